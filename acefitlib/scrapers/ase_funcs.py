"""
Functions for preparing ASE frames for fitting. They are usable without a scraper, so frames made
in a script can be fitted in library mode.
"""

import numpy as np
from ase.stress import voigt_6_to_full_3x3_stress
from acefitlib.tools.atoms_data import data_keys, resolve_key


def calculator_virial(atoms, results):
    """
    Virial of a configuration from calculator results, -stress * volume, or the "virial" result
    itself when the calculator provides one. Returns None if neither is available.
    """
    if "virial" in results:
        return np.reshape(np.asarray(results["virial"], dtype=float), (3, 3))
    if "stress" in results and atoms.cell.rank == 3:
        stress = np.asarray(results["stress"], dtype=float)
        if stress.shape == (6,):
            stress = voigt_6_to_full_3x3_stress(stress)
        return -stress * atoms.get_volume()
    return None


def collate_data(atoms, energy_key="energy", force_key="forces", virial_key="virial"):
    """
    Copy the results of a calculator attached to `atoms` into its `info` and `arrays`.

    Data already stored under a key (compared case-insensitively) is never replaced.

    Args:
        atoms: ASE atoms object for a single configuration of atoms.
        energy_key: Info key for the energy.
        force_key: Array key for the forces.
        virial_key: Info key for the 3x3 virial.

    Returns the same atoms object.
    """
    if atoms.calc is None:
        return atoms
    results = atoms.calc.results
    keys = data_keys(atoms)
    if resolve_key(keys, energy_key) is None:
        energy = results.get("energy", results.get("free_energy"))
        if energy is not None:
            atoms.info[energy_key] = float(energy)
    if resolve_key(keys, force_key) is None and "forces" in results:
        atoms.arrays[force_key] = np.array(results["forces"], dtype=float).reshape(len(atoms), 3)
    if resolve_key(keys, virial_key) is None:
        virial = calculator_virial(atoms, results)
        if virial is not None:
            atoms.info[virial_key] = virial
    return atoms


def collate(frames, energy_key="energy", force_key="forces", virial_key="virial"):
    """
    Prepare a list of ASE frames for fitting.

    Args:
        frames: List of ASE atoms objects.

    Returns the list of frames with calculator results copied to their data.
    """
    return [collate_data(atoms, energy_key, force_key, virial_key) for atoms in frames]
