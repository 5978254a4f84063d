"""
Potentials that can be evaluated on a configuration.

A model returns scalar quantities: a total energy, an (natoms, 3) force array, a 3x3 virial and
per-site energies. Fitted linear models, reference (one-body) energies and ASE calculators all
satisfy the same contract, so error analysis and reference subtraction never need to know which
kind of model they hold.
"""

import numpy as np


class Model:
    """Contract of a potential evaluated on `ase.Atoms` configurations."""

    def energy(self, atoms):
        raise NotImplementedError

    def forces(self, atoms):
        raise NotImplementedError

    def virial(self, atoms):
        raise NotImplementedError

    def site_energy(self, atoms, i):
        raise NotImplementedError


class LinearModel(Model):
    """
    Linear combination of basis functions.

    Args:
        basis: Object returning one result per basis function from `energy`, `forces`, `virial`
            and `site_energy`, e.g. a `Calculator`.
        coeffs: Coefficient of each basis function.
    """

    def __init__(self, basis, coeffs):
        self.basis = basis
        self.coeffs = np.asarray(coeffs, dtype=float).ravel()

    def energy(self, atoms):
        return float(np.dot(self.coeffs, self.basis.energy(atoms)))

    def forces(self, atoms):
        return np.tensordot(self.coeffs, np.asarray(self.basis.forces(atoms)), axes=1)

    def virial(self, atoms):
        v = np.reshape(self.basis.virial(atoms), (len(self.coeffs), 9))
        return (self.coeffs @ v).reshape(3, 3)

    def site_energy(self, atoms, i):
        return float(np.dot(self.coeffs, self.basis.site_energy(atoms, i)))


class OneBodyModel(Model):
    """
    Reference energy made of isolated atom energies.

    Args:
        E0s: Dictionary of chemical symbol -> energy of the isolated atom.
    """

    def __init__(self, E0s):
        self.E0s = {str(k): float(v) for k, v in E0s.items()}

    def _e0(self, symbol):
        try:
            return self.E0s[symbol]
        except KeyError:
            raise KeyError(f"No reference energy for element {symbol}") from None

    def energy(self, atoms):
        return float(sum(self._e0(s) for s in atoms.get_chemical_symbols()))

    def forces(self, atoms):
        return np.zeros((len(atoms), 3))

    def virial(self, atoms):
        return np.zeros((3, 3))

    def site_energy(self, atoms, i):
        return self._e0(atoms.get_chemical_symbols()[i])


def ase_results(calc, atoms, properties):
    """
    Evaluate an ASE calculator on a copy of `atoms`.

    Args:
        calc: ASE calculator.
        atoms: Configuration; it is not modified.
        properties: Any of "energy", "forces", "virial", "energies".

    Returns a dictionary of the requested properties. The virial is -stress * volume as a 3x3
    array, unless the calculator provides a "virial" result itself.
    """
    atoms = atoms.copy()
    atoms.calc = calc
    results = {}
    if "energy" in properties:
        results["energy"] = atoms.get_potential_energy()
    if "forces" in properties:
        results["forces"] = atoms.get_forces()
    if "virial" in properties:
        if "virial" in getattr(calc, "implemented_properties", []):
            results["virial"] = np.reshape(calc.get_property("virial", atoms), (3, 3))
        else:
            results["virial"] = -atoms.get_stress(voigt=False) * atoms.get_volume()
    if "energies" in properties:
        results["energies"] = atoms.get_potential_energies()
    return results


class AseModel(Model):
    """Model backed by an ASE calculator."""

    def __init__(self, calc):
        self.calc = calc

    def energy(self, atoms):
        return float(ase_results(self.calc, atoms, ["energy"])["energy"])

    def forces(self, atoms):
        return ase_results(self.calc, atoms, ["forces"])["forces"]

    def virial(self, atoms):
        return ase_results(self.calc, atoms, ["virial"])["virial"]

    def site_energy(self, atoms, i):
        return float(ase_results(self.calc, atoms, ["energies"])["energies"][i])


class SumModel(Model):
    """Sum of models, e.g. a reference energy plus a fitted linear model."""

    def __init__(self, *models):
        self.models = [m for m in models if m is not None]

    def energy(self, atoms):
        return sum(m.energy(atoms) for m in self.models)

    def forces(self, atoms):
        return sum(np.asarray(m.forces(atoms)) for m in self.models)

    def virial(self, atoms):
        return sum(np.reshape(m.virial(atoms), (3, 3)) for m in self.models)

    def site_energy(self, atoms, i):
        return sum(m.site_energy(atoms, i) for m in self.models)
