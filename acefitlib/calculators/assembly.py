"""
Assembly of the linear least squares problem from a list of observation records.

Every record contributes a contiguous block of rows in the fixed order

    [energy (1)] [forces (3 * masked atoms)] [virial (6)] [per-atom energies (masked atoms)]

where a block is present only if the record resolved the corresponding key. The design matrix,
truth vector and weight vector all derive their layout from `count_observations` and this order,
so they line up row for row.

The basis is any object with `len(basis)` basis functions and the methods

    energy(atoms) -> (nbasis,)
    forces(atoms) -> (nbasis, natoms, 3)
    virial(atoms) -> (nbasis, 3, 3)
    site_energy(atoms, i) -> (nbasis,)
"""

import numpy as np
from acefitlib.tools.atoms_data import VIRIAL_INDICES, atom_mask, force_mask, \
    count_observations, atoms_data

_VIRIAL_INDICES = list(VIRIAL_INDICES)


def _feature_rows(data, basis):
    nbasis = len(basis)
    natoms = len(data)
    rows = np.empty((count_observations(data), nbasis))
    pae_mask = atom_mask(data)
    f_mask = force_mask(data)
    i = 0
    if data.energy_key is not None:
        rows[i, :] = np.asarray(basis.energy(data.atoms), dtype=float)
        i += 1
    if data.force_key is not None:
        nrows = int(np.sum(f_mask))
        f = np.reshape(np.asarray(basis.forces(data.atoms), dtype=float), (nbasis, 3 * natoms))
        rows[i:i+nrows, :] = f[:, f_mask].T
        i += nrows
    if data.virial_key is not None:
        v = np.reshape(np.asarray(basis.virial(data.atoms), dtype=float), (nbasis, 9))
        rows[i:i+6, :] = v[:, _VIRIAL_INDICES].T
        i += 6
    if data.pae_key is not None:
        nrows = int(np.sum(pae_mask))
        pae = np.column_stack([np.asarray(basis.site_energy(data.atoms, j), dtype=float)
                               for j in range(natoms)])
        rows[i:i+nrows, :] = pae[:, pae_mask].T
        i += nrows
    return rows


def _target_rows(data):
    natoms = len(data)
    y = np.empty(count_observations(data))
    pae_mask = atom_mask(data)
    f_mask = force_mask(data)
    i = 0
    if data.energy_key is not None:
        y[i] = data.get_energy() - data.energy_ref
        i += 1
    if data.force_key is not None:
        nrows = int(np.sum(f_mask))
        y[i:i+nrows] = data.get_forces().ravel()[f_mask]
        i += nrows
    if data.virial_key is not None:
        y[i:i+6] = data.get_virial()[_VIRIAL_INDICES]
        i += 6
    if data.pae_key is not None:
        # Per-atom share of the reference energy, not a rescaling of the row.
        nrows = int(np.sum(pae_mask))
        y[i:i+nrows] = data.get_pae()[pae_mask] - data.energy_ref / natoms
        i += nrows
    return y


def _weight_rows(data):
    natoms = len(data)
    w = np.empty(count_observations(data))
    pae_mask = atom_mask(data)
    f_mask = force_mask(data)
    i = 0
    if data.energy_key is not None:
        w[i] = data.weights.E / np.sqrt(natoms)
        i += 1
    if data.force_key is not None:
        nrows = int(np.sum(f_mask))
        w[i:i+nrows] = data.weights.F
        i += nrows
    if data.virial_key is not None:
        w[i:i+6] = data.weights.V / np.sqrt(natoms)
        i += 6
    if data.pae_key is not None:
        # Per-atom energy rows are not scaled by the energy weight.
        nrows = int(np.sum(pae_mask))
        w[i:i+nrows] = 1.0
        i += nrows
    return w


def _row_labels(data):
    natoms = len(data)
    types = []
    atoms = []
    if data.energy_key is not None:
        types.append("Energy")
        atoms.append(-1)
    if data.force_key is not None:
        indices = np.repeat(np.arange(natoms), 3)[force_mask(data)]
        types.extend(["Force"] * len(indices))
        atoms.extend(indices.tolist())
    if data.virial_key is not None:
        types.extend(["Virial"] * 6)
        atoms.extend([-1] * 6)
    if data.pae_key is not None:
        indices = np.arange(natoms)[atom_mask(data)]
        types.extend(["PAE"] * len(indices))
        atoms.extend(indices.tolist())
    return types, atoms


def _blocks(data, rows):
    blocks = []
    for index, d in enumerate(data):
        try:
            blocks.append(rows(d))
        except ValueError as e:
            raise ValueError(f"Configuration {index}: {e}") from e
    return blocks


def feature_matrix(data, basis):
    """
    Design matrix with one row per observation and one column per basis function.

    Args:
        data: List of `AtomsData` records.
        basis: Basis evaluated on each configuration.

    Returns a numpy array of shape (sum of `count_observations`, len(basis)).
    """
    blocks = _blocks(data, lambda d: _feature_rows(d, basis))
    if not blocks:
        return np.empty((0, len(basis)))
    return np.vstack(blocks)


def target_vector(data):
    """Reference values (minus reference energies) in the same row order as `feature_matrix`."""
    return np.concatenate([np.empty(0)] + _blocks(data, _target_rows))


def weight_vector(data):
    """Row weights in the same row order as `feature_matrix`."""
    return np.concatenate([np.empty(0)] + _blocks(data, _weight_rows))


def row_types(data):
    """Observation label ("Energy", "Force", "Virial" or "PAE") of every row."""
    return [t for d in data for t in _row_labels(d)[0]]


def row_atoms(data):
    """Atom index of every force or per-atom energy row, -1 for energy and virial rows."""
    return [a for d in data for a in _row_labels(d)[1]]


def assemble(data, basis):
    """
    Assemble the full linear system.

    Returns a tuple (A, Y, W) of design matrix, truth vector and weight vector.
    """
    return feature_matrix(data, basis), target_vector(data), weight_vector(data)


def assemble_weights(data):
    return weight_vector(data)


def recompute_weights(frames, energy_key=None, force_key=None, virial_key=None, pae_key=None,
                      mask_key=None, weights=None, weight_key="config_type"):
    """
    Weight vector for raw configurations under a new weight table, without evaluating a basis.
    Useful to re-weight an already assembled design matrix.
    """
    data = atoms_data(frames, energy_key=energy_key, force_key=force_key, virial_key=virial_key,
                      pae_key=pae_key, mask_key=mask_key, weights=weights, weight_key=weight_key)
    return assemble_weights(data)
