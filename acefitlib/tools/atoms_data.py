"""
Observation records: one atomic configuration together with the observables that are fitted to.

A configuration is an `ase.Atoms` object. Its free-form data lives in `atoms.info` (per-config
quantities such as energy, virial and group label) and `atoms.arrays` (per-atom quantities such as
forces, per-atom energies and masks). Keys are matched case-insensitively because upstream data
sets label the same quantity inconsistently (`energy`, `Energy`, ...). The first key that matches
in iteration order wins.
"""

from dataclasses import dataclass
from enum import Enum
import numpy as np


# Row-major positions of [xx, yy, zz, yz, xz, xy] in a flattened 3x3 tensor.
VIRIAL_INDICES = (0, 4, 8, 5, 2, 1)

# Arrays ASE always attaches to Atoms, never user data.
_ASE_ARRAYS = ("positions", "numbers")


class Observable(Enum):
    """Kinds of observations that contribute rows to a fit."""
    E = "E"
    F = "F"
    V = "V"
    PAE = "PAE"


@dataclass(frozen=True)
class Weights:
    """Energy, force and virial regression weights of a single configuration."""
    E: float = 1.0
    F: float = 1.0
    V: float = 1.0

    @classmethod
    def from_dict(cls, weights):
        """
        Make weights from a dictionary such as `{"E": 30.0, "F": 1.0, "V": 1.0}`.

        Group table style keys `eweight`, `fweight` and `vweight` are accepted too. Missing entries
        default to 1.0.
        """
        if isinstance(weights, Weights):
            return weights
        values = {}
        for key, val in weights.items():
            key = str(key).upper()
            if key.endswith("WEIGHT"):
                key = key[:-len("WEIGHT")]
            values[key] = float(val)
        return cls(E=values.get("E", 1.0), F=values.get("F", 1.0), V=values.get("V", 1.0))

    def as_dict(self):
        return {"E": self.E, "F": self.F, "V": self.V}


DEFAULT_WEIGHTS = Weights(1.0, 1.0, 1.0)


def default_weights():
    """Weight table used by the fitting pipeline when no groups are given."""
    return {"default": {"E": 30.0, "F": 1.0, "V": 1.0}}


def data_keys(atoms):
    """
    Map lowercase key -> original key for all data attached to a configuration.

    `atoms.info` is scanned before `atoms.arrays`; for keys differing only in case the first one
    seen is kept.
    """
    keys = {}
    for key in atoms.info:
        keys.setdefault(str(key).lower(), key)
    for key in atoms.arrays:
        if key in _ASE_ARRAYS:
            continue
        keys.setdefault(str(key).lower(), key)
    return keys


def resolve_key(keys, key):
    """Resolved key for a requested `key`, or None if it is disabled or absent."""
    if key is None:
        return None
    return keys.get(str(key).lower())


def get_data(atoms, key):
    """Value stored under an already resolved `key`."""
    if key in atoms.info:
        return atoms.info[key]
    return atoms.arrays[key]


def virial_tensor(value):
    """
    Flatten a stored virial to 9 values in row-major order.

    Virials stored as a list of row vectors (seen for 3-atom cells, where the reader cannot tell a
    3x3 tensor from per-atom data) are rebuilt by concatenating the rows. This is the only place
    that knows about that storage quirk.

    Args:
        value: 3x3 array, 9-vector, Voigt 6-vector [xx, yy, zz, yz, xz, xy] or list of 3 rows.

    Returns a numpy array of shape (9,).
    """
    if isinstance(value, (list, tuple)) and len(value) == 3 and all(np.size(row) == 3 for row in value):
        return np.concatenate([np.ravel(np.asarray(row, dtype=float)) for row in value])
    v = np.asarray(value, dtype=float)
    if v.size == 9:
        return v.reshape(9)
    if v.shape == (6,):
        xx, yy, zz, yz, xz, xy = v
        return np.array([xx, xy, xz, xy, yy, yz, xz, yz, zz])
    raise ValueError(f"Virial of shape {v.shape} cannot be read as a 3x3 tensor")


class AtomsData:
    """
    Read-only view over one configuration with the observables used for fitting.

    Args:
        atoms: ASE Atoms object holding the configuration and its data.
        energy_key: Key of the total energy, None to never fit energies.
        force_key: Key of the per-atom forces, None to never fit forces.
        virial_key: Key of the virial tensor, None to never fit virials.
        pae_key: Key of the per-atom energies, None to never fit them.
        mask_key: Key of a per-atom mask selecting atoms for force and per-atom energy rows.
        weights: Weight table `{group: {"E", "F", "V"}}`; a `"default"` entry is the fallback.
        v_ref: Optional reference-energy model with an `energy(atoms)` method.
        weight_key: Data key holding the group label used to look up weights.

    Attributes:
        energy_key, force_key, virial_key, pae_key, mask_key: Resolved keys, None when absent.
        weights (Weights): Resolved weights of this configuration.
        energy_ref (float): Reference energy subtracted from energy-like targets.
    """

    def __init__(self, atoms, energy_key=None, force_key=None, virial_key=None, pae_key=None,
                 mask_key=None, weights=None, v_ref=None, weight_key="config_type"):
        keys = data_keys(atoms)
        self.atoms = atoms
        self.keys = keys
        self.energy_key = resolve_key(keys, energy_key)
        self.force_key = resolve_key(keys, force_key)
        self.virial_key = resolve_key(keys, virial_key)
        self.pae_key = resolve_key(keys, pae_key)
        self.mask_key = resolve_key(keys, mask_key)
        self.weights = self._resolve_weights(weights, weight_key)
        self.energy_ref = 0.0 if v_ref is None else float(v_ref.energy(atoms))
        self._frozen = True

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise AttributeError(f"AtomsData is read-only, cannot set {name}.")
        super().__setattr__(name, value)

    def __len__(self):
        return len(self.atoms)

    def __repr__(self):
        return (f"AtomsData(natoms={len(self)}, energy_key={self.energy_key}, "
                f"force_key={self.force_key}, virial_key={self.virial_key}, "
                f"pae_key={self.pae_key}, mask_key={self.mask_key}, weights={self.weights})")

    def _resolve_weights(self, weights, weight_key):
        if weights is None:
            return DEFAULT_WEIGHTS
        table = {str(name).lower(): w for name, w in weights.items()}
        w = Weights.from_dict(table["default"]) if "default" in table else DEFAULT_WEIGHTS
        group_key = resolve_key(self.keys, weight_key)
        if group_key is not None:
            label = str(get_data(self.atoms, group_key)).lower()
            if label in table:
                w = Weights.from_dict(table[label])
        return w

    def has(self, observable):
        """True if this record contributes rows of the given observable."""
        key = {Observable.E: self.energy_key,
               Observable.F: self.force_key,
               Observable.V: self.virial_key,
               Observable.PAE: self.pae_key}[observable]
        return key is not None

    def get_energy(self):
        return float(get_data(self.atoms, self.energy_key))

    def get_forces(self):
        """Stored forces as an (natoms, 3) array."""
        natoms = len(self)
        f = np.asarray(get_data(self.atoms, self.force_key), dtype=float)
        if f.shape == (natoms, 3):
            return f
        if f.ndim == 1 and f.size == 3 * natoms:
            return f.reshape(natoms, 3)
        raise ValueError(f"Forces under '{self.force_key}' have shape {f.shape}, "
                         f"expected ({natoms}, 3)")

    def get_virial(self):
        """Stored virial flattened row-major to 9 values."""
        try:
            return virial_tensor(get_data(self.atoms, self.virial_key))
        except ValueError as e:
            raise ValueError(f"Bad virial under '{self.virial_key}': {e}") from e

    def get_pae(self):
        """Stored per-atom energies as an (natoms,) array."""
        pae = np.asarray(get_data(self.atoms, self.pae_key), dtype=float).ravel()
        if pae.size != len(self):
            raise ValueError(f"Per-atom energies under '{self.pae_key}' have {pae.size} values "
                             f"for {len(self)} atoms")
        return pae


def atom_mask(data):
    """
    Boolean mask over atoms selecting per-atom energy rows. All atoms are selected without a mask
    key; otherwise the stored values are cast to bool.
    """
    natoms = len(data)
    if data.mask_key is None:
        return np.ones(natoms) != 0
    mask = np.asarray(get_data(data.atoms, data.mask_key)).ravel() != 0
    if mask.size != natoms:
        raise ValueError(f"Mask under '{data.mask_key}' has {mask.size} values for {natoms} atoms")
    return mask


def force_mask(data):
    """Atom mask with each entry repeated for the x, y and z force components."""
    return np.repeat(atom_mask(data), 3)


def count_observations(data):
    """Number of rows a record contributes to the design matrix."""
    count = 0
    if data.energy_key is not None:
        count += 1
    if data.force_key is not None:
        count += int(np.sum(force_mask(data)))
    if data.virial_key is not None:
        count += 6
    if data.pae_key is not None:
        count += int(np.sum(atom_mask(data)))
    return count


def atoms_data(frames, energy_key=None, force_key=None, virial_key=None, pae_key=None,
               mask_key=None, weights=None, v_ref=None, weight_key="config_type"):
    """Make a list of records sharing the same keys, weights and reference model."""
    return [AtomsData(atoms, energy_key=energy_key, force_key=force_key, virial_key=virial_key,
                      pae_key=pae_key, mask_key=mask_key, weights=weights, v_ref=v_ref,
                      weight_key=weight_key)
            for atoms in frames]
