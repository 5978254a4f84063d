import pytest
import numpy as np
from ase import Atoms
from acefitlib.tools.atoms_data import AtomsData, count_observations
from acefitlib.calculators.assembly import feature_matrix, target_vector, weight_vector, assemble, \
    assemble_weights, recompute_weights, row_types, row_atoms
from acefitlib.calculators.models import OneBodyModel


class ToyBasis:
    """Two basis functions: atom count and sum of x coordinates."""

    def __len__(self):
        return 2

    def energy(self, atoms):
        return np.array([len(atoms), atoms.positions[:, 0].sum()])

    def forces(self, atoms):
        f = np.zeros((2, len(atoms), 3))
        f[1, :, 0] = -1.0
        return f

    def virial(self, atoms):
        return np.stack([np.eye(3), np.arange(9.0).reshape(3, 3)])

    def site_energy(self, atoms, i):
        return np.array([1.0, atoms.positions[i, 0]])


def make_atoms(natoms, **info):
    atoms = Atoms("Si" * natoms, positions=np.arange(3 * natoms, dtype=float).reshape(natoms, 3),
                  cell=np.eye(3) * 10.0, pbc=True)
    atoms.info.update(info)
    return atoms


def full_record(weights=None, **kwargs):
    atoms = make_atoms(3, energy=-10.0, virial=np.arange(9.0).reshape(3, 3), pae=[-3.0, -3.5, -3.5],
                       config_type="bulk")
    atoms.new_array("forces", np.arange(9.0).reshape(3, 3))
    return AtomsData(atoms, energy_key="energy", force_key="forces", virial_key="virial",
                     pae_key="pae", weights=weights, **kwargs)


def test_energy_only_record():
    atoms = make_atoms(2, energy=-10.0)
    d = AtomsData(atoms, energy_key="energy", weights={"default": {"E": 30.0, "F": 1.0, "V": 1.0}})
    assert count_observations(d) == 1
    assert target_vector([d]).tolist() == [-10.0]
    assert weight_vector([d]) == pytest.approx(np.array([30.0 / np.sqrt(2.0)]))


def test_forces_only_record():
    atoms = make_atoms(3)
    forces = np.zeros((3, 3))
    forces[0] = [1.0, 0.0, 0.0]
    atoms.new_array("forces", forces)
    d = AtomsData(atoms, force_key="forces", weights={"default": {"E": 30.0, "F": 2.0, "V": 1.0}})
    assert count_observations(d) == 9
    y = target_vector([d])
    assert y[:3].tolist() == [1.0, 0.0, 0.0]
    assert np.all(y[3:] == 0.0)
    assert np.all(weight_vector([d]) == 2.0)


def test_lengths_agree():
    d = full_record()
    n = count_observations(d)
    assert n == 1 + 9 + 6 + 3
    a, y, w = assemble([d], ToyBasis())
    assert a.shape == (n, 2)
    assert len(y) == n
    assert len(w) == n


def test_row_layout():
    d = full_record(weights={"bulk": {"E": 4.0, "F": 2.0, "V": 3.0}})
    a, y, w = assemble([d], ToyBasis())
    # energy
    assert a[0].tolist() == [3.0, 0.0 + 3.0 + 6.0]
    assert y[0] == -10.0
    assert w[0] == pytest.approx(4.0 / np.sqrt(3.0))
    # forces, atom by atom
    assert y[1:10].tolist() == list(range(9))
    assert a[1:10, 1].tolist() == [-1.0, 0.0, 0.0] * 3
    assert np.all(w[1:10] == 2.0)
    # virial in Voigt order xx, yy, zz, yz, xz, xy
    assert y[10:16].tolist() == [0.0, 4.0, 8.0, 5.0, 2.0, 1.0]
    assert a[10:16, 0].tolist() == [1.0, 1.0, 1.0, 0.0, 0.0, 0.0]
    assert w[10:16] == pytest.approx(np.full(6, 3.0 / np.sqrt(3.0)))
    # per-atom energies keep weight 1
    assert y[16:].tolist() == [-3.0, -3.5, -3.5]
    assert a[16:, 1].tolist() == [0.0, 3.0, 6.0]
    assert np.all(w[16:] == 1.0)
    assert row_types([d]) == ["Energy"] + ["Force"] * 9 + ["Virial"] * 6 + ["PAE"] * 3
    assert row_atoms([d]) == [-1] + [0, 0, 0, 1, 1, 1, 2, 2, 2] + [-1] * 6 + [0, 1, 2]


def test_reference_energy_is_subtracted():
    d = full_record(v_ref=OneBodyModel({"Si": -3.0}))
    y = target_vector([d])
    assert y[0] == pytest.approx(-10.0 + 9.0)
    assert y[16:] == pytest.approx(np.array([0.0, -0.5, -0.5]))


def test_masked_rows():
    atoms = make_atoms(3, pae=[1.0, 2.0, 3.0])
    atoms.new_array("forces", np.arange(9.0).reshape(3, 3))
    atoms.new_array("mask", np.array([0, 1, 0]))
    d = AtomsData(atoms, force_key="forces", pae_key="pae", mask_key="mask")
    a, y, w = assemble([d], ToyBasis())
    assert y.tolist() == [3.0, 4.0, 5.0, 2.0]
    assert row_atoms([d]) == [1, 1, 1, 1]
    assert a.shape == (4, 2)


def test_mask_only_record_is_empty():
    atoms = make_atoms(2)
    atoms.new_array("mask", np.array([1, 1]))
    d = AtomsData(atoms, mask_key="mask")
    assert count_observations(d) == 0
    a, y, w = assemble([d], ToyBasis())
    assert a.shape == (0, 2)
    assert len(y) == 0
    assert len(w) == 0


def test_concatenation_is_associative():
    d1 = full_record()
    d2 = AtomsData(make_atoms(2, energy=-4.0, virial=np.ones((3, 3))), energy_key="energy",
                   virial_key="virial")
    basis = ToyBasis()
    a, y, w = assemble([d1, d2], basis)
    a1, y1, w1 = assemble([d1], basis)
    a2, y2, w2 = assemble([d2], basis)
    assert np.array_equal(a, np.vstack([a1, a2]))
    assert np.array_equal(y, np.concatenate([y1, y2]))
    assert np.array_equal(w, np.concatenate([w1, w2]))


def test_virial_stored_as_rows():
    rows = [np.array([0.0, 1.0, 2.0]), np.array([3.0, 4.0, 5.0]), np.array([6.0, 7.0, 8.0])]
    d = AtomsData(make_atoms(3, virial=rows), virial_key="virial")
    assert target_vector([d]).tolist() == [0.0, 4.0, 8.0, 5.0, 2.0, 1.0]


def test_shape_errors_name_the_configuration():
    good = AtomsData(make_atoms(2, energy=-1.0), energy_key="energy")
    bad = AtomsData(make_atoms(2, virial=np.zeros(5)), virial_key="virial")
    with pytest.raises(ValueError, match="Configuration 1"):
        target_vector([good, bad])


def test_basis_failure_propagates():
    class BrokenBasis(ToyBasis):
        def energy(self, atoms):
            raise RuntimeError("evaluation failed")

    d = AtomsData(make_atoms(2, energy=-1.0), energy_key="energy")
    with pytest.raises(RuntimeError):
        feature_matrix([d], BrokenBasis())


def test_reweighting():
    frames = [make_atoms(4, energy=-1.0, config_type="a"), make_atoms(4, energy=-1.0, config_type="b")]
    w = recompute_weights(frames, energy_key="energy", weights={"a": {"E": 2.0}, "b": {"E": 6.0}})
    assert w == pytest.approx(np.array([1.0, 3.0]))
    d = AtomsData(frames[0], energy_key="energy")
    assert assemble_weights([d]) == pytest.approx(np.array([0.5]))
