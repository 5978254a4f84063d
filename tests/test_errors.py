import pytest
import numpy as np
from ase import Atoms
from acefitlib.tools.atoms_data import AtomsData, Observable, atoms_data
from acefitlib.solvers.errors import ErrorAccumulator, accumulate, finalize_errors, error_counts, \
    linear_errors, compute_errors, record_residuals
from acefitlib.calculators.models import Model, OneBodyModel, SumModel
from acefitlib.io.outputs.tables import errors_table, errors_dataframe


class ConstantModel(Model):
    """Predicts zero forces and virial and a fixed energy per atom."""

    def __init__(self, e_atom):
        self.e_atom = e_atom

    def energy(self, atoms):
        return self.e_atom * len(atoms)

    def forces(self, atoms):
        return np.zeros((len(atoms), 3))

    def virial(self, atoms):
        return np.zeros((3, 3))

    def site_energy(self, atoms, i):
        return self.e_atom


def make_atoms(natoms, **info):
    atoms = Atoms("Si" * natoms, positions=np.zeros((natoms, 3)), cell=np.eye(3) * 10.0, pbc=True)
    atoms.info.update(info)
    return atoms


def test_zero_count_policy():
    acc = ErrorAccumulator()
    assert acc.mae() == {"E": 0.0, "F": 0.0, "V": 0.0, "PAE": 0.0}
    assert acc.rmse() == {"E": 0.0, "F": 0.0, "V": 0.0, "PAE": 0.0}
    d = AtomsData(make_atoms(2, virial=np.eye(3)), virial_key="virial")
    errors = linear_errors([d], ConstantModel(0.0))
    assert errors["mae"]["default"]["E"] == 0.0
    assert errors["rmse"]["default"]["E"] == 0.0
    assert errors["rmse"]["set"]["V"] > 0.0


def test_energy_error_is_per_atom():
    d = AtomsData(make_atoms(4, energy=-8.0), energy_key="energy")
    errors = linear_errors([d], ConstantModel(-1.0))
    assert errors["mae"]["set"]["E"] == pytest.approx(1.0)
    assert errors["rmse"]["set"]["E"] == pytest.approx(1.0)


def test_compute_errors_matches_linear_errors():
    data = [AtomsData(make_atoms(2, energy=-3.0, config_type="a"), energy_key="energy"),
            AtomsData(make_atoms(3, energy=-6.0, config_type="b"), energy_key="energy")]
    errors = compute_errors(data, ConstantModel(-1.0))
    assert errors == linear_errors(data, ConstantModel(-1.0))
    assert errors["mae"]["a"]["E"] == pytest.approx(0.5)
    assert errors["mae"]["b"]["E"] == pytest.approx(1.0)
    assert errors["mae"]["set"]["E"] == pytest.approx(0.75)


def test_force_error_counts_every_component():
    atoms = make_atoms(2)
    forces = np.zeros((2, 3))
    forces[0, 0] = 3.0
    atoms.new_array("forces", forces)
    atoms.new_array("mask", np.array([0, 1]))
    d = AtomsData(atoms, force_key="forces", mask_key="mask")
    groups, accumulators = accumulate([d], ConstantModel(0.0))
    assert accumulators["default"].counts()["F"] == 6
    errors = finalize_errors(groups, accumulators)
    assert errors["mae"]["set"]["F"] == pytest.approx(0.5)
    assert errors["rmse"]["set"]["F"] == pytest.approx(np.sqrt(9.0 / 6.0))


def test_virial_error_per_atom_voigt():
    virial = np.diag([2.0, 2.0, 2.0])
    d = AtomsData(make_atoms(2, virial=virial), virial_key="virial")
    groups, accumulators = accumulate([d], ConstantModel(0.0))
    assert accumulators["default"].counts()["V"] == 6
    errors = finalize_errors(groups, accumulators)
    assert errors["mae"]["set"]["V"] == pytest.approx(3 * 1.0 / 6)


def test_pae_error_uses_masked_atoms():
    atoms = make_atoms(3, pae=[1.0, 2.0, 4.0])
    atoms.new_array("mask", np.array([1, 0, 1]))
    d = AtomsData(atoms, pae_key="pae", mask_key="mask")
    residuals = dict(record_residuals(d, ConstantModel(1.0)))
    assert residuals[Observable.PAE].tolist() == [0.0, -3.0]
    errors = linear_errors([d], ConstantModel(1.0))
    assert errors["mae"]["set"]["PAE"] == pytest.approx(1.5)


def test_reference_energy_in_model():
    d = AtomsData(make_atoms(2, energy=-10.0), energy_key="energy")
    model = SumModel(OneBodyModel({"Si": -4.0}), ConstantModel(-1.0))
    errors = linear_errors([d], model)
    assert errors["mae"]["set"]["E"] == pytest.approx(0.0)


def test_groups_in_first_seen_order():
    frames = [make_atoms(1, energy=-1.0, config_type="b"),
              make_atoms(1, energy=-2.0, config_type="a"),
              make_atoms(1, energy=-3.0, config_type="b")]
    data = atoms_data(frames, energy_key="energy")
    errors = linear_errors(data, ConstantModel(0.0))
    assert list(errors["mae"]) == ["b", "a", "set"]
    assert errors["mae"]["b"]["E"] == pytest.approx(2.0)
    assert errors["mae"]["set"]["E"] == pytest.approx(2.0)
    counts = error_counts(*accumulate(data, ConstantModel(0.0)))
    assert counts["b"]["E"] == 2
    assert counts["set"]["E"] == 3


def test_merge_of_halves_equals_whole():
    rng = np.random.default_rng(1)
    frames = []
    for i in range(6):
        atoms = make_atoms(2 + i % 2, energy=rng.normal(), config_type="g{}".format(i % 2))
        atoms.new_array("forces", rng.normal(size=(len(atoms), 3)))
        frames.append(atoms)
    data = atoms_data(frames, energy_key="energy", force_key="forces")
    model = ConstantModel(0.1)

    whole = finalize_errors(*accumulate(data, model))
    g1, acc1 = accumulate(data[:3], model)
    g2, acc2 = accumulate(data[3:], model)
    groups = list(dict.fromkeys(g1 + g2))
    merged = {g: acc1.get(g, ErrorAccumulator()) + acc2.get(g, ErrorAccumulator()) for g in groups}
    halves = finalize_errors(groups, merged)
    for metric in ("mae", "rmse"):
        for group in whole[metric]:
            for obs in ("E", "F", "V", "PAE"):
                assert halves[metric][group][obs] == pytest.approx(whole[metric][group][obs])


def test_merge_is_commutative():
    a = ErrorAccumulator()
    a.add(Observable.F, [1.0, -2.0])
    b = ErrorAccumulator()
    b.add(Observable.F, [3.0])
    assert (a + b).rmse() == (b + a).rmse()
    assert (a + b).counts()["F"] == 3


def test_errors_table_units():
    errors = {"mae": {"set": {"E": 0.001, "F": 0.1, "V": 0.002, "PAE": 0.0}},
              "rmse": {"set": {"E": 0.002, "F": 0.2, "V": 0.004, "PAE": 0.0}}}
    table = errors_table(errors, "rmse")
    assert list(table.columns) == ["E [meV]", "F [eV/A]", "V [meV]", "PAE [meV]"]
    assert table.loc["set", "E [meV]"] == pytest.approx(2.0)
    assert table.loc["set", "F [eV/A]"] == pytest.approx(0.2)
    counts = {"set": {"E": 1, "F": 3, "V": 0, "PAE": 0}}
    df = errors_dataframe(errors, counts)
    assert df.loc[("set", "F"), "ncount"] == 3
    assert df.loc[("set", "E"), "mae"] == pytest.approx(0.001)
