import pytest
import numpy as np
from ase import Atoms
from ase.calculators.lj import LennardJones
from acefitlib.parallel_tools import ParallelTools
from acefitlib.io.input import Config
from acefitlib.calculators.calculator_factory import calculator
from acefitlib.calculators.models import LinearModel, OneBodyModel, AseModel, SumModel, ase_results
from acefitlib.calculators.assembly import assemble
from acefitlib.tools.atoms_data import AtomsData


def make_calculator(settings):
    pt = ParallelTools()
    config = Config(pt, settings, arguments_lst=["--overwrite"])
    return calculator(config.sections["CALCULATOR"].calculator, pt, config)


def dimer():
    return Atoms("Ar2", positions=[[0.0, 0.0, 0.0], [1.2, 0.1, 0.0]], cell=np.eye(3) * 6.0, pbc=True)


def test_onebody_basis():
    basis = make_calculator({"CALCULATOR": {"calculator": "ONEBODY", "elements": "Si O"}})
    atoms = Atoms("SiO2")
    assert len(basis) == 2
    assert basis.energy(atoms).tolist() == [1.0, 2.0]
    assert basis.forces(atoms).shape == (2, 3, 3)
    assert basis.virial(atoms).shape == (2, 3, 3)
    assert basis.site_energy(atoms, 1).tolist() == [0.0, 1.0]


def test_onebody_needs_elements():
    with pytest.raises(ValueError):
        make_calculator({"CALCULATOR": {"calculator": "ONEBODY"}})


def test_unknown_calculator():
    with pytest.raises(IndexError):
        make_calculator({"CALCULATOR": {"calculator": "SNAP"}})


def test_ase_basis_matches_calculator():
    basis = make_calculator({"CALCULATOR": {"calculator": "ASEBASIS",
                                            "ase_calculators": "ase.calculators.lj.LennardJones"}})
    atoms = dimer()
    reference = atoms.copy()
    reference.calc = LennardJones()
    assert len(basis) == 1
    assert basis.energy(atoms)[0] == pytest.approx(reference.get_potential_energy())
    assert basis.forces(atoms)[0] == pytest.approx(reference.get_forces())
    virial = -reference.get_stress(voigt=False) * reference.get_volume()
    assert basis.virial(atoms)[0] == pytest.approx(virial)
    assert basis.site_energy(atoms, 0)[0] == pytest.approx(reference.get_potential_energies()[0])


def test_ase_basis_assembly():
    basis = make_calculator({"CALCULATOR": {"calculator": "ASEBASIS",
                                            "ase_calculators": "ase.calculators.lj.LennardJones"}})
    atoms = dimer()
    results = ase_results(LennardJones(), atoms, ["energy", "forces", "virial"])
    atoms.info["energy"] = 2.0 * results["energy"]
    atoms.info["virial"] = 2.0 * results["virial"]
    atoms.new_array("forces", 2.0 * results["forces"])
    d = AtomsData(atoms, energy_key="energy", force_key="forces", virial_key="virial")
    a, y, w = assemble([d], basis)
    assert a.shape == (13, 1)
    coeffs = np.linalg.lstsq(a, y, rcond=None)[0]
    assert coeffs == pytest.approx(np.array([2.0]))


def test_linear_and_sum_models():
    atoms = dimer()
    lj = AseModel(LennardJones())

    class LJBasis:
        def __len__(self):
            return 1

        def energy(self, atoms):
            return np.array([lj.energy(atoms)])

        def forces(self, atoms):
            return np.array([lj.forces(atoms)])

        def virial(self, atoms):
            return np.array([lj.virial(atoms)])

        def site_energy(self, atoms, i):
            return np.array([lj.site_energy(atoms, i)])

    model = SumModel(OneBodyModel({"Ar": -1.0}), LinearModel(LJBasis(), [3.0]))
    assert model.energy(atoms) == pytest.approx(-2.0 + 3.0 * lj.energy(atoms))
    assert model.forces(atoms) == pytest.approx(3.0 * lj.forces(atoms))
    assert model.virial(atoms) == pytest.approx(3.0 * lj.virial(atoms))
    assert model.site_energy(atoms, 1) == pytest.approx(-1.0 + 3.0 * lj.site_energy(atoms, 1))


def test_onebody_model_missing_element():
    with pytest.raises(KeyError):
        OneBodyModel({"Si": -1.0}).energy(Atoms("O"))
