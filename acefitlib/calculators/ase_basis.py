from acefitlib.calculators.calculator import Calculator
from acefitlib.calculators.models import ase_results
from importlib import import_module
import numpy as np


def load_calculator(path):
    """
    Instantiate an ASE calculator class from its dotted path with default arguments, e.g.
    `ase.calculators.lj.LennardJones`.
    """
    module_name, _, class_name = path.rpartition(".")
    if not module_name:
        raise ValueError(f"{path} is not a dotted path to a calculator class")
    return getattr(import_module(module_name), class_name)()


class AseBasis(Calculator):
    """
    Basis made of ASE calculators, one basis function per calculator.

    Calculators are listed by dotted class path in the `ase_calculators` setting of the
    `[CALCULATOR]` section. In library mode the `calculators` attribute can be replaced by any
    list of configured ASE calculators.
    """

    def __init__(self, name, pt, config):
        super().__init__(name, pt, config)
        paths = self.config.sections["CALCULATOR"].ase_calculators
        self.calculators = [load_calculator(path) for path in paths]

    def get_width(self):
        return len(self.calculators)

    def _evaluate(self, atoms, prop):
        if not self.calculators:
            raise RuntimeError("ASEBASIS calculator has no ASE calculators to evaluate")
        return [ase_results(calc, atoms, [prop])[prop] for calc in self.calculators]

    def energy(self, atoms):
        return np.array(self._evaluate(atoms, "energy"), dtype=float)

    def forces(self, atoms):
        return np.array(self._evaluate(atoms, "forces"), dtype=float)

    def virial(self, atoms):
        return np.array(self._evaluate(atoms, "virial"), dtype=float)

    def site_energy(self, atoms, i):
        return np.array([energies[i] for energies in self._evaluate(atoms, "energies")], dtype=float)
