from acefitlib.calculators.calculator import Calculator
import numpy as np


class OneBody(Calculator):
    """
    One basis function per element, counting the atoms of that element. Fitting this basis gives
    the isolated atom energies of the elements; it is also the one-body part of larger bases.
    """

    def __init__(self, name, pt, config):
        super().__init__(name, pt, config)
        self.elements = list(self.config.sections["CALCULATOR"].elements)
        if not self.elements:
            raise ValueError("ONEBODY calculator needs a list of elements")

    def get_width(self):
        return len(self.elements)

    def energy(self, atoms):
        symbols = atoms.get_chemical_symbols()
        return np.array([symbols.count(e) for e in self.elements], dtype=float)

    def forces(self, atoms):
        return np.zeros((len(self.elements), len(atoms), 3))

    def virial(self, atoms):
        return np.zeros((len(self.elements), 3, 3))

    def site_energy(self, atoms, i):
        symbol = atoms.get_chemical_symbols()[i]
        return np.array([e == symbol for e in self.elements], dtype=float)
