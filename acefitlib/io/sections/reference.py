from acefitlib.io.sections.sections import Section
from ase.data import chemical_symbols


class Reference(Section):
    """Isolated atom energies of the elements, e.g. `Si = -158.54`."""

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = chemical_symbols[1:]
        self._check_section()

        self.E0s = {symbol: float(value) for symbol, value in self.get_section("REFERENCE")}
        self.delete()
