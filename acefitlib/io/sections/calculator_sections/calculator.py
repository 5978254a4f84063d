from acefitlib.io.sections.sections import Section


class Calculator(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['calculator', 'elements', 'ase_calculators']
        self._check_section()

        self.calculator = self.get_value("CALCULATOR", "calculator", "ONEBODY")
        self.elements = self.get_value("CALCULATOR", "elements", "").split()
        if not self.elements and config.has_section("REFERENCE"):
            self.elements = [symbol for symbol, _ in config.items("REFERENCE")]
        self.ase_calculators = self.get_value("CALCULATOR", "ase_calculators", "").split()
        self.delete()
