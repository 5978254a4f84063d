from acefitlib.io.sections.sections import Section


class Solver(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['solver', 'detailed_errors']
        self._check_section()

        self.solver = self.get_value("SOLVER", "solver", "SVD")
        self.detailed_errors = self.get_value("SOLVER", "detailed_errors", "0", "bool")
        self.delete()
