from acefitlib.io.sections.sections import Section


class Ridge(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['alpha']
        self._check_section()

        solver_type = self.get_value("SOLVER", "solver", "SVD")
        if solver_type.upper() != "RIDGE":
            raise UserWarning("{} solver section is in input, but solver is set to {}".format(self.name, solver_type))

        self.alpha = self.get_value("RIDGE", "alpha", "1.0E-8", "float")
        self.delete()
