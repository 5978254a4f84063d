from os import path
from acefitlib.io.sections.sections import Section


class Outfile(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['output_style',
                            'metrics',
                            'metrics_style',
                            'potential',
                            'descriptors',
                            'truth',
                            'weights',
                            'dataframe']
        self._check_section()

        self._outfile()
        self.output_style = self.get_value("OUTFILE", "output_style", "LINEAR")
        self.metrics_style = self.get_value("OUTFILE", "metrics_style", "MD")
        self.delete()

    def _outfile(self):
        self.metric_file = self.check_path(self.get_value("OUTFILE", "metrics", "acefit_metrics.md"))
        potential = self.get_value("OUTFILE", "potential", "acefit_potential")
        if self.get_value("EXTRAS", "only_test", "0", "bool"):
            # Coefficients are read back, not written.
            self.potential_name = None if potential == "None" else path.join(self.get_outfile_directory(), potential)
        else:
            self.potential_name = self.check_path(potential, suffixes=(".acecoeff",))
