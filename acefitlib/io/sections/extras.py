from acefitlib.io.sections.sections import Section


class Extras(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['only_test', 'dump_descriptors', 'dump_truth', 'dump_weights',
                            'dump_dataframe']
        self._check_section()

        # Set EXTRAS section file dump flags.

        self.only_test = self.get_value("EXTRAS", "only_test", "0", "bool")
        self.dump_a = self.get_value("EXTRAS", "dump_descriptors", "0", "bool")
        self.dump_b = self.get_value("EXTRAS", "dump_truth", "0", "bool")
        self.dump_w = self.get_value("EXTRAS", "dump_weights", "0", "bool")
        self.dump_dataframe = self.get_value("EXTRAS", "dump_dataframe", "0", "bool")

        # Set OUTFILE section filenames, only checked when the file is going to be written.

        self.descriptor_file = self._dump_path(self.dump_a, "descriptors", "Descriptors.npy")
        self.truth_file = self._dump_path(self.dump_b, "truth", "Truth-Ref.npy")
        self.weights_file = self._dump_path(self.dump_w, "weights", "Weights.npy")
        self.dataframe_file = self._dump_path(self.dump_dataframe, "dataframe", "ACEfit.df")

        self.delete()

    def _dump_path(self, dump, key, fallback):
        if not dump:
            return None
        return self.check_path(self.get_value("OUTFILE", key, fallback))
