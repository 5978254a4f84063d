from acefitlib.parallel_tools import double_size
from acefitlib.calculators.assembly import assemble, row_types, row_atoms
from acefitlib.tools.atoms_data import count_observations
from acefitlib.tools.group_tools import group_type
import numpy as np
import pandas as pd


class Calculator:
    """
    Class for evaluating basis functions and collating them into the fitting arrays.

    Subclasses define the basis by overriding `get_width`, `energy`, `forces`, `virial` and
    `site_energy`. Each of these returns one result per basis function, so a calculator can be
    handed directly to `assembly.assemble` or wrapped by `models.LinearModel`.
    """

    def __init__(self, name, pt, config):
        self.pt = pt
        self.config = config
        self.name = name
        self.number_of_rows = None

    def get_width(self):
        raise NotImplementedError

    def __len__(self):
        return self.get_width()

    def energy(self, atoms):
        """Energy of each basis function, shape (nbasis,)."""
        raise NotImplementedError

    def forces(self, atoms):
        """Forces of each basis function, shape (nbasis, natoms, 3)."""
        raise NotImplementedError

    def virial(self, atoms):
        """Virial of each basis function, shape (nbasis, 3, 3)."""
        raise NotImplementedError

    def site_energy(self, atoms, i):
        """Energy of site `i` for each basis function, shape (nbasis,)."""
        raise NotImplementedError

    def create_a(self, data):
        """
        Allocate the design matrix, truth and weight arrays for the records on this proc.

        Args:
            data: List of `AtomsData` records.
        """
        pt = self.pt
        a_len = sum(count_observations(d) for d in data)
        a_width = self.get_width()
        assert isinstance(a_width, int)

        a_size = a_len * a_width * double_size
        if "MEMORY" in self.config.sections:
            memory = self.config.sections["MEMORY"].memory
            override = self.config.sections["MEMORY"].override
        else:
            memory = pt.get_ram()
            override = False
        if self.config.args.verbose:
            pt.single_print(">>> Matrix of basis evaluations takes up ",
                            "{:.4f}".format(100 * a_size / memory),
                            "% of the total memory:", "{:.4f}".format(memory*1e-9), "GB")
        if a_size / pt.get_ram() > 0.5 and not override:
            raise MemoryError("The design matrix is larger than 50% of your RAM. \n Aborting...!")
        elif a_size / pt.get_ram() > 0.5 and override:
            pt.single_print("Warning: > 50 % RAM. I hope you know what you are doing!")

        pt.create_shared_array('a', a_len, a_width)
        pt.create_shared_array('b', a_len)
        pt.create_shared_array('w', a_len)
        self.number_of_rows = a_len

    def process_configs(self, data, indices=None):
        """
        Evaluate the basis on every record and fill the fitting arrays.

        Args:
            data: List of `AtomsData` records, already allocated with `create_a`.
            indices: Optional global configuration index of each record, used to label rows.
        """
        pt = self.pt
        if indices is None:
            indices = range(len(data))
        a, b, w = assemble(data, self)
        pt.shared_arrays['a'].array[:] = a
        pt.shared_arrays['b'].array[:] = b
        pt.shared_arrays['w'].array[:] = w

        group_key = self.config.sections["DATA"].group_key
        groups = []
        configs = []
        for index, d in zip(indices, data):
            nrows = count_observations(d)
            groups.extend([group_type(d, group_key)] * nrows)
            configs.extend([int(index)] * nrows)
        pt.add_2_fitace("Groups", groups)
        pt.add_2_fitace("Configs", configs)
        pt.add_2_fitace("Row_Type", row_types(data))
        pt.add_2_fitace("Atom_I", row_atoms(data))

    def collect_distributed_lists(self):
        """
        Concatenate the fitting arrays and row labels of all procs, in proc order.
        """
        for name in ('a', 'b', 'w'):
            self.pt.shared_arrays[name].array = self.pt.gather_arrays(self.pt.shared_arrays[name].array)
        for key in ("Groups", "Configs", "Row_Type", "Atom_I"):
            self.pt.fitace_dict[key] = self.pt.gather_list(self.pt.fitace_dict[key])
        self.number_of_rows = len(self.pt.shared_arrays['b'].array)

    def extras(self):
        @self.pt.rank_zero
        def extras():
            if self.config.sections["EXTRAS"].dump_a:
                np.save(self.config.sections['EXTRAS'].descriptor_file, self.pt.shared_arrays['a'].array)
            if self.config.sections["EXTRAS"].dump_b:
                np.save(self.config.sections['EXTRAS'].truth_file, self.pt.shared_arrays['b'].array)
            if self.config.sections["EXTRAS"].dump_w:
                np.save(self.config.sections['EXTRAS'].weights_file, self.pt.shared_arrays['w'].array)
            if self.config.sections["EXTRAS"].dump_dataframe:
                df = pd.DataFrame(self.pt.shared_arrays['a'].array)
                df['truths'] = self.pt.shared_arrays['b'].array.tolist()
                df['weights'] = self.pt.shared_arrays['w'].array.tolist()
                for key in self.pt.fitace_dict.keys():
                    if isinstance(self.pt.fitace_dict[key], list) and len(self.pt.fitace_dict[key]) == len(df.index):
                        df[key] = self.pt.fitace_dict[key]
                df.to_pickle(self.config.sections['EXTRAS'].dataframe_file)
                del df
        if "EXTRAS" in self.config.sections:
            extras()
