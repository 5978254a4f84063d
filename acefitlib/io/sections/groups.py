"""Groups Class"""
from acefitlib.io.sections.sections import Section
from acefitlib.tools.atoms_data import default_weights
from acefitlib.tools.group_tools import weight_table


class Groups(Section):
    """
    Regression weights per group, one line per group:

        [GROUPS]
        default = 30.0 1.0 1.0
        liquid = 10.0 1.0 1.0

    The columns are named by `group_sections`. Without any group lines the fitting default
    weights are used.
    """

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['group_sections', 'group_types']

        self.group_sections = self.get_value("GROUPS", "group_sections", "name eweight fweight vweight").split()
        self.group_types = [float] * len(self.group_sections)
        self.group_table = None
        self.read_group_config()
        if self.group_table:
            self.weights = weight_table(self.group_table)
        else:
            self.weights = default_weights()

        self.delete()

    def read_group_config(self):
        self.group_table = {k: v.split() for (k, v) in self.get_section("GROUPS")}
        # Settings of this section are not groups.
        for k in self.allowedkeys:
            if k in self.group_table:
                self.group_table.pop(k)
        for k, v in self.group_table.items():
            expected_variables = len(self.group_sections[1:])
            found_variables = len(v)

            if found_variables != expected_variables:
                raise ValueError('!!ERROR: Wrong number of group variables!!'
                                 '\n!!Check the input file section [GROUPS] for extra variables, typos '
                                 f'\n!!\tGroup line: {k} = {v}'
                                 f'\n!!\tExpected {expected_variables} columns for settings, found {found_variables}'
                                 '\n')
            self.group_table[k] = {self.group_sections[i+1]: self.group_types[i+1](item) for i, item in enumerate(v)}
