from acefitlib.io.sections.sections import Section
from psutil import virtual_memory


class Memory(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['memory', 'override']
        self._check_section()

        self.mem_bytes = virtual_memory().total
        self.memory = self.get_value("MEMORY", "memory", "{}".format(self.mem_bytes), "int")
        self.override = self.get_value("MEMORY", "override", "False", interpreter="bool")
        self.delete()
