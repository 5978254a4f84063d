from acefitlib.io.sections.sections import Section


class Data(Section):
    """
    Keys under which configurations store their observables. The value "None" disables an
    observable; keys are matched case-insensitively against each configuration's data.
    """

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['energy_key', 'force_key', 'virial_key', 'pae_key', 'mask_key',
                            'group_key', 'weight_key']
        self._check_section()

        self.energy_key = self._key(self.get_value("DATA", "energy_key", "energy"))
        self.force_key = self._key(self.get_value("DATA", "force_key", "forces"))
        self.virial_key = self._key(self.get_value("DATA", "virial_key", "virial"))
        self.pae_key = self._key(self.get_value("DATA", "pae_key", "None"))
        self.mask_key = self._key(self.get_value("DATA", "mask_key", "None"))
        self.group_key = self.get_value("DATA", "group_key", "config_type")
        self.weight_key = self.get_value("DATA", "weight_key", "config_type")
        self.delete()

    @staticmethod
    def _key(value):
        return None if value == "None" else value

    def record_keys(self):
        """Keyword arguments selecting observables when building records."""
        return {"energy_key": self.energy_key,
                "force_key": self.force_key,
                "virial_key": self.virial_key,
                "pae_key": self.pae_key,
                "mask_key": self.mask_key,
                "weight_key": self.weight_key}
