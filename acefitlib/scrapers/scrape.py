# <!----------------BEGIN-HEADER------------------------------------>
# ## ACEfit
# A Python Package For Fitting ACE Interatomic Potentials to Quantum-Mechanical Reference Data
#
# _Copyright (2016) Sandia Corporation.
# Under the terms of Contract DE-AC04-94AL85000 with Sandia Corporation,
# the U.S. Government retains certain rights in this software.
# This software is distributed under the GNU General Public License_
# ##
# <!-----------------END-HEADER------------------------------------->

from acefitlib.scrapers.ase_funcs import collate


class Scraper:
    """
    Base class of the scrapers. A scraper turns the files named in the `[SCRAPER]` section into a
    list of `ase.Atoms` configurations carrying their data in `info` and `arrays`.
    """

    def __init__(self, name, pt, config):
        self.pt = pt
        self.config = config
        self.name = name
        self.all_data = []

    def scrape_configs(self):
        """Read all configurations, returns a list of `ase.Atoms`."""
        raise NotImplementedError

    def _data_keys(self):
        """Keys that calculator results are stored under, from the `[DATA]` section."""
        keys = {"energy_key": "energy", "force_key": "forces", "virial_key": "virial"}
        if "DATA" in self.config.sections:
            for name in keys:
                value = getattr(self.config.sections["DATA"], name)
                if value is not None:
                    keys[name] = value
        return keys

    def collate(self, frames):
        self.all_data = collate(frames, **self._data_keys())
        if self.config.args.verbose:
            self.pt.single_print("Scraped {} configurations".format(len(self.all_data)))
        return self.all_data
