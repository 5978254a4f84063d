from acefitlib.scrapers.scrape import Scraper
from ase import Atoms
from ase.io import read


class ASE(Scraper):
    """Reads any file format known to `ase.io.read`, e.g. extended xyz."""

    def __init__(self, name, pt, config):
        super().__init__(name, pt, config)

    def scrape_configs(self):
        section = self.config.sections["SCRAPER"]
        if section.datafile == "None":
            raise ValueError("No datafile given in the SCRAPER section")
        frames = read(section.datafile, index=section.index, format=section.format)
        if isinstance(frames, Atoms):
            frames = [frames]
        return self.collate(list(frames))
