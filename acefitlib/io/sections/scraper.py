from acefitlib.io.sections.sections import Section


class Scraper(Section):

    def __init__(self, name, config, pt, infile, args):
        super().__init__(name, config, pt, infile, args)
        self.allowedkeys = ['scraper', 'datafile', 'format', 'index']
        self._check_section()

        self.scraper = self.get_value("SCRAPER", "scraper", "ASE")
        self.datafile = self.check_infile(self.get_value("SCRAPER", "datafile", "None"))
        self.format = self.get_value("SCRAPER", "format", "None")
        if self.format == "None":
            self.format = None
        self.index = self.get_value("SCRAPER", "index", ":")
        self.delete()
