import configparser
import argparse
from acefitlib.io.sections.section_factory import new_section
from pathlib import Path
import random


class Config():
    """
    Class for storing input settings in a `config` instance. If given a path to an input script, we
    use Python's native ConfigParser to parse the settings. If given a nested dictionary, the
    sections are determined from the first keys and specific settings from the nested keys.

    Args:
        pt: A ParallelTools instance.
        input: Optional input can either be a filename or a dictionary.
        arguments_lst: List of args that can be supplied at the command line.

    Attributes:
        infile: String for optional input filename. Defaults to None.
        indict: Dictionary for optional input dictionary of settings, to replace input file.
            Defaults to None.
        sections: Dictionary of section name -> `Section` instance.
    """

    # Sections created with default settings when absent from the input.
    default_sections = ["DATA", "GROUPS"]

    def __init__(self, pt, input=None, arguments_lst: list = []):
        self.pt = pt
        self.input = input
        self.infile = None
        self.indict = None
        self.args = None
        self._original_config = None
        self.parse_cmdline(arguments_lst=arguments_lst)
        self.sections = {}
        self.parse_config()

        # Generate random 128 bit hash to identify this fit on rank 0.
        if self.pt._rank == 0:
            self.hash = f"{random.getrandbits(128):032x}"
        else:
            self.hash = None

    def parse_cmdline(self, arguments_lst: list = []):
        """ Parse command line args if using executable mode, or a list if using library mode. """
        parser = argparse.ArgumentParser(prog="acefit")
        if (self.input is None):
            parser.add_argument("infile", action="store",
                                help="Input file with data, basis and solver options")

        # Optional args.
        parser.add_argument("--nofit", "-nf", action="store_false", dest="perform_fit",
                            help="Don't perform fit, just assemble the linear system.")
        parser.add_argument("--overwrite", action="store_true", dest="overwrite",
                            help="Allow overwriting existing files")
        parser.add_argument("--verbose", "-v", action="store_true", dest="verbose",
                            default=False, help="Show more detailed information about processing")
        parser.add_argument("--relative", "-r", action="store_true", dest="relative",
                            help='''Put output files in the directory of INFILE. If this flag
                             is not present, the files are stored in the
                            current working directory.''')
        parser.add_argument("--keyword", "-k", nargs=3, metavar=("GROUP", "NAME", "VALUE"),
                            action="append", dest="keyword_replacements",
                            help='''Replace or add input keyword group GROUP, key NAME,
                            with value VALUE. Type carefully; a misspelled key name or value
                            may be silently ignored.''')
        parser.add_argument("--screen", "-sc", action="store_false", dest="screen",
                            help="Do not print ACEfit output to screen.")
        parser.add_argument("--log", action="store", dest="log",
                            default=None, help="Write ACEfit log to this file.")
        parser.add_argument("--screen2file", "-s2f", action="store", dest="screen2file",
                            default=None, help="Print screen to a file")

        if arguments_lst:
            # Library mode, parse the supplied list instead of sys.argv.
            self.args = parser.parse_args(arguments_lst)
        else:
            self.args = parser.parse_args()

    def parse_config(self):
        self._original_config = configparser.ConfigParser(inline_comment_prefixes='#')
        self._original_config.optionxform = str
        if self.input is not None:
            if (isinstance(self.input, str)):
                self.infile = self.input
            elif (isinstance(self.input, dict)):
                self.indict = self.input
            else:
                raise TypeError("Input must be a path to an input file or a dictionary of settings")
        else:
            self.infile = self.args.infile

        if (self.infile is not None):
            if not Path(self.infile).is_file():
                raise FileNotFoundError("Input file {} not found".format(self.infile))
            self._original_config.read(self.infile)

        elif (self.indict is not None):
            for key1, data1 in self.indict.items():
                self._original_config[key1] = {}
                for key2, data2 in data1.items():
                    self._original_config[key1]["{}".format(key2)] = str(data2)

        # This adds keyword replacements to the config.
        if self.args.keyword_replacements:
            for kwg, kwn, kwv in self.args.keyword_replacements:
                if kwg not in self._original_config:
                    raise ValueError(f"{kwg} is not a valid keyword group")
                self._original_config[kwg][kwn] = kwv

        # Default missing sections to empty dicts which will prompt default values.
        for name in self.default_sections:
            if name not in self._original_config:
                self._original_config[name] = {}

        # Make sections based on input settings.
        self._set_sections(self._original_config)

    def _set_sections(self, tmp_config):
        sections = tmp_config.sections()
        for section in sections:
            self.sections[section] = new_section(section, tmp_config, self.pt, self.infile, self.args)

    def convert_to_dict(self, original_input=False):
        """
        Convert the current config (settings) object to a dictionary. Note that datatypes may not
        be preserved.

        Args:
            original_input: optional, set to True to return the original input

        Returns:
            config_dict: Python dictionary of the original or current settings.
        """
        if original_input:
            config_dict = {s: dict(self._original_config.items(s)) for s in self._original_config.sections()}
        else:
            config_dict = {s: vars(self.sections[s]) for s in self.sections}
        return config_dict
