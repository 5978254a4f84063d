from acefitlib.io.error import ExitFunc
from os import getcwd, path


def strtobool(val):
    """Convert a string such as "yes", "true", "on", "1" or "no", "false", "off", "0" to a bool."""
    val = str(val).strip().lower()
    if val in ("y", "yes", "t", "true", "on", "1"):
        return True
    elif val in ("n", "no", "f", "false", "off", "0"):
        return False
    else:
        raise ValueError("invalid truth value {!r}".format(val))


class Section:
    """
    Base class of an input section. Subclasses read their settings with `get_value` in their
    constructor, check them against `allowedkeys` and finally call `delete` to drop the raw config.
    """
    def __init__(self, name, config, pt, infile, args=None):
        self.name = name
        self.pt = pt
        self.infile = infile
        self._config = config
        self._args = args
        self.allowedkeys = None
        self._on = config.has_section(self.name.upper())
        if self._on is False:
            self.delete()
            raise ExitFunc

    def delete(self):
        del self._config
        del self._args

    def _check_section(self):
        for value_name in self._config[self.name]:
            if value_name in self.allowedkeys:
                continue
            else:
                raise RuntimeError(">>> Found unmatched variable in {} section of input: {}".format(self.name,
                                                                                                    value_name))

    def print_name(self):
        self.pt.single_print(self.name)

    def get_value(self, section, key, fallback, interpreter="str"):
        if interpreter == "str" or interpreter == "string":
            convert = str
        elif interpreter == "bool":
            convert = strtobool
        elif interpreter == "float":
            convert = float
        elif interpreter == "int" or interpreter == "integer":
            convert = int
        else:
            raise ValueError("{} is not an implemented interpreter.".format(interpreter))

        if section not in self._config:
            value = convert(fallback)
        else:
            value = convert(self._config.get(section, key, fallback=fallback))

        return value

    def get_section(self, section):
        if section not in self._config:
            return None
        return self._config.items(section)

    def check_path(self, name, suffixes=("",)):
        """
        Path of an output file in the output directory.

        Raises FileExistsError if the file, or the file with any of `suffixes` appended, exists and
        `--overwrite` was not given.
        """
        if name == 'None':
            return None
        name = path.join(self.get_outfile_directory(), name)
        if self._args.overwrite is None:
            return name
        for element in [name + suffix for suffix in suffixes]:
            if not self._args.overwrite and path.exists(element):
                raise FileExistsError(f"File {element} already exists.")
        return name

    def check_infile(self, name):
        """Path of an input file, relative to the input file directory unless absolute."""
        if name == 'None' or path.isabs(name):
            return name
        return path.join(self.get_infile_directory(), name)

    def get_infile_directory(self):
        """
        Directory that input is read from. Empty when no input file was supplied, i.e. when
        settings come from a dictionary.
        """
        if not self.infile:
            return ''
        return path.dirname(self.infile)

    def get_outfile_directory(self):
        """Input file directory if `--relative` was given, else the current working directory."""
        if self._args.relative:
            return self.get_infile_directory()
        return getcwd()
