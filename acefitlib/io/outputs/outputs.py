from contextlib import contextmanager
import gzip
import logging
import sys


class Output:
    """
    Base class of the output styles. Configures logging, routes screen output through the
    ParallelTools instance and writes the error metrics file.
    """

    def __init__(self, name, pt, config):
        self.config = config
        self.pt = pt
        self.name = name
        self._screen = self.config.args.screen
        self._logfile = self.config.args.log
        self._s2f = self.config.args.screen2file
        if self._s2f is not None:
            self.pt.set_output(self._s2f)
        if "pytest" in sys.modules:
            self.pt.pytest_is_true()
        if self._logfile is None:
            logging.basicConfig(level=logging.INFO)
        else:
            logging.basicConfig(level=logging.INFO, filename=self._logfile)
        self.logger = logging.getLogger(__name__)
        self.pt.set_logger(self.logger)

    def screen(self, *args, **kw):
        if self._screen:
            self.pt.single_print(*args, **kw)

    def info(self, msg):
        @self.pt.rank_zero
        def decorated_info():
            self.logger.info(msg)
        decorated_info()

    def warning(self, msg):
        @self.pt.rank_zero
        def decorated_warning():
            self.logger.warning(msg)
        decorated_warning()

    def output(self, *args):
        pass

    def read_fit(self):
        raise NotImplementedError("{} output cannot read a fit".format(self.name))

    def write_errors(self, errors):
        """
        Write the error dataframe to the metrics file in the configured `metrics_style`.

        Args:
            errors: pandas DataFrame of errors; nothing is written for an empty list.
        """
        @self.pt.rank_zero
        def decorated_write_errors():
            fname = self.config.sections["OUTFILE"].metric_file
            arguments = {}
            write_type = 'wt'
            if self.config.sections["OUTFILE"].metrics_style == "MD":
                function = errors.to_markdown
            elif self.config.sections["OUTFILE"].metrics_style == "CSV":
                arguments['sep'] = ','
                arguments['float_format'] = "%.8f"
                function = errors.to_csv
            elif self.config.sections["OUTFILE"].metrics_style == "SSV":
                arguments['sep'] = ' '
                arguments['float_format'] = "%.8f"
                function = errors.to_csv
            elif self.config.sections["OUTFILE"].metrics_style == "JSON":
                function = errors.to_json
            elif self.config.sections["OUTFILE"].metrics_style == "DF":
                function = errors.to_pickle
                write_type = 'wb'
            else:
                raise NotImplementedError("Metric style {} not implemented".format(
                    self.config.sections["OUTFILE"].metrics_style))
            with optional_open(fname, write_type) as file:
                if file is not None:
                    function(file, **arguments)

        if not isinstance(errors, list):
            decorated_write_errors()


@contextmanager
def optional_open(file, mode, *args, openfn=None, **kwargs):
    """If file is None, yields None instead of a file object."""
    if file is None:
        yield None
    else:
        if openfn is None:
            openfn = gzip.open if file.endswith('.gz') else open
        with openfn(file, mode, *args, **kwargs) as open_file:
            yield open_file
