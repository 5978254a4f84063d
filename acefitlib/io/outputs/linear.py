from acefitlib.io.outputs.outputs import Output
import numpy as np


class Linear(Output):
    """Writes the coefficients of a linear fit, one per line, to `<potential>.acecoeff`."""

    def __init__(self, name, pt, config):
        super().__init__(name, pt, config)

    def output(self, coeffs, errors):
        self.write(coeffs, errors)

    def coeff_file(self):
        potential_name = self.config.sections["OUTFILE"].potential_name
        return None if potential_name is None else potential_name + ".acecoeff"

    def write_coeffs(self, coeffs):
        fname = self.coeff_file()
        if fname is None:
            return
        header = "ACEfit coefficients\ncalculator {}\nncoeff {}\nhash {}".format(
            self.config.sections["CALCULATOR"].calculator if "CALCULATOR" in self.config.sections else "None",
            len(coeffs), self.config.hash)
        np.savetxt(fname, np.asarray(coeffs, dtype=float), fmt="%.16e", header=header)
        self.screen("Coefficients written to {}".format(fname))
        self.info("Wrote {} coefficients to {}".format(len(coeffs), fname))

    def write(self, coeffs, errors):
        """ Write both coefficient and error files"""
        @self.pt.rank_zero
        def decorated_write():
            if not ("EXTRAS" in self.config.sections and self.config.sections["EXTRAS"].only_test):
                self.write_coeffs(coeffs)
            if isinstance(errors, list):
                self.warning("No errors were computed, skipping the metrics file")
            self.write_errors(errors)
        decorated_write()

    def read_fit(self):
        """Coefficients of a previous fit, read from the coefficient file."""
        fname = self.coeff_file()
        if fname is None:
            raise FileNotFoundError("No potential file to read a fit from")
        return np.loadtxt(fname, ndmin=1)
