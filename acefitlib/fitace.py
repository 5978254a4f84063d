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

from acefitlib.parallel_tools import ParallelTools
from acefitlib.scrapers.scraper_factory import scraper
from acefitlib.calculators.calculator_factory import calculator
from acefitlib.calculators.models import LinearModel, OneBodyModel, SumModel
from acefitlib.solvers.solver_factory import solver
from acefitlib.io.outputs.output_factory import output
from acefitlib.io.outputs.tables import print_errors_tables
from acefitlib.io.input import Config
from acefitlib.tools.atoms_data import atoms_data
from acefitlib.tools.dataset_tools import assess_dataset
import numpy as np


class FitAce:
    """
    This class houses the objects needed for fitting a linear potential, start to finish.

    Args:
        input (str): Optional dictionary or path to input file when using library mode; defaults to
                     None for executable use.
        comm: Optional MPI communicator when using library mode; defaults to None.
        arglist (list): Optional list of cmd line args when using library mode.

    Attributes:
        pt (:obj:`class` ParallelTools): Instance of the ParallelTools class for helping MPI
                                         communication and fitting arrays.
        config (:obj:`class` Config): Instance of the Config class for initializing settings,
                                      initialized with a ParallelTools instance.
        scraper (:obj:`class` Scraper): Instance of the Scraper class for gathering configs.
        frames (:obj:`list`): List of all `ase.Atoms` configurations.
        data (:obj:`list`): List of `AtomsData` records owned by this proc.
        indices (:obj:`np.ndarray`): Index in `frames` of each record owned by this proc.
        calculator (:obj:`class` Calculator): Instance of the Calculator class, the basis that is
            fitted.
        reference (:obj:`class` OneBodyModel): Reference energies subtracted before fitting, None
            without a `[REFERENCE]` section.
        solver (:obj:`class` Solver): Instance of the Solver class for performing a fit.
    """
    def __init__(self, input=None, comm=None, arglist: list=[]):
        self.comm = comm
        self.pt = ParallelTools(comm=comm)
        self.pt.all_barrier()
        self.config = Config(self.pt, input, arguments_lst=arglist)
        if self.config.args.verbose:
            self.pt.single_print(f"ACEfit instance hash: {self.config.hash}")
        self.scraper = scraper(self.config.sections["SCRAPER"].scraper, self.pt, self.config) \
            if "SCRAPER" in self.config.sections else None
        self.calculator = calculator(self.config.sections["CALCULATOR"].calculator, self.pt, self.config) \
            if "CALCULATOR" in self.config.sections else None
        self.solver = solver(self.config.sections["SOLVER"].solver, self.pt, self.config) \
            if "SOLVER" in self.config.sections else None
        self.output = output(self.config.sections["OUTFILE"].output_style, self.pt, self.config) \
            if "OUTFILE" in self.config.sections else None
        self.reference = OneBodyModel(self.config.sections["REFERENCE"].E0s) \
            if "REFERENCE" in self.config.sections else None

        self.frames = None
        self.data = None
        self.indices = None
        self.fit = None

        # Optionally read a fit.
        if "EXTRAS" in self.config.sections and self.config.sections["EXTRAS"].only_test:
            if self.output is None:
                raise RuntimeError("Reading a fit needs an OUTFILE section naming the potential")
            self.fit = self.output.read_fit()

    def __setattr__(self, name: str, value):
        """
        Override set attribute statement to prevent overwriting important attributes of an instance.
        """
        protected = ("pt", "config")
        if name in protected and hasattr(self, name):
            raise AttributeError(f"Overwriting {name} is not allowed; instead change {name} in place.")
        else:
            super().__setattr__(name, value)

    def scrape_configs(self, delete_scraper: bool = False):
        """
        Scrapes configurations of atoms and creates an instance attribute list of configurations
        called `frames`.

        Args:
            delete_scraper: Boolean determining whether the scraper object is deleted or not after
                            scraping. Defaults to False.
        """
        @self.pt.single_timeit
        def scrape_configs():
            self.frames = self.scraper.scrape_configs()
            if delete_scraper:
                del self.scraper
        scrape_configs()

    def build_records(self, frames: list=None):
        """
        Make the observation records of this proc. Frames are split over procs in contiguous
        blocks; keys come from `[DATA]`, weights from `[GROUPS]` and reference energies from
        `[REFERENCE]`.

        Args:
            frames: Optional list of `ase.Atoms`, defaults to the scraped frames.

        Returns the list of records owned by this proc.
        """
        if frames is not None:
            self.frames = frames
        elif self.frames is None:
            raise NameError("No list of configurations to build records from.")

        self.indices = self.pt.split_by_node(np.arange(len(self.frames)))
        self.data = atoms_data([self.frames[i] for i in self.indices],
                               weights=self.config.sections["GROUPS"].weights,
                               v_ref=self.reference,
                               **self.config.sections["DATA"].record_keys())
        return self.data

    def assess(self):
        """
        Count configurations and observations of each group over all procs. The table is printed
        when verbose.
        """
        data = self.pt.gather_list(self.data)
        table = assess_dataset(data, group_key=self.config.sections["DATA"].group_key)
        if self.config.args.verbose:
            self.pt.single_print(table.to_markdown())
        return table

    def process_configs(self, data: list=None, delete_data: bool=False):
        """
        Evaluate the basis on all records and fill the design matrix, truth and weight arrays in
        `pt.shared_arrays`.

        Args:
            data: Optional list of records to process. If not supplied, we use the list owned by
                  this instance.
            delete_data: Whether the frames are deleted after processing.
        """
        if data is not None:
            indices = None
        elif self.data is not None:
            data = self.data
            indices = self.indices
        else:
            raise NameError("No list of records to process.")

        @self.pt.single_timeit
        def process_configs():
            self.calculator.create_a(data)
            self.calculator.process_configs(data, indices)
            if delete_data:
                self.frames = None
            self.calculator.collect_distributed_lists()
            self.calculator.extras()
        process_configs()

    def model(self, coeffs=None):
        """
        Fitted potential: the reference energies plus the linear model of the basis.

        Args:
            coeffs: Optional coefficients, defaults to the solver's fit.
        """
        coeffs = self.solver.fit if coeffs is None else coeffs
        return SumModel(self.reference, LinearModel(self.calculator, coeffs))

    def perform_fit(self):
        """Solve the linear least squares problem, then analyse errors of the fitted model."""
        @self.pt.single_timeit
        def fit():
            if not self.config.args.perform_fit:
                return
            elif self.fit is None:
                self.solver.perform_fit()
            else:
                self.solver.fit = self.fit

        def fit_gather():
            self.solver.fit_gather()

        @self.pt.single_timeit
        def error_analysis():
            model = self.model() if self.solver.fit is not None else None
            self.solver.error_analysis(self.data, model)
            if self.config.args.verbose and self.solver.config_errors is not None:
                print_errors_tables(self.solver.config_errors, printer=self.pt.single_print)
            if self.config.args.verbose and self.config.sections["SOLVER"].detailed_errors:
                row_errors = self.solver.row_errors()
                if row_errors is not None:
                    self.pt.single_print(row_errors.to_markdown())

        fit()
        fit_gather()
        error_analysis()

    def write_output(self):
        @self.pt.single_timeit
        def write_output():
            if not self.config.args.perform_fit or self.output is None:
                return
            self.output.output(self.solver.fit, self.solver.errors)
        write_output()
