from acefitlib.solvers.errors import accumulate, finalize_errors, error_counts
from acefitlib.io.outputs.tables import errors_dataframe
import numpy as np
from pandas import DataFrame


class Solver:
    """
    This class declares the method to solve the linear least squares problem

        min_c || diag(W) (A c - Y) ||

    optionally preconditioned by an invertible prior matrix P, in which case the system
    diag(W) A P^-1 is solved for P c.

    Attributes:
        fit: Numpy array containing coefficients of fit.
        prior: Optional (ncoeff, ncoeff) prior matrix, None for the identity.
        config_errors: Nested dictionary `{"mae": {group: {obs: value}}, "rmse": ...}`.
        errors: Long form pandas dataframe of errors, written as metrics.
        df: Per row dataframe of truths, predictions, weights and row labels.
    """

    def __init__(self, name, pt, config):
        self.config = config
        self.pt = pt
        self.name = name
        self.fit = None
        self.prior = None
        self.errors = []
        self.config_errors = None
        self.error_counts = None
        self.df = None

    def perform_fit(self, a=None, b=None, w=None):
        pass

    def fit_gather(self):
        """Make the coefficients found on rank 0 known to all ranks."""
        self.fit = self.pt.bcast(self.fit)

    def _weighted_system(self, a=None, b=None, w=None):
        """
        Weighted and preconditioned system (diag(w) a P^-1, w b). If no args are supplied, the
        fitting data in `pt.shared_arrays` is used.
        """
        if a is None and b is None and w is None:
            a = self.pt.shared_arrays['a'].array
            b = self.pt.shared_arrays['b'].array
            w = self.pt.shared_arrays['w'].array
        if self.prior is not None:
            a = np.linalg.solve(np.asarray(self.prior).T, np.asarray(a).T).T
        return w[:, np.newaxis] * a, w * b

    def _from_prior(self, coeffs):
        """Map solution of the preconditioned system back to model coefficients."""
        if self.prior is None:
            return coeffs
        return np.linalg.solve(np.asarray(self.prior), coeffs)

    def error_analysis(self, data=None, model=None, a=None, b=None, w=None, fitace_dict=None):
        """
        Store the per row fitting data in a pandas dataframe and, given records and a model,
        compute the MAE and RMSE of every group and observable.

        Each rank passes its own records; partial error sums are reduced over ranks.

        Args:
            data: Optional list of `AtomsData` records on this rank.
            model: Model evaluated on the records, normally the fitted linear model plus any
                reference energies.
            a: Optional A matrix numpy array.
            b: Optional truth numpy array.
            w: Optional weight numpy array.
            fitace_dict: Optional dictionary of per row lists, e.g. `pt.fitace_dict`.
        """
        self.errors = []

        if self.pt._rank == 0:
            if a is None and b is None and w is None and fitace_dict is None:
                a = self.pt.shared_arrays['a'].array if 'a' in self.pt.shared_arrays else None
                b = self.pt.shared_arrays['b'].array if 'b' in self.pt.shared_arrays else None
                w = self.pt.shared_arrays['w'].array if 'w' in self.pt.shared_arrays else None
                fitace_dict = self.pt.fitace_dict
            if a is not None:
                self.df = DataFrame(a)
                self.df['truths'] = b.tolist()
                if self.fit is not None:
                    self.df['preds'] = a @ self.fit
                self.df['weights'] = w.tolist()
                for key in fitace_dict.keys():
                    if isinstance(fitace_dict[key], list) and \
                            len(fitace_dict[key]) == len(self.df.index):
                        self.df[key] = fitace_dict[key]

        if data is not None and model is not None:
            group_key = self.config.sections["DATA"].group_key if "DATA" in self.config.sections \
                else "config_type"
            groups, accumulators = accumulate(data, model, group_key=group_key)
            groups, accumulators = self.pt.reduce_errors((groups, accumulators))
            self.config_errors = finalize_errors(groups, accumulators)
            self.error_counts = error_counts(groups, accumulators)
            self.errors = errors_dataframe(self.config_errors, self.error_counts)

    def row_errors(self):
        """
        Unweighted and weighted errors of the assembled rows, per group and row type. These are
        errors of the linear system itself, i.e. with reference energies subtracted and energies
        not divided by the number of atoms.
        """
        if self.df is None or 'preds' not in self.df:
            return None
        res = self.df['truths'] - self.df['preds']
        w_res = self.df['weights'] * res
        df = DataFrame({'Groups': self.df['Groups'] if 'Groups' in self.df else 'default',
                        'Row_Type': self.df['Row_Type'] if 'Row_Type' in self.df else 'All',
                        'abs': res.abs(), 'sq': res ** 2, 'w_abs': w_res.abs(), 'w_sq': w_res ** 2})
        grouped = df.groupby(['Groups', 'Row_Type'], sort=False)
        table = grouped[['abs', 'sq', 'w_abs', 'w_sq']].mean()
        table.insert(0, 'ncount', grouped.size())
        table['rmse'] = np.sqrt(table.pop('sq'))
        table['w_rmse'] = np.sqrt(table.pop('w_sq'))
        return table.rename(columns={'abs': 'mae', 'w_abs': 'w_mae'})[['ncount', 'mae', 'rmse', 'w_mae', 'w_rmse']]
