from acefitlib.solvers.solver import Solver
from sklearn.linear_model import Ridge


class RIDGE(Solver):

    def __init__(self, name, pt, config):
        super().__init__(name, pt, config)

    def perform_fit(self, a=None, b=None, w=None):
        """
        Ridge regression without intercept on the weighted linear system. The penalty `alpha`
        comes from the `[RIDGE]` section, 1e-8 if it is absent.

        The fit is stored as a member `fs.solver.fit`.
        """
        if self.pt._rank == 0:
            aw, bw = self._weighted_system(a, b, w)
            alval = self.config.sections['RIDGE'].alpha if 'RIDGE' in self.config.sections else 1.0e-8
            reg = Ridge(alpha=alval, fit_intercept=False)
            reg.fit(aw, bw)
            self.fit = self._from_prior(reg.coef_)
