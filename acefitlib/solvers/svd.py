from acefitlib.solvers.solver import Solver
from scipy.linalg import lstsq


class SVD(Solver):

    def __init__(self, name, pt, config):
        super().__init__(name, pt, config)

    def perform_fit(self, a=None, b=None, w=None):
        """
        Perform fit on a linear system. If no args are supplied, will use fitting data in `pt.shared_arrays`.

        Args:
            a (np.array): Optional "A" matrix.
            b (np.array): Optional Truth array.
            w (np.array): Optional Weight array.

        The fit is stored as a member `fs.solver.fit`.
        """
        # Only fit on rank 0 to prevent unnecessary memory and work.
        if self.pt._rank == 0:
            aw, bw = self._weighted_system(a, b, w)
            coeffs, residues, rank, s = lstsq(aw, bw, 1.0e-13)
            self.fit = self._from_prior(coeffs)
