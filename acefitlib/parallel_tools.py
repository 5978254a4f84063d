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

from time import time, sleep
import numpy as np
from psutil import virtual_memory
import ctypes
import signal


try:
    # stubs = 0 MPI is active
    stubs = 0
    from mpi4py import MPI
except ModuleNotFoundError:
    stubs = 1


def printf(*args, **kw):
    kw['flush'] = True

    if 'overwrite' in kw:
        del kw['overwrite']
        kw['end'] = ''
        print("\r", end='')
        print(" ".join(map(str, args)), **kw)
    else:
        print(" ".join(map(str, args)), **kw)


class GracefulError(BaseException):

    def __init__(self, *args, **kwargs):
        pass


class GracefulKiller:

    def __init__(self, comm):
        self._comm = comm
        self._rank = 0
        self.already_killed = False
        if self._comm is not None:
            self._rank = self._comm.Get_rank()
            signal.signal(signal.SIGINT, self.exit_gracefully)
            signal.signal(signal.SIGTERM, self.exit_gracefully)

    def exit_gracefully(self, signum, frame):
        if self._rank == 0:
            printf("attempting to exit gracefully")
        if self.already_killed:
            self._comm.Abort()
        raise GracefulError("exiting from exit code", signum, "at", frame)


def _rank_zero(method):
    def check_if_rank_zero(*args, **kw):
        if args[0].get_rank() == 0:
            return method(*args, **kw)
        else:
            return dummy_function()
    return check_if_rank_zero


def identity_decorator(self, obj):
    return obj


def _rank_zero_decorator(decorator):
    def check_if_rank_zero(*args, **kw):
        if args[0].get_rank() == 0:
            return decorator(*args, **kw)
        else:
            return identity_decorator(*args, **kw)
    return check_if_rank_zero


def dummy_function(*args, **kw):
    return None


def stub_check(method):
    def stub_function(*args, **kw):
        if stubs == 0 and args[0]._comm is not None:
            return method(*args, **kw)
        else:
            return dummy_function(*args, **kw)
    return stub_function


class ParallelTools():
    """
    This class holds the communicator, the rank-local fitting arrays and the helpers used to print,
    time and reduce results across processes.

    Records are split over ranks in contiguous blocks, so gathering the rank-local arrays in rank
    order reproduces the serial row order.

    Attributes:
        check_fitace_exist (bool): Checks whether fitace dictionaries exist before creating a new
            one, set to `False` to allow recreating a dictionary.
    """

    def __init__(self, comm=None):
        self.check_fitace_exist = True
        if stubs == 0:
            if comm is None:
                comm = MPI.COMM_WORLD
            self._comm = comm
            self._rank = self._comm.Get_rank()
            self._size = self._comm.Get_size()

        if stubs == 1:
            self._rank = 0
            self._size = 1
            self._comm = None

        self.killer = GracefulKiller(self._comm)

        self.shared_arrays = {}
        self.fitace_dict = {}
        self.logger = None
        self.pytest = False
        self._fp = None

    def get_rank(self):
        return self._rank

    @_rank_zero
    def single_print(self, *args, **kw):
        printf(*args, file=self._fp)

    def set_output(self, output_file):
        """Send screen output of rank 0 to a file."""
        if self._rank == 0:
            self._fp = open(output_file, 'w')

    @_rank_zero_decorator
    def single_timeit(self, method):
        def timed(*args, **kw):
            ts = time()
            result = method(*args, **kw)
            te = time()
            printf("'{0}' took {1:.2f} ms on rank {2}".format(
                method.__name__, (te - ts) * 1000, self._rank), file=self._fp)
            return result
        return timed

    def rank_zero(self, method):
        if self._rank == 0:
            def check_if_rank_zero(*args, **kw):
                return method(*args, **kw)
            return check_if_rank_zero
        else:
            return dummy_function

    def create_shared_array(self, name, size1, size2=1, dtype='d'):
        """
        Create a rank-local array registered under `name`.

        Args:
            name: Key of the array in `shared_arrays`.
            size1: Number of rows.
            size2: Number of columns, a 1D array is made when this is 1.
            dtype: Numpy dtype character.
        """
        if isinstance(name, str):
            self.shared_arrays[name] = StubsArray(size1, size2, dtype=dtype)
        else:
            raise TypeError("name must be a string")

    def add_2_fitace(self, name, an_object):
        if isinstance(name, str):
            if (self.check_fitace_exist):
                if name in self.fitace_dict:
                    self.fitace_dict.pop(name)
            self.fitace_dict[name] = an_object
        else:
            raise TypeError("name must be a string")

    @stub_check
    def all_barrier(self):
        self._comm.Barrier()

    def split_by_node(self, obj):
        """
        Contiguous block of a list or array owned by this rank. Earlier ranks get the extra items.
        """
        if isinstance(obj, (list, np.ndarray)):
            nitems = len(obj)
            base, extra = divmod(nitems, self._size)
            start = self._rank * base + min(self._rank, extra)
            stop = start + base + (1 if self._rank < extra else 0)
            return obj[start:stop]
        else:
            raise TypeError("Parallel tools cannot split {} by node.".format(obj))

    def gather_arrays(self, array):
        """
        Concatenate rank-local arrays along rows in rank order, on every rank.
        """
        if stubs == 1 or self._comm is None or self._size == 1:
            return array
        pieces = self._comm.allgather(array)
        if np.ndim(array) == 1:
            return np.concatenate(pieces)
        return np.vstack(pieces)

    def bcast(self, obj, root=0):
        if stubs == 1 or self._comm is None or self._size == 1:
            return obj
        return self._comm.bcast(obj, root=root)

    def gather_list(self, a_list):
        if stubs == 1 or self._comm is None or self._size == 1:
            return a_list
        return [item for sublist in self._comm.allgather(a_list) for item in sublist]

    def reduce_errors(self, accumulators):
        """
        Sum per-rank error accumulators group by group, keeping first-seen group order.

        Args:
            accumulators: Tuple `(groups, {group: ErrorAccumulator})` computed on this rank.

        Returns the same structure summed over all ranks.
        """
        if stubs == 1 or self._comm is None or self._size == 1:
            return accumulators
        groups = []
        total = {}
        for rank_groups, rank_accumulators in self._comm.allgather(accumulators):
            for group in rank_groups:
                if group in total:
                    total[group] = total[group] + rank_accumulators[group]
                else:
                    groups.append(group)
                    total[group] = rank_accumulators[group]
        return groups, total

    @staticmethod
    def get_ram():
        mem = virtual_memory()
        return mem.total

    def set_logger(self, logger):
        self.logger = logger

    def pytest_is_true(self):
        self.pytest = True

    def abort(self):
        self._comm.Abort()

    def exception(self, err):
        self.killer.already_killed = True

        if self.logger is None and self._rank == 0:
            raise err

        if self._rank == 0:
            self.logger.exception(err)
            if self.pytest or self._comm is None:
                raise err

        sleep(5)
        if self._comm is not None:
            self.abort()


class StubsArray:

    def __init__(self, size1, size2=1, dtype='d'):
        self.array = None

        if size2 == 1:
            self.array = np.zeros(shape=(size1, ), dtype=dtype)
        else:
            self.array = np.zeros(shape=(size1, size2), dtype=dtype)


if stubs == 0:
    double_size = MPI.DOUBLE.Get_size()
else:
    double_size = ctypes.sizeof(ctypes.c_double)
