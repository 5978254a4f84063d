from acefitlib.solvers.solver import Solver
from acefitlib.solvers.ridge import RIDGE
from acefitlib.solvers.svd import SVD


def solver(solver_name, pt, cfg):
    """Solver Factory"""
    instance = search(solver_name)
    instance.__init__(solver_name, pt, cfg)
    return instance


def search(solver_name):
    instance = None

    def find_subclass_recursive(base_class, target_name):
        """Recursively search through all subclass levels"""
        if base_class.__name__.lower() == target_name.lower():
            return base_class

        for subclass in base_class.__subclasses__():
            result = find_subclass_recursive(subclass, target_name)
            if result is not None:
                return result

        return None

    target_class = find_subclass_recursive(Solver, solver_name)

    if target_class is not None:
        instance = Solver.__new__(target_class)

    if instance is None:
        raise IndexError("{} was not found in ACEfit solvers".format(solver_name))
    else:
        return instance
