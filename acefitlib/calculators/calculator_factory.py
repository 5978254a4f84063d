from acefitlib.calculators.calculator import Calculator
from acefitlib.calculators.onebody import OneBody
from acefitlib.calculators.ase_basis import AseBasis


def calculator(calculator_name, pt, cfg):
    """Calculator Factory"""
    instance = search(calculator_name)
    if cfg.args.verbose:
        pt.single_print("Using {} as ACEfit calculator".format(calculator_name))

    instance.__init__(calculator_name, pt, cfg)
    return instance


def search(calculator_name):
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

    target_class = find_subclass_recursive(Calculator, calculator_name)

    if target_class is not None:
        instance = Calculator.__new__(target_class)

    if instance is None:
        raise IndexError("{} was not found in ACEfit calculators".format(calculator_name))
    else:
        return instance
