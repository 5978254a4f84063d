from acefitlib.io.outputs.outputs import Output
from acefitlib.io.outputs.linear import Linear


def output(output_name, pt, cfg):
    """Output Factory"""
    instance = search(output_name)
    instance.__init__(output_name, pt, cfg)
    return instance


def search(output_name):
    instance = None
    for cls in Output.__subclasses__():
        if cls.__name__.lower() == output_name.lower():
            instance = Output.__new__(cls)

    if instance is None:
        raise IndexError("{} was not found in ACEfit outputs".format(output_name))
    else:
        return instance
