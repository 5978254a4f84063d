from acefitlib.io.sections.sections import Section
from acefitlib.io.error import ExitFunc
from acefitlib.io.sections.calculator_sections.calculator import Calculator
from acefitlib.io.sections.data import Data
from acefitlib.io.sections.extras import Extras
from acefitlib.io.sections.groups import Groups
from acefitlib.io.sections.memory import Memory
from acefitlib.io.sections.outfile import Outfile
from acefitlib.io.sections.reference import Reference
from acefitlib.io.sections.scraper import Scraper
from acefitlib.io.sections.solver_sections.solver import Solver
from acefitlib.io.sections.solver_sections.ridge import Ridge


def new_section(section, config, pt, infile, args):
    """Section Factory"""
    instance = search(section)
    try:
        instance.__init__(section, config, pt, infile, args)
    except ExitFunc:
        pass
    return instance


def search(section):
    instance = None
    for cls in Section.__subclasses__():
        if cls.__name__.lower() == section.lower():
            instance = Section.__new__(cls)

    if instance is None:
        raise IndexError("{} was not found in ACEfit sections".format(section))
    else:
        return instance
