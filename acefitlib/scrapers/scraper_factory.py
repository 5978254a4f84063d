from acefitlib.scrapers.scrape import Scraper
from acefitlib.scrapers.ase_scraper import ASE


def scraper(scraper_name, pt, config):
    """Scraper Factory"""
    instance = search(scraper_name)
    instance.__init__(scraper_name, pt, config)
    return instance


def search(scraper_name):
    instance = None
    for cls in Scraper.__subclasses__():
        if cls.__name__.lower() == scraper_name.lower():
            instance = Scraper.__new__(cls)

    if instance is None:
        raise IndexError("{} was not found in ACEfit scrapers".format(scraper_name))
    else:
        return instance
