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

from acefitlib.fitace import FitAce

try:
    from mpi4py import MPI
    comm = MPI.COMM_WORLD
except ModuleNotFoundError:
    comm = None


def main():
    # Single ACEfit instance for the traditional flow of control. Its parallel tools detect
    # whether MPI is available.
    fs = None
    try:
        fs = FitAce(comm=comm)
        fs.scrape_configs(delete_scraper=True)
        fs.build_records()
        fs.assess()
        if fs.fit is None:
            fs.process_configs(delete_data=True)
        # Barrier after a large parallel operation.
        fs.pt.all_barrier()
        fs.perform_fit()
        fs.write_output()
    except Exception as e:
        if fs is None:
            raise
        fs.pt.exception(e)


if __name__ == "__main__":
    main()
