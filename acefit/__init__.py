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
print("")
print("    ___   ____________________ ")
print("   /   | / ____/ ____/ __(_) /_")
print("  / /| |/ /   / __/ / /_/ / __/")
print(" / ___ / /___/ /___/ __/ / /_  ")
print("/_/  |_\\____/_____/_/ /_/\\__/  ")
print("")
print("-----------")
try:
    import numpy as np
    print("numpy version: ", np.__version__)
except Exception as e:
    print("Trouble importing numpy package, exiting...")
    raise e

try:
    import pandas as pd
    print("pandas version: ", pd.__version__)
except Exception as e:
    print("Trouble importing pandas package, exiting...")
    raise e

try:
    import sklearn as skl
    print("scikit-learn version: ", skl.__version__)
except Exception as e:
    print("Trouble importing scikit-learn package, exiting...")
    raise e

try:
    import scipy as sp
    print("scipy version: ", sp.__version__)
except Exception as e:
    print("Trouble importing scipy package, exiting...")
    raise e

try:
    import ase
    print("ase version: ", ase.__version__)
except Exception as e:
    print("Trouble importing ase package, exiting...")
    raise e
print("-----------")
