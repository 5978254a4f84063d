"""
Summaries of a training set before fitting.
"""
import pandas as pd
from acefitlib.tools.atoms_data import Observable
from acefitlib.tools.group_tools import group_type


def assess_dataset(data, group_key="config_type"):
    """
    Count configurations, atomic environments and observations of each group.

    Args:
        data: List of `AtomsData` records.
        group_key: Data key holding the group label.

    Returns a pandas DataFrame indexed by group label (first-seen order) with columns `#Configs`,
    `#Envs`, `#E`, `#F`, `#V`, followed by a `total` row and a `missing` row counting the
    observations absent from the data set. Force counts are 3 per atom, virial counts 6 per
    configuration.
    """
    counts = {}
    for d in data:
        c_t = group_type(d, group_key)
        if c_t not in counts:
            counts[c_t] = {"#Configs": 0, "#Envs": 0, "#E": 0, "#F": 0, "#V": 0}
        natoms = len(d)
        counts[c_t]["#Configs"] += 1
        counts[c_t]["#Envs"] += natoms
        if d.has(Observable.E):
            counts[c_t]["#E"] += 1
        if d.has(Observable.F):
            counts[c_t]["#F"] += 3 * natoms
        if d.has(Observable.V):
            counts[c_t]["#V"] += 6

    columns = ["#Configs", "#Envs", "#E", "#F", "#V"]
    table = pd.DataFrame([[row[c] for c in columns] for row in counts.values()],
                         index=list(counts), columns=columns, dtype=int)
    total = table.sum(axis=0)
    missing = pd.Series({"#Configs": 0,
                         "#Envs": 0,
                         "#E": total["#Configs"] - total["#E"],
                         "#F": 3 * total["#Envs"] - total["#F"],
                         "#V": 6 * total["#Configs"] - total["#V"]})
    table.loc["total"] = total
    table.loc["missing"] = missing
    table.index.name = "Type"
    return table
