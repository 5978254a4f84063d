"""
Tables of fitting errors for printing and for the metrics file.
"""

import pandas as pd
from acefitlib.tools.atoms_data import Observable

_OBSERVABLES = [o.value for o in Observable]

# Energies and virials in meV, forces in eV/A.
_SCALE = {"E": 1000.0, "F": 1.0, "V": 1000.0, "PAE": 1000.0}
_COLUMNS = {"E": "E [meV]", "F": "F [eV/A]", "V": "V [meV]", "PAE": "PAE [meV]"}


def errors_table(config_errors, metric="rmse"):
    """
    One row per group (the whole set last) and one column per observable.

    Args:
        config_errors: Nested dictionary `{metric: {group: {observable: value}}}`.
        metric: "rmse" or "mae".
    """
    rows = config_errors[metric]
    table = pd.DataFrame([[rows[group][obs] for obs in _OBSERVABLES] for group in rows],
                         index=list(rows), columns=_OBSERVABLES)
    for obs in _OBSERVABLES:
        table[obs] = table[obs] * _SCALE[obs]
    table = table.rename(columns=_COLUMNS)
    table.index.name = "Type"
    return table


def print_errors_tables(config_errors, printer=print):
    printer("RMSE Table")
    printer(errors_table(config_errors, "rmse").to_markdown(floatfmt=".3f"))
    printer("MAE Table")
    printer(errors_table(config_errors, "mae").to_markdown(floatfmt=".3f"))


def errors_dataframe(config_errors, counts):
    """
    Long form error dataframe indexed by (Group, Observable) with columns ncount, mae and rmse,
    in units of eV and eV/A.
    """
    rows = []
    for group in config_errors["mae"]:
        for obs in _OBSERVABLES:
            rows.append({"Group": group,
                         "Observable": obs,
                         "ncount": counts[group][obs],
                         "mae": config_errors["mae"][group][obs],
                         "rmse": config_errors["rmse"][group][obs]})
    return pd.DataFrame(rows, columns=["Group", "Observable", "ncount", "mae", "rmse"]) \
        .set_index(["Group", "Observable"])
