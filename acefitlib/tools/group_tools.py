"""
This file houses functions that are useful for organizing groups of training data.
"""
from acefitlib.tools.atoms_data import get_data, resolve_key


def weight_table(group_table):
    """
    Convert a group table with `eweight`, `fweight` and `vweight` columns to a weight table.

    Args:
        group_table: Dictionary `{group: {"eweight": ..., "fweight": ..., "vweight": ...}}`.

    Returns a dictionary `{group: {"E": ..., "F": ..., "V": ...}}`. Missing columns default to 1.0.
    """
    table = {}
    for name, row in group_table.items():
        table[name] = {"E": float(row.get("eweight", 1.0)),
                       "F": float(row.get("fweight", 1.0)),
                       "V": float(row.get("vweight", 1.0))}
    return table


def group_type(data, group_key="config_type"):
    """Group label of a record, "default" if its configuration carries no `group_key`."""
    key = resolve_key(data.keys, group_key)
    if key is None:
        return "default"
    return str(get_data(data.atoms, key))


def group_types(data, group_key="config_type"):
    """Group labels of a list of records in first-seen order."""
    return list(dict.fromkeys(group_type(d, group_key) for d in data))
