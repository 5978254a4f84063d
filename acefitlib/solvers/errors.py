"""
Error analysis of a fitted model against the reference data of a list of records.

Errors are accumulated as sums of absolute and squared deviations plus an observation count, per
group and per observable. These sums merge by addition, so partial results from different procs
or different parts of a data set can be combined before the final MAE and RMSE are taken.

Metric definitions:

    E   - energy per atom, one value per configuration.
    F   - every Cartesian component of every atom's force.
    V   - the six independent virial components, divided by the number of atoms.
    PAE - site energies of the masked atoms.
"""

import numpy as np
from acefitlib.tools.atoms_data import Observable, VIRIAL_INDICES, atom_mask
from acefitlib.tools.group_tools import group_type

_VIRIAL_INDICES = list(VIRIAL_INDICES)

# Name of the group holding the errors of the whole data set.
SET = "set"


class ErrorAccumulator:
    """Running sums of absolute deviation, squared deviation and count for each observable."""

    def __init__(self):
        self.sum_abs = {o: 0.0 for o in Observable}
        self.sum_sq = {o: 0.0 for o in Observable}
        self.num = {o: 0 for o in Observable}

    def add(self, observable, residual):
        r = np.atleast_1d(np.asarray(residual, dtype=float))
        self.sum_abs[observable] += float(np.sum(np.abs(r)))
        self.sum_sq[observable] += float(np.sum(np.square(r)))
        self.num[observable] += r.size

    def merge(self, other):
        """Add the sums of `other` to this accumulator in place and return it."""
        for o in Observable:
            self.sum_abs[o] += other.sum_abs[o]
            self.sum_sq[o] += other.sum_sq[o]
            self.num[o] += other.num[o]
        return self

    def __add__(self, other):
        return ErrorAccumulator().merge(self).merge(other)

    def mae(self):
        """Mean absolute error per observable; 0.0 where nothing was observed."""
        return {o.value: (self.sum_abs[o] / self.num[o] if self.num[o] > 0 else 0.0)
                for o in Observable}

    def rmse(self):
        """Root mean square error per observable; 0.0 where nothing was observed."""
        return {o.value: (np.sqrt(self.sum_sq[o] / self.num[o]) if self.num[o] > 0 else 0.0)
                for o in Observable}

    def counts(self):
        return {o.value: self.num[o] for o in Observable}


def record_residuals(data, model):
    """
    Residuals (prediction minus reference) of one record.

    Args:
        data: `AtomsData` record.
        model: Model with `energy`, `forces`, `virial` and `site_energy` methods. It should include
            any reference energy, since raw reference data is compared.

    Yields tuples of (Observable, residual array).
    """
    atoms = data.atoms
    natoms = len(data)
    if data.energy_key is not None:
        estim = model.energy(atoms) / natoms
        exact = data.get_energy() / natoms
        yield Observable.E, estim - exact
    if data.force_key is not None:
        estim = np.reshape(np.asarray(model.forces(atoms), dtype=float), (natoms, 3))
        exact = data.get_forces()
        yield Observable.F, estim - exact
    if data.virial_key is not None:
        estim = np.reshape(np.asarray(model.virial(atoms), dtype=float), 9)[_VIRIAL_INDICES] / natoms
        exact = data.get_virial()[_VIRIAL_INDICES] / natoms
        yield Observable.V, estim - exact
    if data.pae_key is not None:
        mask = atom_mask(data)
        estim = np.array([model.site_energy(atoms, i) for i in range(natoms)], dtype=float)
        exact = data.get_pae()
        yield Observable.PAE, (estim - exact)[mask]


def accumulate(data, model, group_key="config_type"):
    """
    Accumulate errors of each group.

    Returns a tuple (groups, accumulators) with the group labels in first-seen order and a
    dictionary of group label -> `ErrorAccumulator`.
    """
    groups = []
    accumulators = {}
    for d in data:
        c_t = group_type(d, group_key)
        if c_t not in accumulators:
            groups.append(c_t)
            accumulators[c_t] = ErrorAccumulator()
        for observable, residual in record_residuals(d, model):
            accumulators[c_t].add(observable, residual)
    return groups, accumulators


def _with_set(groups, accumulators):
    total = ErrorAccumulator()
    for group in groups:
        total.merge(accumulators[group])
    return groups + [SET], {**accumulators, SET: total}


def finalize_errors(groups, accumulators):
    """
    MAE and RMSE of every group and of the whole set.

    Returns `{"mae": {group: {obs: value}}, "rmse": {group: {obs: value}}}` with the groups in
    order and the synthetic group "set" last.
    """
    groups, accumulators = _with_set(groups, accumulators)
    return {"mae": {g: accumulators[g].mae() for g in groups},
            "rmse": {g: accumulators[g].rmse() for g in groups}}


def error_counts(groups, accumulators):
    """Number of observations behind every error, `{group: {obs: count}}`, "set" last."""
    groups, accumulators = _with_set(groups, accumulators)
    return {g: accumulators[g].counts() for g in groups}


def compute_errors(data, model, group_key="config_type"):
    """MAE and RMSE of a model on the records of this proc, grouped by `group_key`."""
    return finalize_errors(*accumulate(data, model, group_key=group_key))


def linear_errors(data, model, group_key="config_type", verbose=False, pt=None):
    """
    Errors of a model on a list of records, grouped by `group_key`.

    Args:
        data: List of `AtomsData` records.
        model: Model to evaluate.
        group_key: Data key holding the group label.
        verbose: Print the RMSE and MAE tables.
        pt: Optional ParallelTools instance; when given, each proc passes its own records and the
            partial sums are reduced over procs.

    Returns `{"mae": {group: {obs: value}}, "rmse": {...}}`.
    """
    groups, accumulators = accumulate(data, model, group_key=group_key)
    if pt is not None:
        groups, accumulators = pt.reduce_errors((groups, accumulators))
    config_errors = finalize_errors(groups, accumulators)
    if verbose:
        from acefitlib.io.outputs.tables import print_errors_tables
        printer = pt.single_print if pt is not None else print
        print_errors_tables(config_errors, printer=printer)
    return config_errors
