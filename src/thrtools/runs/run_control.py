"""
Reading run-control tables and attributing origins to runs.

A run-control table is tab-delimited with a header row. Columns are taken by
position: run name, origin regular expression and (optionally) the
prediction file used to design the run. Row order defines run precedence: an
origin belongs to the first run whose pattern matches it.
"""

import numpy as np

from thrtools.util import read_table

from .run_descriptor import RunDescriptor

import os


def read_run_control(run_file, cutoffs=(1.2, 2.0, 4.0)):
    """
    Build the run descriptors described by a run-control table.

    Parameters
    ----------
    run_file : str
        path to the run-control table.
    cutoffs : list of float
        production cutoffs handed to every run.

    Returns
    -------
    list of RunDescriptor
        one per row, in file order.

    Raises
    ------
    FileNotFoundError
        if the run file does not exist.
    ValueError
        if the table has fewer than two columns, a run name is blank or
        repeated, or a pattern is not a valid regular expression.
    """

    df = read_table(run_file)
    if len(df.columns) < 2:
        raise ValueError(
            f"run-control file '{run_file}' must have at least a name and a "
            "pattern column."
        )

    base_dir = os.path.dirname(os.path.abspath(str(run_file)))

    runs = []
    seen = set()
    for _, row in df.iterrows():

        name = row.iloc[0].strip()
        pattern = row.iloc[1].strip()
        if name == "":
            raise ValueError(f"run-control file '{run_file}' has a blank run name.")
        if name in seen:
            raise ValueError(f"run '{name}' appears more than once in '{run_file}'.")
        seen.add(name)

        pred_file = None
        if len(row) > 2 and row.iloc[2].strip() != "":
            pred_file = row.iloc[2].strip()
            # relative prediction files are looked for next to the run file
            # when they are not found from the working directory
            if not os.path.isabs(pred_file) and not os.path.exists(pred_file):
                pred_file = os.path.join(base_dir, pred_file)

        runs.append(RunDescriptor(name, pattern, pred_file=pred_file, cutoffs=cutoffs))

    return runs


def find_run(runs, origin):
    """
    Index of the first run matching an origin, or None.
    """

    for i, run in enumerate(runs):
        if run.is_match(origin):
            return i
    return None


def attribute_origins(runs, origins):
    """
    Attribute each origin of a sample to its run.

    Parameters
    ----------
    runs : list of RunDescriptor
        runs in precedence order.
    origins : str or list of str
        origin labels, or a ", "-joined origins string.

    Returns
    -------
    first_run : int or None
        index of the earliest run any origin belongs to.
    runs_used : list of int
        sorted indices of every run an origin belongs to.
    unmatched : list of str
        origins that match no run.
    """

    if isinstance(origins, str):
        origins = [o for o in origins.split(", ") if o.strip() != ""]

    used = set()
    unmatched = []
    for origin in origins:
        i = find_run(runs, origin)
        if i is None:
            unmatched.append(origin)
        else:
            used.add(i)

    first_run = min(used) if len(used) > 0 else None

    return first_run, sorted(used), unmatched


def load_predictions(runs, samples, verbose=False):
    """
    Collect every run's predictions for a set of samples.

    Parameters
    ----------
    runs : list of RunDescriptor
        runs whose prediction files should be read.
    samples : iterable of SampleId
        the samples of interest.
    verbose : bool, default False
        print progress.

    Returns
    -------
    dict
        maps each SampleId to a float array with one entry per run (NaN where
        the run made no prediction for it).
    """

    pred_map = {}
    for sample in samples:
        pred_map[sample] = np.full(len(runs), np.nan)

    for i, run in enumerate(runs):
        if run.has_predictions():
            if verbose:
                print(f"Loading predictions for run {run.name} from {run.pred_file}.",
                      flush=True)
            run.store_predictions(i, pred_map, verbose=verbose)

    return pred_map
