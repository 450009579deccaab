"""
Run-by-run analysis of a reconciled production table.
"""

import numpy as np
from tqdm.auto import tqdm

from thrtools.samples import (
    SampleId,
    SampleFormatter,
    is_constructed_strain,
)
from thrtools.runs import (
    read_run_control,
    attribute_origins,
    load_predictions,
)
from thrtools.util import (
    generalized_main,
    read_table,
    write_workbook,
    check_cutoffs,
    parse_float,
)
from . import big_run_report

from collections import Counter
import os

PRODUCTION_COLUMNS = ["num",
                      "old_strain",
                      "sample",
                      "thr_production",
                      "density",
                      "bad",
                      "origins",
                      "raw_productions",
                      "raw_densities"]


class BigRunStats:
    """
    Global accumulators for a big-run scan.

    Parameters
    ----------
    cutoffs : list of float
        production cutoffs. Component counts are also kept at cutoff 0.
    """

    def __init__(self, cutoffs):

        self.cutoffs = list(cutoffs)

        self.count_maps = {0.0: Counter()}
        for c in self.cutoffs:
            self.count_maps[c] = Counter()
        self.count_totals = Counter()

        # component -> other component -> productions of samples with both
        self.pair_map = {}
        self.constructed_strains = set()

        self.errors = []
        self.try_counts = Counter()
        self.experiment_count = 0
        self.outlier_count = 0
        self.good_samples = 0
        self.bad_samples = 0
        self.unmeasured_samples = 0

    def add_good_sample(self, sample, production):
        """
        Update the component counts, pairings and constructed-strain set for a
        good sample.
        """

        self.good_samples += 1
        parts = sample.components()

        for cutoff, counts in self.count_maps.items():
            if cutoff <= production:
                counts.update(parts)
                self.count_totals[cutoff] += 1

        for comp in parts:
            pairs = self.pair_map.setdefault(comp, {})
            for other in parts:
                if other != comp:
                    pairs.setdefault(other, []).append(production)

        strain = sample.to_strain()
        if is_constructed_strain(strain):
            self.constructed_strains.add(strain)

    def add_tries(self, tries, fails):
        self.experiment_count += tries + fails
        self.outlier_count += fails
        self.try_counts[tries] += 1


def parse_raw_productions(raw_productions):
    """
    Split a raw production list from a production table.

    Parameters
    ----------
    raw_productions : str
        comma-delimited production values; outliers are in parentheses.

    Returns
    -------
    values : list of float
        the values that are not outliers.
    fails : int
        number of outliers.
    """

    values = []
    fails = 0
    for token in raw_productions.split(","):
        token = token.strip()
        if token == "":
            continue
        if token.startswith("("):
            fails += 1
        else:
            values.append(float(token))

    return values, fails


def _collect_samples(prod_df):
    return [SampleId(s) for s in prod_df["sample"]]


def big_run(production_table,
            run_file,
            out_file,
            scores="1.2,2.0,4.0",
            choices=None,
            verbose=True):
    """
    Analyze a production table run by run and write an Excel report.

    Each sample is attributed to the runs its origins belong to; its first
    run is the earliest in the run-control file. Run predictions are merged
    and scored against the observed production.

    Parameters
    ----------
    production_table : str
        production table written by thrfix.
    run_file : str
        run-control table (run name, origin regex, optional prediction file).
    out_file : str
        output .xlsx workbook.
    scores : str, default "1.2,2.0,4.0"
        comma-delimited production cutoffs, positive and strictly increasing.
    choices : str, optional
        choices file for the xmatrix sheet. Defaults to choices.tbl in the
        directory of the run file.
    verbose : bool, default True
        print progress.

    Returns
    -------
    dict
        sheet name -> DataFrame, as written to the workbook.
    """

    cutoffs = check_cutoffs(scores, param_name="scores")

    for f, desc in [(production_table, "Production table"),
                    (run_file, "Run control file")]:
        if not os.path.isfile(f):
            raise FileNotFoundError(f"{desc} '{f}' is not found or unreadable.")

    if choices is None:
        choices = os.path.join(os.path.dirname(os.path.abspath(run_file)),
                               "choices.tbl")
    if not os.path.isfile(choices):
        raise FileNotFoundError(f"Choices file '{choices}' is not found or unreadable.")

    formatter = SampleFormatter(choices)
    if verbose:
        print(f"{formatter.num_columns} xmatrix columns defined by {choices}.",
              flush=True)

    runs = read_run_control(run_file, cutoffs=cutoffs)
    if len(runs) == 0:
        raise ValueError(f"Run control file '{run_file}' defines no runs.")
    if verbose:
        print(f"{len(runs)} runs read from {run_file}.", flush=True)

    prod_df = read_table(production_table, required_columns=PRODUCTION_COLUMNS)

    # first pass: the samples of interest for the prediction files
    pred_map = load_predictions(runs, _collect_samples(prod_df), verbose=verbose)
    if verbose:
        print(f"{len(pred_map)} samples found in {production_table}.", flush=True)

    stats = BigRunStats(cutoffs)

    report_rows = []
    matrix_samples = []
    matrix_densities = []
    matrix_productions = []
    matrix_max = []

    # second pass
    rows = prod_df.to_dict("records")
    for row in tqdm(rows, disable=not verbose):

        sample_text = row["sample"].strip()
        sample = SampleId(sample_text)
        origins = row["origins"]
        raw_productions = row["raw_productions"]
        production = parse_float(row["thr_production"])

        bad_flag = row["bad"].strip()
        bad_sample = bad_flag == "Y"

        # only good samples with a production value are scored
        scored = False
        if bad_sample:
            stats.bad_samples += 1
        elif not np.isfinite(production):
            stats.unmeasured_samples += 1
        else:
            scored = True
            stats.add_good_sample(sample, production)

        first_run, runs_used, unmatched = attribute_origins(runs, origins)
        if verbose:
            for origin in unmatched:
                print(f"Could not find a run for origin \"{origin}\".", flush=True)
        if first_run is None:
            raise IOError(f"Invalid sample {sample_text} has no first run "
                          f"(origins \"{origins}\").")

        if scored:
            for i in runs_used:
                runs[i].add_sample(sample, i == first_run, production)

        values, fails = parse_raw_productions(raw_productions)
        max_production = max([0.0] + values)
        if np.isfinite(production):
            stats.errors.extend(abs(v - production) for v in values)
        if not bad_sample:
            stats.add_tries(len(values), fails)

        report = {"num": int(row["num"]),
                  "old_strain": row["old_strain"],
                  "sample": sample_text,
                  "first_run": runs[first_run].name,
                  "bad": bad_flag,
                  "constructed": "Y" if sample.is_constructed() else "",
                  "thr_production": production,
                  "max_production": max_production}

        preds = pred_map.get(sample)
        for i, run in enumerate(runs):
            if not run.has_predictions():
                continue
            pred = preds[i]
            report[f"pred_{run.name}"] = pred
            if np.isfinite(pred) and scored:
                run.add_prediction(sample, pred, production, i == first_run)

        density = parse_float(row["density"])
        report["density"] = density
        report["origins"] = origins
        report["raw_productions"] = raw_productions
        report["raw_densities"] = row["raw_densities"]
        report_rows.append(report)

        matrix_samples.append(sample)
        matrix_densities.append(density)
        matrix_productions.append(production)
        matrix_max.append(max_production)

    for run in runs:
        run.finish()

    if verbose:
        print(f"{stats.good_samples} good and {stats.bad_samples} bad samples "
              "processed.", flush=True)
        if stats.unmeasured_samples > 0:
            print(f"{stats.unmeasured_samples} good samples had no production "
                  "value and were not scored.", flush=True)

    sheets = big_run_report.production_sheets(report_rows, runs)
    sheets["xmatrix"] = big_run_report.xmatrix_sheet(formatter,
                                                     matrix_samples,
                                                     matrix_densities,
                                                     matrix_productions,
                                                     matrix_max)
    for run in runs:
        if run.has_predictions():
            sheets[f"{run.name}_pred"] = big_run_report.prediction_sheet(run)

    sheets["performance"] = big_run_report.performance_sheet(runs, cutoffs)
    sheets["components"] = big_run_report.components_sheet(stats.count_maps,
                                                           stats.pair_map)
    sheets["comp_pairs"] = big_run_report.comp_pairs_sheet(stats.pair_map)
    sheets["Good Samples"] = big_run_report.good_samples_sheet(stats, cutoffs)

    write_workbook(sheets, out_file, precision=4)
    if verbose:
        print(f"Workbook written to {out_file}.", flush=True)

    return sheets


def main(argv=None):
    return generalized_main(big_run,
                            argv=argv,
                            prog="thrtools bigrun")
