"""
Reconcile a raw multi-run threonine master table into a production table.
"""

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from thrtools.samples import (
    SampleId,
    GrowthData,
    ChoiceTracker,
    mean_registry,
    get_mean_computer,
)
from thrtools.runs import read_run_control, find_run, read_prediction_file
from thrtools.data import load_legacy_strain_config
from thrtools.util import (
    generalized_main,
    read_table,
    check_number,
    parse_flag,
    parse_float,
)

import os

MASTER_COLUMNS = ["strain_lower",
                  "iptg",
                  "time",
                  "Thr",
                  "Growth",
                  "Suspect",
                  "experiment",
                  "Sample_y"]

OUTPUT_COLUMNS = ["num",
                  "old_strain",
                  "sample",
                  "thr_production",
                  "density",
                  "bad",
                  "thr_normalized",
                  "thr_rate",
                  "origins",
                  "raw_productions",
                  "raw_densities"]

# induction only takes effect from this time point on
IPTG_START_TIME = 5.0

COUNTER_NAMES = ["missing_numbers",
                 "bad_numbers",
                 "blank_strain",
                 "bad_strain",
                 "filtered",
                 "excluded_by_run",
                 "good",
                 "suspect",
                 "zero_production",
                 "good_samples",
                 "failed_alert",
                 "questionable",
                 "threshold_failures",
                 "fixed_samples"]


def _format_number(value, fmt):
    if value is None or np.isnan(value):
        return ""
    return fmt % value


def _parse_row_number(value, column, reported, verbose):
    """
    Parse a numeric cell, returning None if it is not a number. Each bad
    value is reported once.
    """

    try:
        return parse_float(value)
    except ValueError:
        if value not in reported:
            reported.add(value)
            if verbose:
                print(f"Invalid number '{value}' in column '{column}'.", flush=True)
        return None


def _prep_runs(run_file, runs, verbose):
    """
    Load the run-control table and the set of runs to include.
    """

    if run_file is None:
        if runs is not None:
            raise ValueError("runs can only be specified along with run_file.")
        return None, None

    run_list = read_run_control(run_file)
    if verbose:
        print(f"{len(run_list)} runs read from {run_file}.", flush=True)

    if runs is None:
        return run_list, None

    keep = set(r.strip() for r in runs.split(",") if r.strip() != "")
    known = set(r.name for r in run_list)
    unknown = keep - known
    if unknown:
        raise ValueError(
            f"runs {sorted(unknown)} are not defined in {run_file}."
        )

    return run_list, keep


def _scan_master(df,
                 mean,
                 time_filter,
                 iptg_filter,
                 fixed_only,
                 medium,
                 run_list,
                 run_keep,
                 strain_config,
                 counters,
                 verbose):
    """
    Walk the master table, sorting each row into the good or bad growth maps.

    Returns
    -------
    good_map : dict
        SampleId -> GrowthData for rows not flagged suspect.
    bad_map : dict
        SampleId -> GrowthData for rows flagged suspect.
    choices : ChoiceTracker
        strain field values of every accepted row.
    """

    good_map = {}
    bad_map = {}
    choices = ChoiceTracker()

    has_fixed = "fixed" in df.columns

    bad_strain_names = set()
    bad_number_values = set()
    iptg_flag = False
    old_strain = ""

    rows = df.to_dict("records")
    for row_num, row in enumerate(tqdm(rows, disable=not verbose), start=2):

        prod_text = row["Thr"].strip()
        dens_text = row["Growth"].strip()
        if prod_text == "" or dens_text == "":
            counters["missing_numbers"] += 1
            continue

        prod = _parse_row_number(prod_text, "Thr", bad_number_values, verbose)
        dens = _parse_row_number(dens_text, "Growth", bad_number_values, verbose)
        time = _parse_row_number(row["time"].strip(), "time", bad_number_values, verbose)
        if prod is None or dens is None or time is None:
            counters["bad_numbers"] += 1
            continue

        # A blank strain cell continues the strain from the row above
        strain = row["strain_lower"].strip()
        if strain == "":
            strain = old_strain
        else:
            old_strain = strain

        if strain.lower().startswith("blank"):
            counters["blank_strain"] += 1
            continue

        # A blank iptg cell keeps the previous flag
        if row["iptg"].strip() != "":
            iptg_flag = parse_flag(row["iptg"])

        real_iptg = iptg_flag and time >= IPTG_START_TIME

        sample = SampleId.translate(strain, time, real_iptg, medium,
                                    config=strain_config)
        if sample is None:
            counters["bad_strain"] += 1
            if strain not in bad_strain_names:
                bad_strain_names.add(strain)
                if verbose:
                    print(f"Invalid input strain ID '{strain}'.", flush=True)
            continue

        fixed = has_fixed and parse_flag(row["fixed"])
        if iptg_filter and not sample.is_iptg():
            counters["filtered"] += 1
            continue
        if time_filter >= 0 and sample.time_point != time_filter:
            counters["filtered"] += 1
            continue
        if fixed_only and not fixed:
            counters["filtered"] += 1
            continue

        origin = f"{row['experiment'].strip()}:{row['Sample_y'].strip()}"
        if run_list is not None:
            run_index = find_run(run_list, origin)
            if run_index is None:
                raise IOError(
                    f"Origin '{origin}' for row {row_num} does not match any run."
                )
            if run_keep is not None and run_list[run_index].name not in run_keep:
                counters["excluded_by_run"] += 1
                continue

        choices.add(sample)

        if parse_flag(row["Suspect"]):
            target = bad_map
            counters["suspect"] += 1
        else:
            target = good_map
            counters["good"] += 1
            if prod == 0.0:
                counters["zero_production"] += 1

        if sample not in target:
            target[sample] = GrowthData(strain, time, mean_type=mean)
        target[sample].merge(prod, dens, origin, fixed=fixed)

    return good_map, bad_map, choices


def check_thresholds(good_map, trigger):
    """
    Flag threshold anomalies: within a group of samples that differ only by
    time point, a single sample producing far more than every other one.

    Parameters
    ----------
    good_map : dict
        SampleId -> GrowthData.
    trigger : float
        production gap between the best and second-best sample of a group
        above which the best sample is marked suspicious.

    Returns
    -------
    int
        number of samples marked suspicious.
    """

    groups = {}
    for sample, growth in good_map.items():
        groups.setdefault(sample.to_timeless(), []).append(growth)

    count = 0
    for growths in groups.values():
        if len(growths) < 3:
            continue
        growths.sort(key=lambda g: g.sort_key())
        if growths[0].production - growths[1].production > trigger:
            growths[0].suspicious = True
            count += 1

    return count


def _check_growth(good_map, alert, trigger, counters):
    """
    Apply the bad-zero, alert-range and threshold checks to the good samples.
    """

    for growth in good_map.values():
        growth.remove_bad_zeroes(alert)
        if not growth.remove_outlier(alert):
            growth.suspicious = True
            counters["failed_alert"] += 1
        elif growth.suspicious:
            counters["questionable"] += 1
        else:
            counters["good_samples"] += 1
        if growth.fix_count > 0:
            counters["fixed_samples"] += 1

    counters["threshold_failures"] = check_thresholds(good_map, trigger)


def _attach_predictions(pairs, maps):
    """
    Attach (SampleId, prediction) pairs to the matching GrowthData objects.
    """

    found = 0
    for sample, pred in pairs:
        for m in maps:
            if sample in m:
                m[sample].prediction = pred
                found += 1

    return found


def _sample_row(num, sample, growth, bad_flag, with_predictions):

    row = {"num": num,
           "old_strain": growth.old_strain,
           "sample": str(sample),
           "thr_production": _format_number(growth.production, "%1.9f"),
           "density": _format_number(growth.density, "%1.2f"),
           "bad": bad_flag,
           "thr_normalized": _format_number(growth.normalized_production, "%1.9f"),
           "thr_rate": _format_number(growth.production_rate, "%1.9f"),
           "origins": growth.origins_string(),
           "raw_productions": growth.production_list(),
           "raw_densities": growth.density_list()}
    if with_predictions:
        row["predicted"] = _format_number(growth.prediction, "%1.4f")

    return row


def _build_output(good_map, bad_map, good_only, with_predictions):
    """
    Good samples first (bad flag "?" if suspicious), then the suspect-flagged
    copies of samples that are also good (bad flag "Y"), each in SampleId
    order.
    """

    rows = []
    num = 0
    for sample in sorted(good_map):
        num += 1
        growth = good_map[sample]
        flag = "?" if growth.suspicious else ""
        rows.append(_sample_row(num, sample, growth, flag, with_predictions))

    bad_count = 0
    if not good_only:
        for sample in sorted(bad_map):
            if sample in good_map:
                num += 1
                bad_count += 1
                rows.append(_sample_row(num, sample, bad_map[sample], "Y",
                                        with_predictions))

    columns = list(OUTPUT_COLUMNS)
    if with_predictions:
        columns.append("predicted")

    return pd.DataFrame(rows, columns=columns), bad_count


def thr_fix(master_table,
            choices_file,
            production_file,
            good=False,
            alert=1.0,
            mean="TRIMEAN",
            trigger=1.2,
            time=-1.0,
            iptg=False,
            fixed_only=False,
            medium="M1",
            run_file=None,
            runs=None,
            pred_file=None,
            translation_config=None,
            verbose=True):
    """
    Reconcile a raw threonine master table into a production table.

    Legacy strain labels are translated into sample IDs, repeated measurements
    of each sample are merged, and inconsistent samples are flagged. A choices
    file listing the values seen in each strain field is written alongside.

    Parameters
    ----------
    master_table : str
        tab-delimited master table with columns strain_lower, iptg, time,
        Thr, Growth, Suspect, experiment and Sample_y (optionally fixed).
    choices_file : str
        output file for the choice sets.
    production_file : str
        output file for the production table.
    good : bool, default False
        only output good samples (omit the suspect-flagged rows).
    alert : float, default 1.0
        largest acceptable spread of a sample's production values.
    mean : str, default "TRIMEAN"
        algorithm for the mean of repeated measurements.
    trigger : float, default 1.2
        production gap that flags a sample as a threshold anomaly.
    time : float, default -1.0
        only keep this time point (negative keeps all).
    iptg : bool, default False
        only keep induced samples.
    fixed_only : bool, default False
        only keep rows flagged in the master table's "fixed" column.
    medium : str, default "M1"
        medium code for the sample IDs.
    run_file : str, optional
        run-control table. Every origin must then belong to a run.
    runs : str, optional
        comma-delimited names of the runs to keep (requires run_file).
    pred_file : str, optional
        prediction table (sample ID, prediction) to merge into the output.
    translation_config : str, optional
        YAML file replacing the packaged legacy strain translation tables.
    verbose : bool, default True
        print progress and a summary of the row counts.

    Returns
    -------
    out_df : pandas.DataFrame
        the production table as written.
    counters : dict
        number of rows or samples on each processing path.
    """

    alert = check_number(alert, param_name="alert", min_allowed=0, inclusive_min=False)
    trigger = check_number(trigger, param_name="trigger", min_allowed=0, inclusive_min=False)
    time = check_number(time, param_name="time")
    get_mean_computer(mean)

    if not os.path.isfile(master_table):
        raise FileNotFoundError(f"master table '{master_table}' not found.")
    if pred_file is not None and not os.path.isfile(pred_file):
        raise FileNotFoundError(f"prediction file '{pred_file}' not found.")

    strain_config = load_legacy_strain_config(translation_config)
    run_list, run_keep = _prep_runs(run_file, runs, verbose)

    pred_pairs = None
    if pred_file is not None:
        pred_pairs, skipped = read_prediction_file(pred_file, verbose=verbose)
        if verbose:
            print(f"{len(pred_pairs)} predictions read from {pred_file}, "
                  f"{skipped} lines skipped.", flush=True)

    required = list(MASTER_COLUMNS)
    if fixed_only:
        required.append("fixed")
    df = read_table(master_table, required_columns=required)
    if verbose:
        print(f"Read {len(df)} rows from {master_table}.", flush=True)

    counters = {k: 0 for k in COUNTER_NAMES}

    good_map, bad_map, choices = _scan_master(df,
                                              mean=mean,
                                              time_filter=time,
                                              iptg_filter=iptg,
                                              fixed_only=fixed_only,
                                              medium=medium,
                                              run_list=run_list,
                                              run_keep=run_keep,
                                              strain_config=strain_config,
                                              counters=counters,
                                              verbose=verbose)

    choices.write(choices_file)
    if verbose:
        print(f"{choices.num_columns} columns required for training set.",
              flush=True)

    _check_growth(good_map, alert, trigger, counters)

    with_predictions = pred_pairs is not None
    if with_predictions:
        found = _attach_predictions(pred_pairs, [good_map, bad_map])
        if verbose:
            print(f"{found} predictions attached from {pred_file}.", flush=True)

    out_df, bad_count = _build_output(good_map, bad_map, good, with_predictions)
    out_df.to_csv(production_file, sep="\t", index=False)

    if verbose:
        print(f"{counters['bad_strain']} rows had improperly-formatted strain names. "
              f"{counters['filtered']} rows were removed by filtering and "
              f"{counters['excluded_by_run']} by run.", flush=True)
        print(f"{counters['missing_numbers']} rows were missing growth or production "
              f"numbers, {counters['blank_strain']} were blanks, "
              f"{counters['suspect']} were suspect and {counters['good']} were good.",
              flush=True)
        print(f"{counters['bad_numbers']} rows had non-numeric production, growth "
              "or time values.", flush=True)
        print(f"{counters['zero_production']} good rows had no production.", flush=True)
        print(f"{counters['good_samples']} good samples output, "
              f"{counters['failed_alert']} failed the alert check, "
              f"{counters['questionable']} were questionable and "
              f"{counters['threshold_failures']} failed the threshold test.", flush=True)
        print(f"{counters['fixed_samples']} good samples include hand-fixed rows.",
              flush=True)
        if not good:
            print(f"{bad_count} bad samples output.", flush=True)
        print(f"Production table written to {production_file}.", flush=True)

    return out_df, counters


def main(argv=None):
    return generalized_main(thr_fix,
                            argv=argv,
                            prog="thrtools thrfix",
                            manual_arg_types={"time": float,
                                              "alert": float,
                                              "trigger": float},
                            manual_arg_choices={"mean": list(mean_registry.keys())})
