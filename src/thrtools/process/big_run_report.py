"""
Sheet builders for the big-run workbook. Each function returns a DataFrame
for one sheet; NaN and None cells are written as blanks.
"""

import numpy as np
import pandas as pd

REPORT_HEAD = ["num",
               "old_strain",
               "sample",
               "first_run",
               "bad",
               "constructed",
               "thr_production",
               "max_production"]

REPORT_TAIL = ["density",
               "origins",
               "raw_productions",
               "raw_densities"]

PRED_COLUMNS = ["pred_level",
                "tp",
                "fp",
                "tn",
                "fn",
                "sensitivity",
                "miss_rate",
                "fallout",
                "accuracy"]


def report_columns(runs):
    """column names for the production report sheets"""
    pred_heads = [f"pred_{r.name}" for r in runs if r.has_predictions()]
    return REPORT_HEAD + pred_heads + REPORT_TAIL


def production_sheets(report_rows, runs):
    """
    Build the full production report and one report per run. A row goes on
    the sheet of its first run.

    Returns
    -------
    dict
        sheet name -> DataFrame; "full_report" first, then "<run>_report" in
        run order.
    """

    full = pd.DataFrame(report_rows, columns=report_columns(runs))

    sheets = {"full_report": full}
    for run in runs:
        run_df = full.loc[full["first_run"] == run.name, :].reset_index(drop=True)
        sheets[f"{run.name}_report"] = run_df

    return sheets


def xmatrix_sheet(formatter, samples, densities, productions, max_productions):
    """
    One-hot training matrix: sample, the formatter's columns, then density,
    mean production and max production.
    """

    df = formatter.to_dataframe(samples)
    df["density"] = np.asarray(densities, dtype=float)
    df["mean_production"] = np.asarray(productions, dtype=float)
    df["max_production"] = np.asarray(max_productions, dtype=float)

    return df


def prediction_sheet(run):
    """
    ROC table for a run with predictions: the confusion matrix at every
    prediction level, with the first-run production/prediction pairs in two
    extra columns on the right.
    """

    rows = []
    for level in run.all_predictions():
        m = run.matrix(level)
        rows.append([level,
                     m.tp,
                     m.fp,
                     m.tn,
                     m.fn,
                     m.sensitivity(),
                     m.miss_ratio(),
                     m.fallout(),
                     m.accuracy()])
    roc_df = pd.DataFrame(rows, columns=PRED_COLUMNS)

    pairs = run.analyzer1.samples
    pair_df = pd.DataFrame({"production": [p.production for p in pairs],
                            "prediction": [p.prediction for p in pairs]})

    return pd.concat([roc_df, pair_df], axis=1)


def _format_cutoff(fmt, cutoff):
    return fmt % cutoff


def performance_sheet(runs, cutoffs):
    """
    Statistics for each run: one row per statistic, one column per run, and a
    description column. Prediction statistics are blank for runs without a
    prediction file.
    """

    rows = []

    def add(title, fcn, desc, predictions_only=False):
        values = []
        for run in runs:
            if predictions_only and not run.has_predictions():
                values.append(None)
            else:
                values.append(fcn(run))
        rows.append([title] + values + [desc])

    def add_matrix(title, fcn, desc, cutoff):
        values = []
        for run in runs:
            if not run.has_predictions():
                values.append(None)
            else:
                values.append(fcn(run.analyzer1.matrix(cutoff)))
        rows.append([_format_cutoff(title, cutoff)] + values +
                    [_format_cutoff(desc, cutoff) if "%" in desc else desc])

    add("tot_size", lambda r: r.run_size, "Number of samples run.")
    add("new_size", lambda r: r.new_size, "Number of samples new to this run.")
    add("max_prod_all", lambda r: r.max_prod_all, "Maximum production output.")
    add("max_prod_constructed", lambda r: r.max_prod_constructed,
        "Maximum production output for a constructed strain.")
    add("max_prod_control", lambda r: r.max_prod_control,
        "Maximum production output for a control strain.")
    add("tot_strains", lambda r: r.strain_count, "Number of strains run.")
    add("new_strains", lambda r: r.new_strain_count,
        "Number of strains new to this run.")
    add("tot_constructed", lambda r: r.constructed_strain_count,
        "Number of constructed strains in this run.")
    add("new_constructed", lambda r: r.new_constructed_strain_count,
        "Number of constructed strains new to this run.")
    add("cons_chromosome", lambda r: r.constructed_chromosome_count,
        "Number of distinct constructed chromosomes in this run.")
    add("tot_chromosome", lambda r: r.chromosome_count,
        "Number of distinct chromosomes in this run.")

    add("predictions_computed", lambda r: r.total_predictions,
        "Total number of predictions computed in virtual space to build run.",
        predictions_only=True)
    add("high_predictions_computed", lambda r: r.high_predictions,
        f"Total number of predictions in virtual space >= {cutoffs[0]:1.2f}.",
        predictions_only=True)
    add("tot_predictions", lambda r: r.size,
        "Number of samples with predicted values from the model used to create the run.",
        predictions_only=True)
    add("new_predictions", lambda r: len(r.analyzer1),
        "Number of samples with predicted values new to this run.",
        predictions_only=True)
    add("max_prediction", lambda r: r.max_pred,
        "Maximum prediction from the model used to create the run.",
        predictions_only=True)
    add("AUC", lambda r: r.auc,
        "Area-under-curve for classification by production level of samples in the run.",
        predictions_only=True)
    add("Pearson", lambda r: r.pearson(),
        "Pearson correlation for predicted and actual production levels in samples new to the run.",
        predictions_only=True)
    add("MAE", lambda r: r.mae(),
        "Mean absolute error for predictions in samples new to the run.",
        predictions_only=True)
    add("strain_predictions", lambda r: len(r.strain_data),
        "Number of strains with predicted values in the run.",
        predictions_only=True)
    add("strain_AUC", lambda r: r.strain_auc,
        "Area-under-curve using the best prediction and production of each strain.",
        predictions_only=True)
    add("strain_Pearson", lambda r: r.strain_pearson(),
        "Pearson correlation using the best prediction and production of each strain new to the run.",
        predictions_only=True)
    add("strain_MAE", lambda r: r.strain_mae(),
        "Mean absolute error using the best prediction and production of each strain new to the run.",
        predictions_only=True)

    for c in cutoffs:

        add(f"MAE >= {c:1.2f}", lambda r, c=c: r.analyzer.high_mae(c),
            f"Mean Absolute Error for samples with production >= {c:1.2f}.",
            predictions_only=True)
        add(f"MAE < {c:1.2f}", lambda r, c=c: r.analyzer.low_mae(c),
            f"Mean Absolute Error for samples with production < {c:1.2f}.",
            predictions_only=True)

        add(f"high_constructed_{c:1.2f}",
            lambda r, c=c: r.constructed_strain_high_count(c),
            f"Number of constructed strains in this run with production >= {c:1.2f}.")
        add(f"new_high_constructed_{c:1.2f}",
            lambda r, c=c: r.new_constructed_strain_high_count(c),
            f"Number of constructed strains new to this run with production >= {c:1.2f}.")
        add(f"high_samples_{c:1.2f}", lambda r, c=c: r.cutoff_count(c),
            f"Number of constructed samples with production > {c:1.2f}.")

        add_matrix("predicted_%1.2f", lambda m: m.predicted_count,
                   "Number of samples new to this run predicted positive using cutoff %1.2f.", c)
        add_matrix("actual_%1.2f", lambda m: m.actual_count,
                   "Number of samples new to this run producing at least cutoff %1.2f.", c)
        add_matrix("true_positive_%1.2f", lambda m: m.tp,
                   "Number of true positive results in samples new to the run using cutoff %1.2f.", c)
        add_matrix("false_positive_%1.2f", lambda m: m.fp,
                   "Number of false positive results in samples new to the run using cutoff %1.2f.", c)
        add_matrix("true_negative_%1.2f", lambda m: m.tn,
                   "Number of true negative results in samples new to the run using cutoff %1.2f.", c)
        add_matrix("false_negative_%1.2f", lambda m: m.fn,
                   "Number of false negative results in samples new to the run using cutoff %1.2f.", c)
        add_matrix("precision_%1.2f", lambda m: m.precision(),
                   "Chance of a positive prediction being a positive result using cutoff %1.2f.", c)
        add_matrix("sensitivity_%1.2f", lambda m: m.sensitivity(),
                   "Chance of a positive result being predicted positive using cutoff %1.2f.", c)
        add_matrix("accuracy_%1.2f", lambda m: m.accuracy(),
                   "Accuracy of predictions for samples new to the run using classification cutoff %1.2f.", c)
        add_matrix("fallout_%1.2f", lambda m: m.fallout(),
                   "Chance of a negative result being predicted positive using cutoff %1.2f.", c)
        add_matrix("F1score_%1.2f", lambda m: m.f1_score(),
                   "Combined precision / recall rating.", c)
        add_matrix("MCC_%1.2f", lambda m: m.mcc(),
                   "Classification rating: 1 = perfect, 0 = random, -1 = always wrong.", c)

    columns = ["statistic"] + [r.name for r in runs] + ["Detailed description"]

    return pd.DataFrame(rows, columns=columns)


def _pair_value(values):
    # summary of the productions seen for a component pair
    return max(values)


def components_sheet(count_maps, pair_map):
    """
    Component counts: for each component, the number of good samples
    containing it at or above each cutoff (cutoff 0 is every good sample),
    the percentage of its samples above each positive cutoff, and the number
    of samples it shares with every other component.

    Parameters
    ----------
    count_maps : dict
        cutoff -> collections.Counter of component occurrences. Must include
        cutoff 0.0.
    pair_map : dict
        component -> {other component: list of productions}.
    """

    components = sorted(pair_map)
    cutoffs = sorted(count_maps)

    columns = ["component"]
    for c in cutoffs:
        columns.append(f"cutoff_{c:2.1f}")
        if c > 0.0:
            columns.append(f"pct_{c:2.1f}")
    columns.extend(components)

    rows = []
    for comp in components:
        base = count_maps[0.0][comp]
        row = [comp]
        for c in cutoffs:
            count = count_maps[c][comp]
            row.append(count)
            if c > 0.0:
                row.append(None if base == 0 else count*100.0/base)
        pairs = pair_map[comp]
        for comp2 in components:
            values = pairs.get(comp2)
            row.append(None if not values else len(values))
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)


def sort_components(pair_map):
    """
    Order components by the mean of their positive pair values, lowest first
    (ties keep alphabetical order).
    """

    ratings = {}
    for comp, pairs in pair_map.items():
        values = [_pair_value(v) for v in pairs.values() if len(v) > 0]
        values = [v for v in values if v > 0]
        ratings[comp] = float(np.mean(values)) if len(values) > 0 else 0.0

    return sorted(sorted(pair_map), key=lambda c: ratings[c])


def comp_pairs_sheet(pair_map):
    """
    Max production for each pair of components, components in
    sort_components order. Usable as a heat map.
    """

    ordered = sort_components(pair_map)

    rows = []
    for comp in ordered:
        pairs = pair_map[comp]
        row = [comp]
        for comp2 in ordered:
            values = pairs.get(comp2)
            row.append(None if not values else _pair_value(values))
        rows.append(row)

    return pd.DataFrame(rows, columns=["component"] + ordered)


def good_samples_sheet(stats, cutoffs):
    """
    Global statistics for the big run.

    Parameters
    ----------
    stats : BigRunStats
        accumulated counts from the scan.
    cutoffs : list of float
        production cutoffs.
    """

    errors = np.asarray(stats.errors, dtype=float)
    if len(errors) == 0:
        err_mean = np.nan
        err_std = np.nan
    elif len(errors) == 1:
        err_mean = float(errors[0])
        err_std = 0.0
    else:
        err_mean = float(np.mean(errors))
        err_std = float(np.std(errors, ddof=1))

    rows = [["Number of good samples", stats.good_samples],
            ["Number of bad samples", stats.bad_samples],
            ["Number of good samples without production", stats.unmeasured_samples],
            ["Total number of experiments", stats.experiment_count],
            ["Total number of outliers", stats.outlier_count],
            ["Mean absolute error in experiments", err_mean],
            ["Standard deviation of absolute error in experiments", err_std],
            ["Number of constructed strains", len(stats.constructed_strains)]]

    for tries in sorted(stats.try_counts):
        rows.append([f"Samples with {tries:2d} good tries", stats.try_counts[tries]])

    for c in cutoffs:
        rows.append([f"Samples with production >= {c:1.2f}", stats.count_totals[c]])

    return pd.DataFrame(rows, columns=["Statistic", "Value"])
