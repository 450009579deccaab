"""
Per-run accumulators for the big-run analysis.
"""

import numpy as np

from thrtools.samples import SampleId, is_constructed_strain
from thrtools.stats import (
    PredictionAnalyzer,
    StrainAnalyzer,
    roc_points,
    trapezoid_auc,
    compute_auc,
    pearson,
)
from thrtools.util import read_table, parse_float

import re

# insert field of a strain string, replaced to get the chromosome
INSERT_PART = re.compile(r"_[^_]+_D")
NULL_INSERT = "_000_D"


def to_chromosome(strain):
    """
    Strip the inserted genes from a strain string, leaving the chromosome
    (host, plasmid and deletions).
    """
    return INSERT_PART.sub(NULL_INSERT, strain, count=1)


def read_prediction_file(pred_file, verbose=False):
    """
    Read a prediction table: sample ID in the first column, prediction in the
    second, with a header row. Lines with an invalid sample ID or a missing or
    non-numeric prediction are skipped; each distinct problem is reported once
    when verbose.

    Parameters
    ----------
    pred_file : str
        path to the prediction table.
    verbose : bool, default False
        report skipped lines.

    Returns
    -------
    pairs : list of tuple
        (SampleId, prediction) for every usable line, in file order.
    skipped : int
        number of lines skipped.

    Raises
    ------
    ValueError
        if the table has fewer than two columns.
    """

    df = read_table(pred_file)
    if len(df.columns) < 2:
        raise ValueError(
            f"prediction file '{pred_file}' must have at least two columns."
        )

    pairs = []
    skipped = 0
    reported = set()
    for sample_text, pred_text in zip(df.iloc[:, 0], df.iloc[:, 1]):

        try:
            sample = SampleId(sample_text)
            pred = parse_float(pred_text)
            if np.isnan(pred):
                raise ValueError(f"Missing prediction for sample '{sample_text}'.")
        except ValueError as e:
            skipped += 1
            message = str(e)
            if verbose and message not in reported:
                reported.add(message)
                print(f"Skipping line of {pred_file}: {message}", flush=True)
            continue

        pairs.append((sample, pred))

    return pairs, skipped


def _merge_max(strain_map, strain, production):
    old = strain_map.get(strain)
    if old is None or production > old:
        strain_map[strain] = production


class RunDescriptor:
    """
    One experimental run: a name, a regular expression matching the
    plate:well origins that belong to the run, and an optional file of the
    model predictions used to design the run.

    The descriptor accumulates run statistics while the production table is
    scanned. Call ``finish`` once the scan is complete.

    Parameters
    ----------
    name : str
        run name.
    pattern : str
        regular expression that must match an entire origin string.
    pred_file : str, optional
        tab-delimited prediction file (sample ID in the first column,
        prediction in the second, header row).
    cutoffs : list of float
        production cutoffs used for the per-cutoff counts.
    """

    def __init__(self, name, pattern, pred_file=None, cutoffs=(1.2, 2.0, 4.0)):

        self.name = name
        self.pattern = pattern
        try:
            self.well_pattern = re.compile(pattern)
        except re.error as e:
            raise ValueError(
                f"run '{name}' has an invalid origin pattern '{pattern}': {e}"
            ) from e

        if pred_file is not None and str(pred_file).strip() == "":
            pred_file = None
        self.pred_file = pred_file

        self.cutoffs = list(cutoffs)

        # all samples and first-run samples
        self.analyzer = PredictionAnalyzer()
        self.analyzer1 = PredictionAnalyzer()
        self.strain_data = StrainAnalyzer()
        self.strain_data1 = StrainAnalyzer()

        # strain -> max production
        self.strains = {}
        self.strains1 = {}

        self.run_size = 0
        self.new_size = 0
        self.max_prod_all = 0.0
        self.max_prod_constructed = 0.0
        self.max_prod_control = 0.0

        self.total_predictions = 0
        self.high_predictions = 0
        self.skipped_predictions = 0
        self.cutoff_counts = {c: 0 for c in self.cutoffs}

        self.max_pred = np.nan
        self.auc = 0.0
        self.roc = []
        self.strain_auc = 0.0

    def has_predictions(self):
        return self.pred_file is not None

    def is_match(self, origin):
        """
        True if the whole origin string matches the run pattern. Parentheses
        marking an outlier origin are ignored.
        """

        origin = origin.strip()
        if origin.startswith("(") and origin.endswith(")"):
            origin = origin[1:-1]

        return self.well_pattern.fullmatch(origin) is not None

    def add_sample(self, sample, is_new, production):
        """
        Count a good sample that was observed in this run.

        Parameters
        ----------
        sample : SampleId
            the sample.
        is_new : bool
            True if this is the first run the sample appeared in.
        production : float
            the sample's mean production.
        """

        self.run_size += 1
        strain = sample.to_strain()
        _merge_max(self.strains, strain, production)
        if is_new:
            self.new_size += 1
            _merge_max(self.strains1, strain, production)

        if production > self.max_prod_all:
            self.max_prod_all = production

        if sample.is_constructed():
            if production > self.max_prod_constructed:
                self.max_prod_constructed = production
            for c in self.cutoffs:
                if production > c:
                    self.cutoff_counts[c] += 1
        elif production > self.max_prod_control:
            self.max_prod_control = production

    def add_prediction(self, sample, prediction, production, is_new):
        """
        Record a prediction/production pair for a sample in this run.
        """

        self.analyzer.add(prediction, production)
        self.strain_data.add(sample, prediction, production)
        if is_new:
            self.analyzer1.add(prediction, production)
            self.strain_data1.add(sample, prediction, production)

    def store_predictions(self, index, pred_map, verbose=False):
        """
        Load this run's prediction file into a shared prediction map.

        Parameters
        ----------
        index : int
            position of this run in each prediction array.
        pred_map : dict
            maps SampleId to a numpy array with one slot per run. Predictions
            for samples not in the map are counted but not kept.
        verbose : bool, default False
            print a summary.
        """

        if self.pred_file is None:
            return

        pairs, skipped = read_prediction_file(self.pred_file, verbose=verbose)

        cutoff = self.cutoffs[0]
        line_count = 0
        pred_count = 0
        high_count = 0
        for sample, pred in pairs:
            preds = pred_map.get(sample)
            if preds is not None:
                preds[index] = pred
                pred_count += 1
            if pred >= cutoff:
                high_count += 1
            line_count += 1

        self.total_predictions = line_count
        self.high_predictions = high_count
        self.skipped_predictions = skipped

        if verbose:
            print(f"{pred_count} predictions retrieved from {line_count} lines "
                  f"of {self.pred_file}. {high_count} were >= {cutoff}.",
                  flush=True)
            if skipped > 0:
                print(f"{skipped} unusable lines skipped.", flush=True)

    def finish(self):
        """
        Compute the maximum prediction, the ROC curve and its AUC once all the
        samples have been added.
        """

        levels = self.analyzer.all_predictions()
        if len(levels) > 0:
            self.max_pred = levels[0]
        self.roc = roc_points(self.analyzer)
        self.auc = trapezoid_auc(self.roc)
        self.strain_auc = compute_auc(self.strain_data.to_analyzer())

    # -- summary values -------------------------------------------------------

    def all_predictions(self):
        return self.analyzer.all_predictions()

    def matrix(self, level):
        return self.analyzer.matrix(level)

    @property
    def size(self):
        """number of samples with predictions"""
        return len(self.analyzer)

    def pearson(self):
        """correlation of prediction and production for first-run samples"""
        pairs = self.analyzer1.samples
        return pearson([p.prediction for p in pairs],
                       [p.production for p in pairs])

    def mae(self):
        """mean absolute error for first-run samples"""
        return self.analyzer1.mae()

    def strain_mae(self):
        """mean absolute error of the best pair per strain new to the run"""
        return self.strain_data1.to_analyzer().mae()

    def strain_pearson(self):
        """correlation of the best pair per strain new to the run"""
        pairs = self.strain_data1.to_analyzer().samples
        return pearson([p.prediction for p in pairs],
                       [p.production for p in pairs])

    @property
    def strain_count(self):
        return len(self.strains)

    @property
    def new_strain_count(self):
        return len(self.strains1)

    @property
    def constructed_strain_count(self):
        return sum(1 for s in self.strains if is_constructed_strain(s))

    @property
    def new_constructed_strain_count(self):
        return sum(1 for s in self.strains1 if is_constructed_strain(s))

    @property
    def chromosome_count(self):
        return len({to_chromosome(s) for s in self.strains})

    @property
    def constructed_chromosome_count(self):
        return len({to_chromosome(s) for s in self.strains
                    if is_constructed_strain(s)})

    def constructed_strain_high_count(self, cutoff):
        """constructed strains in the run with production >= cutoff"""
        return sum(1 for s, p in self.strains.items()
                   if is_constructed_strain(s) and p >= cutoff)

    def new_constructed_strain_high_count(self, cutoff):
        """constructed strains new to the run with production >= cutoff"""
        return sum(1 for s, p in self.strains1.items()
                   if is_constructed_strain(s) and p >= cutoff)

    def cutoff_count(self, cutoff):
        """constructed samples in the run with production > cutoff"""
        return self.cutoff_counts.get(cutoff, 0)

    def __repr__(self):
        return f"RunDescriptor(name={self.name!r}, pattern={self.pattern!r})"
