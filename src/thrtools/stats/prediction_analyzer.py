"""
Confusion matrices and error statistics for prediction/production pairs.
"""

import numpy as np

from .pred_prod import PredProd

import math


def _safe_ratio(num, denom):
    if denom == 0:
        return 0.0
    return num/denom


class ConfusionMatrix:
    """
    Confusion matrix for a set of prediction/production pairs at a cutoff.

    A pair is predicted positive if its prediction is >= cutoff and actually
    positive if its production is >= cutoff. Every ratio is 0.0 when its
    denominator is zero.

    Parameters
    ----------
    pairs : iterable of PredProd
        pairs to classify.
    cutoff : float
        positive/negative threshold applied to both values.
    """

    def __init__(self, pairs, cutoff):

        self.cutoff = cutoff

        tp = fp = tn = fn = 0
        for p in pairs:
            predicted = p.is_prediction(cutoff)
            actual = p.is_production(cutoff)
            if predicted and actual:
                tp += 1
            elif predicted:
                fp += 1
            elif actual:
                fn += 1
            else:
                tn += 1

        self.tp = tp
        self.fp = fp
        self.tn = tn
        self.fn = fn

    @property
    def size(self):
        return self.tp + self.fp + self.tn + self.fn

    @property
    def predicted_count(self):
        return self.tp + self.fp

    @property
    def actual_count(self):
        return self.tp + self.fn

    def true_positive_ratio(self):
        return _safe_ratio(self.tp, self.size)

    def false_positive_ratio(self):
        return _safe_ratio(self.fp, self.size)

    def true_negative_ratio(self):
        return _safe_ratio(self.tn, self.size)

    def false_negative_ratio(self):
        return _safe_ratio(self.fn, self.size)

    def sensitivity(self):
        """true positives / actual positives"""
        return _safe_ratio(self.tp, self.tp + self.fn)

    def miss_ratio(self):
        """false negatives / actual positives"""
        return _safe_ratio(self.fn, self.tp + self.fn)

    def fallout(self):
        """false positives / actual negatives"""
        return _safe_ratio(self.fp, self.fp + self.tn)

    def accuracy(self):
        return _safe_ratio(self.tp + self.tn, self.size)

    def precision(self):
        """true positives / predicted positives"""
        return _safe_ratio(self.tp, self.tp + self.fp)

    def f1_score(self):
        """TP / (TP + (FP + FN)/2)"""
        return _safe_ratio(self.tp, self.tp + (self.fp + self.fn)/2.0)

    def mcc(self):
        """Matthews correlation coefficient"""

        denom = (float(self.tn + self.fn) * (self.fp + self.tp) *
                 (self.tn + self.fp) * (self.fn + self.tp))
        if denom == 0.0:
            return 0.0

        return (self.tn*self.tp - self.fp*self.fn)/math.sqrt(denom)

    def __repr__(self):
        return (f"ConfusionMatrix(cutoff={self.cutoff}, tp={self.tp}, "
                f"fp={self.fp}, tn={self.tn}, fn={self.fn})")


class PredictionAnalyzer:
    """
    Collection of prediction/production pairs for a regression model.
    """

    def __init__(self, pairs=None):
        if pairs is None:
            pairs = []
        self.samples = list(pairs)

    def add(self, prediction, production):
        self.samples.append(PredProd(prediction, production))

    def __len__(self):
        return len(self.samples)

    @property
    def size(self):
        return len(self.samples)

    def matrix(self, cutoff):
        """confusion matrix at the given cutoff"""
        return ConfusionMatrix(self.samples, cutoff)

    def all_predictions(self):
        """distinct prediction levels, highest to lowest"""
        levels = sorted({p.prediction for p in self.samples}, reverse=True)
        return levels

    def max_production(self):
        """largest production (0.0 if there are no pairs)"""
        if len(self.samples) == 0:
            return 0.0
        return max(p.production for p in self.samples)

    def _mae(self, pairs):
        errors = [p.abs_error for p in pairs]
        if len(errors) == 0:
            return 0.0
        return float(np.mean(errors))

    def mae(self):
        """mean absolute error over all pairs (0.0 if empty)"""
        return self._mae(self.samples)

    def high_mae(self, cutoff):
        """mean absolute error of the pairs with production >= cutoff"""
        return self._mae(p for p in self.samples if p.production >= cutoff)

    def low_mae(self, cutoff):
        """mean absolute error of the pairs with production < cutoff"""
        return self._mae(p for p in self.samples if p.production < cutoff)

    def sorted_samples(self):
        """pairs in ROC order"""
        return sorted(self.samples)
