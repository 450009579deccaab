"""
Prediction/production pairs and their ROC ordering.
"""

import itertools

# insertion counter used to keep the sort stable across analyzers
_NEXT_ID = itertools.count(1)


class PredProd:
    """
    A prediction/production pair.

    Pairs sort for ROC processing: prediction high to low, then production
    high to low, then order of creation.

    Parameters
    ----------
    prediction : float
        predicted production.
    production : float
        observed production.
    """

    __slots__ = ("prediction", "production", "id")

    def __init__(self, prediction, production):
        self.prediction = float(prediction)
        self.production = float(production)
        self.id = next(_NEXT_ID)

    def roc_key(self):
        return (-self.prediction, -self.production, self.id)

    def __lt__(self, other):
        return self.roc_key() < other.roc_key()

    def is_prediction(self, cutoff):
        """True if the prediction is at or above the cutoff"""
        return self.prediction >= cutoff

    def is_production(self, cutoff):
        """True if the production is at or above the cutoff"""
        return self.production >= cutoff

    @property
    def abs_error(self):
        return abs(self.prediction - self.production)

    def __repr__(self):
        return f"PredProd(prediction={self.prediction}, production={self.production})"
