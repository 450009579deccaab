"""
ROC points and area under the curve.

Each distinct prediction level of an analyzer gives one point: the
(fallout, sensitivity) of the confusion matrix computed at that level, with
the same level applied to both prediction and production.
"""


def roc_points(analyzer):
    """
    Build the ROC curve of a PredictionAnalyzer.

    Parameters
    ----------
    analyzer : PredictionAnalyzer
        source of the prediction/production pairs.

    Returns
    -------
    list
        distinct (fallout, sensitivity) tuples sorted by fallout, then
        sensitivity, both ascending.
    """

    points = set()
    for level in analyzer.all_predictions():
        m = analyzer.matrix(level)
        points.add((m.fallout(), m.sensitivity()))

    return sorted(points)


def trapezoid_auc(points):
    """
    Area under a curve by the trapezoidal rule. Points are integrated in the
    order given; no end points are added.

    >>> trapezoid_auc([(0.0, 0.0), (1.0, 1.0)])
    0.5
    """

    area = 0.0
    for (x0, y0), (x1, y1) in zip(points[:-1], points[1:]):
        area += (x1 - x0)*(y1 + y0)/2.0

    return area


def compute_auc(analyzer):
    """AUC of the ROC curve of an analyzer (0.0 if it has fewer than two points)"""
    return trapezoid_auc(roc_points(analyzer))
