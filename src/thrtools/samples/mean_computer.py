"""
Robust means for small lists of repeated measurements.

Each strategy takes a list of numbers and returns a single value with the
influence of outliers reduced. Strategies are looked up by name through
``mean_registry`` / ``get_mean_computer``.
"""

import numpy as np


def _short_mean(values):
    """
    Shared handling for the lists too short for outlier removal. Returns None
    if the list is long enough for the strategy to do its own work.
    """

    if len(values) == 0:
        return np.nan
    if len(values) == 1:
        return float(values[0])
    if len(values) == 2:
        return (values[0] + values[1]) / 2.0
    return None


def trimean(values):
    """
    Weighted average of the median and the two quartiles:
    q2/2 + (q1 + q3)/4. Quartiles average the two values that straddle the
    quartile position in the sorted list.
    """

    short = _short_mean(values)
    if short is not None:
        return short

    s = np.sort(np.asarray(values, dtype=float))
    n = len(s)

    q2 = (s[(n - 1) >> 1] + s[n >> 1]) / 2.0
    q1 = (s[(n - 2) >> 2] + s[n >> 2]) / 2.0
    q3 = (s[(3*n - 1) >> 2] + s[(3*n + 1) >> 2]) / 2.0

    return float(q2 / 2.0 + (q1 + q3) / 4.0)


def middle(values):
    """
    Mean after dropping the single smallest and largest values.
    """

    short = _short_mean(values)
    if short is not None:
        return short

    v = np.asarray(values, dtype=float)
    lo = np.min(v)
    hi = np.max(v)
    if lo == hi:
        return float(lo)

    return float((np.sum(v) - lo - hi) / (len(v) - 2))


def _sigma_mean(values, n_sigma):

    short = _short_mean(values)
    if short is not None:
        return short

    v = np.asarray(values, dtype=float)
    mean = np.mean(v)
    stdv = np.std(v)

    keep = np.abs(v - mean) <= n_sigma*stdv
    if not np.any(keep):
        # only possible through rounding when every value is identical
        return float(mean)

    return float(np.mean(v[keep]))


def sigma1(values):
    """Mean of the values within one standard deviation of the mean."""
    return _sigma_mean(values, 1)


def sigma2(values):
    """Mean of the values within two standard deviations of the mean."""
    return _sigma_mean(values, 2)


def max_value(values):
    """Largest value (NaN for an empty list)."""
    if len(values) == 0:
        return np.nan
    return float(np.max(values))


mean_registry = {
    "TRIMEAN": trimean,
    "MIDDLE": middle,
    "SIGMA1": sigma1,
    "SIGMA2": sigma2,
    "MAX": max_value,
}


def get_mean_computer(mean_type):
    """
    Look up a mean strategy by name (case-insensitive).

    Parameters
    ----------
    mean_type : str
        one of the keys of ``mean_registry``.

    Returns
    -------
    callable
        function taking a list of numbers and returning a float.

    Raises
    ------
    ValueError
        if the name is not recognized.
    """

    key = str(mean_type).strip().upper()
    if key not in mean_registry:
        raise ValueError(
            f"mean type '{mean_type}' not recognized. It should be one of: "
            f"{', '.join(mean_registry.keys())}"
        )

    return mean_registry[key]
