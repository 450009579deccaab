
import numpy as np
from scipy import stats


def pearson(x, y):
    """
    Pearson correlation coefficient between two paired sequences.

    Parameters
    ----------
    x, y : array-like
        paired values; must have the same length.

    Returns
    -------
    float
        the correlation, or NaN if there are fewer than two pairs or either
        sequence is constant.
    """

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if len(x) != len(y):
        raise ValueError(
            f"x and y must have the same length ({len(x)} vs {len(y)})"
        )

    if len(x) < 2:
        return np.nan
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return np.nan

    r, _ = stats.pearsonr(x, y)

    return float(r)
