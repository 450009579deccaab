"""
Accumulator for the repeated production/density observations of one sample.
"""

import numpy as np

from .mean_computer import get_mean_computer


class GrowthData:
    """
    Repeated threonine production and growth density measurements for a
    single sample.

    Observations are kept as paired raw lists. A value is used for the means
    when its density is at least ``MIN_DENSITY`` and it has not been flagged
    as an outlier. Means are recomputed from the raw lists on every access.

    Parameters
    ----------
    old_strain : str
        legacy strain label the sample came from.
    time : float
        time point in hours.
    mean_type : str, default "TRIMEAN"
        name of the robust mean strategy (see mean_computer.mean_registry).
    """

    MIN_DENSITY = 0.1

    def __init__(self, old_strain, time, mean_type="TRIMEAN"):

        self.old_strain = old_strain
        self.time = time
        self.mean_type = mean_type
        self._mean = get_mean_computer(mean_type)

        self._production = []
        self._density = []
        self._origins = []
        self._good = []
        self._outlier = []

        self.suspicious = False
        self.prediction = np.nan
        self.fix_count = 0

    def merge(self, production, density, origin, fixed=False):
        """
        Add one observation.

        Parameters
        ----------
        production : float
            threonine production (g/l).
        density : float
            optical density.
        origin : str
            plate:well label for the observation.
        fixed : bool, default False
            True if the observation was corrected by hand.
        """

        self._production.append(float(production))
        self._density.append(float(density))
        self._origins.append(str(origin))
        self._good.append(bool(density >= self.MIN_DENSITY))
        self._outlier.append(False)
        if fixed:
            self.fix_count += 1

    def __len__(self):
        return len(self._production)

    def _used(self):
        return [i for i in range(len(self._production))
                if self._good[i] and not self._outlier[i]]

    def _used_values(self, values):
        return [values[i] for i in self._used()]

    # -- derived values --------------------------------------------------------

    @property
    def production(self):
        """robust mean production of the usable observations"""
        return self._mean(self._used_values(self._production))

    @property
    def density(self):
        """robust mean density of the usable observations"""
        return self._mean(self._used_values(self._density))

    @property
    def normalized_production(self):
        """robust mean of production/density over the usable observations"""
        norms = [self._production[i]/self._density[i] for i in self._used()]
        return self._mean(norms)

    @property
    def production_rate(self):
        """production per hour of growth"""
        if self.time is None or np.isnan(self.time) or self.time == 0:
            return np.nan
        return self.production/self.time

    @property
    def production_range(self):
        """max - min of the usable production values (0.0 if fewer than two)"""
        vals = self._used_values(self._production)
        if len(vals) < 2:
            return 0.0
        return max(vals) - min(vals)

    @property
    def raw_productions(self):
        return list(self._production)

    @property
    def raw_densities(self):
        return list(self._density)

    @property
    def origins(self):
        return list(self._origins)

    def has_good_values(self):
        return len(self._used()) > 0

    # -- quality checks --------------------------------------------------------

    def remove_bad_zeroes(self, alert_range):
        """
        Drop zero production values that are probably failed measurements.

        The zeros are dropped when they are a minority of the usable values and
        every usable non-zero value is above the alert range. If nothing usable
        is left afterwards, the sample is marked suspicious.
        """

        used = self._used()
        zeros = [i for i in used if self._production[i] == 0.0]
        nonzero = [i for i in used if self._production[i] != 0.0]

        if len(zeros) > 0 and len(zeros) < len(nonzero):
            if all(self._production[i] > alert_range for i in nonzero):
                for i in zeros:
                    self._outlier[i] = True

        if not self.has_good_values():
            self.suspicious = True

    def remove_outlier(self, alert_range):
        """
        Check the spread of the usable production values.

        Parameters
        ----------
        alert_range : float
            largest acceptable max - min spread.

        Returns
        -------
        bool
            False if max - min of the usable production values exceeds
            alert_range. In that case, when three or more usable values exist,
            the value farthest from their median is flagged as an outlier.
        """

        used = self._used()
        if len(used) == 0:
            return True

        vals = [self._production[i] for i in used]
        if max(vals) - min(vals) <= alert_range:
            return True

        if len(used) >= 3:
            median = np.median(vals)
            worst = max(used, key=lambda i: abs(self._production[i] - median))
            self._outlier[worst] = True

        return False

    # -- display ---------------------------------------------------------------

    def _display(self, i, text):
        if self._outlier[i]:
            return f"({text})"
        return text

    def production_list(self):
        """comma-delimited raw production values, outliers in parentheses"""
        return ",".join(self._display(i, f"{v:6.4f}".strip())
                        for i, v in enumerate(self._production))

    def density_list(self):
        """comma-delimited raw density values, outliers in parentheses"""
        return ",".join(self._display(i, f"{v:6.4f}".strip())
                        for i, v in enumerate(self._density))

    def origins_string(self):
        """origin labels joined by ", ", outliers in parentheses"""
        return ", ".join(self._display(i, o) for i, o in enumerate(self._origins))

    def sort_key(self):
        """sorts by production (high to low), time point, then legacy strain"""
        return (-self.production, self.time, self.old_strain)

    def __repr__(self):
        return (f"GrowthData(old_strain={self.old_strain!r}, time={self.time}, "
                f"n={len(self)}, production={self.production:.4f})")
