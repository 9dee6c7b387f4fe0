"""
Dispersion risk measures

Symmetric measures of how far returns spread around their mean.
"""

import numpy as np


def _series(returns) -> np.ndarray:
    return np.asarray(returns, dtype=float).reshape(-1)


def standard_deviation(returns) -> float:
    """
    Sample standard deviation (ddof=1) of a return series.

    Returns NaN for fewer than two observations.
    """
    r = _series(returns)
    if r.size < 2:
        return float("nan")
    return float(np.std(r, ddof=1))


def mean_absolute_deviation(returns) -> float:
    """Average absolute deviation of returns from their mean."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(np.mean(np.abs(r - r.mean())))


def gini_mean_difference(returns) -> float:
    """
    Gini mean difference: sum of |r_i - r_j| over all pairs divided by n^2.

    Computed from the order statistics in O(n log n).
    """
    r = np.sort(_series(returns))
    n = r.size
    if n == 0:
        return float("nan")
    ranks = np.arange(1, n + 1)
    return float(2.0 * np.sum((2 * ranks - n - 1) * r) / n ** 2)


def range_of_returns(returns) -> float:
    """Difference between the best and worst return."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(r.max() - r.min())


def sqrt_kurtosis(returns) -> float:
    """Square root of the fourth central moment."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(np.sqrt(np.mean((r - r.mean()) ** 4)))
