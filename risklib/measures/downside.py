"""
Downside risk measures

Measures that only penalise returns below the mean or below a target.
Partial moments take the threshold as their second positional argument.
"""

import numpy as np

from .dispersion import _series


def semi_std_deviation(returns) -> float:
    """Semi standard deviation: dispersion of returns below their mean."""
    r = _series(returns)
    if r.size < 2:
        return float("nan")
    downside = np.minimum(r - r.mean(), 0.0)
    return float(np.sqrt(np.sum(downside ** 2) / (r.size - 1)))


def sqrt_semi_kurtosis(returns) -> float:
    """Square root of the fourth lower semi-moment around the mean."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    downside = np.minimum(r - r.mean(), 0.0)
    return float(np.sqrt(np.mean(downside ** 4)))


def first_lower_partial_moment(returns, target: float = 0.0) -> float:
    """
    First lower partial moment: mean shortfall below target.

    Args:
        returns: Return series
        target: Threshold return (default 0)
    """
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(np.mean(np.maximum(target - r, 0.0)))


def second_lower_partial_moment(returns, target: float = 0.0) -> float:
    """Second lower partial moment: mean squared shortfall below target."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(np.mean(np.maximum(target - r, 0.0) ** 2))


def worst_case_realization(returns) -> float:
    """Worst observed loss (minimax), as a positive number for losses."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(-r.min())
