"""
Drawdown risk measures

Drawdowns are computed on uncompounded cumulative returns starting from
zero, so these measures depend on the chronological order of the series:

    cum_t  = r_1 + ... + r_t
    peak_t = max(0, cum_1, ..., cum_t)
    dd_t   = peak_t - cum_t
"""

import numpy as np

from .dispersion import _series
from .tail import DEFAULT_ALPHA, _check_alpha, entropic_risk_of_losses


def drawdown_series(returns) -> np.ndarray:
    """Uncompounded drawdown at every period (non-negative)."""
    r = _series(returns)
    cumulative = np.cumsum(r)
    peaks = np.maximum.accumulate(np.maximum(cumulative, 0.0))
    return peaks - cumulative


def maximum_drawdown(returns) -> float:
    """Largest peak-to-trough decline of the cumulative returns."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(drawdown_series(r).max())


def average_drawdown(returns) -> float:
    """Mean drawdown over all periods."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(drawdown_series(r).mean())


def cdrawdown_at_risk(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Conditional Drawdown at Risk: mean of the worst alpha share of drawdowns."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    dd = drawdown_series(r)
    threshold = np.quantile(dd, 1.0 - alpha)
    return float(dd[dd >= threshold].mean())


def entropic_drawdown_at_risk(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Entropic Drawdown at Risk: entropic bound applied to the drawdowns."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return entropic_risk_of_losses(drawdown_series(r), alpha)


def ulcer_index(returns) -> float:
    """Root mean square of the drawdowns (depth and duration)."""
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(np.sqrt(np.mean(drawdown_series(r) ** 2)))


def calmar_ratio(returns) -> float:
    """
    Mean return divided by maximum drawdown.

    A performance ratio rather than a risk measure; NaN when the series
    never draws down.
    """
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    mdd = maximum_drawdown(r)
    if mdd == 0:
        return float("nan")
    return float(r.mean() / mdd)
