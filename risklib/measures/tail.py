"""
Tail risk measures

Quantile based measures parametrised by a tail probability alpha
(typically in (0, 0.5]). Losses are reported as positive numbers.

References:
    - Rockafellar, R.T. and Uryasev, S. (2000). Optimization of Conditional
      Value-at-Risk. Journal of Risk.
    - Ahmadi-Javid, A. (2012). Entropic Value-at-Risk: A New Coherent Risk
      Measure. Journal of Optimization Theory and Applications.
"""

import numpy as np
from scipy.optimize import minimize_scalar
from scipy.special import logsumexp

from .dispersion import _series, gini_mean_difference


DEFAULT_ALPHA = 0.05


def _check_alpha(alpha: float) -> float:
    alpha = float(alpha)
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must lie in (0, 1), got {alpha}")
    return alpha


def _lower_tail(r: np.ndarray, alpha: float) -> np.ndarray:
    return r[r <= np.quantile(r, alpha)]


def _upper_tail(r: np.ndarray, alpha: float) -> np.ndarray:
    return r[r >= np.quantile(r, 1.0 - alpha)]


def value_at_risk(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Historical Value at Risk: loss at the alpha quantile."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(-np.quantile(r, alpha))


def cvar(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Conditional Value at Risk: mean loss at or beyond the VaR."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(-np.mean(_lower_tail(r, alpha)))


def cvar_range(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Distance between the mean of the upper and the lower alpha tails."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return float(np.mean(_upper_tail(r, alpha)) - np.mean(_lower_tail(r, alpha)))


def tail_gini(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Gini mean difference of the returns in the lower alpha tail."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return gini_mean_difference(_lower_tail(r, alpha))


def tail_gini_range(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Sum of the lower-tail and upper-tail Gini mean differences."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return gini_mean_difference(_lower_tail(r, alpha)) + gini_mean_difference(_upper_tail(r, alpha))


def entropic_risk_of_losses(losses: np.ndarray, alpha: float) -> float:
    """
    Entropic risk bound of a loss sample.

        inf_{z > 0} (1/z) * log(mean(exp(z * L)) / alpha)

    The infimum is searched over log(z) and capped by the worst loss.
    """
    losses = np.asarray(losses, dtype=float)
    n = losses.size
    log_alpha = np.log(alpha)

    def objective(log_z: float) -> float:
        z = np.exp(log_z)
        return float((logsumexp(z * losses) - np.log(n) - log_alpha) / z)

    result = minimize_scalar(objective, bounds=(-12.0, 12.0), method="bounded",
                             options={"xatol": 1e-8})
    return float(min(result.fun, losses.max()))


def entropic_value_at_risk(returns, alpha: float = DEFAULT_ALPHA) -> float:
    """Entropic Value at Risk (tightest Chernoff bound on VaR and CVaR)."""
    alpha = _check_alpha(alpha)
    r = _series(returns)
    if r.size == 0:
        return float("nan")
    return entropic_risk_of_losses(-r, alpha)
