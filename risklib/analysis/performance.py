"""
Portfolio performance analysis

Risk and return of a fixed weight vector on historical returns.
"""

from typing import Optional, Tuple

import numpy as np

from ..core.data import ReturnsLike, as_returns_matrix, as_weight_vector
from ..core.errors import DegenerateInputError
from ..core.objective import checked_risk
from ..core.types import RiskMeasure, resolve_risk_param


def portfolio_risk(
    returns: ReturnsLike,
    weights,
    risk_measure: RiskMeasure,
    alpha: Optional[float] = None,
    target: Optional[float] = None
) -> float:
    """
    Risk of a portfolio on historical returns.

    Args:
        returns: Returns matrix (T x N)
        weights: Portfolio weights (length N)
        risk_measure: Function of a return series returning a scalar
        alpha: Tail parameter for the risk measure
        target: Threshold parameter for the risk measure

    Returns:
        risk_measure(returns @ weights[, alpha or target])
    """
    param = resolve_risk_param(alpha, target)
    values, _ = as_returns_matrix(returns)
    w = as_weight_vector(weights, values.shape[1])
    return checked_risk(param.apply(risk_measure, values @ w), "portfolio returns")


def portfolio_return(returns: ReturnsLike, weights) -> float:
    """Expected return: weights dotted with the per-asset mean returns."""
    values, _ = as_returns_matrix(returns)
    w = as_weight_vector(weights, values.shape[1])
    return float(np.dot(w, values.mean(axis=0)))


def portfolio_log_return(returns: ReturnsLike, weights) -> float:
    """
    Mean of the weighted log returns, mean(log(R) @ w).

    The returns are treated as gross returns and must all be positive.

    Raises:
        DegenerateInputError: If any return is zero or negative
    """
    values, _ = as_returns_matrix(returns)
    w = as_weight_vector(weights, values.shape[1])
    if np.any(values <= 0):
        raise DegenerateInputError("Log returns require strictly positive (gross) returns")
    return float(np.mean(np.log(values) @ w))


def portfolio_performance(
    returns: ReturnsLike,
    weights,
    risk_measure: RiskMeasure,
    log_return: bool = False,
    alpha: Optional[float] = None,
    target: Optional[float] = None
) -> Tuple[float, float]:
    """
    Risk and return of a portfolio.

    Returns:
        Tuple of (risk, return); the return is the log return when
        log_return is True
    """
    risk = portfolio_risk(returns, weights, risk_measure, alpha=alpha, target=target)
    if log_return:
        ret = portfolio_log_return(returns, weights)
    else:
        ret = portfolio_return(returns, weights)
    return risk, ret
