"""
Objective composition for risk-aware portfolio optimization

Both optimizer backends evaluate candidate weights through the same
ObjectiveFunction, so a stochastic run and a solver run with identical
arguments optimize exactly the same quantity:

    MINIMIZE  ->  risk
    MAXIMIZE  ->  expected return
    UTILITY   ->  expected return - lambda * risk
    RATIO     ->  expected return / risk

The return and risk terms depend on the optimization mode:

    MEAN_RISK      return = sum_i w_i * mean_i
                   risk   = f(R @ w)
    LOG_MEAN_RISK  return = sum_i w_i * log(mean_i)
                   risk   = f(R @ w)
    RISK_PARITY    return = sum_i w_i * mean_i
                   risk   = sum_i (w_i * f(R[:, i]) - risk_level)^2
"""

import logging
from typing import Optional, Union

import numpy as np

from .data import ReturnsLike, as_returns_matrix
from .errors import (
    DegenerateInputError,
    DegenerateRatioError,
    MissingParameterError,
    RiskMeasureError,
)
from .types import (
    ObjectiveKind,
    OptimizationMode,
    RiskMeasure,
    coerce_mode,
    coerce_objective,
    resolve_risk_param,
)

logger = logging.getLogger(__name__)

# Risk values below this magnitude are treated as zero in the ratio objective
RISK_EPSILON = 1e-12


def checked_risk(value, description: str) -> float:
    try:
        risk = float(value)
    except (TypeError, ValueError) as e:
        raise RiskMeasureError(f"Risk measure returned a non-scalar value for {description}") from e
    if not np.isfinite(risk):
        raise RiskMeasureError(f"Risk measure returned {risk} for {description}")
    return risk


class ObjectiveFunction:
    """
    Callable objective for a fixed returns matrix and configuration.

    All argument validation happens in the constructor, before any
    sampling or solving work begins. Calling the instance with a weight
    vector returns the objective value with the direction given by
    ``objective.seeks_minimum``.

    Attributes:
        returns: Validated returns matrix (T x N)
        asset_means: Historical mean return per asset
        objective: Objective kind
        mode: Optimization mode
        risk_param: Resolved risk-measure parameter
        lam: Risk aversion for the utility objective
        risk_level: Target contribution for the risk-parity term
        asset_risks: Per-asset risks (risk parity only)
    """

    def __init__(
        self,
        returns: ReturnsLike,
        risk_measure: RiskMeasure,
        objective: Union[ObjectiveKind, str],
        lam: Optional[float] = None,
        alpha: Optional[float] = None,
        target: Optional[float] = None,
        mode: Union[OptimizationMode, str] = OptimizationMode.MEAN_RISK,
        risk_level: float = 0.0,
    ):
        self.objective = coerce_objective(objective)
        self.mode = coerce_mode(mode)

        if self.objective is ObjectiveKind.UTILITY:
            if lam is None:
                raise MissingParameterError(
                    "lam", "Please provide a value for `lam` when using the utility objective"
                )
            lam = float(lam)
            if not np.isfinite(lam):
                raise DegenerateInputError(f"lam must be finite, got {lam}")

        if not callable(risk_measure):
            raise TypeError("risk_measure must be callable")

        self.risk_param = resolve_risk_param(alpha, target)
        self.returns, self.asset_names = as_returns_matrix(returns)
        self.n_assets = self.returns.shape[1]
        self.risk_measure = risk_measure
        self.lam = lam
        self.risk_level = float(risk_level)
        self.asset_means = self.returns.mean(axis=0)

        self._log_means = None
        if self.mode is OptimizationMode.LOG_MEAN_RISK:
            if np.any(self.asset_means <= 0):
                raise DegenerateInputError(
                    "Logarithmic mean-risk requires every asset mean return to be positive"
                )
            # log of the mean return, not the mean of log returns
            self._log_means = np.log(self.asset_means)

        self.asset_risks = None
        if self.mode is OptimizationMode.RISK_PARITY:
            self.asset_risks = np.array([
                checked_risk(self.risk_param.apply(risk_measure, self.returns[:, i]),
                              f"asset {self.asset_names[i]}")
                for i in range(self.n_assets)
            ])

    def portfolio_returns(self, weights: np.ndarray) -> np.ndarray:
        """Per-period portfolio returns R @ w"""
        return self.returns @ weights

    def expected_return(self, weights: np.ndarray) -> float:
        """Return term of the objective for the current mode."""
        if self._log_means is not None:
            return float(np.dot(weights, self._log_means))
        return float(np.dot(weights, self.asset_means))

    def risk(self, weights: np.ndarray) -> float:
        """Risk term of the objective for the current mode."""
        if self.asset_risks is not None:
            return float(np.sum((weights * self.asset_risks - self.risk_level) ** 2))
        value = self.risk_param.apply(self.risk_measure, self.portfolio_returns(weights))
        return checked_risk(value, "portfolio returns")

    def __call__(self, weights: np.ndarray) -> float:
        """
        Evaluate the objective at weights.

        Raises:
            DegenerateRatioError: Ratio objective with zero risk
            RiskMeasureError: Risk measure returned NaN or infinity
        """
        weights = np.asarray(weights, dtype=float)
        kind = self.objective

        if kind is ObjectiveKind.MINIMIZE:
            return self.risk(weights)
        if kind is ObjectiveKind.MAXIMIZE:
            return self.expected_return(weights)

        risk = self.risk(weights)
        if kind is ObjectiveKind.UTILITY:
            return self.expected_return(weights) - self.lam * risk

        if abs(risk) < RISK_EPSILON:
            raise DegenerateRatioError("Ratio objective is undefined for zero risk")
        return self.expected_return(weights) / risk

    def describe(self) -> str:
        parts = [self.objective.value, self.mode.value, f"param={self.risk_param}"]
        if self.lam is not None:
            parts.append(f"lam={self.lam:g}")
        if self.mode is OptimizationMode.RISK_PARITY:
            parts.append(f"risk_level={self.risk_level:g}")
        return ", ".join(parts)


def compose_objective(
    weights,
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    lam: Optional[float] = None,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    mode: Union[OptimizationMode, str] = OptimizationMode.MEAN_RISK,
    risk_level: float = 0.0,
) -> float:
    """
    Compute the objective value of a weight vector.

    Args:
        weights: Portfolio weights (length N)
        returns: Returns matrix (T x N)
        risk_measure: Function of a return series returning a scalar
        objective: Objective kind (enum or name)
        lam: Risk aversion, required for the utility objective
        alpha: Tail parameter passed to the risk measure
        target: Threshold parameter passed to the risk measure
        mode: Optimization mode
        risk_level: Target contribution for risk parity

    Returns:
        Objective value (smaller is better for MINIMIZE, larger otherwise)

    Example:
        >>> from risklib.measures import standard_deviation
        >>> compose_objective([0.5, 0.5], returns, standard_deviation, "minimize")
    """
    func = ObjectiveFunction(
        returns, risk_measure, objective,
        lam=lam, alpha=alpha, target=target, mode=mode, risk_level=risk_level,
    )
    w = np.asarray(weights, dtype=float).reshape(-1)
    if w.shape[0] != func.n_assets:
        raise DegenerateInputError(f"Expected {func.n_assets} weights, got {w.shape[0]}")
    return func(w)
