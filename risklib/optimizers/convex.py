"""
Convex solver backend

Solves the composed objective with scipy's SLSQP over the long-only,
fully invested simplex:

    w_i in [0, 1],  sum_i w_i = 1

Each call performs exactly one solve starting from equal weights. The
solver is treated as non-reentrant, so solves are serialised through a
process-wide lock. Argument errors are raised before the solver runs;
solver failures raise SolverConvergenceError.

The result is only globally optimal when the risk measure is convex in
the weights. Non-smooth measures (drawdowns, tail quantiles) rely on
finite-difference gradients and may fail to converge.
"""

import logging
import threading
from typing import Optional, Tuple, Union

import numpy as np
from scipy.optimize import OptimizeResult, minimize

from ..core.data import ReturnsLike, as_weight_vector, frozen_weights
from ..core.errors import SolverConvergenceError
from ..core.objective import ObjectiveFunction
from ..core.types import ObjectiveKind, OptimizationMode, RiskMeasure
from ..measures import standard_deviation

logger = logging.getLogger(__name__)

_SOLVER_LOCK = threading.Lock()


def solve_objective(
    objective_fn: ObjectiveFunction,
    method: str = "SLSQP",
    ftol: float = 1e-10,
    maxiter: int = 1000,
    x0: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, OptimizeResult]:
    """
    Solve a prepared objective on the simplex.

    Args:
        objective_fn: Composed objective
        method: scipy.optimize.minimize method supporting bounds and
                equality constraints
        ftol: Solver tolerance
        maxiter: Iteration limit
        x0: Starting weights (default: equal weights)

    Returns:
        Tuple of (cleaned weights, raw scipy result)

    Raises:
        SolverConvergenceError: If the solver does not report success or
                                returns a non-finite solution
    """
    n = objective_fn.n_assets
    if x0 is None:
        x0 = np.ones(n) / n
    else:
        x0 = as_weight_vector(x0, n)

    sign = 1.0 if objective_fn.objective.seeks_minimum else -1.0
    bounds = tuple((0.0, 1.0) for _ in range(n))
    constraints = [{'type': 'eq', 'fun': lambda w: np.sum(w) - 1.0}]

    with _SOLVER_LOCK:
        result = minimize(
            fun=lambda w: sign * objective_fn(w),
            x0=x0,
            method=method,
            bounds=bounds,
            constraints=constraints,
            options={'ftol': ftol, 'maxiter': maxiter}
        )

    iterations = int(getattr(result, "nit", 0) or 0)
    if not result.success:
        raise SolverConvergenceError(
            f"Optimization did not converge: {result.message}",
            solver_message=str(result.message),
            iterations=iterations,
            status=getattr(result, "status", None),
        )
    if not np.all(np.isfinite(result.x)):
        raise SolverConvergenceError(
            "Solver returned a non-finite solution",
            solver_message=str(result.message),
            iterations=iterations,
            status=getattr(result, "status", None),
        )

    # Clean up solver noise around the bounds
    weights = np.clip(result.x, 0.0, None)
    total = weights.sum()
    if total <= 0:
        raise SolverConvergenceError(
            "Solver returned an all-zero weight vector",
            solver_message=str(result.message),
            iterations=iterations,
        )
    weights = weights / total

    logger.debug(f"{method} finished in {iterations} iterations ({objective_fn.describe()})")
    return weights, result


def optimize_convex(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    *,
    lam: Optional[float] = None,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    mode: Union[OptimizationMode, str] = OptimizationMode.MEAN_RISK,
    risk_level: float = 0.0,
    method: str = "SLSQP",
    ftol: float = 1e-10,
    maxiter: int = 1000,
    x0: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Find the optimal portfolio with a constrained solver.

    Args:
        returns: Returns matrix (T x N)
        risk_measure: Function of a return series returning a scalar
        objective: minimize, maximize, utility or ratio
        lam: Risk aversion (required for utility)
        alpha: Tail parameter for the risk measure
        target: Threshold parameter for the risk measure
        mode: mean_risk, log_mean_risk or risk_parity
        risk_level: Target contribution for risk parity
        method: Solver method
        ftol: Solver tolerance
        maxiter: Iteration limit
        x0: Starting weights

    Returns:
        Read-only optimal weight vector

    Raises:
        SolverConvergenceError: If the solve fails

    Example:
        >>> from risklib.measures import standard_deviation
        >>> w = optimize_convex(returns, standard_deviation, "utility", lam=2.0)
    """
    objective_fn = ObjectiveFunction(
        returns, risk_measure, objective,
        lam=lam, alpha=alpha, target=target, mode=mode, risk_level=risk_level,
    )
    weights, _ = solve_objective(objective_fn, method=method, ftol=ftol, maxiter=maxiter, x0=x0)
    return frozen_weights(weights)


def mean_risk_optimization(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    lam: Optional[float] = None,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    **solver_options
) -> np.ndarray:
    """Mean-risk optimization: return term sum_i w_i * mean_i."""
    return optimize_convex(
        returns, risk_measure, objective,
        lam=lam, alpha=alpha, target=target,
        mode=OptimizationMode.MEAN_RISK, **solver_options
    )


def logarithmic_mean_risk_optimization(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    lam: Optional[float] = None,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    **solver_options
) -> np.ndarray:
    """
    Log mean-risk optimization: return term sum_i w_i * log(mean_i).

    Every asset must have a positive mean return.
    """
    return optimize_convex(
        returns, risk_measure, objective,
        lam=lam, alpha=alpha, target=target,
        mode=OptimizationMode.LOG_MEAN_RISK, **solver_options
    )


def risk_parity_optimization(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    lam: Optional[float] = None,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    risk_level: float = 0.0,
    **solver_options
) -> np.ndarray:
    """
    Risk parity optimization.

    The risk term is sum_i (w_i * risk_i - risk_level)^2 where risk_i is
    the risk measure of asset i on its own.
    """
    return optimize_convex(
        returns, risk_measure, objective,
        lam=lam, alpha=alpha, target=target,
        mode=OptimizationMode.RISK_PARITY, risk_level=risk_level, **solver_options
    )


def kelly_criterion_optimization(returns: ReturnsLike, **solver_options) -> np.ndarray:
    """
    Kelly criterion portfolio: maximise sum_i w_i * log(mean_i).

    There is no risk term, so the solution concentrates on the asset with
    the largest mean return.
    """
    return optimize_convex(
        returns, standard_deviation, ObjectiveKind.MAXIMIZE,
        mode=OptimizationMode.LOG_MEAN_RISK, **solver_options
    )
