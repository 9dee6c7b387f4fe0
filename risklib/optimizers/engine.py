"""
Portfolio optimization engine

One entry point for both backends. The engine holds a validated returns
matrix and a risk measure, dispatches optimization requests to the
stochastic or convex backend, and wraps the results with the metadata
needed for reporting. Every run is timed and reported through the
structured logger.
"""

import logging
import time
import warnings
from functools import partial
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..analysis.frontier import FrontierResult, efficient_frontier
from ..analysis.performance import portfolio_performance
from ..analysis.scenario import (
    ScenarioRiskResult,
    monte_carlo_scenario_analysis,
    summarize_scenario_risk,
)
from ..core.config import RiskLibConfig
from ..core.data import ReturnsLike, as_returns_matrix, frozen_weights
from ..core.objective import ObjectiveFunction
from ..core.sampling import RandomState
from ..core.types import (
    Backend,
    ObjectiveKind,
    OptimizationMode,
    OptimizationResult,
    RiskMeasure,
    coerce_backend,
)
from ..measures import find_measure_info
from ..utils.logging_config import get_logger
from .convex import optimize_convex, solve_objective
from .stochastic import optimize_stochastic, run_stochastic_search

logger = logging.getLogger(__name__)


class PortfolioOptimizer:
    """
    Risk-aware portfolio optimizer with a selectable backend.

    Attributes:
        returns: Validated returns matrix (T x N)
        asset_names: Asset labels (DataFrame columns or Asset_<i>)
        n_assets: Number of assets
        risk_measure: Risk measure used by every request
        backend: Default backend
        config: Sampling, solver and simulation settings

    Example:
        >>> from risklib.measures import cvar
        >>> optimizer = PortfolioOptimizer(returns, cvar, backend="stochastic")
        >>> result = optimizer.optimize("utility", lam=2.0, alpha=0.05, random_state=42)
        >>> print(result.weights_by_asset())
    """

    def __init__(
        self,
        returns: ReturnsLike,
        risk_measure: RiskMeasure,
        backend: Union[Backend, str] = Backend.STOCHASTIC,
        config: Optional[RiskLibConfig] = None
    ):
        """
        Initialize the optimizer.

        Args:
            returns: Returns matrix or DataFrame (rows=periods, cols=assets)
            risk_measure: Function of a return series returning a scalar
            backend: "stochastic" or "convex"
            config: Settings (defaults if None)

        Raises:
            DegenerateInputError: If the returns matrix is invalid
        """
        if not callable(risk_measure):
            raise TypeError("risk_measure must be callable")

        self.returns, self.asset_names = as_returns_matrix(returns)
        self.n_assets = self.returns.shape[1]
        self.risk_measure = risk_measure
        self.backend = coerce_backend(backend)
        self.config = config or RiskLibConfig()

        info = find_measure_info(risk_measure)
        self.measure_name = info.name if info else getattr(risk_measure, "__name__", "custom")
        self._measure_is_convex = info.convex if info else None
        logger.debug(f"Optimizer ready: {self.n_assets} assets, {self.returns.shape[0]} periods, "
                     f"measure={self.measure_name}, backend={self.backend.value}")

    def _returns_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.returns, columns=self.asset_names)

    def optimize(
        self,
        objective: Union[ObjectiveKind, str],
        *,
        mode: Union[OptimizationMode, str] = OptimizationMode.MEAN_RISK,
        lam: Optional[float] = None,
        alpha: Optional[float] = None,
        target: Optional[float] = None,
        risk_level: float = 0.0,
        n_samples: Optional[int] = None,
        random_state: RandomState = None,
        backend: Optional[Union[Backend, str]] = None
    ) -> OptimizationResult:
        """
        Optimize the portfolio.

        Args:
            objective: minimize, maximize, utility or ratio
            mode: mean_risk, log_mean_risk or risk_parity
            lam: Risk aversion (required for utility)
            alpha: Tail parameter for the risk measure
            target: Threshold parameter for the risk measure
            risk_level: Target contribution for risk parity
            n_samples: Stochastic sample count (config default if None)
            random_state: Seed (config default if None)
            backend: Override the engine backend for this call

        Returns:
            OptimizationResult with read-only weights

        Raises:
            InvalidObjectiveError, MissingParameterError,
            ConflictingParametersError, DegenerateInputError: Before any work
            DegenerateRatioError: No valid ratio candidate (stochastic)
            SolverConvergenceError: Solver failure (convex)
        """
        backend = coerce_backend(backend) if backend is not None else self.backend
        objective_fn = ObjectiveFunction(
            self.returns, self.risk_measure, objective,
            lam=lam, alpha=alpha, target=target, mode=mode, risk_level=risk_level,
        )
        opt_config = self.config.optimizer
        if random_state is None:
            random_state = opt_config.random_seed

        structured = get_logger()
        structured.log_optimization_start(
            backend=backend.value,
            objective=objective_fn.objective.value,
            mode=objective_fn.mode.value,
            n_assets=self.n_assets,
            n_periods=self.returns.shape[0],
            risk_measure=self.measure_name,
            parameters={"lam": lam, "risk_param": str(objective_fn.risk_param), "risk_level": risk_level},
        )

        start = time.perf_counter()
        try:
            if backend is Backend.STOCHASTIC:
                best = run_stochastic_search(
                    objective_fn,
                    n_samples=n_samples if n_samples is not None else opt_config.n_samples,
                    random_state=random_state,
                    n_workers=opt_config.n_workers,
                )
                weights, value, evaluations = best.weights, best.value, best.evaluations
            else:
                if self._measure_is_convex is False:
                    warnings.warn(
                        f"{self.measure_name} is not convex; the solver may return a local optimum"
                    )
                weights, solver_result = solve_objective(
                    objective_fn,
                    method=opt_config.solver_method,
                    ftol=opt_config.ftol,
                    maxiter=opt_config.maxiter,
                )
                value = objective_fn(weights)
                evaluations = int(getattr(solver_result, "nfev", 0) or 0)
        except Exception as e:
            structured.log_error(e, operation=f"optimize_{backend.value}")
            raise
        duration = time.perf_counter() - start

        result = OptimizationResult(
            weights=frozen_weights(weights),
            objective=objective_fn.objective,
            mode=objective_fn.mode,
            backend=backend,
            objective_value=float(value),
            risk_param=objective_fn.risk_param,
            lam=objective_fn.lam,
            risk_level=objective_fn.risk_level,
            evaluations=evaluations,
            asset_names=list(self.asset_names),
        )

        structured.log_optimization_end(
            backend=backend.value,
            objective=result.objective.value,
            objective_value=result.objective_value,
            weights=result.weights_by_asset(),
            duration_seconds=duration,
            evaluations=evaluations,
        )
        return result

    def efficient_frontier(
        self,
        target_returns: Sequence[float],
        lam: float = 1.0,
        alpha: Optional[float] = None,
        mode: Union[OptimizationMode, str] = OptimizationMode.MEAN_RISK,
        random_state: RandomState = None
    ) -> FrontierResult:
        """
        Efficient frontier with the engine's backend.

        Args:
            target_returns: Targets to sweep (reported in this order)
            lam: Risk aversion for the utility objective
            alpha: Tail parameter; without it each target is passed to the
                   risk measure as its ``target``
            mode: Optimization mode for every point
            random_state: Seed for the stochastic backend

        Returns:
            FrontierResult aligned with target_returns
        """
        opt_config = self.config.optimizer
        if self.backend is Backend.STOCHASTIC:
            if random_state is None:
                random_state = opt_config.random_seed
            optimizer_fn = partial(
                optimize_stochastic,
                mode=mode,
                n_samples=opt_config.n_samples,
                random_state=random_state,
                n_workers=opt_config.n_workers,
            )
        else:
            optimizer_fn = partial(
                optimize_convex,
                mode=mode,
                method=opt_config.solver_method,
                ftol=opt_config.ftol,
                maxiter=opt_config.maxiter,
            )

        start = time.perf_counter()
        frontier = efficient_frontier(
            self._returns_frame(), self.risk_measure, target_returns, optimizer_fn, lam=lam, alpha=alpha
        )
        get_logger().log_frontier(
            n_points=len(frontier),
            risk_measure=self.measure_name,
            duration_seconds=time.perf_counter() - start,
            backend=self.backend.value,
        )
        return frontier

    def scenario_analysis(
        self,
        weights,
        n_simulations: Optional[int] = None,
        n_periods: Optional[int] = None,
        alpha: Optional[float] = None,
        target: Optional[float] = None,
        random_state: RandomState = None
    ) -> ScenarioRiskResult:
        """
        Monte Carlo distribution of the risk measure for a portfolio.

        Sizes and seed default to the simulation settings of the config.

        Returns:
            ScenarioRiskResult with the raw values and percentiles
        """
        sim_config = self.config.simulation
        n_simulations = n_simulations if n_simulations is not None else sim_config.n_simulations
        n_periods = n_periods if n_periods is not None else sim_config.n_periods
        if random_state is None:
            random_state = sim_config.random_seed

        start = time.perf_counter()
        values = monte_carlo_scenario_analysis(
            self.returns, weights, self.risk_measure, n_simulations, n_periods,
            alpha=alpha, target=target, random_state=random_state, n_workers=sim_config.n_workers,
        )
        summary = summarize_scenario_risk(values, sim_config.confidence_levels)

        get_logger().log_simulation(
            n_simulations=n_simulations,
            n_periods=n_periods,
            risk_measure=self.measure_name,
            duration_seconds=time.perf_counter() - start,
            summary={"mean": summary.mean, "std": summary.std},
        )
        return summary

    def performance(
        self,
        weights,
        alpha: Optional[float] = None,
        target: Optional[float] = None,
        log_return: bool = False
    ):
        """Risk and return of a weight vector on the historical returns."""
        return portfolio_performance(
            self.returns, np.asarray(weights, dtype=float), self.risk_measure,
            log_return=log_return, alpha=alpha, target=target,
        )


def optimize(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    *,
    backend: Union[Backend, str] = Backend.STOCHASTIC,
    config: Optional[RiskLibConfig] = None,
    **kwargs
) -> OptimizationResult:
    """
    Functional form of PortfolioOptimizer.optimize.

    Example:
        >>> from risklib.measures import standard_deviation
        >>> result = optimize(returns, standard_deviation, "minimize", backend="convex")
    """
    optimizer = PortfolioOptimizer(returns, risk_measure, backend=backend, config=config)
    return optimizer.optimize(objective, **kwargs)
