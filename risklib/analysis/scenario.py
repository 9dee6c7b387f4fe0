"""
Monte Carlo scenario risk evaluation

Fits a multivariate normal to the historical returns (sample mean and
covariance), simulates return paths for a fixed portfolio and evaluates
the risk measure on every path. The resulting distribution of risk values
shows how stable the measure is under resampling.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.data import ReturnsLike, as_returns_matrix, as_weight_vector, validate_count
from ..core.objective import checked_risk
from ..core.sampling import RandomState, chunk_sizes, make_rng, root_seed_sequence
from ..core.types import RiskMeasure, RiskParam, resolve_risk_param

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_LEVELS = (5, 25, 50, 75, 95)


@dataclass
class ScenarioRiskResult:
    """
    Summary of a scenario risk distribution.

    Attributes:
        values: Risk value per simulated path
        mean: Mean risk
        std: Standard deviation of the risk values
        min: Smallest risk value
        max: Largest risk value
        percentiles: Risk value at each requested percentile
    """
    values: np.ndarray
    mean: float
    std: float
    min: float
    max: float
    percentiles: Dict[float, float] = field(default_factory=dict)

    @property
    def n_simulations(self) -> int:
        return len(self.values)

    def to_dict(self) -> Dict[str, float]:
        """Summary statistics without the raw values."""
        summary = {
            'n_simulations': self.n_simulations,
            'mean': self.mean,
            'std': self.std,
            'min': self.min,
            'max': self.max,
        }
        for level, value in self.percentiles.items():
            summary[f'p{level:g}'] = value
        return summary


def _estimate_distribution(values: np.ndarray):
    mean = values.mean(axis=0)
    cov = np.atleast_2d(np.cov(values, rowvar=False, ddof=1))
    return mean, cov


def _simulate_chunk(
    mean: np.ndarray,
    cov: np.ndarray,
    weights: np.ndarray,
    risk_measure: RiskMeasure,
    param: RiskParam,
    n_simulations: int,
    n_periods: int,
    random_state: RandomState
) -> np.ndarray:
    rng = make_rng(random_state)
    risk_values = np.empty(n_simulations)

    for i in range(n_simulations):
        simulated = rng.multivariate_normal(mean, cov, size=n_periods)
        risk_values[i] = checked_risk(param.apply(risk_measure, simulated @ weights),
                                      f"simulation {i}")

    return risk_values


def monte_carlo_scenario_analysis(
    returns: ReturnsLike,
    weights,
    risk_measure: RiskMeasure,
    n_simulations: int,
    n_periods: int,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    random_state: RandomState = None,
    n_workers: int = 1
) -> np.ndarray:
    """
    Distribution of the risk measure over simulated return paths.

    Args:
        returns: Historical returns matrix (T x N)
        weights: Portfolio weights (length N, on the simplex)
        risk_measure: Function of a return series returning a scalar
        n_simulations: Number of simulated paths (>= 1)
        n_periods: Periods per path (>= 1)
        alpha: Tail parameter for the risk measure
        target: Threshold parameter for the risk measure
        random_state: Seed, SeedSequence or Generator
        n_workers: Worker threads; paths are split into contiguous chunks

    Returns:
        Array of n_simulations risk values in trial order

    Raises:
        DegenerateInputError: Invalid sizes or weights
        RiskMeasureError: A path produced a NaN or infinite risk value

    Example:
        >>> from risklib.measures import cvar
        >>> risks = monte_carlo_scenario_analysis(returns, w, cvar, 1000, 252,
        ...                                       alpha=0.05, random_state=42)
    """
    param = resolve_risk_param(alpha, target)
    n_simulations = validate_count(n_simulations, "n_simulations")
    n_periods = validate_count(n_periods, "n_periods")
    n_workers = validate_count(n_workers, "n_workers")

    values, _ = as_returns_matrix(returns)
    w = as_weight_vector(weights, values.shape[1])
    mean, cov = _estimate_distribution(values)

    n_chunks = min(n_workers, n_simulations)
    if n_chunks == 1:
        risk_values = _simulate_chunk(mean, cov, w, risk_measure, param,
                                      n_simulations, n_periods, random_state)
    else:
        child_seeds = root_seed_sequence(random_state).spawn(n_chunks)
        sizes = chunk_sizes(n_simulations, n_chunks)
        chunks: List[Optional[np.ndarray]] = [None] * n_chunks

        with ThreadPoolExecutor(max_workers=n_chunks) as executor:
            future_to_index = {
                executor.submit(_simulate_chunk, mean, cov, w, risk_measure, param,
                                size, n_periods, seed): index
                for index, (size, seed) in enumerate(zip(sizes, child_seeds))
            }
            for future in as_completed(future_to_index):
                chunks[future_to_index[future]] = future.result()

        risk_values = np.concatenate(chunks)

    logger.debug(f"Simulated {n_simulations} paths of {n_periods} periods")
    return risk_values


def summarize_scenario_risk(
    risk_values,
    confidence_levels: Sequence[float] = DEFAULT_CONFIDENCE_LEVELS
) -> ScenarioRiskResult:
    """
    Summary statistics and percentiles of simulated risk values.

    Args:
        risk_values: Output of monte_carlo_scenario_analysis
        confidence_levels: Percentiles to report (0-100)
    """
    values = np.asarray(risk_values, dtype=float).reshape(-1)
    if values.size == 0:
        raise ValueError("risk_values cannot be empty")

    return ScenarioRiskResult(
        values=values,
        mean=float(values.mean()),
        std=float(values.std(ddof=1)) if values.size > 1 else 0.0,
        min=float(values.min()),
        max=float(values.max()),
        percentiles={float(level): float(np.percentile(values, level)) for level in confidence_levels},
    )
