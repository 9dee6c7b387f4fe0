"""
Stochastic (random search) portfolio optimizer

Draws candidate weight vectors from the probability simplex and keeps the
best one under the composed objective. Works with any risk measure,
including non-convex and non-smooth ones, at the price of returning only
an approximate optimum.

The search is a fold over the sample stream with an immutable
BestCandidate accumulator. With n_workers > 1 the samples are split into
chunks, each chunk is searched in a worker thread with its own child
generator, and the partial winners are merged in chunk order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from typing import List, Optional, Union

import numpy as np

from ..core.data import ReturnsLike, frozen_weights, validate_count
from ..core.errors import DegenerateRatioError
from ..core.objective import ObjectiveFunction
from ..core.sampling import (
    RandomState,
    SamplingStrategy,
    SimplexSampler,
    chunk_sizes,
    root_seed_sequence,
)
from ..core.types import ObjectiveKind, OptimizationMode, RiskMeasure

logger = logging.getLogger(__name__)

# Progress is logged every this many candidates on the sequential path
PROGRESS_INTERVAL = 1000


@dataclass(frozen=True)
class BestCandidate:
    """
    Best weight vector found so far.

    Attributes:
        objective: Objective kind (fixes the comparison direction)
        value: Objective value of the incumbent
        weights: Incumbent weights, None until a valid candidate is seen
        evaluations: Candidates drawn
        skipped: Candidates rejected because the ratio was undefined
    """
    objective: ObjectiveKind
    value: float
    weights: Optional[np.ndarray] = None
    evaluations: int = 0
    skipped: int = 0

    @classmethod
    def empty(cls, objective: ObjectiveKind) -> "BestCandidate":
        return cls(objective=objective, value=objective.worst_value)

    @property
    def found(self) -> bool:
        return self.weights is not None

    def consider(self, weights: np.ndarray, value: float) -> "BestCandidate":
        """Fold one evaluated candidate in; ties keep the incumbent."""
        if not self.found or self.objective.improves(value, self.value):
            return replace(self, value=value, weights=weights, evaluations=self.evaluations + 1)
        return replace(self, evaluations=self.evaluations + 1)

    def skip(self) -> "BestCandidate":
        return replace(self, evaluations=self.evaluations + 1, skipped=self.skipped + 1)

    def merge(self, other: "BestCandidate") -> "BestCandidate":
        """
        Combine with the result of a later chunk.

        The later chunk only wins on strict improvement, so merging partial
        results in chunk order behaves like one sequential fold.
        """
        evaluations = self.evaluations + other.evaluations
        skipped = self.skipped + other.skipped
        if other.found and (not self.found or self.objective.improves(other.value, self.value)):
            return replace(other, evaluations=evaluations, skipped=skipped)
        return replace(self, evaluations=evaluations, skipped=skipped)


def default_sampling(mode: OptimizationMode) -> SamplingStrategy:
    """Sampling strategy used when the caller does not choose one."""
    if mode is OptimizationMode.RISK_PARITY:
        return SamplingStrategy.NORMALIZED_UNIFORM
    return SamplingStrategy.UNIFORM_SIMPLEX


def _search_chunk(
    objective_fn: ObjectiveFunction,
    n_samples: int,
    strategy: SamplingStrategy,
    random_state: RandomState,
    log_progress: bool = False
) -> BestCandidate:
    sampler = SimplexSampler(strategy, objective_fn.n_assets, random_state)
    best = BestCandidate.empty(objective_fn.objective)

    for i, weights in enumerate(sampler.stream(n_samples), start=1):
        try:
            value = objective_fn(weights)
        except DegenerateRatioError:
            best = best.skip()
        else:
            best = best.consider(weights, value)

        if log_progress and i % PROGRESS_INTERVAL == 0:
            logger.debug(f"Evaluated {i}/{n_samples} candidates, best={best.value:.6g}")

    return best


def run_stochastic_search(
    objective_fn: ObjectiveFunction,
    n_samples: int = 10000,
    sampling: Optional[Union[SamplingStrategy, str]] = None,
    random_state: RandomState = None,
    n_workers: int = 1
) -> BestCandidate:
    """
    Random search over the simplex for a prepared objective.

    Args:
        objective_fn: Composed objective to evaluate
        n_samples: Number of candidates to draw (>= 1)
        sampling: Sampling strategy (default depends on the mode)
        random_state: Seed, SeedSequence or Generator
        n_workers: Worker threads; 1 runs a single sequential fold

    Returns:
        BestCandidate accumulator after all samples

    Raises:
        DegenerateRatioError: If every candidate had an undefined ratio
    """
    n_samples = validate_count(n_samples, "n_samples")
    n_workers = validate_count(n_workers, "n_workers")
    if sampling is None:
        strategy = default_sampling(objective_fn.mode)
    elif isinstance(sampling, str):
        strategy = SamplingStrategy(sampling.lower())
    else:
        strategy = sampling

    n_chunks = min(n_workers, n_samples)
    if n_chunks == 1:
        best = _search_chunk(objective_fn, n_samples, strategy, random_state, log_progress=True)
    else:
        child_seeds = root_seed_sequence(random_state).spawn(n_chunks)
        sizes = chunk_sizes(n_samples, n_chunks)
        partials: List[Optional[BestCandidate]] = [None] * n_chunks

        with ThreadPoolExecutor(max_workers=n_chunks) as executor:
            future_to_index = {
                executor.submit(_search_chunk, objective_fn, size, strategy, seed): index
                for index, (size, seed) in enumerate(zip(sizes, child_seeds))
            }
            for future in as_completed(future_to_index):
                partials[future_to_index[future]] = future.result()

        best = partials[0]
        for partial in partials[1:]:
            best = best.merge(partial)

    if not best.found:
        raise DegenerateRatioError(
            f"All {best.evaluations} sampled portfolios had zero risk; the ratio objective is undefined"
        )

    if best.skipped:
        logger.debug(f"Skipped {best.skipped} candidates with zero risk")
    return best


def optimize_stochastic(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    objective: Union[ObjectiveKind, str],
    *,
    lam: Optional[float] = None,
    alpha: Optional[float] = None,
    target: Optional[float] = None,
    n_samples: int = 10000,
    mode: Union[OptimizationMode, str] = OptimizationMode.MEAN_RISK,
    risk_level: float = 0.0,
    sampling: Optional[Union[SamplingStrategy, str]] = None,
    random_state: RandomState = None,
    n_workers: int = 1
) -> np.ndarray:
    """
    Approximate the optimal portfolio by random sampling.

    Args:
        returns: Returns matrix (T x N)
        risk_measure: Function of a return series returning a scalar
        objective: minimize, maximize, utility or ratio
        lam: Risk aversion (required for utility)
        alpha: Tail parameter for the risk measure
        target: Threshold parameter for the risk measure
        n_samples: Number of candidate portfolios
        mode: mean_risk, log_mean_risk or risk_parity
        risk_level: Target contribution for risk parity
        sampling: Override the sampling strategy
        random_state: Seed for reproducible runs
        n_workers: Worker threads

    Returns:
        Read-only weight vector of the best candidate

    Example:
        >>> from risklib.measures import standard_deviation
        >>> w = optimize_stochastic(returns, standard_deviation, "minimize",
        ...                         n_samples=5000, random_state=42)
    """
    objective_fn = ObjectiveFunction(
        returns, risk_measure, objective,
        lam=lam, alpha=alpha, target=target, mode=mode, risk_level=risk_level,
    )
    best = run_stochastic_search(
        objective_fn, n_samples=n_samples, sampling=sampling,
        random_state=random_state, n_workers=n_workers,
    )
    return frozen_weights(best.weights)
