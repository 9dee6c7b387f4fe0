"""
Random sampling of weight vectors on the probability simplex

Two strategies are provided:

- UNIFORM_SIMPLEX draws from a symmetric Dirichlet(1, ..., 1), which is
  uniform over the simplex.
- NORMALIZED_UNIFORM draws N independent U(0, 1) values and divides by
  their sum. This is not uniform over the simplex; it concentrates mass
  toward the centre.

Both satisfy the weight invariant (non-negative, sums to one).
"""

from enum import Enum
from typing import List, Optional, Union

import numpy as np


RandomState = Optional[Union[int, np.random.Generator, np.random.SeedSequence]]


class SamplingStrategy(Enum):
    """Simplex sampling strategy"""
    UNIFORM_SIMPLEX = "uniform_simplex"
    NORMALIZED_UNIFORM = "normalized_uniform"


def make_rng(random_state: RandomState = None) -> np.random.Generator:
    """
    Build a numpy Generator from a seed, seed sequence or generator.

    A Generator is returned as is so callers can share one stream.
    """
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def sample_uniform_simplex(rng: np.random.Generator, n_assets: int) -> np.ndarray:
    """Draw one weight vector uniformly from the simplex."""
    return rng.dirichlet(np.ones(n_assets))


def sample_normalized_uniform(rng: np.random.Generator, n_assets: int) -> np.ndarray:
    """Draw N uniforms and normalize them to sum to one."""
    draws = rng.random(n_assets)
    total = draws.sum()
    while total == 0.0:
        draws = rng.random(n_assets)
        total = draws.sum()
    return draws / total


_SAMPLERS = {
    SamplingStrategy.UNIFORM_SIMPLEX: sample_uniform_simplex,
    SamplingStrategy.NORMALIZED_UNIFORM: sample_normalized_uniform,
}


class SimplexSampler:
    """
    Stream of random weight vectors.

    Example:
        >>> sampler = SimplexSampler(SamplingStrategy.UNIFORM_SIMPLEX, n_assets=3, random_state=42)
        >>> w = sampler.sample()
        >>> abs(w.sum() - 1.0) < 1e-12
        True
    """

    def __init__(
        self,
        strategy: Union[SamplingStrategy, str],
        n_assets: int,
        random_state: RandomState = None
    ):
        if isinstance(strategy, str):
            strategy = SamplingStrategy(strategy.lower())
        if n_assets < 1:
            raise ValueError("n_assets must be at least 1")
        self.strategy = strategy
        self.n_assets = n_assets
        self.rng = make_rng(random_state)
        self._draw = _SAMPLERS[strategy]

    def sample(self) -> np.ndarray:
        """Draw a single weight vector"""
        return self._draw(self.rng, self.n_assets)

    def stream(self, count: int):
        """Yield count weight vectors"""
        for _ in range(count):
            yield self._draw(self.rng, self.n_assets)


def root_seed_sequence(random_state: RandomState = None) -> np.random.SeedSequence:
    """
    Seed sequence from which parallel workers spawn their child streams.

    A Generator contributes entropy by drawing from its own stream.
    """
    if isinstance(random_state, np.random.SeedSequence):
        return random_state
    if isinstance(random_state, np.random.Generator):
        return np.random.SeedSequence(random_state.integers(np.iinfo(np.int64).max, size=4))
    return np.random.SeedSequence(random_state)


def chunk_sizes(total: int, n_chunks: int) -> List[int]:
    """Split total into n_chunks contiguous sizes differing by at most one."""
    base, extra = divmod(total, n_chunks)
    return [base + (1 if i < extra else 0) for i in range(n_chunks)]
