"""
Efficient frontier driver

Sweeps a sequence of targets, optimizes the utility objective at each one
with a caller-supplied optimizer function, and records the weights and the
realized risk of each optimal portfolio.

The optimizer function must accept
``(returns, risk_measure, objective, lam=..., alpha=... | target=...)``,
which both ``optimize_stochastic`` and ``optimize_convex`` (and the named
convex modes) do.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.data import ReturnsLike, as_returns_matrix
from ..core.types import ObjectiveKind, RiskMeasure
from .performance import portfolio_risk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrontierPoint:
    """One point of the frontier."""
    target: float
    weights: np.ndarray
    risk: float


@dataclass
class FrontierResult:
    """
    Efficient frontier as three index-aligned lists.

    Iterating yields (weights, targets, risks) so the result unpacks the
    same way as a plain tuple:

        >>> weights, targets, risks = efficient_frontier(...)
    """
    weights: List[np.ndarray] = field(default_factory=list)
    targets: List[float] = field(default_factory=list)
    risks: List[float] = field(default_factory=list)
    asset_names: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator:
        return iter((self.weights, self.targets, self.risks))

    def __len__(self) -> int:
        return len(self.targets)

    @property
    def points(self) -> List[FrontierPoint]:
        return [
            FrontierPoint(target=t, weights=w, risk=r)
            for w, t, r in zip(self.weights, self.targets, self.risks)
        ]

    def to_frame(self) -> pd.DataFrame:
        """
        Frontier as a DataFrame with one row per target.

        Columns are target, risk and one weight column per asset.
        """
        names = self.asset_names
        if not names and self.weights:
            names = [f"Asset_{i}" for i in range(len(self.weights[0]))]

        rows = []
        for w, t, r in zip(self.weights, self.targets, self.risks):
            row = {'target': t, 'risk': r}
            row.update({name: float(x) for name, x in zip(names, w)})
            rows.append(row)

        return pd.DataFrame(rows, columns=['target', 'risk'] + list(names))


def efficient_frontier(
    returns: ReturnsLike,
    risk_measure: RiskMeasure,
    target_returns: Sequence[float],
    optimizer_fn: Callable[..., np.ndarray],
    lam: float = 1.0,
    alpha: Optional[float] = None
) -> FrontierResult:
    """
    Compute the efficient frontier over a sequence of targets.

    Each target t is optimized with the utility objective. When alpha is
    given it is passed to the optimizer and the risk measure; otherwise the
    target itself is passed as the measure's ``target`` parameter. The
    realized risk is evaluated with the same parameter.

    Args:
        returns: Returns matrix (T x N)
        risk_measure: Function of a return series returning a scalar
        target_returns: Targets in the order they should be reported
        optimizer_fn: Optimizer returning a weight vector
        lam: Risk aversion for the utility objective
        alpha: Tail parameter for the risk measure

    Returns:
        FrontierResult aligned with target_returns (no sorting or
        deduplication)

    Example:
        >>> from risklib.measures import second_lower_partial_moment
        >>> from risklib.optimizers import optimize_convex
        >>> weights, targets, risks = efficient_frontier(
        ...     returns, second_lower_partial_moment, [0.0, 0.005, 0.01], optimize_convex)
    """
    _, asset_names = as_returns_matrix(returns)
    result = FrontierResult(asset_names=asset_names)

    for t in target_returns:
        t = float(t)
        param = {'alpha': alpha} if alpha is not None else {'target': t}

        weights = optimizer_fn(returns, risk_measure, ObjectiveKind.UTILITY, lam=lam, **param)
        risk = portfolio_risk(returns, weights, risk_measure, **param)

        result.weights.append(weights)
        result.targets.append(t)
        result.risks.append(risk)
        logger.debug(f"Frontier point target={t:.6g} risk={risk:.6g}")

    return result


def plot_efficient_frontier(frontier: FrontierResult, ax=None, title: str = "Efficient Frontier"):
    """
    Plot realized risk against target.

    Args:
        frontier: Result of efficient_frontier
        ax: Matplotlib axes object (creates new figure if None)
        title: Plot title

    Returns:
        Matplotlib axes object
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for plotting. Install with: pip install risklib[plot]")

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))

    ax.plot(frontier.targets, frontier.risks, 'b-', linewidth=2, marker='o', label='Efficient Frontier')
    ax.set_xlabel('Return')
    ax.set_ylabel('Risk')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    return ax
