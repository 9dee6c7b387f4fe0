"""
Portfolio optimizers: stochastic search, convex solver and the engine
"""

from .convex import (
    kelly_criterion_optimization,
    logarithmic_mean_risk_optimization,
    mean_risk_optimization,
    optimize_convex,
    risk_parity_optimization,
)
from .engine import PortfolioOptimizer, optimize
from .stochastic import BestCandidate, optimize_stochastic, run_stochastic_search

__all__ = [
    'optimize_stochastic', 'run_stochastic_search', 'BestCandidate',
    'optimize_convex', 'mean_risk_optimization', 'logarithmic_mean_risk_optimization',
    'risk_parity_optimization', 'kelly_criterion_optimization',
    'PortfolioOptimizer', 'optimize',
]
