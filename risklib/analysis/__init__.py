"""
Portfolio analysis: performance, efficient frontier and scenario risk
"""

from .frontier import FrontierPoint, FrontierResult, efficient_frontier, plot_efficient_frontier
from .performance import (
    portfolio_log_return,
    portfolio_performance,
    portfolio_return,
    portfolio_risk,
)
from .scenario import ScenarioRiskResult, monte_carlo_scenario_analysis, summarize_scenario_risk

__all__ = [
    'portfolio_risk', 'portfolio_return', 'portfolio_log_return', 'portfolio_performance',
    'FrontierPoint', 'FrontierResult', 'efficient_frontier', 'plot_efficient_frontier',
    'ScenarioRiskResult', 'monte_carlo_scenario_analysis', 'summarize_scenario_risk',
]
