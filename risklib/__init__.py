"""
RiskLib - Risk-aware portfolio optimization

Composes portfolio objectives from a pluggable risk measure, optimizes them
with a stochastic search or a constrained solver, traces efficient
frontiers and evaluates scenario risk by Monte Carlo simulation.
"""

__version__ = "0.1.0"

from .analysis import (
    FrontierResult,
    ScenarioRiskResult,
    efficient_frontier,
    monte_carlo_scenario_analysis,
    plot_efficient_frontier,
    portfolio_log_return,
    portfolio_performance,
    portfolio_return,
    portfolio_risk,
    summarize_scenario_risk,
)
from .core import (
    Backend,
    ConfigurationError,
    ConflictingParametersError,
    DegenerateInputError,
    DegenerateRatioError,
    InvalidObjectiveError,
    MissingParameterError,
    ObjectiveFunction,
    ObjectiveKind,
    OptimizationMode,
    OptimizationResult,
    RiskLibConfig,
    RiskLibError,
    RiskMeasureError,
    RiskParam,
    SamplingStrategy,
    SimplexSampler,
    SolverConvergenceError,
    UnknownRiskMeasureError,
    compose_objective,
    load_config,
)
from .measures import RISK_MEASURES, get_risk_measure, list_risk_measures
from .optimizers import (
    PortfolioOptimizer,
    kelly_criterion_optimization,
    logarithmic_mean_risk_optimization,
    mean_risk_optimization,
    optimize,
    optimize_convex,
    optimize_stochastic,
    risk_parity_optimization,
)

__all__ = [
    '__version__',
    'ObjectiveKind', 'OptimizationMode', 'Backend', 'RiskParam', 'OptimizationResult',
    'ObjectiveFunction', 'compose_objective', 'SamplingStrategy', 'SimplexSampler',
    'RiskLibConfig', 'load_config',
    'RISK_MEASURES', 'get_risk_measure', 'list_risk_measures',
    'optimize_stochastic', 'optimize_convex', 'mean_risk_optimization',
    'logarithmic_mean_risk_optimization', 'risk_parity_optimization',
    'kelly_criterion_optimization', 'PortfolioOptimizer', 'optimize',
    'portfolio_risk', 'portfolio_return', 'portfolio_log_return', 'portfolio_performance',
    'efficient_frontier', 'plot_efficient_frontier', 'FrontierResult',
    'monte_carlo_scenario_analysis', 'summarize_scenario_risk', 'ScenarioRiskResult',
    'RiskLibError', 'InvalidObjectiveError', 'MissingParameterError',
    'ConflictingParametersError', 'DegenerateRatioError', 'DegenerateInputError',
    'RiskMeasureError', 'ConfigurationError', 'UnknownRiskMeasureError',
    'SolverConvergenceError',
]
