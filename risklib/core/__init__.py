"""
Core types, validation, objective composition and sampling
"""

from .config import OptimizerConfig, RiskLibConfig, SimulationConfig, load_config
from .errors import (
    ConfigurationError,
    ConflictingParametersError,
    DegenerateInputError,
    DegenerateRatioError,
    InvalidObjectiveError,
    MissingParameterError,
    RiskLibError,
    RiskMeasureError,
    SolverConvergenceError,
    UnknownRiskMeasureError,
)
from .objective import ObjectiveFunction, compose_objective
from .sampling import SamplingStrategy, SimplexSampler, make_rng
from .types import (
    Backend,
    ObjectiveKind,
    OptimizationMode,
    OptimizationResult,
    RiskParam,
    resolve_risk_param,
)

__all__ = [
    'Backend', 'ObjectiveKind', 'OptimizationMode', 'OptimizationResult',
    'RiskParam', 'resolve_risk_param',
    'ObjectiveFunction', 'compose_objective',
    'SamplingStrategy', 'SimplexSampler', 'make_rng',
    'OptimizerConfig', 'SimulationConfig', 'RiskLibConfig', 'load_config',
    'RiskLibError', 'InvalidObjectiveError', 'MissingParameterError',
    'ConflictingParametersError', 'DegenerateRatioError', 'DegenerateInputError',
    'RiskMeasureError', 'ConfigurationError', 'UnknownRiskMeasureError',
    'SolverConvergenceError',
]
