"""
Core types shared by the RiskLib optimizers

Defines the objective kinds, optimization modes and backends, the tagged
risk-measure parameter, and the result record produced by the engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from .errors import ConflictingParametersError, InvalidObjectiveError


RiskMeasure = Callable[..., float]


class ObjectiveKind(Enum):
    """Optimization goal; also fixes the comparison direction."""
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"
    UTILITY = "utility"
    RATIO = "ratio"

    @property
    def seeks_minimum(self) -> bool:
        """True when smaller objective values are better"""
        return self is ObjectiveKind.MINIMIZE

    def improves(self, candidate: float, incumbent: float) -> bool:
        """Strict improvement test (ties keep the incumbent)."""
        if self.seeks_minimum:
            return candidate < incumbent
        return candidate > incumbent

    @property
    def worst_value(self) -> float:
        """Starting value for a best-candidate search"""
        return float("inf") if self.seeks_minimum else float("-inf")


class OptimizationMode(Enum):
    """Formulation of the return and risk terms."""
    MEAN_RISK = "mean_risk"
    LOG_MEAN_RISK = "log_mean_risk"
    RISK_PARITY = "risk_parity"


class Backend(Enum):
    """Optimizer backend used by the engine."""
    STOCHASTIC = "stochastic"
    CONVEX = "convex"


def _coerce_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_")
        for member in enum_cls:
            if key in (member.value, member.name.lower()):
                return member
    valid = ", ".join(m.value for m in enum_cls)
    raise InvalidObjectiveError(f"Unknown {label}: {value!r} (expected one of: {valid})")


def coerce_objective(value: Union[ObjectiveKind, str]) -> ObjectiveKind:
    """Convert an ObjectiveKind or its name into an ObjectiveKind."""
    return _coerce_enum(ObjectiveKind, value, "objective kind")


def coerce_mode(value: Union[OptimizationMode, str]) -> OptimizationMode:
    """Convert an OptimizationMode or its name into an OptimizationMode."""
    return _coerce_enum(OptimizationMode, value, "optimization mode")


def coerce_backend(value: Union[Backend, str]) -> Backend:
    """Convert a Backend or its name into a Backend."""
    return _coerce_enum(Backend, value, "backend")


class ParamKind(Enum):
    """Which optional argument a risk measure receives."""
    NONE = "none"
    ALPHA = "alpha"
    TARGET = "target"


@dataclass(frozen=True)
class RiskParam:
    """
    Tagged risk-measure parameter.

    A risk measure is called as f(returns), f(returns, alpha) or
    f(returns, target). The variant is chosen once at the call boundary
    with resolve_risk_param and then applied unchanged to every evaluation.

    Attributes:
        kind: Which argument form to use
        value: Tail probability or target threshold (None for NONE)
    """
    kind: ParamKind = ParamKind.NONE
    value: Optional[float] = None

    @classmethod
    def none(cls) -> "RiskParam":
        return cls()

    @classmethod
    def with_alpha(cls, alpha: float) -> "RiskParam":
        return cls(ParamKind.ALPHA, float(alpha))

    @classmethod
    def with_target(cls, target: float) -> "RiskParam":
        return cls(ParamKind.TARGET, float(target))

    @property
    def alpha(self) -> Optional[float]:
        return self.value if self.kind is ParamKind.ALPHA else None

    @property
    def target(self) -> Optional[float]:
        return self.value if self.kind is ParamKind.TARGET else None

    def apply(self, risk_measure: RiskMeasure, series: np.ndarray) -> float:
        """Evaluate risk_measure on series with the matching signature."""
        if self.kind is ParamKind.NONE:
            return risk_measure(series)
        return risk_measure(series, self.value)

    def as_kwargs(self) -> Dict[str, float]:
        """Keyword form accepted by the optimizer functions"""
        if self.kind is ParamKind.NONE:
            return {}
        return {self.kind.value: self.value}

    def __str__(self) -> str:
        if self.kind is ParamKind.NONE:
            return "none"
        return f"{self.kind.value}={self.value:g}"


def resolve_risk_param(alpha: Optional[float] = None, target: Optional[float] = None) -> RiskParam:
    """
    Build the RiskParam for a call.

    Raises:
        ConflictingParametersError: If both alpha and target are set
    """
    if alpha is not None and target is not None:
        raise ConflictingParametersError(
            f"alpha ({alpha}) and target ({target}) cannot both be supplied"
        )
    if alpha is not None:
        return RiskParam.with_alpha(alpha)
    if target is not None:
        return RiskParam.with_target(target)
    return RiskParam.none()


@dataclass(frozen=True)
class OptimizationResult:
    """
    Result of a single engine optimization.

    Attributes:
        weights: Optimal (or best found) weight vector, read-only
        objective: Objective kind that was optimized
        mode: Optimization mode
        backend: Backend that produced the weights
        objective_value: Objective evaluated at the returned weights
        risk_param: Risk-measure parameter used
        lam: Risk aversion (utility objective only)
        risk_level: Target risk contribution (risk parity only)
        evaluations: Number of objective evaluations (stochastic only)
        asset_names: Asset labels aligned with weights
    """
    weights: np.ndarray
    objective: ObjectiveKind
    mode: OptimizationMode
    backend: Backend
    objective_value: float
    risk_param: RiskParam = field(default_factory=RiskParam)
    lam: Optional[float] = None
    risk_level: float = 0.0
    evaluations: int = 0
    asset_names: List[str] = field(default_factory=list)

    def weights_by_asset(self) -> Dict[str, float]:
        """Map asset names to weights"""
        names = self.asset_names or [f"Asset_{i}" for i in range(len(self.weights))]
        return {name: float(w) for name, w in zip(names, self.weights)}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for display or serialization."""
        return {
            "objective": self.objective.value,
            "mode": self.mode.value,
            "backend": self.backend.value,
            "objective_value": self.objective_value,
            "risk_param": str(self.risk_param),
            "lambda": self.lam,
            "risk_level": self.risk_level,
            "evaluations": self.evaluations,
            "weights": self.weights_by_asset(),
        }
