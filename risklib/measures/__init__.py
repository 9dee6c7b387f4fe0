"""
Risk measures for portfolio return series

Every measure is a pure function of a 1-D return series returning a
scalar, larger meaning riskier. Tail and drawdown-at-risk measures take a
tail probability ``alpha`` and partial moments take a ``target`` as their
second positional argument; the registry records which one applies.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..core.errors import UnknownRiskMeasureError
from ..core.types import ParamKind
from .dispersion import (
    gini_mean_difference,
    mean_absolute_deviation,
    range_of_returns,
    sqrt_kurtosis,
    standard_deviation,
)
from .downside import (
    first_lower_partial_moment,
    second_lower_partial_moment,
    semi_std_deviation,
    sqrt_semi_kurtosis,
    worst_case_realization,
)
from .drawdown import (
    average_drawdown,
    calmar_ratio,
    cdrawdown_at_risk,
    drawdown_series,
    entropic_drawdown_at_risk,
    maximum_drawdown,
    ulcer_index,
)
from .tail import (
    cvar,
    cvar_range,
    entropic_value_at_risk,
    tail_gini,
    tail_gini_range,
    value_at_risk,
)


@dataclass(frozen=True)
class MeasureInfo:
    """
    Registry entry for a risk measure.

    Attributes:
        name: Registry key
        func: The measure
        parameter: Which optional argument the measure accepts
        convex: Whether the measure is convex in the portfolio weights
        description: One line description
    """
    name: str
    func: Callable[..., float]
    parameter: ParamKind
    convex: bool
    description: str


RISK_MEASURES: Dict[str, MeasureInfo] = {
    info.name: info for info in [
        MeasureInfo("standard_deviation", standard_deviation, ParamKind.NONE, True,
                    "Sample standard deviation"),
        MeasureInfo("mean_absolute_deviation", mean_absolute_deviation, ParamKind.NONE, True,
                    "Mean absolute deviation from the mean"),
        MeasureInfo("gini_mean_difference", gini_mean_difference, ParamKind.NONE, True,
                    "Mean absolute difference over all pairs"),
        MeasureInfo("range_of_returns", range_of_returns, ParamKind.NONE, True,
                    "Best minus worst return"),
        MeasureInfo("sqrt_kurtosis", sqrt_kurtosis, ParamKind.NONE, True,
                    "Square root of the fourth central moment"),
        MeasureInfo("semi_std_deviation", semi_std_deviation, ParamKind.NONE, True,
                    "Dispersion below the mean"),
        MeasureInfo("sqrt_semi_kurtosis", sqrt_semi_kurtosis, ParamKind.NONE, True,
                    "Square root of the fourth lower semi-moment"),
        MeasureInfo("first_lower_partial_moment", first_lower_partial_moment, ParamKind.TARGET, True,
                    "Mean shortfall below target"),
        MeasureInfo("second_lower_partial_moment", second_lower_partial_moment, ParamKind.TARGET, True,
                    "Mean squared shortfall below target"),
        MeasureInfo("worst_case_realization", worst_case_realization, ParamKind.NONE, True,
                    "Worst observed loss"),
        MeasureInfo("value_at_risk", value_at_risk, ParamKind.ALPHA, False,
                    "Historical Value at Risk"),
        MeasureInfo("cvar", cvar, ParamKind.ALPHA, True,
                    "Conditional Value at Risk"),
        MeasureInfo("cvar_range", cvar_range, ParamKind.ALPHA, True,
                    "Upper tail mean minus lower tail mean"),
        MeasureInfo("tail_gini", tail_gini, ParamKind.ALPHA, False,
                    "Gini mean difference of the lower tail"),
        MeasureInfo("tail_gini_range", tail_gini_range, ParamKind.ALPHA, False,
                    "Lower plus upper tail Gini mean difference"),
        MeasureInfo("entropic_value_at_risk", entropic_value_at_risk, ParamKind.ALPHA, True,
                    "Entropic Value at Risk"),
        MeasureInfo("maximum_drawdown", maximum_drawdown, ParamKind.NONE, True,
                    "Maximum uncompounded drawdown"),
        MeasureInfo("average_drawdown", average_drawdown, ParamKind.NONE, True,
                    "Average uncompounded drawdown"),
        MeasureInfo("cdrawdown_at_risk", cdrawdown_at_risk, ParamKind.ALPHA, True,
                    "Conditional Drawdown at Risk"),
        MeasureInfo("entropic_drawdown_at_risk", entropic_drawdown_at_risk, ParamKind.ALPHA, True,
                    "Entropic Drawdown at Risk"),
        MeasureInfo("ulcer_index", ulcer_index, ParamKind.NONE, True,
                    "Root mean square drawdown"),
    ]
}


def get_risk_measure(name: str) -> MeasureInfo:
    """
    Look up a registered risk measure by name.

    Raises:
        UnknownRiskMeasureError: If the name is not registered
    """
    key = name.strip().lower()
    if key not in RISK_MEASURES:
        raise UnknownRiskMeasureError(
            f"Unknown risk measure '{name}'. Available: {', '.join(sorted(RISK_MEASURES))}"
        )
    return RISK_MEASURES[key]


def find_measure_info(func: Callable) -> Optional[MeasureInfo]:
    """Registry entry for a measure function, or None if it is not registered."""
    for info in RISK_MEASURES.values():
        if info.func is func:
            return info
    return None


def list_risk_measures() -> List[str]:
    """Names of all registered risk measures"""
    return sorted(RISK_MEASURES)


__all__ = [
    'MeasureInfo', 'RISK_MEASURES', 'get_risk_measure', 'find_measure_info', 'list_risk_measures',
    'standard_deviation', 'mean_absolute_deviation', 'gini_mean_difference',
    'range_of_returns', 'sqrt_kurtosis',
    'semi_std_deviation', 'sqrt_semi_kurtosis', 'first_lower_partial_moment',
    'second_lower_partial_moment', 'worst_case_realization',
    'value_at_risk', 'cvar', 'cvar_range', 'tail_gini', 'tail_gini_range',
    'entropic_value_at_risk',
    'drawdown_series', 'maximum_drawdown', 'average_drawdown', 'cdrawdown_at_risk',
    'entropic_drawdown_at_risk', 'ulcer_index', 'calmar_ratio',
]
