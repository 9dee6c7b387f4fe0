"""
Unit tests for risk measures and the measure registry
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from risklib.core.errors import UnknownRiskMeasureError
from risklib.core.types import ParamKind
from risklib.measures import (
    RISK_MEASURES,
    average_drawdown,
    calmar_ratio,
    cdrawdown_at_risk,
    cvar,
    cvar_range,
    drawdown_series,
    entropic_drawdown_at_risk,
    entropic_value_at_risk,
    find_measure_info,
    first_lower_partial_moment,
    get_risk_measure,
    gini_mean_difference,
    list_risk_measures,
    maximum_drawdown,
    mean_absolute_deviation,
    range_of_returns,
    second_lower_partial_moment,
    semi_std_deviation,
    sqrt_kurtosis,
    sqrt_semi_kurtosis,
    standard_deviation,
    tail_gini,
    tail_gini_range,
    ulcer_index,
    value_at_risk,
    worst_case_realization,
)


SERIES = np.array([0.01, -0.02, 0.03, -0.01, 0.02])


@pytest.fixture
def normal_series():
    """1000 draws from N(0.0005, 0.01)"""
    return np.random.default_rng(3).normal(0.0005, 0.01, 1000)


class TestDispersion:
    """Tests for symmetric dispersion measures"""

    def test_standard_deviation_uses_sample_estimator(self):
        assert standard_deviation([1.0, 2.0, 3.0, 4.0]) == pytest.approx(np.std([1, 2, 3, 4], ddof=1))

    def test_standard_deviation_single_value_is_nan(self):
        assert np.isnan(standard_deviation([0.01]))

    def test_mean_absolute_deviation(self):
        assert mean_absolute_deviation(SERIES) == pytest.approx(0.0168)

    def test_gini_mean_difference_matches_pairwise_definition(self):
        r = np.array([0.03, -0.01, 0.02, 0.00])
        pairwise = np.abs(r[:, None] - r[None, :]).sum() / len(r) ** 2
        assert gini_mean_difference(r) == pytest.approx(pairwise)

    def test_range_of_returns(self):
        assert range_of_returns(SERIES) == pytest.approx(0.05)

    def test_sqrt_kurtosis(self):
        dev = SERIES - SERIES.mean()
        assert sqrt_kurtosis(SERIES) == pytest.approx(np.sqrt(np.mean(dev ** 4)))

    def test_constant_series_has_zero_dispersion(self):
        r = np.full(10, 0.01)
        assert standard_deviation(r) == pytest.approx(0.0, abs=1e-15)
        assert mean_absolute_deviation(r) == pytest.approx(0.0, abs=1e-15)
        assert gini_mean_difference(r) == pytest.approx(0.0, abs=1e-15)


class TestDownside:
    """Tests for downside and partial moment measures"""

    def test_semi_std_deviation(self):
        expected = np.sqrt((0.026 ** 2 + 0.016 ** 2) / 4)
        assert semi_std_deviation(SERIES) == pytest.approx(expected)

    def test_semi_std_not_above_std(self, normal_series):
        assert semi_std_deviation(normal_series) <= standard_deviation(normal_series) * 1.1

    def test_sqrt_semi_kurtosis_ignores_upside(self):
        up_only = np.array([0.0, 0.0, 0.0, 0.10])
        down_only = -up_only
        assert sqrt_semi_kurtosis(down_only) > sqrt_semi_kurtosis(up_only)

    def test_first_lower_partial_moment(self):
        assert first_lower_partial_moment(SERIES) == pytest.approx(0.006)

    def test_first_lower_partial_moment_with_target(self):
        # shortfalls below 0.01: 0, 0.03, 0, 0.02, 0
        assert first_lower_partial_moment(SERIES, 0.01) == pytest.approx(0.01)

    def test_second_lower_partial_moment(self):
        assert second_lower_partial_moment(SERIES) == pytest.approx(0.0001)

    def test_worst_case_realization(self):
        assert worst_case_realization(SERIES) == pytest.approx(0.02)


class TestTail:
    """Tests for quantile based tail measures"""

    def test_value_at_risk(self):
        r = np.arange(-10, 10) / 100.0
        assert value_at_risk(r, 0.05) == pytest.approx(0.0905)

    def test_cvar_at_least_var(self, normal_series):
        assert cvar(normal_series, 0.05) >= value_at_risk(normal_series, 0.05)

    def test_cvar_of_single_tail_point(self):
        r = np.arange(-10, 10) / 100.0
        assert cvar(r, 0.05) == pytest.approx(0.10)

    def test_evar_between_cvar_and_worst_loss(self, normal_series):
        evar = entropic_value_at_risk(normal_series, 0.05)
        assert evar >= cvar(normal_series, 0.05) - 1e-9
        assert evar <= worst_case_realization(normal_series) + 1e-12

    def test_cvar_range_is_positive(self, normal_series):
        assert cvar_range(normal_series, 0.05) > 0

    def test_tail_gini_range_contains_tail_gini(self, normal_series):
        assert tail_gini_range(normal_series, 0.1) >= tail_gini(normal_series, 0.1)

    @pytest.mark.parametrize("alpha", [0.0, 1.0, -0.1, 1.5])
    def test_invalid_alpha_rejected(self, alpha):
        with pytest.raises(ValueError):
            cvar(SERIES, alpha)


class TestDrawdown:
    """Tests for drawdown measures on uncompounded cumulative returns"""

    def test_drawdown_series(self):
        assert list(drawdown_series(SERIES)) == pytest.approx([0.0, 0.02, 0.0, 0.01, 0.0])

    def test_initial_loss_counts_as_drawdown(self):
        # cumulative returns never rise above the starting level
        assert maximum_drawdown([-0.01, -0.02]) == pytest.approx(0.03)

    def test_maximum_drawdown(self):
        assert maximum_drawdown(SERIES) == pytest.approx(0.02)

    def test_average_drawdown(self):
        assert average_drawdown(SERIES) == pytest.approx(0.006)

    def test_ulcer_index(self):
        assert ulcer_index(SERIES) == pytest.approx(0.01)

    def test_cdrawdown_at_risk(self):
        # 60% quantile of [0, 0, 0, .01, .02] is 0.004, tail mean of {.02, .01}
        assert cdrawdown_at_risk(SERIES, 0.4) == pytest.approx(0.015)

    def test_edar_at_least_cdar(self, normal_series):
        assert entropic_drawdown_at_risk(normal_series, 0.05) >= cdrawdown_at_risk(normal_series, 0.05) - 1e-9

    def test_drawdown_depends_on_order(self):
        ordered = np.array([0.02, 0.02, -0.02, -0.02])
        shuffled = np.array([0.02, -0.02, 0.02, -0.02])
        assert maximum_drawdown(ordered) > maximum_drawdown(shuffled)

    def test_calmar_ratio(self):
        assert calmar_ratio(SERIES) == pytest.approx(0.3)

    def test_calmar_ratio_without_drawdown_is_nan(self):
        assert np.isnan(calmar_ratio([0.01, 0.02, 0.01]))


class TestRegistry:
    """Tests for the risk measure registry"""

    def test_lookup_by_name(self):
        info = get_risk_measure("cvar")
        assert info.func is cvar
        assert info.parameter is ParamKind.ALPHA

    def test_lookup_is_case_insensitive(self):
        assert get_risk_measure("  Standard_Deviation ").func is standard_deviation

    def test_unknown_measure(self):
        with pytest.raises(UnknownRiskMeasureError) as exc_info:
            get_risk_measure("sharpe")
        assert "sharpe" in str(exc_info.value)

    def test_unknown_measure_is_key_error(self):
        with pytest.raises(KeyError):
            get_risk_measure("nope")

    def test_partial_moments_take_target(self):
        assert RISK_MEASURES["first_lower_partial_moment"].parameter is ParamKind.TARGET
        assert RISK_MEASURES["second_lower_partial_moment"].parameter is ParamKind.TARGET

    def test_value_at_risk_flagged_non_convex(self):
        assert RISK_MEASURES["value_at_risk"].convex is False
        assert RISK_MEASURES["cvar"].convex is True

    def test_find_measure_info(self):
        assert find_measure_info(ulcer_index).name == "ulcer_index"
        assert find_measure_info(lambda r: 0.0) is None

    def test_list_is_sorted(self):
        names = list_risk_measures()
        assert names == sorted(names)
        assert len(names) == len(RISK_MEASURES)

    def test_every_measure_returns_finite_scalar(self, normal_series):
        for info in RISK_MEASURES.values():
            if info.parameter is ParamKind.ALPHA:
                value = info.func(normal_series, 0.05)
            elif info.parameter is ParamKind.TARGET:
                value = info.func(normal_series, 0.0)
            else:
                value = info.func(normal_series)
            assert np.isfinite(value), info.name
