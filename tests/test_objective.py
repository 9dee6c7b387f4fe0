"""
Unit tests for objective composition, core types and the error hierarchy
"""

import pytest
import numpy as np
import pandas as pd
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from risklib.core.errors import (
    ConflictingParametersError,
    DegenerateInputError,
    DegenerateRatioError,
    InvalidObjectiveError,
    MissingParameterError,
    RiskLibError,
    RiskMeasureError,
    SolverConvergenceError,
)
from risklib.core.objective import ObjectiveFunction, compose_objective
from risklib.core.types import (
    Backend,
    ObjectiveKind,
    OptimizationMode,
    OptimizationResult,
    ParamKind,
    RiskParam,
    coerce_backend,
    coerce_mode,
    coerce_objective,
    resolve_risk_param,
)
from risklib.measures import cvar, first_lower_partial_moment, standard_deviation


class RecordingMeasure:
    """Risk measure that records the extra arguments it receives"""

    def __init__(self, value=0.5):
        self.value = value
        self.calls = []

    def __call__(self, returns, *args):
        self.calls.append(args)
        return self.value


class TestObjectiveKinds:
    """Tests for the four objective kinds"""

    def test_minimize_is_exactly_the_risk(self, small_returns):
        w = np.array([0.2, 0.5, 0.3])
        value = compose_objective(w, small_returns, standard_deviation, ObjectiveKind.MINIMIZE)
        assert value == standard_deviation(small_returns @ w)

    def test_maximize_is_expected_return(self, small_returns):
        w = np.array([1.0, 0.0, 0.0])
        assert compose_objective(w, small_returns, standard_deviation, "maximize") == pytest.approx(0.015)

    def test_expected_return_matches_mean_of_portfolio_returns(self, small_returns, equal_weights):
        value = compose_objective(equal_weights, small_returns, standard_deviation, "maximize")
        assert value == pytest.approx(np.mean(small_returns @ equal_weights))

    def test_utility(self, small_returns, equal_weights):
        risk = standard_deviation(small_returns @ equal_weights)
        ret = np.mean(small_returns @ equal_weights)
        value = compose_objective(equal_weights, small_returns, standard_deviation, "utility", lam=2.0)
        assert value == pytest.approx(ret - 2.0 * risk)

    def test_utility_with_zero_lambda_is_return(self, small_returns, equal_weights):
        value = compose_objective(equal_weights, small_returns, standard_deviation, "utility", lam=0.0)
        assert value == pytest.approx(np.mean(small_returns @ equal_weights))

    def test_ratio(self, small_returns, equal_weights):
        risk = standard_deviation(small_returns @ equal_weights)
        ret = np.mean(small_returns @ equal_weights)
        value = compose_objective(equal_weights, small_returns, standard_deviation, "ratio")
        assert value == pytest.approx(ret / risk)

    def test_objective_names_are_case_insensitive(self, small_returns, equal_weights):
        a = compose_objective(equal_weights, small_returns, standard_deviation, "MINIMIZE")
        b = compose_objective(equal_weights, small_returns, standard_deviation, ObjectiveKind.MINIMIZE)
        assert a == b

    def test_dataframe_input(self, sample_returns):
        w = np.full(4, 0.25)
        value = compose_objective(w, sample_returns, standard_deviation, "minimize")
        assert value == pytest.approx(standard_deviation(sample_returns.to_numpy() @ w))


class TestRiskParameter:
    """Tests for alpha/target dispatch to the risk measure"""

    def test_alpha_is_passed_positionally(self, small_returns, equal_weights):
        measure = RecordingMeasure()
        compose_objective(equal_weights, small_returns, measure, "minimize", alpha=0.05)
        assert measure.calls == [(0.05,)]

    def test_target_is_passed_positionally(self, small_returns, equal_weights):
        measure = RecordingMeasure()
        compose_objective(equal_weights, small_returns, measure, "minimize", target=0.01)
        assert measure.calls == [(0.01,)]

    def test_no_parameter(self, small_returns, equal_weights):
        measure = RecordingMeasure()
        compose_objective(equal_weights, small_returns, measure, "minimize")
        assert measure.calls == [()]

    def test_alpha_reaches_cvar(self, sample_returns):
        w = np.full(4, 0.25)
        value = compose_objective(w, sample_returns, cvar, "minimize", alpha=0.1)
        assert value == pytest.approx(cvar(sample_returns.to_numpy() @ w, 0.1))

    def test_target_reaches_partial_moment(self, small_returns, equal_weights):
        value = compose_objective(equal_weights, small_returns, first_lower_partial_moment,
                                  "minimize", target=0.02)
        assert value == pytest.approx(first_lower_partial_moment(small_returns @ equal_weights, 0.02))


class TestObjectiveErrors:
    """Tests for argument validation and degenerate cases"""

    def test_unknown_objective(self, small_returns, equal_weights):
        with pytest.raises(InvalidObjectiveError):
            compose_objective(equal_weights, small_returns, standard_deviation, "maximise_sharpe")

    def test_non_string_objective(self, small_returns, equal_weights):
        with pytest.raises(InvalidObjectiveError):
            compose_objective(equal_weights, small_returns, standard_deviation, 3)

    def test_utility_requires_lambda(self, small_returns, equal_weights):
        with pytest.raises(MissingParameterError) as exc_info:
            compose_objective(equal_weights, small_returns, standard_deviation, "utility")
        assert exc_info.value.parameter == "lam"

    def test_conflicting_parameters(self, small_returns, equal_weights):
        with pytest.raises(ConflictingParametersError):
            compose_objective(equal_weights, small_returns, cvar, "minimize", alpha=0.05, target=0.0)

    def test_ratio_with_zero_risk(self, constant_returns, equal_weights):
        with pytest.raises(DegenerateRatioError):
            compose_objective(equal_weights, constant_returns, standard_deviation, "ratio")

    def test_zero_risk_is_fine_for_other_objectives(self, constant_returns, equal_weights):
        value = compose_objective(equal_weights, constant_returns, standard_deviation, "minimize")
        assert value == pytest.approx(0.0, abs=1e-12)

    def test_nan_risk_fails_fast(self, small_returns, equal_weights):
        with pytest.raises(RiskMeasureError):
            compose_objective(equal_weights, small_returns, lambda r: float("nan"), "minimize")

    def test_wrong_weight_length(self, small_returns):
        with pytest.raises(DegenerateInputError):
            compose_objective([0.5, 0.5], small_returns, standard_deviation, "minimize")

    def test_single_period_rejected(self):
        with pytest.raises(DegenerateInputError):
            compose_objective([1.0], np.array([[0.01]]), standard_deviation, "minimize")

    def test_non_finite_returns_rejected(self, small_returns, equal_weights):
        bad = small_returns.copy()
        bad[1, 1] = np.nan
        with pytest.raises(DegenerateInputError):
            compose_objective(equal_weights, bad, standard_deviation, "minimize")

    def test_non_numeric_dataframe_rejected(self, equal_weights):
        frame = pd.DataFrame({"AAA": [0.01, 0.02], "BBB": ["x", "y"], "CCC": [0.0, 0.01]})
        with pytest.raises(DegenerateInputError, match="numeric"):
            compose_objective(equal_weights, frame, standard_deviation, "minimize")

    def test_non_callable_measure(self, small_returns, equal_weights):
        with pytest.raises(TypeError):
            compose_objective(equal_weights, small_returns, "standard_deviation", "minimize")


class TestModes:
    """Tests for the log mean-risk and risk parity formulations"""

    def test_log_mean_risk_return_term(self, positive_mean_returns):
        w = np.array([0.2, 0.3, 0.5])
        means = positive_mean_returns.mean(axis=0)
        value = compose_objective(w, positive_mean_returns, standard_deviation, "maximize",
                                  mode=OptimizationMode.LOG_MEAN_RISK)
        assert value == pytest.approx(np.dot(w, np.log(means)))

    def test_log_mean_risk_requires_positive_means(self):
        returns = np.array([[0.01, -0.02], [0.02, -0.01], [0.0, -0.03]])
        with pytest.raises(DegenerateInputError):
            ObjectiveFunction(returns, standard_deviation, "maximize", mode="log_mean_risk")

    def test_risk_parity_risk_term(self, small_returns):
        w = np.array([0.2, 0.5, 0.3])
        asset_risks = np.array([standard_deviation(small_returns[:, i]) for i in range(3)])
        value = compose_objective(w, small_returns, standard_deviation, "minimize",
                                  mode="risk_parity", risk_level=0.001)
        assert value == pytest.approx(np.sum((w * asset_risks - 0.001) ** 2))

    def test_risk_parity_precomputes_asset_risks(self, small_returns):
        measure = RecordingMeasure(value=0.1)
        func = ObjectiveFunction(small_returns, measure, "minimize", mode=OptimizationMode.RISK_PARITY)
        assert len(measure.calls) == 3
        func(np.array([0.2, 0.5, 0.3]))
        func(np.array([0.4, 0.4, 0.2]))
        assert len(measure.calls) == 3

    def test_unknown_mode(self, small_returns):
        with pytest.raises(InvalidObjectiveError):
            ObjectiveFunction(small_returns, standard_deviation, "minimize", mode="kelly")

    def test_describe_mentions_parameters(self, small_returns):
        func = ObjectiveFunction(small_returns, cvar, "utility", lam=2.5, alpha=0.05)
        text = func.describe()
        assert "utility" in text
        assert "alpha=0.05" in text
        assert "lam=2.5" in text


class TestCoreTypes:
    """Tests for enums, RiskParam and OptimizationResult"""

    def test_comparison_direction(self):
        assert ObjectiveKind.MINIMIZE.improves(1.0, 2.0)
        assert not ObjectiveKind.MINIMIZE.improves(2.0, 2.0)
        assert ObjectiveKind.RATIO.improves(2.0, 1.0)
        assert not ObjectiveKind.UTILITY.improves(1.0, 1.0)

    def test_worst_values(self):
        assert ObjectiveKind.MINIMIZE.worst_value == float("inf")
        assert ObjectiveKind.MAXIMIZE.worst_value == float("-inf")

    def test_coercion(self):
        assert coerce_objective("Utility") is ObjectiveKind.UTILITY
        assert coerce_mode("log-mean-risk") is OptimizationMode.LOG_MEAN_RISK
        assert coerce_backend("CONVEX") is Backend.CONVEX
        with pytest.raises(InvalidObjectiveError):
            coerce_backend("gpu")

    def test_resolve_risk_param(self):
        assert resolve_risk_param().kind is ParamKind.NONE
        assert resolve_risk_param(alpha=0.1).alpha == 0.1
        assert resolve_risk_param(target=0.0).target == 0.0
        assert resolve_risk_param(target=0.0).alpha is None

    def test_zero_target_is_not_missing(self):
        # 0.0 is a valid target, not an absent one
        assert resolve_risk_param(target=0.0).kind is ParamKind.TARGET

    def test_risk_param_kwargs(self):
        assert RiskParam.with_alpha(0.05).as_kwargs() == {"alpha": 0.05}
        assert RiskParam.none().as_kwargs() == {}
        assert str(RiskParam.with_target(0.01)) == "target=0.01"

    def test_optimization_result_to_dict(self):
        result = OptimizationResult(
            weights=np.array([0.25, 0.75]),
            objective=ObjectiveKind.MINIMIZE,
            mode=OptimizationMode.MEAN_RISK,
            backend=Backend.STOCHASTIC,
            objective_value=0.01,
            asset_names=["A", "B"],
        )
        data = result.to_dict()
        assert data["weights"] == {"A": 0.25, "B": 0.75}
        assert data["backend"] == "stochastic"
        assert data["risk_param"] == "none"


class TestErrorHierarchy:
    """Tests for the exception taxonomy"""

    @pytest.mark.parametrize("error_cls", [
        InvalidObjectiveError, MissingParameterError, ConflictingParametersError,
        DegenerateInputError, RiskMeasureError,
    ])
    def test_caller_errors_are_value_errors(self, error_cls):
        assert issubclass(error_cls, RiskLibError)
        assert issubclass(error_cls, ValueError)

    def test_degenerate_ratio_is_zero_division(self):
        assert issubclass(DegenerateRatioError, ZeroDivisionError)

    def test_solver_error_is_not_a_value_error(self):
        assert issubclass(SolverConvergenceError, RuntimeError)
        assert not issubclass(SolverConvergenceError, ValueError)

    def test_solver_error_carries_details(self):
        error = SolverConvergenceError("failed", solver_message="Iteration limit reached", iterations=7)
        assert error.iterations == 7
        assert "Iteration limit" in error.solver_message
