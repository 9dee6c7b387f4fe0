"""
Unit tests for the convex solver backend

Tests cover:
- Known optima for minimum variance, maximum return and risk parity
- Named mode functions and the Kelly criterion
- Solver failure reporting (mocked scipy results)
- Validation before the solver runs
"""

import pytest
import numpy as np
import sys
from pathlib import Path
from scipy.optimize import OptimizeResult

sys.path.insert(0, str(Path(__file__).parent.parent))

from risklib.core.errors import (
    ConflictingParametersError,
    DegenerateInputError,
    InvalidObjectiveError,
    MissingParameterError,
    SolverConvergenceError,
)
from risklib.core.objective import ObjectiveFunction
from risklib.core.types import ObjectiveKind
from risklib.measures import second_lower_partial_moment, standard_deviation
from risklib.optimizers import convex
from risklib.optimizers.convex import (
    kelly_criterion_optimization,
    logarithmic_mean_risk_optimization,
    mean_risk_optimization,
    optimize_convex,
    risk_parity_optimization,
    solve_objective,
)
from risklib.optimizers.stochastic import optimize_stochastic


def fake_minimize(x, success=True, message="Optimization terminated successfully", calls=None):
    """Build a stand-in for scipy.optimize.minimize returning a fixed result"""
    def _minimize(fun, x0, **kwargs):
        if calls is not None:
            calls.append(kwargs)
        return OptimizeResult(x=np.asarray(x, dtype=float), success=success,
                              message=message, nit=12, nfev=40, status=0 if success else 9)
    return _minimize


class TestConvexOptima:
    """Tests against optima known in closed form"""

    def test_minimum_standard_deviation(self, small_returns, assert_on_simplex):
        w = optimize_convex(small_returns, standard_deviation, "minimize")
        assert_on_simplex(w)
        assert list(w) == pytest.approx([0.2, 0.5, 0.3], abs=1e-2)

    def test_minimum_beats_equal_weights(self, small_returns, equal_weights):
        w = optimize_convex(small_returns, standard_deviation, ObjectiveKind.MINIMIZE)
        assert standard_deviation(small_returns @ w) < standard_deviation(small_returns @ equal_weights)

    def test_maximize_picks_highest_mean(self, small_returns):
        w = optimize_convex(small_returns, standard_deviation, "maximize")
        assert list(w) == pytest.approx([1.0, 0.0, 0.0], abs=1e-4)

    def test_solver_at_least_as_good_as_sampling(self, sample_returns):
        solved = optimize_convex(sample_returns, standard_deviation, "minimize")
        sampled = optimize_stochastic(sample_returns, standard_deviation, "minimize",
                                      n_samples=500, random_state=0)
        values = sample_returns.to_numpy()
        assert standard_deviation(values @ solved) <= standard_deviation(values @ sampled) + 1e-9

    def test_utility_with_target_measure(self, sample_returns, assert_on_simplex):
        w = optimize_convex(sample_returns, second_lower_partial_moment, "utility", lam=5.0, target=0.0)
        assert_on_simplex(w)

    def test_high_risk_aversion_approaches_minimum_risk(self, small_returns):
        w = optimize_convex(small_returns, standard_deviation, "utility", lam=1000.0)
        assert list(w) == pytest.approx([0.2, 0.5, 0.3], abs=2e-2)

    def test_weights_are_read_only(self, small_returns):
        w = optimize_convex(small_returns, standard_deviation, "minimize")
        assert not w.flags.writeable
        with pytest.raises(ValueError):
            w[1] = 0.0

    def test_custom_starting_point(self, small_returns):
        w = optimize_convex(small_returns, standard_deviation, "minimize", x0=[0.6, 0.2, 0.2])
        assert list(w) == pytest.approx([0.2, 0.5, 0.3], abs=1e-2)


class TestNamedModes:
    """Tests for the mode specific entry points"""

    def test_mean_risk_matches_optimize_convex(self, small_returns):
        a = mean_risk_optimization(small_returns, standard_deviation, "utility", lam=2.0)
        b = optimize_convex(small_returns, standard_deviation, "utility", lam=2.0)
        assert list(a) == pytest.approx(list(b))

    def test_risk_parity_inverse_variance(self, small_returns, assert_on_simplex):
        w = risk_parity_optimization(small_returns, standard_deviation, "minimize")
        assert_on_simplex(w)
        assert list(w) == pytest.approx([1 / 6, 5 / 12, 5 / 12], abs=1e-2)

    def test_logarithmic_mean_risk(self, positive_mean_returns):
        w = logarithmic_mean_risk_optimization(positive_mean_returns, standard_deviation, "maximize")
        assert np.argmax(w) == 1

    def test_logarithmic_requires_positive_means(self):
        returns = np.array([[0.01, -0.02], [0.03, -0.01], [0.02, -0.03]])
        with pytest.raises(DegenerateInputError):
            logarithmic_mean_risk_optimization(returns, standard_deviation, "maximize")

    def test_kelly_criterion(self, small_returns):
        w = kelly_criterion_optimization(small_returns)
        assert np.argmax(w) == 0
        assert w[0] == pytest.approx(1.0, abs=1e-4)


class TestSolverFailures:
    """Tests for solver outcomes, with scipy replaced by a stub"""

    def test_unsuccessful_solve_raises(self, small_returns, monkeypatch):
        monkeypatch.setattr(convex, "minimize",
                            fake_minimize([1 / 3] * 3, success=False, message="Iteration limit reached"))
        with pytest.raises(SolverConvergenceError) as exc_info:
            optimize_convex(small_returns, standard_deviation, "minimize")
        assert exc_info.value.solver_message == "Iteration limit reached"
        assert exc_info.value.iterations == 12

    def test_non_finite_solution_raises(self, small_returns, monkeypatch):
        monkeypatch.setattr(convex, "minimize", fake_minimize([np.nan, 0.5, 0.5]))
        with pytest.raises(SolverConvergenceError):
            optimize_convex(small_returns, standard_deviation, "minimize")

    def test_all_zero_solution_raises(self, small_returns, monkeypatch):
        monkeypatch.setattr(convex, "minimize", fake_minimize([-1e-9, 0.0, 0.0]))
        with pytest.raises(SolverConvergenceError):
            optimize_convex(small_returns, standard_deviation, "minimize")

    def test_solver_noise_is_cleaned(self, small_returns, monkeypatch, assert_on_simplex):
        monkeypatch.setattr(convex, "minimize", fake_minimize([-1e-10, 0.4, 0.6 + 2e-10]))
        w = optimize_convex(small_returns, standard_deviation, "minimize")
        assert_on_simplex(w, tol=1e-12)
        assert w[0] == 0.0

    def test_solver_receives_simplex_constraints(self, small_returns, monkeypatch):
        calls = []
        monkeypatch.setattr(convex, "minimize", fake_minimize([0.2, 0.5, 0.3], calls=calls))
        optimize_convex(small_returns, standard_deviation, "minimize", maxiter=50)

        assert len(calls) == 1
        kwargs = calls[0]
        assert kwargs["method"] == "SLSQP"
        assert kwargs["bounds"] == ((0.0, 1.0),) * 3
        assert kwargs["constraints"][0]["type"] == "eq"
        assert kwargs["constraints"][0]["fun"](np.array([0.2, 0.5, 0.3])) == pytest.approx(0.0)
        assert kwargs["options"]["maxiter"] == 50

    def test_maximizing_objectives_are_negated(self, small_returns, monkeypatch):
        seen = {}

        def capture(fun, x0, **kwargs):
            seen["value"] = fun(np.array([1.0, 0.0, 0.0]))
            return OptimizeResult(x=np.array([1.0, 0.0, 0.0]), success=True, message="ok", nit=1)

        monkeypatch.setattr(convex, "minimize", capture)
        optimize_convex(small_returns, standard_deviation, "maximize")
        assert seen["value"] == pytest.approx(-0.015)

    def test_solve_objective_returns_raw_result(self, small_returns, monkeypatch):
        monkeypatch.setattr(convex, "minimize", fake_minimize([0.2, 0.5, 0.3]))
        objective_fn = ObjectiveFunction(small_returns, standard_deviation, "minimize")
        weights, result = solve_objective(objective_fn)
        assert result.nfev == 40
        assert list(weights) == pytest.approx([0.2, 0.5, 0.3])


class TestConvexValidation:
    """Argument errors are raised before the solver is called"""

    @pytest.fixture
    def no_solver(self, monkeypatch):
        calls = []
        monkeypatch.setattr(convex, "minimize", fake_minimize([1 / 3] * 3, calls=calls))
        return calls

    def test_missing_lambda(self, small_returns, no_solver):
        with pytest.raises(MissingParameterError):
            optimize_convex(small_returns, standard_deviation, "utility")
        assert no_solver == []

    def test_invalid_objective(self, small_returns, no_solver):
        with pytest.raises(InvalidObjectiveError):
            optimize_convex(small_returns, standard_deviation, "minimise")
        assert no_solver == []

    def test_conflicting_parameters(self, small_returns, no_solver):
        with pytest.raises(ConflictingParametersError):
            optimize_convex(small_returns, second_lower_partial_moment, "minimize", alpha=0.05, target=0.0)
        assert no_solver == []

    def test_bad_starting_point(self, small_returns, no_solver):
        with pytest.raises(DegenerateInputError):
            optimize_convex(small_returns, standard_deviation, "minimize", x0=[0.5, 0.5])
        assert no_solver == []

    def test_degenerate_returns(self, no_solver):
        with pytest.raises(DegenerateInputError):
            optimize_convex(np.array([[0.01, 0.02]]), standard_deviation, "minimize")
        assert no_solver == []
