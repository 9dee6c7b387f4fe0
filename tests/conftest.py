"""
Pytest configuration and fixtures for RiskLib tests
"""

import pytest
import pandas as pd
import numpy as np
from pathlib import Path
import sys

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def quiet_logging():
    """Reset the structured logger to the silent testing preset around every test"""
    from risklib.utils.logging_config import setup_logging

    setup_logging(console_enabled=False, environment="testing")
    yield
    setup_logging(console_enabled=False, environment="testing")


@pytest.fixture
def small_returns():
    """
    Four periods of three assets.

    The long-only minimum variance portfolio is exactly (0.2, 0.5, 0.3) and
    asset 0 has the highest mean return (0.015 vs 0.01).
    """
    return np.array([
        [0.02, 0.01, 0.00],
        [0.01, 0.02, 0.01],
        [0.03, 0.00, 0.02],
        [0.00, 0.01, 0.01],
    ])


@pytest.fixture
def sample_returns():
    """Correlated synthetic returns for four named assets"""
    rng = np.random.default_rng(7)
    means = np.array([0.0004, 0.0006, 0.0003, 0.0008])
    vols = np.array([0.010, 0.015, 0.008, 0.020])
    corr = np.full((4, 4), 0.3)
    np.fill_diagonal(corr, 1.0)
    cov = corr * np.outer(vols, vols)

    data = rng.multivariate_normal(means, cov, size=250)
    return pd.DataFrame(data, columns=['AAA', 'BBB', 'CCC', 'DDD'])


@pytest.fixture
def positive_mean_returns():
    """Returns whose asset means are all clearly positive (log mean-risk mode)"""
    rng = np.random.default_rng(11)
    return rng.normal(loc=[0.010, 0.020, 0.015], scale=0.004, size=(120, 3))


@pytest.fixture
def constant_returns():
    """Every period identical, so any portfolio has zero dispersion"""
    return np.tile([0.01, 0.02, 0.03], (6, 1))


@pytest.fixture
def equal_weights():
    """Equal weights for the three-asset fixtures"""
    return np.ones(3) / 3


@pytest.fixture
def assert_on_simplex():
    """Assertion helper: weight vector is long-only and fully invested"""
    def check(weights, tol=1e-8):
        weights = np.asarray(weights)
        assert np.all(weights >= -tol), f"Negative weights: {weights}"
        assert abs(weights.sum() - 1.0) < tol * 10, f"Weights sum to {weights.sum()}"
    return check
