"""
Synthetic return data for examples, the CLI and tests
"""

from typing import List, Optional

import numpy as np
import pandas as pd


def create_sample_returns(
    n_periods: int = 252,
    n_assets: int = 4,
    seed: Optional[int] = 42,
    asset_names: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Correlated Gaussian daily returns.

    Each asset gets a mean between 0.02% and 0.08% per period and a
    volatility between 0.8% and 2.0%; pairwise correlations are drawn from
    a random factor model so the covariance is positive definite.

    Args:
        n_periods: Number of rows (periods)
        n_assets: Number of columns (assets)
        seed: Random seed
        asset_names: Column labels (default Asset_<i>)

    Returns:
        DataFrame of shape (n_periods, n_assets)
    """
    if n_periods < 2 or n_assets < 1:
        raise ValueError("Need at least 2 periods and 1 asset")
    if asset_names is None:
        asset_names = [f"Asset_{i}" for i in range(n_assets)]
    if len(asset_names) != n_assets:
        raise ValueError("asset_names must have one label per asset")

    rng = np.random.default_rng(seed)
    means = rng.uniform(0.0002, 0.0008, n_assets)
    vols = rng.uniform(0.008, 0.020, n_assets)

    # One market factor plus idiosyncratic noise
    loadings = rng.uniform(0.3, 0.8, n_assets)
    corr = np.outer(loadings, loadings)
    np.fill_diagonal(corr, 1.0)
    cov = corr * np.outer(vols, vols)

    values = rng.multivariate_normal(means, cov, size=n_periods)
    index = pd.RangeIndex(n_periods, name="period")
    return pd.DataFrame(values, columns=asset_names, index=index)
