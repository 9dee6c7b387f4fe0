"""
Input validation for returns matrices and weight vectors
"""

from typing import List, Tuple, Union

import numpy as np
import pandas as pd

from .errors import DegenerateInputError


ReturnsLike = Union[pd.DataFrame, np.ndarray, list]

WEIGHT_TOLERANCE = 1e-6


def as_returns_matrix(returns: ReturnsLike) -> Tuple[np.ndarray, List[str]]:
    """
    Validate a returns matrix and convert it to a float array.

    Args:
        returns: T x N returns (rows=periods, cols=assets). DataFrames keep
                 their column labels; a 1-D input is a single asset.

    Returns:
        Tuple of (returns array of shape (T, N), asset names)

    Raises:
        DegenerateInputError: If the matrix is empty, has fewer than two
                              periods, or contains non-finite values
    """
    try:
        if isinstance(returns, pd.DataFrame):
            asset_names = [str(c) for c in returns.columns]
            values = returns.to_numpy(dtype=float)
        elif isinstance(returns, pd.Series):
            asset_names = [str(returns.name) if returns.name is not None else "Asset_0"]
            values = returns.to_numpy(dtype=float).reshape(-1, 1)
        else:
            asset_names = None
            values = np.asarray(returns, dtype=float)
    except (TypeError, ValueError) as e:
        raise DegenerateInputError(f"Returns must be numeric: {e}") from e

    if values.ndim == 1:
        values = values.reshape(-1, 1)

    if values.ndim != 2:
        raise DegenerateInputError(f"Returns must be 2-dimensional, got shape {values.shape}")

    n_periods, n_assets = values.shape
    if n_assets < 1 or n_periods == 0:
        raise DegenerateInputError("Returns matrix cannot be empty")
    if n_periods < 2:
        raise DegenerateInputError(f"At least 2 periods are required, got {n_periods}")
    if not np.all(np.isfinite(values)):
        raise DegenerateInputError("Returns contain NaN or infinite values")

    if asset_names is None:
        asset_names = [f"Asset_{i}" for i in range(n_assets)]

    return values, asset_names


def as_weight_vector(weights, n_assets: int, tol: float = WEIGHT_TOLERANCE) -> np.ndarray:
    """
    Validate a weight vector against the simplex constraint.

    Raises:
        DegenerateInputError: If the length, sign or sum is wrong
    """
    w = np.asarray(weights, dtype=float).reshape(-1)
    if w.shape[0] != n_assets:
        raise DegenerateInputError(f"Expected {n_assets} weights, got {w.shape[0]}")
    if not np.all(np.isfinite(w)):
        raise DegenerateInputError("Weights contain NaN or infinite values")
    if np.any(w < -tol):
        raise DegenerateInputError("Weights must be non-negative")
    if abs(w.sum() - 1.0) > tol:
        raise DegenerateInputError(f"Weights must sum to 1 (sum={w.sum():.8f})")
    return w


def frozen_weights(weights: np.ndarray) -> np.ndarray:
    """Return a read-only copy of a weight vector."""
    w = np.array(weights, dtype=float, copy=True)
    w.setflags(write=False)
    return w


def validate_count(value: int, name: str, minimum: int = 1) -> int:
    """Validate an integer size parameter (sample count, periods, ...)."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise DegenerateInputError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise DegenerateInputError(f"{name} must be >= {minimum}, got {value}")
    return int(value)
