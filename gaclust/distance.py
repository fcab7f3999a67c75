"""
Distance / correlation engine: pairwise dissimilarity between the rows of two matrices
(or of one matrix with itself), and nearest-centroid assignment.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from scipy.stats import kendalltau, rankdata
from sklearn.metrics.pairwise import euclidean_distances, manhattan_distances

from .errors import InputError

CORRELATION_METHODS = ("pearson", "spearman", "kendall")
GEOMETRIC_METHODS = ("euclidean", "manhattan")
METHODS = CORRELATION_METHODS + GEOMETRIC_METHODS


def as_matrix(data: Any, name: str = "dataset") -> np.ndarray:
    """
    Convert a tabular input to a finite 2D float matrix.

    Raises:
        InputError: If data is None, not numeric, not 2D, empty, or contains NaN/inf.
    """
    if data is None:
        raise InputError(f"'{name}' can not be None")
    try:
        X = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InputError(f"'{name}' must be a numeric table: {e}") from e
    if X.ndim != 2:
        raise InputError(f"'{name}' must be 2D (rows x features), got shape {X.shape}")
    if X.shape[0] == 0 or X.shape[1] == 0:
        raise InputError(f"'{name}' must not be empty, got shape {X.shape}")
    if not np.all(np.isfinite(X)):
        raise InputError(f"'{name}' contains NaN or infinite values")
    return X


def check_method(method: str) -> str:
    if method not in METHODS:
        raise InputError(f"method must be one of {METHODS}, got {method!r}")
    return method


def _standardize_rows(X: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Center and scale each row to unit norm; also return a mask of constant rows."""
    centered = X - X.mean(axis=1, keepdims=True)
    norms = np.linalg.norm(centered, axis=1, keepdims=True)
    constant = norms[:, 0] == 0
    norms[constant] = 1.0
    return centered / norms, constant


def _pearson(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    # Undefined correlations (a constant row on either side) are reported as 0.
    Za, const_a = _standardize_rows(A)
    Zb, const_b = _standardize_rows(B)
    r = Za @ Zb.T
    r[const_a, :] = 0.0
    r[:, const_b] = 0.0
    return r


def _kendall(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    r = np.zeros((A.shape[0], B.shape[0]))
    for i, a in enumerate(A):
        for j, b in enumerate(B):
            tau, _ = kendalltau(a, b)
            r[i, j] = 0.0 if np.isnan(tau) else tau
    return r


def row_correlation(A: np.ndarray, B: np.ndarray, method: str = "pearson") -> np.ndarray:
    """Correlation between every row of A and every row of B, shape (len(A), len(B))."""
    if method == "pearson":
        return _pearson(A, B)
    if method == "spearman":
        return _pearson(rankdata(A, axis=1), rankdata(B, axis=1))
    if method == "kendall":
        return _kendall(A, B)
    raise InputError(f"not a correlation method: {method!r}")


def dissimilarity(
    A: np.ndarray,
    B: np.ndarray,
    method: str = "pearson",
    *,
    squared: bool = False,
) -> np.ndarray:
    """
    Dissimilarity between every row of A and every row of B.

    Correlation methods give ``1 - r`` clipped to [0, 2]; geometric methods give the
    Euclidean or Manhattan distance, squared when ``squared`` is set.
    """
    if method in CORRELATION_METHODS:
        return np.clip(1.0 - row_correlation(A, B, method), 0.0, 2.0)
    if method == "euclidean":
        return euclidean_distances(A, B, squared=squared)
    if method == "manhattan":
        D = manhattan_distances(A, B)
        return D * D if squared else D
    raise InputError(f"method must be one of {METHODS}, got {method!r}")


def nearest(A: np.ndarray, centers: np.ndarray, method: str = "pearson") -> np.ndarray:
    """
    Assign each row of A to its nearest row of centers.

    Returns:
        np.ndarray of shape (n,) dtype int with 1-based center indices (first index on ties).
    """
    D = dissimilarity(A, centers, method, squared=True)
    return np.argmin(D, axis=1).astype(np.int_) + 1


def distance(
    data: Any,
    d2: Any = None,
    method: str = "pearson",
) -> np.ndarray:
    """
    Pairwise dissimilarity of a dataset, or nearest-row assignment against a second dataset.

    Args:
        data: Matrix of shape (n1, d).
        d2: Optional matrix of shape (n2, d), e.g. cluster centroids.
        method: One of "pearson", "spearman", "kendall" (dissimilarity = 1 - correlation)
            or "euclidean", "manhattan".

    Returns:
        If d2 is given: np.ndarray of shape (n1,) with, for each row of data, the 1-based
        index of the closest row of d2 (distances squared for geometric methods).
        Otherwise: symmetric np.ndarray of shape (n1, n1) with a zero diagonal.

    Raises:
        InputError: If data (or d2) is not a proper numeric table, the column counts
            differ, or method is unknown.
    """
    A = as_matrix(data, "dataset")
    check_method(method)

    if d2 is not None:
        B = as_matrix(d2, "d2")
        if B.shape[1] != A.shape[1]:
            raise InputError(
                f"'d2' has {B.shape[1]} columns but 'dataset' has {A.shape[1]}"
            )
        return nearest(A, B, method)

    D = dissimilarity(A, A, method)
    D = (D + D.T) / 2.0
    np.fill_diagonal(D, 0.0)
    return D
