import numpy as np
import pytest


@pytest.fixture
def synthetic():
    """10 rows x 4 columns of synthetic values and a per-row reference vector."""
    rng = np.random.default_rng(7)
    X = rng.normal(size=(10, 4))
    X[:5] += np.array([0.0, 1.0, 2.0, 3.0])
    X[5:] += np.array([3.0, 2.0, 1.0, 0.0])
    reference = np.r_[np.full(5, -1.0), np.full(5, 1.0)] + rng.normal(scale=0.1, size=10)
    return X, reference


@pytest.fixture
def two_patterns():
    """Rows following an increasing or a decreasing profile, at different levels."""
    up = np.array([1.0, 2.0, 3.0, 4.0])
    down = up[::-1]
    X = np.vstack(
        [up * s for s in (1.0, 1.5, 2.0, 2.5, 3.0)]
        + [down * 2.0 + 10.0 + s for s in (0.0, 0.5, 1.0, 1.5, 2.0)]
    )
    reference = np.r_[np.zeros(5), np.ones(5)]
    centroids = np.vstack([up, down])
    return X, reference, centroids
