"""
Per-cluster aggregate statistic and its correlation with the reference vector.

An aggregation maps the block of member rows of one cluster, shape (m, d), to one float.
"""

from __future__ import annotations

import logging
from typing import Callable, Union

import numpy as np
from scipy.stats import kendalltau, spearmanr

from .errors import InputError

LOG = logging.getLogger(__name__)

Aggregation = Callable[[np.ndarray], float]


def _mean(block: np.ndarray) -> float:
    return float(np.mean(block))


def _median(block: np.ndarray) -> float:
    return float(np.median(block))


AGGREGATIONS: dict[str, Aggregation] = {
    "mean": _mean,
    "median": _median,
}

CORRELATIONS = ("pearson", "spearman", "kendall")


def resolve_aggregation(aggregation: Union[str, Aggregation]) -> Aggregation:
    if callable(aggregation):
        return aggregation
    try:
        return AGGREGATIONS[aggregation]
    except (KeyError, TypeError):
        raise InputError(
            f"aggregation must be a callable or one of {sorted(AGGREGATIONS)}, got {aggregation!r}"
        ) from None


def cluster_values(
    dataset: np.ndarray,
    labels: np.ndarray,
    k: int,
    aggregation: Aggregation,
) -> np.ndarray:
    """
    Aggregate value per cluster id 1..k.

    Returns:
        np.ndarray of shape (k,); NaN for clusters without members.
    """
    values = np.full(k, np.nan)
    for c in np.unique(labels):
        values[c - 1] = aggregation(dataset[labels == c])
    return values


def correlate(x: np.ndarray, y: np.ndarray, method: str = "pearson") -> float:
    """
    Absolute correlation between x and y.

    Returns 0.0 when it is undefined: fewer than two points or a constant side.
    """
    if len(x) < 2 or np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0
    if method == "pearson":
        r = np.corrcoef(x, y)[0, 1]
    elif method == "spearman":
        r, _ = spearmanr(x, y)
    elif method == "kendall":
        r, _ = kendalltau(x, y)
    else:
        raise InputError(f"correlation method must be one of {CORRELATIONS}, got {method!r}")
    if np.isnan(r):
        return 0.0
    return float(abs(r))


def aggregate_correlation(
    dataset: np.ndarray,
    labels: np.ndarray,
    reference: np.ndarray,
    k: int,
    aggregation: Aggregation,
    method: str = "pearson",
) -> tuple[np.ndarray, float]:
    """
    Build the per-observation aggregate vector and score it against the reference.

    The reference is read per observation when its length is n, per cluster when its
    length is k (only populated clusters are paired then).

    Returns:
        (aggregate, correlation) where aggregate has shape (n,) in dataset row order.
    """
    values = cluster_values(dataset, labels, k, aggregation)
    aggregate = values[labels - 1]
    populated = ~np.isnan(values)
    if not populated.all():
        LOG.debug("Empty clusters %s skipped", (np.flatnonzero(~populated) + 1).tolist())

    if len(reference) == len(labels):
        return aggregate, correlate(aggregate, reference, method)
    return aggregate, correlate(values[populated], reference[populated], method)
