"""
Fitness of a chromosome: |corr(aggregate statistic, reference)| minus an optional penalty.
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Union

import numpy as np

from ..aggregate import Aggregation, aggregate_correlation, resolve_aggregation
from ..distance import nearest
from .population import canonical_order, decode_chromosome

Penalty = Callable[[np.ndarray, np.ndarray], float]


def assign(chromosome: np.ndarray, dataset: np.ndarray, k: int, method: str = "pearson") -> np.ndarray:
    """
    1-based nearest-centroid labels of every dataset row for this chromosome.

    Clusters are numbered in canonical centroid order (ascending coordinate sum), so a
    per-cluster reference entry j always belongs to label j + 1 whatever the gene order.
    """
    centroids = decode_chromosome(chromosome, k, dataset.shape[1])
    return nearest(dataset, centroids[canonical_order(centroids)], method)


def _penalty_value(penalty: Penalty, chromosome: np.ndarray, labels: np.ndarray) -> float:
    value = float(penalty(chromosome, labels))
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"penalty_function must return a finite value >= 0, got {value!r}")
    return value


def fitness(
    chromosome: np.ndarray,
    dataset: np.ndarray,
    reference: np.ndarray,
    k: int,
    method: str = "pearson",
    penalty: Optional[Penalty] = None,
    aggregation: Union[str, Aggregation] = "mean",
    correlation: str = "pearson",
) -> float:
    """
    Score one chromosome.

    Rows are assigned to the nearest decoded centroid, the aggregation is taken per
    populated cluster and broadcast to its members, and the absolute correlation with
    the reference is returned, less penalty(chromosome, labels) when a penalty is given.
    Empty clusters are skipped; an assignment that leaves the correlation undefined
    scores 0.
    """
    labels = assign(chromosome, dataset, k, method)
    _, corr = aggregate_correlation(
        dataset, labels, reference, k, resolve_aggregation(aggregation), correlation,
    )
    if penalty is None:
        return corr
    return corr - _penalty_value(penalty, chromosome, labels)
