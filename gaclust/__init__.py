"""
gaclust: genetic-algorithm clustering guided by correlation with an external reference vector.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

import numpy as np

from .distance import as_matrix, distance
from .errors import InputError
from .evolution.config import ClusterConfig, validate_config
from .evolution.ga_driver import run_ga
from .result import ClusterResult, RunMetadata, extract_result, format_result, result_to_dict

__all__ = [
    "cluster",
    "distance",
    "format_result",
    "result_to_dict",
    "ClusterConfig",
    "ClusterResult",
    "RunMetadata",
    "InputError",
]

LOG = logging.getLogger(__name__)


def _feature_names(dataset: Any, d: int) -> list[str]:
    columns = getattr(dataset, "columns", None)
    if columns is not None and len(columns) == d:
        return [str(c) for c in columns]
    return [f"V{j + 1}" for j in range(d)]


def _as_reference(reference: Any, n: int, k: int) -> np.ndarray:
    if reference is None:
        raise InputError("'reference' can not be None")
    try:
        ref = np.asarray(reference, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as e:
        raise InputError(f"'reference' must be a numeric vector: {e}") from e
    if len(ref) not in (n, k):
        raise InputError(
            f"'reference' must have one value per row ({n}) or per cluster ({k}), got {len(ref)}"
        )
    if not np.all(np.isfinite(ref)):
        raise InputError("'reference' contains NaN or infinite values")
    return ref


def cluster(
    dataset: Any,
    k: Optional[int] = None,
    reference: Any = None,
    config: Optional[ClusterConfig] = None,
    *,
    feature_names: Optional[Sequence[str]] = None,
    cancel: Optional[Callable[[], bool]] = None,
    **overrides: Any,
) -> ClusterResult:
    """
    Cluster the rows of dataset into k groups whose aggregate statistic best correlates
    with reference.

    Args:
        dataset: (n, d) numeric table, rows = observations.
        k: Number of clusters (integer >= 2). Overrides config.k when given.
        reference: Known per-row (length n) or per-cluster (length k) vector.
        config: Run options; defaults to ClusterConfig().
        feature_names: Column names for the report; taken from dataset.columns if present.
        cancel: Optional zero-argument callable polled between generations.
        **overrides: Individual ClusterConfig fields, e.g. generations=50.

    Returns:
        ClusterResult with centroids in canonical order and labels in 1..k.

    Raises:
        InputError: If the dataset, k, reference, or any option is invalid. Nothing is
            initialised before all inputs are checked.

    Example:
        >>> result = cluster(X, k=2, reference=known_lfc, seed=42, population_size=len(X))
        >>> print(format_result(result))
    """
    X = as_matrix(dataset, "dataset")
    cfg = config or ClusterConfig()
    if k is not None:
        overrides["k"] = k
    if overrides:
        cfg = cfg.replace(**overrides)
    cfg = validate_config(cfg, n_rows=X.shape[0])
    ref = _as_reference(reference, X.shape[0], cfg.k)

    names = list(feature_names) if feature_names is not None else _feature_names(dataset, X.shape[1])
    if len(names) != X.shape[1]:
        raise InputError(f"'feature_names' has {len(names)} entries for {X.shape[1]} columns")

    LOG.info(
        "Clustering %d rows x %d features into k=%d (pop=%d, generations=%d, seed=%d)",
        X.shape[0], X.shape[1], cfg.k, cfg.population_size, cfg.generations, cfg.seed,
    )
    run = run_ga(X, ref, cfg, cancel=cancel)

    return extract_result(
        X, ref, run.best_chromosome, cfg,
        best_fitness=run.best_fitness,
        feature_names=names,
        generations_completed=run.generations_completed,
        cancelled=run.cancelled,
        history=list(run.logbook),
    )
