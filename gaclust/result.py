"""
Result record of a clustering run: decoding the best chromosome into canonically
ordered centroids and labels, plus a text formatter and a JSON-ready view.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from .aggregate import aggregate_correlation, resolve_aggregation
from .evolution.config import ClusterConfig, describe_callable
from .evolution.fitness import assign
from .evolution.population import canonical_order, decode_chromosome


@dataclass(frozen=True)
class RunMetadata:
    """The configuration a run actually used, plus how far it got."""
    k: int
    n_rows: int
    n_features: int
    crossover_rate: float
    mutation_rate: float
    elitism_fraction: float
    population_size: int
    generations: int
    seed: int
    distance_method: str
    correlation_method: str
    aggregation: Optional[str]
    penalty_function: Optional[str]
    blend_alpha: float
    mutation_shrink: float
    n_jobs: int
    timeout_s: Optional[float]
    generations_completed: int
    cancelled: bool

    @classmethod
    def from_config(
        cls,
        cfg: ClusterConfig,
        n_rows: int,
        n_features: int,
        generations_completed: int,
        cancelled: bool = False,
    ) -> "RunMetadata":
        return cls(
            k=cfg.k,
            n_rows=n_rows,
            n_features=n_features,
            crossover_rate=cfg.crossover_rate,
            mutation_rate=cfg.mutation_rate,
            elitism_fraction=cfg.elitism_fraction,
            population_size=cfg.population_size,
            generations=cfg.generations,
            seed=cfg.seed,
            distance_method=cfg.distance_method,
            correlation_method=cfg.correlation_method,
            aggregation=describe_callable(cfg.aggregation),
            penalty_function=describe_callable(cfg.penalty_function),
            blend_alpha=cfg.blend_alpha,
            mutation_shrink=cfg.mutation_shrink,
            n_jobs=cfg.n_jobs,
            timeout_s=cfg.timeout_s,
            generations_completed=generations_completed,
            cancelled=cancelled,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True, eq=False)
class ClusterResult:
    """Read-only snapshot of a finished run. Arrays are flagged non-writeable."""
    original_data: np.ndarray
    centers: np.ndarray
    cluster: np.ndarray
    correlation: float
    aggregate: np.ndarray
    feature_names: Tuple[str, ...]
    metadata: RunMetadata
    best_fitness: float
    history: Tuple[Mapping[str, float], ...] = ()


def _frozen(a: np.ndarray) -> np.ndarray:
    out = np.array(a, copy=True)
    out.setflags(write=False)
    return out


def extract_result(
    dataset: np.ndarray,
    reference: np.ndarray,
    chromosome: np.ndarray,
    cfg: ClusterConfig,
    *,
    best_fitness: float,
    feature_names: Sequence[str],
    generations_completed: int,
    cancelled: bool = False,
    history: Sequence[Mapping[str, Any]] = (),
) -> ClusterResult:
    """
    Build the result record for the best chromosome.

    Centroids are sorted by ascending coordinate sum, so label 1 is always the centroid
    with the smallest sum. Labels, aggregate and correlation (without penalty) are then
    recomputed over the full dataset exactly as the fitness does; with a per-cluster
    reference, entry j is paired with label j + 1.

    The final assignment uses the run's ``distance_method`` rather than always pearson,
    so the reported partition is the one the fitness optimised.
    """
    n, d = dataset.shape
    centroids = decode_chromosome(chromosome, cfg.k, d)
    labels = assign(chromosome, dataset, cfg.k, cfg.distance_method)
    aggregate, corr = aggregate_correlation(
        dataset, labels, reference, cfg.k,
        resolve_aggregation(cfg.aggregation), cfg.correlation_method,
    )

    return ClusterResult(
        original_data=_frozen(dataset),
        centers=_frozen(centroids[canonical_order(centroids)]),
        cluster=_frozen(labels),
        correlation=corr,
        aggregate=_frozen(aggregate),
        feature_names=tuple(str(f) for f in feature_names),
        metadata=RunMetadata.from_config(cfg, n, d, generations_completed, cancelled),
        best_fitness=float(best_fitness),
        history=tuple(
            MappingProxyType({key: _plain(v) for key, v in row.items()}) for row in history
        ),
    )


def _plain(v: Any) -> Any:
    if isinstance(v, np.generic):
        return v.item()
    return v


def result_to_dict(result: ClusterResult) -> Dict[str, Any]:
    """JSON-ready mapping of a result record."""
    return {
        "feature_names": list(result.feature_names),
        "centers": result.centers.tolist(),
        "cluster": result.cluster.tolist(),
        "correlation": result.correlation,
        "aggregate": result.aggregate.tolist(),
        "best_fitness": result.best_fitness,
        "metadata": result.metadata.to_dict(),
        "history": [dict(row) for row in result.history],
    }


def _table(rows: np.ndarray, header: Sequence[str], index: Sequence[str]) -> str:
    cells = [[f"{v:.6g}" for v in row] for row in rows]
    widths = [
        max([len(h)] + [len(r[j]) for r in cells]) for j, h in enumerate(header)
    ]
    iw = max([0] + [len(i) for i in index])
    lines = [" " * iw + "  " + "  ".join(h.rjust(w) for h, w in zip(header, widths))]
    for name, r in zip(index, cells):
        lines.append(name.ljust(iw) + "  " + "  ".join(c.rjust(w) for c, w in zip(r, widths)))
    return "\n".join(lines)


def format_result(result: ClusterResult, max_rows: int = 6) -> str:
    """Text report of a result record (original data head, centers, partitions, statistic)."""
    names = list(result.feature_names)
    head = result.original_data[:max_rows]
    meta = result.metadata.to_dict()
    parts = [
        "Description of GA clustering result:",
        "",
        "Original data (first rows):",
        _table(head, names, [str(i + 1) for i in range(len(head))]),
        "",
        "Cluster centers:",
        _table(result.centers, names, [str(i + 1) for i in range(len(result.centers))]),
        "",
        "Cluster partitions:",
        " ".join(str(c) for c in result.cluster),
        "",
        "Aggregate statistic:",
        " ".join(f"{v:.6g}" for v in result.aggregate),
        "",
        "Correlation:",
        f"{result.correlation:.6f}",
        "",
        "Call:",
    ]
    parts.extend(f"  {key} = {value!r}" for key, value in meta.items())
    return "\n".join(parts)
