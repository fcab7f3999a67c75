"""ClusterConfig dataclass: all options for a GA clustering run."""

from __future__ import annotations

import inspect
import numbers
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from ..aggregate import AGGREGATIONS, CORRELATIONS
from ..distance import METHODS
from ..errors import InputError


@dataclass
class ClusterConfig:
    # --- Clustering ---
    k: int = 2
    distance_method: str = "pearson"
    correlation_method: str = "pearson"
    aggregation: Union[str, Callable[[np.ndarray], float]] = "mean"
    penalty_function: Optional[Callable[..., float]] = None

    # --- Genetic Algorithm ---
    population_size: int = 25
    generations: int = 100
    crossover_rate: float = 0.9
    mutation_rate: float = 0.01
    elitism_fraction: float = 0.05
    seed: int = 42

    # --- Operator parameters ---
    blend_alpha: float = 0.5  # BLX-alpha interval extension
    mutation_shrink: float = 5.0  # exponent b of the non-uniform mutation schedule

    # --- Execution ---
    n_jobs: int = 1
    timeout_s: Optional[float] = None

    @property
    def elitism_size(self) -> int:
        return int(np.floor(self.population_size * self.elitism_fraction))

    def replace(self, **overrides: Any) -> "ClusterConfig":
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise InputError(f"Unknown config option(s): {sorted(unknown)}")
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(overrides)
        return ClusterConfig(**values)


def _is_int(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, numbers.Integral):
        return True
    return isinstance(v, numbers.Real) and float(v).is_integer()


def _check_probability(errors: List[str], name: str, v: Any) -> None:
    if not isinstance(v, numbers.Real) or isinstance(v, bool) or not 0.0 <= v <= 1.0:
        errors.append(f"'{name}' must be a probability in [0, 1] (got {v!r})")


def _accepts_two_args(fn: Any) -> bool:
    if not callable(fn):
        return False
    try:
        inspect.signature(fn).bind(None, None)
    except TypeError:
        return False
    except ValueError:
        # no introspectable signature (some builtins)
        return True
    return True


def validate_k(k: Any) -> int:
    """Return k as int; raise InputError unless it is an integer >= 2."""
    if k is None:
        raise InputError("'k' can not be None")
    if not _is_int(k) or int(k) < 2:
        raise InputError(f"'k' must be an integer value greater than one (k > 1), got {k!r}")
    return int(k)


def validate_config(cfg: ClusterConfig, n_rows: Optional[int] = None) -> ClusterConfig:
    """
    Check every option once, before a run starts.

    Returns a copy with k normalised to int. All problems are reported together.

    Raises:
        InputError: On the first call with an invalid option set.
    """
    k = validate_k(cfg.k)
    errors: List[str] = []

    if n_rows is not None and k > n_rows:
        errors.append(f"'k' ({k}) can not exceed the number of rows ({n_rows})")
    if cfg.penalty_function is not None and not _accepts_two_args(cfg.penalty_function):
        errors.append("'penalty_function' must be callable as penalty(chromosome, labels)")
    if cfg.distance_method not in METHODS:
        errors.append(f"'distance_method' must be one of {METHODS} (got {cfg.distance_method!r})")
    if cfg.correlation_method not in CORRELATIONS:
        errors.append(
            f"'correlation_method' must be one of {CORRELATIONS} (got {cfg.correlation_method!r})"
        )
    if not callable(cfg.aggregation) and cfg.aggregation not in AGGREGATIONS:
        errors.append(
            f"'aggregation' must be callable or one of {sorted(AGGREGATIONS)} (got {cfg.aggregation!r})"
        )

    if not _is_int(cfg.population_size) or cfg.population_size < 2:
        errors.append(f"'population_size' must be an integer >= 2 (got {cfg.population_size!r})")
    if not _is_int(cfg.generations) or cfg.generations < 1:
        errors.append(f"'generations' must be an integer >= 1 (got {cfg.generations!r})")
    if not _is_int(cfg.seed):
        errors.append(f"'seed' must be an integer (got {cfg.seed!r})")
    if not _is_int(cfg.n_jobs) or cfg.n_jobs == 0:
        errors.append(f"'n_jobs' must be a non-zero integer (got {cfg.n_jobs!r})")

    _check_probability(errors, "crossover_rate", cfg.crossover_rate)
    _check_probability(errors, "mutation_rate", cfg.mutation_rate)
    _check_probability(errors, "elitism_fraction", cfg.elitism_fraction)

    if not errors and cfg.elitism_size >= cfg.population_size:
        errors.append(
            f"elitism ({cfg.elitism_size} individuals) must be < population_size ({cfg.population_size})"
        )
    if not isinstance(cfg.blend_alpha, numbers.Real) or cfg.blend_alpha < 0:
        errors.append(f"'blend_alpha' must be >= 0 (got {cfg.blend_alpha!r})")
    if not isinstance(cfg.mutation_shrink, numbers.Real) or cfg.mutation_shrink < 0:
        errors.append(f"'mutation_shrink' must be >= 0 (got {cfg.mutation_shrink!r})")
    if cfg.timeout_s is not None and (
        not isinstance(cfg.timeout_s, numbers.Real) or cfg.timeout_s <= 0
    ):
        errors.append(f"'timeout_s' must be > 0 when set (got {cfg.timeout_s!r})")

    if errors:
        raise InputError("Config validation failed:\n  " + "\n  ".join(errors))

    return cfg.replace(
        k=k,
        population_size=int(cfg.population_size),
        generations=int(cfg.generations),
        seed=int(cfg.seed),
        n_jobs=int(cfg.n_jobs),
    )


def describe_callable(fn: Any) -> Optional[str]:
    if fn is None:
        return None
    if isinstance(fn, str):
        return fn
    module = getattr(fn, "__module__", None)
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
    return f"{module}.{name}" if module else name


def config_to_dict(cfg: ClusterConfig) -> Dict[str, Any]:
    """JSON-ready view of the configuration; callables are recorded by qualified name."""
    out: Dict[str, Any] = {}
    for f in fields(cfg):
        value = getattr(cfg, f.name)
        if f.name in ("aggregation", "penalty_function"):
            value = describe_callable(value)
        out[f.name] = value
    return out
