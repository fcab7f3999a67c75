"""
Kconfig-style loader for gaclust runs.

Parses .config files (``CONFIG_KEY=value`` lines) into ClusterConfig.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from .errors import InputError
from .evolution.config import ClusterConfig, validate_config

# CONFIG_ key -> (ClusterConfig field, type)
_KEYS = {
    "K": ("k", int),
    "DISTANCE_METHOD": ("distance_method", str),
    "CORRELATION_METHOD": ("correlation_method", str),
    "AGGREGATION": ("aggregation", str),
    "POPULATION_SIZE": ("population_size", int),
    "GENERATIONS": ("generations", int),
    "CROSSOVER_RATE": ("crossover_rate", float),
    "MUTATION_RATE": ("mutation_rate", float),
    "ELITISM_FRACTION": ("elitism_fraction", float),
    "SEED": ("seed", int),
    "BLEND_ALPHA": ("blend_alpha", float),
    "MUTATION_SHRINK": ("mutation_shrink", float),
    "N_JOBS": ("n_jobs", int),
    "TIMEOUT_S": ("timeout_s", float),
}


def _parse_config_file(path: str) -> Dict[str, object]:
    """Parse a kconfig .config into {KEY: value} (without CONFIG_ prefix)."""
    values: Dict[str, object] = {}
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, raw = line.partition("=")
            key = key.strip()
            if key.startswith("CONFIG_"):
                key = key[len("CONFIG_"):]
            raw = raw.strip()
            if raw.startswith('"') and raw.endswith('"'):
                raw = raw[1:-1]
            if raw == "y":
                values[key] = True
            elif raw == "n":
                values[key] = False
            else:
                try:
                    values[key] = int(raw)
                except ValueError:
                    try:
                        values[key] = float(raw)
                    except ValueError:
                        values[key] = raw
    return values


def _convert(key: str, raw: object, typ: type) -> object:
    if typ is float and raw == "":
        return None
    try:
        if typ is int:
            if isinstance(raw, float) and not raw.is_integer():
                raise ValueError(raw)
            return int(raw)  # type: ignore[arg-type]
        return typ(raw)
    except (TypeError, ValueError):
        raise InputError(f"CONFIG_{key} must be {typ.__name__} (got {raw!r})") from None


def load_config(
    config_path: str,
    base: Optional[ClusterConfig] = None,
    validate: bool = True,
) -> ClusterConfig:
    """Load a .config file on top of ``base`` (default ClusterConfig()).

    Unknown keys are rejected so typos do not silently fall back to defaults.
    With validate=True the result goes through validate_config().
    """
    p = Path(config_path).resolve()
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")
    v = _parse_config_file(str(p))

    unknown = sorted(set(v) - set(_KEYS))
    if unknown:
        raise InputError(f"Unknown config key(s): {', '.join('CONFIG_' + u for u in unknown)}")

    overrides = {}
    for key, raw in v.items():
        field_name, typ = _KEYS[key]
        overrides[field_name] = _convert(key, raw, typ)

    cfg = (base or ClusterConfig()).replace(**overrides)
    if validate:
        cfg = validate_config(cfg)
    return cfg
