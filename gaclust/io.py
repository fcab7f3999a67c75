"""
File helpers for the CLI: load datasets / reference vectors, write results.

Tables are read from .npy or delimited text (comma, tab or whitespace). A first text
line that is not numeric is taken as the header (feature names).
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import numpy as np

from .errors import InputError


def _delimiter(first_line: str) -> Optional[str]:
    if "," in first_line:
        return ","
    if "\t" in first_line:
        return "\t"
    return None


def _is_numeric_row(fields: list[str]) -> bool:
    try:
        [float(f) for f in fields]
    except ValueError:
        return False
    return True


def load_table(path: str | Path) -> tuple[np.ndarray, Optional[list[str]]]:
    """
    Load a 2D numeric table.

    Returns:
        (X, feature_names) where feature_names is None when the file has no header.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Not a file: {path}")
    if path.suffix == ".npy":
        X = np.load(path)
        return np.atleast_2d(X), None

    lines = [line for line in path.read_text().splitlines() if line.strip()]
    if not lines:
        raise InputError(f"{path} is empty")
    delim = _delimiter(lines[0])
    first = [f.strip() for f in lines[0].split(delim)]
    header: Optional[list[str]] = None
    if not _is_numeric_row(first):
        header = [f.strip('"') for f in first]
        lines = lines[1:]
    try:
        X = np.loadtxt(lines, delimiter=delim, ndmin=2)
    except ValueError as e:
        raise InputError(f"{path}: not a numeric table ({e})") from e
    return X, header


def load_vector(path: str | Path) -> np.ndarray:
    """Load a 1D numeric vector (one value per line, or a single column/row table)."""
    X, _ = load_table(path)
    if X.ndim == 2 and 1 not in X.shape:
        raise InputError(f"{path}: expected a single column or row, got shape {X.shape}")
    return X.reshape(-1)


def save_json(obj: Any, path: str | Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(obj, f, indent=2)
        f.write("\n")


def write_lines(path: Optional[Path], lines: list[str]) -> None:
    text = "\n".join(lines) + "\n"
    if path is None or str(path) == "-":
        sys.stdout.write(text)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
