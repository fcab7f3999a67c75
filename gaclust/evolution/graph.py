"""
Matplotlib graph: population best, mean and best-ever fitness vs. generation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

LOG = logging.getLogger(__name__)


def plot_convergence(
    history: Sequence[Mapping[str, Any]],
    path: str | Path,
    title: str = "GA clustering: fitness vs generation",
) -> None:
    """Draw the convergence graph of a run and save it as PNG.

    history: logbook rows with gen, max, avg and best (best-ever fitness).
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    if not history:
        return

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    gens = [h["gen"] for h in history]
    best = [h["max"] for h in history]
    mean = [h["avg"] for h in history]
    best_ever = [h["best"] for h in history]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(gens, best, "o-", label="Pop best", color="C0", markersize=3)
    ax.plot(gens, mean, "s--", label="Pop mean", color="C1", markersize=3)
    ax.plot(gens, best_ever, "-", label="Best ever", color="C2", linewidth=2)
    ax.set_xlabel("Generation")
    ax.set_ylabel("Fitness")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.savefig(str(out), dpi=120, bbox_inches="tight")
    plt.close(fig)
    LOG.info("Convergence graph written: %s", out)
