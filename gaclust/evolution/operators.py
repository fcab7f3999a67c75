"""
Real-valued GA operators: linear-rank selection, BLX-alpha crossover, non-uniform mutation.

All randomness comes from the numpy Generator passed in.
"""

from __future__ import annotations

import numpy as np
from scipy.stats import rankdata


def rank_probabilities(fitness: np.ndarray) -> np.ndarray:
    """
    Linear-rank selection probabilities.

    The best individual (rank 1) gets q = 2/n, each following rank r = 2/(n(n-1)) less,
    so the worst gets 0. Tied fitness values share the worse rank of the tie; a
    population with equal fitness everywhere is sampled uniformly.
    """
    n = len(fitness)
    q = 2.0 / n
    r = 2.0 / (n * (n - 1))
    rank = (n + 1) - rankdata(fitness, method="min")
    prob = np.clip(q - (rank - 1) * r, 0.0, 1.0)
    total = prob.sum()
    if total <= 0:
        return np.full(n, 1.0 / n)
    return prob / total


def sel_linear_rank(fitness: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Draw k population indices with replacement, proportional to linear rank."""
    return rng.choice(len(fitness), size=k, replace=True, p=rank_probabilities(fitness))


def blx_crossover(
    parent1: np.ndarray,
    parent2: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    alpha: float,
    rng: np.random.Generator,
) -> tuple[np.ndarray, np.ndarray]:
    """
    BLX-alpha: both children are drawn coordinate-wise from the parents' interval
    widened by alpha times its span on each side, then cut to [lower, upper].
    """
    lo = np.minimum(parent1, parent2)
    hi = np.maximum(parent1, parent2)
    span = hi - lo
    xl = np.maximum(lo - alpha * span, lower)
    xu = np.minimum(hi + alpha * span, upper)
    children = rng.uniform(xl, xu, size=(2, len(parent1)))
    return children[0], children[1]


def nonuniform_mutation(
    individual: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    generation: int,
    max_generations: int,
    rate: float,
    shrink: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Non-uniform mutation, each coordinate independently with probability rate.

    A mutated coordinate moves toward its lower or upper bound (50/50) by the fraction
    1 - u ** (g ** shrink) of the remaining room, with g = 1 - generation / max_generations,
    so steps shrink toward zero as the run ends. Returns a new clamped array.
    """
    n = len(individual)
    mask = rng.random(n) < rate
    down = rng.random(n) < 0.5
    u = rng.random(n)

    g = 1.0 - generation / max_generations
    step = 1.0 - u ** (g ** shrink)
    moved = np.where(
        down,
        individual - (individual - lower) * step,
        individual + (upper - individual) * step,
    )
    return np.clip(np.where(mask, moved, individual), lower, upper)
