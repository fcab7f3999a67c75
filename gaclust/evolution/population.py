"""
Chromosome encoding and initial population.

A chromosome is a flat vector of k*d floats: k concatenated centroids of length d.
"""

from __future__ import annotations

import numpy as np


def chromosome_bounds(dataset: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
    """Per-coordinate (lower, upper): the feature min/max of the dataset, once per centroid."""
    return np.tile(dataset.min(axis=0), k), np.tile(dataset.max(axis=0), k)


def initialize(
    pop_size: int,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Draw pop_size chromosomes, each coordinate uniform in [lower[j], upper[j]].

    Returns:
        np.ndarray of shape (pop_size, len(lower)).
    """
    population = np.empty((pop_size, len(lower)), dtype=np.float64)
    for j in range(len(lower)):
        population[:, j] = rng.uniform(lower[j], upper[j], size=pop_size)
    return population


def decode_chromosome(chromosome: np.ndarray, k: int, d: int) -> np.ndarray:
    """Chromosome -> (k, d) centroid matrix."""
    return np.asarray(chromosome, dtype=np.float64).reshape(k, d)


def encode_centroids(centroids: np.ndarray) -> np.ndarray:
    """(k, d) centroid matrix -> flat chromosome."""
    return np.asarray(centroids, dtype=np.float64).reshape(-1)


def canonical_order(centroids: np.ndarray) -> np.ndarray:
    """Permutation sorting centroids by ascending coordinate sum (stable on ties)."""
    return np.argsort(centroids.sum(axis=1), kind="stable")


def canonicalize_chromosome(chromosome: np.ndarray, k: int, d: int) -> np.ndarray:
    centroids = decode_chromosome(chromosome, k, d)
    return encode_centroids(centroids[canonical_order(centroids)])
