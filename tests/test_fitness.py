"""
Tests for the fitness evaluator.
"""

import numpy as np
import pytest

from gaclust.evolution.fitness import assign, fitness
from gaclust.evolution.population import encode_centroids


def test_assign_uses_correlation_profile(two_patterns):
    X, _, centroids = two_patterns
    labels = assign(encode_centroids(centroids), X, 2)
    assert list(labels) == [1] * 5 + [2] * 5


def test_perfect_partition_scores_one(two_patterns):
    X, reference, centroids = two_patterns
    assert fitness(encode_centroids(centroids), X, reference, 2) == pytest.approx(1.0)


def test_label_permutation_does_not_change_score(two_patterns):
    X, reference, centroids = two_patterns
    a = fitness(encode_centroids(centroids), X, reference, 2)
    b = fitness(encode_centroids(centroids[::-1]), X, reference, 2)
    assert a == pytest.approx(b)


def test_penalty_is_subtracted(two_patterns):
    X, reference, centroids = two_patterns
    seen = {}

    def penalty(chromosome, labels):
        seen["chromosome"] = chromosome
        seen["labels"] = labels
        return 0.25

    chrom = encode_centroids(centroids)
    score = fitness(chrom, X, reference, 2, penalty=penalty)

    assert score == pytest.approx(0.75)
    assert np.array_equal(seen["chromosome"], chrom)
    assert list(seen["labels"]) == [1] * 5 + [2] * 5


@pytest.mark.parametrize("bad", [-0.1, float("nan"), float("inf")])
def test_invalid_penalty_value_raises(two_patterns, bad):
    X, reference, centroids = two_patterns
    with pytest.raises(ValueError, match="penalty_function"):
        fitness(encode_centroids(centroids), X, reference, 2, penalty=lambda c, l: bad)


def test_empty_cluster_handled(two_patterns):
    X, reference, centroids = two_patterns
    # Both centroids identical: every row goes to cluster 1, cluster 2 stays empty.
    chrom = encode_centroids(np.vstack([centroids[0], centroids[0]]))
    assert fitness(chrom, X, reference, 2) == 0.0


def test_empty_cluster_skipped_with_three_centroids(two_patterns):
    X, reference, centroids = two_patterns
    flat = np.array([1.0, 1.0, 1.0, 1.0])
    chrom = encode_centroids(np.vstack([centroids[0], flat, centroids[1]]))
    assert fitness(chrom, X, reference, 3) == pytest.approx(1.0)


def test_geometric_assignment_and_median(two_patterns):
    X, reference, _ = two_patterns
    centroids = np.vstack([X[:5].mean(axis=0), X[5:].mean(axis=0)])
    score = fitness(
        encode_centroids(centroids), X, reference, 2,
        method="euclidean", aggregation="median", correlation="spearman",
    )
    assert score == pytest.approx(1.0)


def test_per_cluster_score_ignores_gene_order():
    X = np.array([[5.0, 5.0], [5.5, 5.0], [10.0, 10.0], [10.5, 10.0], [0.0, 0.0], [0.5, 0.0]])
    reference = np.array([3.0, 2.0, 7.0])
    centroids = np.array([[5.1, 5.15], [10.1, 10.15], [0.1, 0.15]])

    labels = assign(encode_centroids(centroids), X, 3, method="euclidean")
    assert list(labels) == [2, 2, 3, 3, 1, 1]

    scores = [
        fitness(encode_centroids(centroids[p]), X, reference, 3, method="euclidean")
        for p in ([0, 1, 2], [2, 0, 1], [1, 2, 0])
    ]
    assert scores == pytest.approx([20.0 / np.sqrt(700.0)] * 3)
