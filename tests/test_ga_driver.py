"""
Tests for the generational GA driver.
"""

import time

import numpy as np
import pytest

from gaclust.evolution import ga_driver
from gaclust.evolution.config import ClusterConfig, validate_config
from gaclust.evolution.population import chromosome_bounds


def _cfg(**kw):
    base = dict(k=2, population_size=12, generations=8, seed=5)
    base.update(kw)
    return validate_config(ClusterConfig(**base), n_rows=10)


def test_every_evaluated_chromosome_within_bounds(synthetic, monkeypatch):
    X, reference = synthetic
    cfg = _cfg(mutation_rate=0.5, k=3)
    lower, upper = chromosome_bounds(X, 3)
    seen = []
    real_fitness = ga_driver.fitness

    def recording_fitness(chromosome, **kwargs):
        seen.append(np.array(chromosome))
        return real_fitness(chromosome, **kwargs)

    monkeypatch.setattr(ga_driver, "fitness", recording_fitness)
    ga_driver.run_ga(X, reference, cfg)

    assert len(seen) == cfg.population_size * (cfg.generations + 1)
    for chrom in seen:
        assert np.all(chrom >= lower)
        assert np.all(chrom <= upper)


def test_best_fitness_non_decreasing(synthetic):
    X, reference = synthetic
    run = ga_driver.run_ga(X, reference, _cfg(generations=15, mutation_rate=0.2))

    best = run.logbook.select("best")
    assert len(best) == 16
    assert all(b2 >= b1 for b1, b2 in zip(best, best[1:]))
    assert run.best_fitness == best[-1]


def test_elitism_keeps_population_best(synthetic):
    X, reference = synthetic
    cfg = _cfg(population_size=20, elitism_fraction=0.1, generations=12, mutation_rate=0.3)
    assert cfg.elitism_size == 2
    run = ga_driver.run_ga(X, reference, cfg)

    maxima = run.logbook.select("max")
    assert all(m2 >= m1 for m1, m2 in zip(maxima, maxima[1:]))


def test_same_seed_same_run(synthetic):
    X, reference = synthetic
    a = ga_driver.run_ga(X, reference, _cfg())
    b = ga_driver.run_ga(X, reference, _cfg())
    c = ga_driver.run_ga(X, reference, _cfg(seed=6))

    assert np.array_equal(a.best_chromosome, b.best_chromosome)
    assert np.array_equal(a.population, b.population)
    assert a.logbook.select("avg") == b.logbook.select("avg")
    assert not np.array_equal(a.population, c.population)


def test_threaded_evaluation_matches_sequential(synthetic):
    X, reference = synthetic
    a = ga_driver.run_ga(X, reference, _cfg())
    b = ga_driver.run_ga(X, reference, _cfg(n_jobs=2))

    assert np.array_equal(a.population, b.population)
    assert a.best_fitness == b.best_fitness


def test_runs_exactly_the_configured_generations(synthetic):
    X, reference = synthetic
    run = ga_driver.run_ga(X, reference, _cfg(generations=4))

    assert run.generations_completed == 4
    assert not run.cancelled
    assert run.logbook.select("gen") == [0, 1, 2, 3, 4]


def test_cancel_truncates_run(synthetic):
    X, reference = synthetic
    calls = []

    def cancel():
        calls.append(1)
        return len(calls) > 2

    run = ga_driver.run_ga(X, reference, _cfg(generations=10), cancel=cancel)

    assert run.cancelled
    assert run.generations_completed == 2
    assert run.best_fitness == pytest.approx(max(run.logbook.select("max")))


def test_tie_keeps_first_individual(monkeypatch, synthetic):
    X, reference = synthetic
    monkeypatch.setattr(ga_driver, "fitness", lambda chromosome, **kwargs: 0.5)
    cfg = _cfg(generations=3)
    run = ga_driver.run_ga(X, reference, cfg)

    lower, upper = chromosome_bounds(X, cfg.k)
    first = ga_driver.initialize(cfg.population_size, lower, upper, np.random.default_rng(cfg.seed))[0]
    assert run.best_fitness == 0.5
    assert np.array_equal(run.best_chromosome, first)


def test_timeout_truncates_run(synthetic, monkeypatch):
    X, reference = synthetic
    real_fitness = ga_driver.fitness

    def slow_fitness(chromosome, **kwargs):
        time.sleep(0.005)
        return real_fitness(chromosome, **kwargs)

    monkeypatch.setattr(ga_driver, "fitness", slow_fitness)
    cfg = _cfg(generations=1000, timeout_s=0.02)
    run = ga_driver.run_ga(X, reference, cfg)

    assert run.cancelled
    assert 1 <= run.generations_completed < cfg.generations
    assert run.logbook.select("gen")[-1] == run.generations_completed
    assert run.best_fitness == pytest.approx(max(run.logbook.select("max")))
