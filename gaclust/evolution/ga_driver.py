"""
Generational GA driver for centroid search.

Each generation: keep the elites, draw parents by linear rank, BLX-alpha crossover,
non-uniform mutation, evaluate, put the elites back in place of the worst offspring.
The loop runs for exactly ``cfg.generations`` iterations unless cancelled.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

import numpy as np
from deap import base, tools
from joblib import Parallel, delayed

from ..aggregate import resolve_aggregation
from .config import ClusterConfig
from .fitness import fitness
from .operators import blx_crossover, nonuniform_mutation, sel_linear_rank
from .population import chromosome_bounds, initialize

LOG = logging.getLogger(__name__)


@dataclass
class GARun:
    """Outcome of one GA run."""
    best_chromosome: np.ndarray
    best_fitness: float
    population: np.ndarray
    fitness: np.ndarray
    logbook: tools.Logbook
    generations_completed: int
    cancelled: bool = False


# ---------------------------------------------------------------------------
# Toolbox
# ---------------------------------------------------------------------------

def _parallel_map(func: Callable[[Any], float], iterable: Iterable[Any], n_jobs: int) -> List[float]:
    # Threads: dataset and reference are shared read-only; nothing is pickled.
    return Parallel(n_jobs=n_jobs, prefer="threads")(delayed(func)(x) for x in iterable)


def build_toolbox(
    dataset: np.ndarray,
    reference: np.ndarray,
    cfg: ClusterConfig,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: np.random.Generator,
) -> base.Toolbox:
    toolbox = base.Toolbox()
    toolbox.register(
        "evaluate", fitness,
        dataset=dataset,
        reference=reference,
        k=cfg.k,
        method=cfg.distance_method,
        penalty=cfg.penalty_function,
        aggregation=resolve_aggregation(cfg.aggregation),
        correlation=cfg.correlation_method,
    )
    toolbox.register("select", sel_linear_rank, rng=rng)
    toolbox.register("mate", blx_crossover, lower=lower, upper=upper, alpha=cfg.blend_alpha, rng=rng)
    toolbox.register(
        "mutate", nonuniform_mutation,
        lower=lower,
        upper=upper,
        max_generations=cfg.generations,
        rate=cfg.mutation_rate,
        shrink=cfg.mutation_shrink,
        rng=rng,
    )
    if cfg.n_jobs != 1:
        toolbox.register("map", _parallel_map, n_jobs=cfg.n_jobs)
    return toolbox


def _evaluate(toolbox: base.Toolbox, population: np.ndarray) -> np.ndarray:
    return np.array(list(toolbox.map(toolbox.evaluate, population)), dtype=np.float64)


def _build_stats() -> tools.Statistics:
    stats = tools.Statistics()
    stats.register("max", np.max)
    stats.register("avg", np.mean)
    stats.register("min", np.min)
    return stats


# ---------------------------------------------------------------------------
# Main GA loop
# ---------------------------------------------------------------------------

def run_ga(
    dataset: np.ndarray,
    reference: np.ndarray,
    cfg: ClusterConfig,
    cancel: Optional[Callable[[], bool]] = None,
) -> GARun:
    """
    Search centroid space for the chromosome with the highest fitness.

    ``cfg`` must already be validated. ``cancel`` is polled between generations;
    returning True (or exceeding ``cfg.timeout_s``) ends the run early with the
    best individual found so far.

    The best-ever individual only changes on strict improvement, so among equal
    fitness values the first one found (and, within a generation, the first in
    population order) is kept.
    """
    rng = np.random.default_rng(cfg.seed)
    lower, upper = chromosome_bounds(dataset, cfg.k)
    toolbox = build_toolbox(dataset, reference, cfg, lower, upper, rng)
    n_elite = cfg.elitism_size
    pop_size = cfg.population_size

    stats = _build_stats()
    logbook = tools.Logbook()
    logbook.header = ["gen", "nevals", "best", "max", "avg", "min"]

    # ---- Initial population ----
    population = initialize(pop_size, lower, upper, rng)
    fit = _evaluate(toolbox, population)

    i_best = int(np.argmax(fit))
    best_fitness = float(fit[i_best])
    best_chromosome = population[i_best].copy()
    logbook.record(gen=0, nevals=pop_size, best=best_fitness, **stats.compile(fit))
    LOG.info(
        "Initial population: %d individuals, %d genes, best=%.4f",
        pop_size, population.shape[1], best_fitness,
    )

    started = time.monotonic()
    completed = 0
    cancelled = False

    for gen in range(1, cfg.generations + 1):
        if cancel is not None and cancel():
            LOG.warning("Cancelled before generation %d; keeping best so far", gen)
            cancelled = True
            break
        if cfg.timeout_s is not None and time.monotonic() - started > cfg.timeout_s:
            LOG.warning("Timeout (%.1fs) before generation %d; keeping best so far", cfg.timeout_s, gen)
            cancelled = True
            break

        # ---- Elites (before offspring) ----
        order = np.argsort(-fit, kind="stable")
        elites = population[order[:n_elite]].copy()
        elite_fit = fit[order[:n_elite]].copy()

        # ---- Selection ----
        parents = population[toolbox.select(fit, pop_size)]

        # ---- Crossover ----
        offspring = parents.copy()
        for i in range(0, pop_size - 1, 2):
            if rng.random() < cfg.crossover_rate:
                offspring[i], offspring[i + 1] = toolbox.mate(parents[i], parents[i + 1])

        # ---- Mutation ----
        for i in range(pop_size):
            offspring[i] = toolbox.mutate(offspring[i], generation=gen)

        # ---- Evaluate, then elites replace the worst offspring ----
        off_fit = _evaluate(toolbox, offspring)
        if n_elite:
            worst = np.argsort(off_fit, kind="stable")[:n_elite]
            offspring[worst] = elites
            off_fit[worst] = elite_fit
        population, fit = offspring, off_fit

        # ---- Update best-ever ----
        i_best = int(np.argmax(fit))
        if fit[i_best] > best_fitness:
            best_fitness = float(fit[i_best])
            best_chromosome = population[i_best].copy()

        record = stats.compile(fit)
        logbook.record(gen=gen, nevals=pop_size, best=best_fitness, **record)
        LOG.info(
            "Gen %d / %d: pop_best=%.4f  pop_mean=%.4f  best_ever=%.4f",
            gen, cfg.generations, record["max"], record["avg"], best_fitness,
        )
        completed = gen

    LOG.info("GA finished after %d generation(s); best fitness %.4f", completed, best_fitness)
    return GARun(
        best_chromosome=best_chromosome,
        best_fitness=best_fitness,
        population=population,
        fitness=fit,
        logbook=logbook,
        generations_completed=completed,
        cancelled=cancelled,
    )
