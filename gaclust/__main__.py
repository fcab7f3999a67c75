"""
CLI for gaclust: cluster and distance subcommands.
Run with: python3 -m gaclust <subcommand> ...
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Any

LOG = logging.getLogger("gaclust")

# argparse dest -> ClusterConfig field
_OVERRIDES = (
    "population_size",
    "generations",
    "crossover_rate",
    "mutation_rate",
    "elitism_fraction",
    "seed",
    "distance_method",
    "correlation_method",
    "aggregation",
    "blend_alpha",
    "mutation_shrink",
    "n_jobs",
    "timeout_s",
)


def _save_matrix(path: Path | None, M: Any) -> None:
    import numpy as np

    if path is not None and path.suffix == ".npy":
        np.save(path, M)
        return
    target = sys.stdout if path is None or str(path) == "-" else path
    np.savetxt(target, M, fmt="%.6g", delimiter=",")


def cmd_cluster(args: argparse.Namespace) -> None:
    from . import cluster, format_result, result_to_dict
    from .config_loader import load_config
    from .evolution.config import ClusterConfig
    from .io import load_table, load_vector, save_json, write_lines

    X, header = load_table(args.data)
    reference = load_vector(args.reference)

    cfg = load_config(str(args.config), validate=False) if args.config else ClusterConfig()
    overrides = {
        name: getattr(args, name) for name in _OVERRIDES if getattr(args, name) is not None
    }

    # SIGINT: finish the current generation, then report the best found so far.
    interrupted = False
    original_sigint = signal.getsignal(signal.SIGINT)

    def _sigint_handler(_signum: int, _frame: Any) -> None:
        nonlocal interrupted
        interrupted = True
        LOG.warning("SIGINT received; stopping after the current generation ...")

    signal.signal(signal.SIGINT, _sigint_handler)
    try:
        result = cluster(
            X,
            k=args.k,
            reference=reference,
            config=cfg,
            feature_names=header,
            cancel=lambda: interrupted,
            **overrides,
        )
    finally:
        signal.signal(signal.SIGINT, original_sigint)

    sys.stdout.write(format_result(result) + "\n")
    if args.output:
        save_json(result_to_dict(result), args.output)
        LOG.info("Result written: %s", args.output)
    if args.labels_out:
        write_lines(args.labels_out, [str(int(c)) for c in result.cluster])
    if args.plot_out:
        from .evolution.graph import plot_convergence

        plot_convergence(result.history, args.plot_out)


def cmd_distance(args: argparse.Namespace) -> None:
    from . import distance
    from .io import load_table, write_lines

    X, _ = load_table(args.data)
    if args.centers is not None:
        C, _ = load_table(args.centers)
        labels = distance(X, C, method=args.method)
        write_lines(args.output, [str(int(i)) for i in labels])
    else:
        _save_matrix(args.output, distance(X, method=args.method))


def main() -> None:
    from .aggregate import AGGREGATIONS, CORRELATIONS
    from .distance import METHODS
    from .errors import InputError

    parser = argparse.ArgumentParser(
        prog="gaclust",
        description="Genetic-algorithm clustering guided by correlation with a reference vector.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # cluster
    p_cl = subparsers.add_parser("cluster", help="Run GA clustering")
    p_cl.add_argument(
        "data",
        type=Path,
        help="Dataset: .npy, or CSV/TSV/whitespace table (rows = observations; optional header)",
    )
    p_cl.add_argument(
        "reference",
        type=Path,
        help="Reference vector: one value per row (or per cluster)",
    )
    p_cl.add_argument("-k", type=int, default=None, metavar="K", help="Number of clusters (>= 2)")
    p_cl.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="kconfig-style .config file (CONFIG_POPULATION_SIZE=25, ...); flags override it",
    )
    p_cl.add_argument("-p", "--population-size", dest="population_size", type=int, default=None)
    p_cl.add_argument("-g", "--generations", type=int, default=None)
    p_cl.add_argument("--crossover-rate", type=float, default=None)
    p_cl.add_argument("--mutation-rate", type=float, default=None)
    p_cl.add_argument("--elitism-fraction", type=float, default=None)
    p_cl.add_argument("--seed", type=int, default=None, help="Random seed (default: 42)")
    p_cl.add_argument(
        "--distance-method",
        choices=METHODS,
        default=None,
        help="Assignment metric (default: pearson)",
    )
    p_cl.add_argument("--correlation-method", choices=CORRELATIONS, default=None)
    p_cl.add_argument("--aggregation", choices=sorted(AGGREGATIONS), default=None)
    p_cl.add_argument("--blend-alpha", type=float, default=None, help="BLX-alpha (default: 0.5)")
    p_cl.add_argument(
        "--mutation-shrink",
        type=float,
        default=None,
        help="Non-uniform mutation shrink exponent (default: 5)",
    )
    p_cl.add_argument(
        "-j", "--n-jobs",
        dest="n_jobs",
        type=int,
        default=None,
        help="Threads for fitness evaluation within a generation (default: 1)",
    )
    p_cl.add_argument("--timeout-s", type=float, default=None, help="Stop after this many seconds")
    p_cl.add_argument("-o", "--output", type=Path, default=None, help="Write result JSON")
    p_cl.add_argument("--labels-out", type=Path, default=None, help="Write one label per line")
    p_cl.add_argument("--plot-out", type=Path, default=None, help="Write convergence graph PNG")
    p_cl.set_defaults(func=cmd_cluster)

    # distance
    p_d = subparsers.add_parser(
        "distance",
        help="Pairwise dissimilarity matrix, or nearest-center labels with --centers",
    )
    p_d.add_argument("data", type=Path, help="Dataset table (.npy or text)")
    p_d.add_argument(
        "--centers",
        type=Path,
        default=None,
        help="Second table; output the 1-based index of the nearest row for each data row",
    )
    p_d.add_argument("-m", "--method", choices=METHODS, default="pearson")
    p_d.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (.npy or text; default: stdout)",
    )
    p_d.set_defaults(func=cmd_distance)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except (InputError, FileNotFoundError) as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    main()
