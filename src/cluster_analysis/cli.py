#!/usr/bin/env python3
"""
Command-line interface for cluster analysis.

Usage:
    cluster-analysis FILE                 # merge everything into one cluster
    cluster-analysis FILE 3               # stop at 3 clusters (average linkage)
    cluster-analysis FILE 3 --min         # nearest-neighbour linkage
    cluster-analysis FILE 3 --max --plot  # farthest-neighbour linkage, show a plot
"""

import argparse
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from cluster_analysis.agglomerative_clustering import agglomerative, release_clusters
from cluster_analysis.errors import ClusteringError, PreconditionViolation
from cluster_analysis.loader import load_clusters
from cluster_analysis.logging_config import configure_logging
from cluster_analysis.report import format_clusters
from cluster_analysis.settings import ClusteringSettings

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cluster-analysis",
        description="Agglomerative clustering of 2-D objects read from FILE.",
    )
    parser.add_argument("file", help="Input file ('count=N' line followed by 'id x y' lines)")
    parser.add_argument("n_clusters", nargs="?", type=int, default=1,
                        help="Number of clusters to stop at (default: 1)")

    method = parser.add_mutually_exclusive_group()
    method.add_argument("--avg", dest="linkage", action="store_const", const="average",
                        help="Unweighted pair-group average (default)")
    method.add_argument("--min", dest="linkage", action="store_const", const="min",
                        help="Nearest-neighbour linkage")
    method.add_argument("--max", dest="linkage", action="store_const", const="max",
                        help="Farthest-neighbour linkage")
    parser.set_defaults(linkage="average")

    parser.add_argument("--plot", action="store_true", help="Show a scatter plot of the result")
    parser.add_argument("--log-level", help="Logging level (default: WARNING)")
    parser.add_argument("--log-format", choices=["console", "json"], default="console",
                        help="Log output format")
    return parser


def _settings_from_args(args: argparse.Namespace) -> ClusteringSettings:
    values = {
        "n_clusters": args.n_clusters,
        "linkage": args.linkage,
        "log_format": args.log_format,
        "plot": args.plot,
    }
    if args.log_level is not None:
        values["log_level"] = args.log_level
    return ClusteringSettings(**values)


def _show_plot(clusters) -> None:
    import matplotlib.pyplot as plt
    from cluster_analysis.plotting import plot_clusters

    fig, ax = plt.subplots()
    plot_clusters(ax, clusters)
    plt.show()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the program.

    Returns:
        Process exit status: 0 on success, 1 on invalid arguments or input.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        print(f"Invalid argument: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level, settings.log_format)

    try:
        clusters = load_clusters(args.file)
        if settings.n_clusters > len(clusters):
            raise PreconditionViolation(
                f"Requested {settings.n_clusters} clusters but {args.file} has only {len(clusters)} objects."
            )
        agglomerative(clusters, settings.n_clusters, settings.linkage)
    except ClusteringError as exc:
        logger.error("clustering_failed", error=str(exc), error_type=type(exc).__name__)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(format_clusters(clusters))
    if settings.plot:
        _show_plot(clusters)
    release_clusters(clusters)
    return 0


if __name__ == "__main__":
    sys.exit(main())
