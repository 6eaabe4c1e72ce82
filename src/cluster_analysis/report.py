"""Text rendering of clustering results."""

from typing import Iterable

from cluster_analysis.agglomerative_clustering import Cluster, Point


def format_point(point: Point) -> str:
    return f"{point.id}[{point.x:g},{point.y:g}]"


def format_cluster(cluster: Cluster) -> str:
    """Space-separated ``id[x,y]`` tokens in the cluster's (id-sorted) order."""
    return " ".join(format_point(point) for point in cluster)


def format_clusters(clusters: Iterable[Cluster]) -> str:
    lines = ["Clusters:"]
    for index, cluster in enumerate(clusters):
        lines.append(f"cluster {index}: {format_cluster(cluster)}")
    return "\n".join(lines) + "\n"
