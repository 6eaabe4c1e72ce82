from cluster_analysis.agglomerative_clustering import agglomerative, init_clusters
from cluster_analysis.logging_config import configure_logging
from cluster_analysis.report import format_clusters

if __name__ == "__main__":
    configure_logging("WARNING")

    # Example dataset: (id, x, y)
    points = [
        (40, 86.0, 663.0),
        (43, 747.0, 938.0),
        (47, 285.0, 973.0),
        (49, 548.0, 422.0),
        (52, 741.0, 541.0),
        (56, 44.0, 854.0),
        (57, 795.0, 59.0),
        (61, 267.0, 375.0),
        (62, 85.0, 874.0),
        (66, 125.0, 211.0),
    ]

    # Perform agglomerative clustering
    for linkage in ("average", "min", "max"):
        clusters = agglomerative(init_clusters(points), n_clusters=3, linkage=linkage)
        print(f"--- {linkage} ---")
        print(format_clusters(clusters), end="")
