from typing import List

import matplotlib.pyplot as plt
from matplotlib.axes import Axes

from cluster_analysis.agglomerative_clustering import Cluster


def plot_clusters(axis: Axes, clusters: List[Cluster]) -> None:
    """
    Plots the clustered points in 2D, one colour per cluster.

    Args:
        axis (Axes): Axes to draw on.
        clusters (List[Cluster]): Clusters returned by agglomerative().
    """
    for index, cluster in enumerate(clusters):
        coords = cluster.coordinates
        axis.scatter(coords[:, 0], coords[:, 1], label=f'Cluster {index}')

    axis.set_title('Agglomerative Clustering Results')
    axis.set_xlabel('x')
    axis.set_ylabel('y')
    axis.legend()
    axis.grid(True)


if __name__ == "__main__":
    # Example usage
    import numpy as np
    from cluster_analysis.agglomerative_clustering import agglomerative, init_clusters
    from cluster_analysis.logging_config import configure_logging
    configure_logging("INFO")
    rng = np.random.RandomState(0)
    A = rng.uniform(100.0, 300.0, size=(10, 2))
    B = rng.uniform(600.0, 900.0, size=(8, 2))
    X = np.vstack([A, B])
    points = [(i, x, y) for i, (x, y) in enumerate(X)]

    clusters = agglomerative(init_clusters(points), n_clusters=2, linkage='average')

    fig, ax = plt.subplots()
    plot_clusters(ax, clusters)
    plt.show()
