#!/usr/bin/env python3
# agglomerative_clustering.py
"""
Agglomerative clustering of labeled 2-D points with selectable linkage.

Every cluster owns a growable NumPy buffer of (id, x, y) records. Each iteration
of the clustering loop scans all cluster pairs for the smallest inter-cluster
distance, appends the second cluster of that pair onto the first, re-sorts the
result by id and compacts the collection. Supported linkages:
    - 'average' (unweighted pair-group average)
    - 'min'     (nearest neighbour, single linkage)
    - 'max'     (farthest neighbour, complete linkage)

Ties in the nearest-pair search go to the pair scanned last (i ascending, then
j ascending), so the result is fully deterministic.

Doxygen-style docstrings are used (with @param / @return tags).
"""

import math
import operator
from typing import Iterable, Iterator, List, NamedTuple, Tuple

import numpy as np
import structlog

from cluster_analysis.errors import AllocationFailure, PreconditionViolation

__all__ = [
    "POINT_DTYPE",
    "Point",
    "Cluster",
    "point_distance",
    "compute_pairwise_distances",
    "cluster_distance",
    "find_nearest_pair",
    "merge_clusters",
    "remove_cluster",
    "init_clusters",
    "release_clusters",
    "agglomerative",
]

logger = structlog.get_logger(__name__)

POINT_DTYPE = np.dtype([("id", np.int64), ("x", np.float64), ("y", np.float64)])

# Minimum number of slots added when a cluster grows.
CLUSTER_CHUNK = 10

_supported_linkages = {"average", "min", "max"}


class Point(NamedTuple):
    id: int
    x: float
    y: float


def _allocate(capacity: int) -> np.ndarray:
    try:
        return np.empty(capacity, dtype=POINT_DTYPE)
    except (MemoryError, ValueError) as exc:
        raise AllocationFailure(f"Cannot allocate storage for {capacity} objects.") from exc


def _grown_capacity(capacity: int, required: int) -> int:
    return max(capacity * 2, capacity + CLUSTER_CHUNK, required)


class Cluster:
    """
    Ordered, growable sequence of points.

    Storage grows geometrically (at least CLUSTER_CHUNK slots at a time), so a run
    of appends costs amortized O(1) each.
    """

    def __init__(self, capacity: int = 0):
        """
        @param capacity: number of slots to reserve up front (>= 0).
        @raises PreconditionViolation: if capacity is not a non-negative integer.
        """
        try:
            capacity = operator.index(capacity)
        except TypeError:
            raise PreconditionViolation(f"Cluster capacity must be an integer, not {capacity!r}.") from None
        if capacity < 0:
            raise PreconditionViolation("Cluster capacity must be non-negative.")
        self.size = 0
        self._objects = _allocate(capacity)

    @property
    def capacity(self) -> int:
        return int(self._objects.shape[0])

    @property
    def objects(self) -> np.ndarray:
        """Structured view (dtype POINT_DTYPE) of the occupied slots."""
        return self._objects[: self.size]

    @property
    def ids(self) -> np.ndarray:
        return self.objects["id"]

    @property
    def coordinates(self) -> np.ndarray:
        """Array of shape (size, 2) holding the x and y columns."""
        objects = self.objects
        return np.column_stack((objects["x"], objects["y"]))

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Point]:
        for record in self.objects:
            yield Point(int(record["id"]), float(record["x"]), float(record["y"]))

    def __getitem__(self, index: int) -> Point:
        record = self.objects[index]
        return Point(int(record["id"]), float(record["x"]), float(record["y"]))

    def __repr__(self):
        return f"Cluster(size={self.size}, capacity={self.capacity}, ids={self.ids.tolist()})"

    def reserve(self, new_capacity: int) -> None:
        """
        Grow the backing storage to hold at least new_capacity points.
        Requests at or below the current capacity do nothing.

        @raises AllocationFailure: if the new buffer cannot be allocated.
        """
        if new_capacity <= self.capacity:
            return
        objects = _allocate(new_capacity)
        objects[: self.size] = self._objects[: self.size]
        self._objects = objects

    def append(self, point) -> None:
        """
        Add a point as the new last element.

        @param point: Point, (id, x, y) tuple or POINT_DTYPE record.
        """
        if self.size >= self.capacity:
            self.reserve(_grown_capacity(self.capacity, self.size + 1))
        self._objects[self.size] = (int(point[0]), float(point[1]), float(point[2]))
        self.size += 1

    def extend(self, other: "Cluster") -> None:
        """Append every point of other, in order."""
        needed = self.size + other.size
        if needed > self.capacity:
            self.reserve(_grown_capacity(self.capacity, needed))
        self._objects[self.size:needed] = other.objects
        self.size = needed

    def sort(self) -> None:
        """Sort the points ascending by id (stable)."""
        order = np.argsort(self.ids, kind="stable")
        self._objects[: self.size] = self.objects[order]

    def release(self) -> None:
        """Free the backing storage and reset to an empty cluster."""
        self._objects = _allocate(0)
        self.size = 0


def point_distance(p1: Point, p2: Point) -> float:
    """
    Euclidean distance between two points.

    @param p1: first point
    @param p2: second point
    @return: sqrt((x1 - x2)^2 + (y1 - y2)^2)
    """
    return float(np.hypot(p1.x - p2.x, p1.y - p2.y))


def compute_pairwise_distances(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """
    Compute the Euclidean distance between every row of A and every row of B.

    Differences are taken explicitly (not through the |a|^2 + |b|^2 - 2ab expansion)
    so that D(A, B) is exactly the transpose of D(B, A) and equal point offsets give
    bit-identical distances.

    @param A: array shape (n, 2)
    @param B: array shape (m, 2)
    @return: array D shape (n, m) where D[i, j] is the distance between A[i] and B[j].
    """
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    diff = A[:, np.newaxis, :] - B[np.newaxis, :, :]
    return np.hypot(diff[..., 0], diff[..., 1])


def _check_linkage(linkage: str) -> None:
    if linkage not in _supported_linkages:
        raise PreconditionViolation(f"Unsupported linkage: {linkage}")


def cluster_distance(c1: Cluster, c2: Cluster, linkage: str = "average") -> float:
    """
    Distance between two non-empty clusters under the given linkage.

    @param c1: first cluster
    @param c2: second cluster
    @param linkage: 'average' | 'min' | 'max'
    @return: mean, minimum or maximum of the size(c1) * size(c2) pairwise distances.
    @raises PreconditionViolation: on an empty cluster or an unknown linkage.
    """
    _check_linkage(linkage)
    if c1.size == 0 or c2.size == 0:
        raise PreconditionViolation("Cluster distance is undefined for an empty cluster.")

    D = compute_pairwise_distances(c1.coordinates, c2.coordinates)
    if linkage == "min":
        return float(D.min())
    elif linkage == "max":
        return float(D.max())
    # fsum is exactly rounded, so the mean does not depend on argument order;
    # the clamp keeps it inside [min, max] despite rounding in the division
    mean = math.fsum(D.flat) / D.size
    return min(max(mean, float(D.min())), float(D.max()))


def find_nearest_pair(clusters: List[Cluster], linkage: str = "average") -> Tuple[int, int, float]:
    """
    Find the two closest clusters by exhaustive search over all pairs.

    Pairs are scanned with i ascending, then j ascending; on an exact tie the pair
    scanned last wins.

    @param clusters: list of at least two non-empty clusters
    @param linkage: 'average' | 'min' | 'max'
    @return: tuple (i, j, distance) with i < j
    @raises PreconditionViolation: if fewer than two clusters are given.
    """
    count = len(clusters)
    if count < 2:
        raise PreconditionViolation("At least two clusters are needed to find a pair.")

    best = np.inf
    best_i, best_j = 0, 1
    for i in range(count):
        for j in range(i + 1, count):
            dist = cluster_distance(clusters[i], clusters[j], linkage)
            if dist <= best:
                best = dist
                best_i, best_j = i, j
    return best_i, best_j, float(best)


def merge_clusters(target: Cluster, source: Cluster) -> None:
    """
    Append every point of source onto target, then sort target by id.
    source itself is left untouched; remove it with remove_cluster.

    @param target: cluster that grows (modified in-place)
    @param source: cluster whose points are copied
    @raises PreconditionViolation: if target and source are the same cluster.
    """
    if target is source:
        raise PreconditionViolation("Cannot merge a cluster with itself.")
    target.extend(source)
    target.sort()


def remove_cluster(clusters: List[Cluster], idx: int) -> int:
    """
    Remove the cluster at idx by moving every following cluster one slot earlier.
    The removed cluster's storage is released.

    @param clusters: list of clusters (modified in-place)
    @param idx: index of the cluster to remove, 0 <= idx < len(clusters)
    @return: new number of clusters
    @raises PreconditionViolation: if idx is out of range.
    """
    count = len(clusters)
    if not 0 <= idx < count:
        raise PreconditionViolation(f"Cluster index {idx} out of range for {count} clusters.")

    removed = clusters[idx]
    for k in range(idx, count - 1):
        clusters[k] = clusters[k + 1]
    clusters.pop()
    removed.release()
    return count - 1


def init_clusters(points: Iterable) -> List[Cluster]:
    """
    Build one singleton cluster per point.

    @param points: iterable of Point / (id, x, y) records, or an array shape (n, 3)
    @return: list of clusters, each holding exactly one point
    """
    clusters: List[Cluster] = []
    for point in points:
        cluster = Cluster(1)
        cluster.append(point)
        clusters.append(cluster)
    return clusters


def release_clusters(clusters: List[Cluster]) -> None:
    for cluster in clusters:
        cluster.release()
    clusters.clear()


def agglomerative(clusters: List[Cluster],
                  n_clusters: int = 1,
                  linkage: str = "average") -> List[Cluster]:
    """
    Merge the closest pair of clusters until n_clusters remain.

    @param clusters: initial clusters (modified in-place)
    @param n_clusters: desired number of clusters (1 <= n_clusters <= len(clusters))
    @param linkage: one of 'average', 'min', 'max'

    @return: the same list, now holding exactly n_clusters clusters, each sorted by id
    @raises PreconditionViolation: on an unknown linkage or n_clusters out of range.
    """
    _check_linkage(linkage)
    if not (1 <= n_clusters <= len(clusters)):
        raise PreconditionViolation("n_clusters must be between 1 and the number of clusters.")

    log = logger.bind(linkage=linkage, n_clusters=n_clusters)
    log.info("clustering_started", initial_clusters=len(clusters))

    while len(clusters) > n_clusters:
        i, j, dist = find_nearest_pair(clusters, linkage)
        merge_clusters(clusters[i], clusters[j])
        remove_cluster(clusters, j)
        log.debug("clusters_merged", first=i, second=j, distance=dist,
                  merged_size=clusters[i].size, remaining=len(clusters))

    log.info("clustering_finished", clusters=len(clusters))
    return clusters
