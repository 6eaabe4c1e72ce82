"""
Reads clustering input files.

File format::

    count=<positive integer>
    <id> <x> <y>
    ...

with exactly ``count`` object lines and both coordinates in [0, 1000]. Every
object becomes its own singleton cluster.
"""

import re
from pathlib import Path
from typing import List, TextIO, Union

import structlog

from cluster_analysis.agglomerative_clustering import Cluster, Point, init_clusters
from cluster_analysis.errors import LoadError

logger = structlog.get_logger(__name__)

COORDINATE_MIN = 0.0
COORDINATE_MAX = 1000.0

_COUNT_LINE = re.compile(r"^\s*count=(-?\d+)")


def _parse_object(line: str, filename: str, lineno: int) -> Point:
    fields = line.split()
    if len(fields) < 3:
        raise LoadError("Object line needs an id and two coordinates.", filename, lineno)
    try:
        point = Point(int(fields[0]), float(fields[1]), float(fields[2]))
    except ValueError:
        raise LoadError(f"Malformed object line: {line.strip()!r}", filename, lineno) from None

    for value in (point.x, point.y):
        if not COORDINATE_MIN <= value <= COORDINATE_MAX:
            raise LoadError(
                f"Coordinate {value:g} of object {point.id} is outside "
                f"[{COORDINATE_MIN:g}, {COORDINATE_MAX:g}].",
                filename,
                lineno,
            )
    return point


def load_clusters_from(stream: TextIO, filename: str = "<stream>") -> List[Cluster]:
    """
    Parse an open text stream into singleton clusters.

    Blank lines are skipped and fields after the third on an object line are ignored.

    @raises LoadError: on a bad count line, a bad object line or a count mismatch.
    """
    count = None
    points: List[Point] = []
    for lineno, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        if count is None:
            match = _COUNT_LINE.match(line)
            if match is None:
                raise LoadError("Expected 'count=<number>' as the first line.", filename, lineno)
            count = int(match.group(1))
            if count < 1:
                raise LoadError("Object count must be positive.", filename, lineno)
            continue
        points.append(_parse_object(line, filename, lineno))

    if count is None:
        raise LoadError("File is empty.", filename)
    if len(points) != count:
        raise LoadError(f"Declared count={count} but found {len(points)} objects.", filename)

    logger.debug("objects_loaded", filename=filename, count=count)
    return init_clusters(points)


def load_clusters(path: Union[str, Path]) -> List[Cluster]:
    """
    Load singleton clusters from the file at path.

    @raises LoadError: if the file cannot be read or is malformed.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            return load_clusters_from(handle, str(path))
    except OSError as exc:
        raise LoadError(f"Cannot read file: {exc.strerror}", str(path)) from exc
