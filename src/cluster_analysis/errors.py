"""
Exception hierarchy shared by the clustering core, the loader and the CLI.
"""

from typing import Optional


class ClusteringError(Exception):
    """Base exception for every error raised by cluster_analysis."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionViolation(ClusteringError, ValueError):
    """A caller broke the contract of a core operation (bad index, empty cluster, ...)."""


class AllocationFailure(ClusteringError, MemoryError):
    """Backing storage for a cluster could not be obtained."""


class LoadError(ClusteringError):
    """The input file is missing or does not follow the expected format."""

    def __init__(self, message: str, filename: Optional[str] = None, lineno: Optional[int] = None):
        super().__init__(message)
        self.filename = filename
        self.lineno = lineno

    def __str__(self):
        location = ""
        if self.filename is not None:
            location = self.filename
            if self.lineno is not None:
                location += f":{self.lineno}"
            location += ": "
        return location + self.message
