"""
Shared fixtures for the cluster_analysis tests.
"""

import matplotlib

matplotlib.use("Agg")

import logging

import numpy as np
import pytest
import structlog


# Four objects: a tight diagonal run 1-2-3 and an outlier 4.
DIAGONAL_POINTS = [
    (1, 1.0, 1.0),
    (2, 2.0, 2.0),
    (3, 3.0, 3.0),
    (4, 10.0, 10.0),
]


@pytest.fixture
def diagonal_points():
    return list(DIAGONAL_POINTS)


@pytest.fixture
def random_points():
    """30 objects with distinct ids, shuffled, coordinates in [0, 1000]."""
    rng = np.random.default_rng(7)
    ids = rng.permutation(np.arange(100, 130))
    coords = rng.uniform(0.0, 1000.0, size=(30, 2))
    return [(int(i), float(x), float(y)) for i, (x, y) in zip(ids, coords)]


@pytest.fixture
def write_input(tmp_path):
    """Write an input file from raw text and return its path."""
    def _write(text: str, name: str = "objekty.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def diagonal_file(write_input):
    lines = ["count=4"] + [f"{i} {x:g} {y:g}" for i, x, y in DIAGONAL_POINTS]
    return write_input("\n".join(lines) + "\n")


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() so captured streams never outlive their test."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
