"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import logging

import numpy as np
import pytest


def euclidean_distances(X: np.ndarray) -> np.ndarray:
    """Full Euclidean distance matrix of the rows of X."""
    return np.linalg.norm(X[:, None, :] - X[None, :, :], axis=-1)


@pytest.fixture
def blobs():
    """
    Three well separated 2-D blobs of 10 points each.

    Returns (points, true labels).
    """
    rng = np.random.default_rng(42)
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [0.0, 10.0]])
    X = np.vstack([c + rng.standard_normal((10, 2)) * 0.5 for c in centers])
    labels = np.repeat(np.arange(3), 10)
    return X, labels


@pytest.fixture
def blob_distances(blobs):
    """Distance matrix of the blobs and their true labels."""
    X, labels = blobs
    return euclidean_distances(X), labels


@pytest.fixture
def line_distances():
    """Distance matrix of the points 0, 1, 2, 3, 4 on a line."""
    x = np.arange(5, dtype=float)
    return np.abs(x[:, None] - x[None, :])


@pytest.fixture
def random_distances():
    """Symmetric distance matrix of 25 random 3-D points."""
    rng = np.random.default_rng(7)
    return euclidean_distances(rng.standard_normal((25, 3)))


@pytest.fixture
def reset_package_logger():
    """Restore the package logger after a test that configures logging."""
    from ocr_cluster.utils import logging_config

    yield
    root = logging.getLogger(logging_config.PACKAGE_LOGGER_NAME)
    if logging_config._handler is not None:
        root.removeHandler(logging_config._handler)
        logging_config._handler = None
    root.setLevel(logging.NOTSET)
