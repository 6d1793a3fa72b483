"""
Tests for k-means clustering.
"""

import numpy as np
import pytest

from ocr_cluster.algorithms.evaluation import adjusted_rand_index
from ocr_cluster.algorithms.kmeans import kmeans, kmeanspp_seeds
from ocr_cluster.algorithms.spectral import SpectralClustering
from ocr_cluster.errors import DimensionError, DomainError


# ------------------------------------------------------------------
# Given prototypes
# ------------------------------------------------------------------


def test_given_prototypes(blobs):
    X, truth = blobs
    labels, prototypes = kmeans(X, X[[0, 10, 20]])
    np.testing.assert_array_equal(labels, truth)
    for c in range(3):
        np.testing.assert_allclose(prototypes[c], X[truth == c].mean(axis=0))


def test_prototypes_are_not_modified(blobs):
    X, _ = blobs
    initial = X[[0, 10, 20]].copy()
    kmeans(X, initial)
    np.testing.assert_array_equal(initial, X[[0, 10, 20]])


def test_scalar_data():
    labels, prototypes = kmeans([1.0, 2.0, 3.0, 10.0, 11.0, 12.0], [0.0, 20.0])
    assert list(labels) == [0, 0, 0, 1, 1, 1]
    np.testing.assert_allclose(prototypes, [2.0, 11.0])


def test_empty_cluster_keeps_prototype():
    labels, prototypes = kmeans([1.0, 2.0, 3.0], [0.0, 100.0])
    assert list(labels) == [0, 0, 0]
    np.testing.assert_allclose(prototypes, [2.0, 100.0])


def test_ties_go_to_first_prototype():
    labels, _ = kmeans([1.0, 5.0], [0.0, 2.0], max_iter=1)
    assert list(labels) == [0, 1]


def test_max_iter_limits_moves():
    """One iteration: a single assignment and a single mean update."""
    data = [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    labels, prototypes = kmeans(data, [0.0, 1.0], max_iter=1)
    assert list(labels) == [0, 1, 1, 1, 1, 1]
    np.testing.assert_allclose(prototypes, [0.0, 3.0])


# ------------------------------------------------------------------
# Seeded prototypes
# ------------------------------------------------------------------


def test_seeds_are_distinct(blobs):
    X, _ = blobs
    seeds = kmeanspp_seeds(X, 5, np.random.default_rng(0))
    assert len(set(seeds.tolist())) == 5


def test_seeds_on_duplicated_rows():
    X = np.zeros((4, 2))
    seeds = kmeanspp_seeds(X, 4, np.random.default_rng(1))
    assert sorted(seeds.tolist()) == [0, 1, 2, 3]


def test_seeded_run_is_reproducible(blobs):
    X, _ = blobs
    a_labels, a_proto = kmeans(X, 4, seed=3)
    b_labels, b_proto = kmeans(X, 4, seed=3)
    np.testing.assert_array_equal(a_labels, b_labels)
    np.testing.assert_array_equal(a_proto, b_proto)
    assert a_proto.shape == (4, 2)


def test_seeded_run_is_a_fixed_point(blobs):
    """Prototypes are the means of their clusters and samples their nearest prototype."""
    X, _ = blobs
    labels, prototypes = kmeans(X, 3, seed=0)
    for c in np.unique(labels):
        np.testing.assert_allclose(prototypes[c], X[labels == c].mean(axis=0))
    nearest = np.argmin(((X[:, None, :] - prototypes[None]) ** 2).sum(axis=2), axis=1)
    np.testing.assert_array_equal(nearest, labels)


def test_spectral_projection(blob_distances):
    """k-means on the normalized spectral embedding recovers the blobs."""
    D, truth = blob_distances
    sc = SpectralClustering.create_fixed_scale(D, 1.0, epsilon=5.0)
    k = sc.estimate_cluster_number(0.99)
    labels, prototypes = kmeans(sc.project_data(k, normalize=True), k)
    assert k == 3
    assert prototypes.shape == (3, 3)
    assert adjusted_rand_index(truth, labels) == pytest.approx(1.0)


# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------


@pytest.mark.parametrize("k", [0, 31])
def test_bad_cluster_number(blobs, k):
    X, _ = blobs
    with pytest.raises(DomainError, match="number of clusters"):
        kmeans(X, k)


def test_more_prototypes_than_samples():
    with pytest.raises(DomainError):
        kmeans([1.0, 2.0], [0.0, 1.0, 2.0])


def test_prototype_dimension_mismatch(blobs):
    X, _ = blobs
    with pytest.raises(DimensionError, match="prototypes"):
        kmeans(X, np.zeros((3, 5)))


def test_no_samples():
    with pytest.raises(DimensionError, match="no samples"):
        kmeans(np.zeros((0, 2)), 1)


def test_max_iter_must_be_positive(blobs):
    X, _ = blobs
    with pytest.raises(DomainError, match="max_iter"):
        kmeans(X, 3, max_iter=0)
