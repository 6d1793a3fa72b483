"""
Tests for spectral clustering.
"""

import numpy as np
import pytest

from ocr_cluster.algorithms.evaluation import adjusted_rand_index
from ocr_cluster.algorithms.kmeans import kmeans
from ocr_cluster.algorithms.spectral import SpectralClustering
from ocr_cluster.errors import DimensionError, DomainError


def euclidean_distances(X):
    return np.linalg.norm(X[:, None, :] - X[None, :, :], axis=-1)


@pytest.fixture
def disconnected(blob_distances):
    """Blobs whose affinity graph has one component per blob."""
    D, truth = blob_distances
    return SpectralClustering.create_fixed_scale(D, 1.0, epsilon=5.0), truth


# ------------------------------------------------------------------
# Construction
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "create",
    [
        lambda D: SpectralClustering.create_local_scale_from_nn(D),
        lambda D: SpectralClustering.create_global_scale_from_nn(D),
        lambda D: SpectralClustering.create_global_scale_from_dimension(D, 3),
        lambda D: SpectralClustering.create_fixed_scale(D, 1.0),
    ],
)
def test_one_eigenpair_per_element(random_distances, create):
    n = random_distances.shape[0]
    sc = create(random_distances)
    pairs = sc.get_eigenpairs()
    assert len(pairs) == n
    for value, vector in pairs:
        assert vector.shape == (n,)
        assert np.linalg.norm(vector) == pytest.approx(1.0)
    values = [v for v, _ in pairs]
    assert values == sorted(values)


def test_eigenvalues_descending(random_distances):
    sc = SpectralClustering.create_local_scale_from_nn(random_distances)
    values = sc.get_eigenvalues()
    assert values == sorted(values, reverse=True)
    # the normalized affinity of a connected graph has top eigenvalue 1
    assert values[0] == pytest.approx(1.0)
    assert values[-1] >= -1.0 - 1e-9


def test_global_scale_from_dimension_matches_fixed_scale(random_distances):
    D = random_distances
    n = D.shape[0]
    sigma = D.max() / (2.0 * n ** (1.0 / 3))
    a = SpectralClustering.create_global_scale_from_dimension(D, 3)
    b = SpectralClustering.create_fixed_scale(D, sigma)
    np.testing.assert_allclose(a.get_eigenvalues(), b.get_eigenvalues(), atol=1e-10)


def test_global_scale_from_nn_matches_fixed_scale(random_distances):
    D = random_distances
    masked = D + np.diag(np.full(D.shape[0], np.inf))
    sigma = masked.min(axis=1).mean()
    a = SpectralClustering.create_global_scale_from_nn(D, 1)
    b = SpectralClustering.create_fixed_scale(D, sigma)
    np.testing.assert_allclose(a.get_eigenvalues(), b.get_eigenvalues(), atol=1e-10)


def test_zero_sigma_links_only_identical_elements():
    """With sigma 0 only elements at distance 0 are linked."""
    D = euclidean_distances(np.array([[0.0], [0.0], [5.0]]))
    sc = SpectralClustering.create_fixed_scale(D, 0.0)
    values = sc.get_eigenvalues()
    assert values[0] == pytest.approx(1.0)
    assert values[-1] == pytest.approx(-1.0)


def test_single_element():
    sc = SpectralClustering.create_local_scale_from_nn(np.zeros((1, 1)))
    assert len(sc.eigenpairs) == 1
    assert sc.estimate_cluster_number() == 1


@pytest.mark.parametrize(
    "create,match",
    [
        (lambda D: SpectralClustering.create_local_scale_from_nn(D, 0), "Neighborhood"),
        (lambda D: SpectralClustering.create_global_scale_from_nn(D, 0), "Neighborhood"),
        (lambda D: SpectralClustering.create_global_scale_from_dimension(D, 0), "Dimension"),
        (lambda D: SpectralClustering.create_fixed_scale(D, -1.0), "Sigma"),
    ],
)
def test_invalid_parameters(random_distances, create, match):
    with pytest.raises(ValueError, match=match):
        create(random_distances)


def test_empty_matrix():
    with pytest.raises(DimensionError, match="empty"):
        SpectralClustering.create_local_scale_from_nn(np.zeros((0, 0)))


def test_non_square_matrix():
    with pytest.raises(DimensionError):
        SpectralClustering.create_fixed_scale(np.zeros((2, 3)), 1.0)


# ------------------------------------------------------------------
# Cluster number and projection
# ------------------------------------------------------------------


def test_estimate_cluster_number(disconnected):
    sc, _ = disconnected
    assert sc.estimate_cluster_number(0.99) == 3


def test_estimate_cluster_number_is_at_least_one(random_distances):
    sc = SpectralClustering.create_fixed_scale(random_distances, 1.0)
    assert sc.estimate_cluster_number(1.0) >= 1
    assert sc.estimate_cluster_number(0.0) >= 1


@pytest.mark.parametrize("limit", [-0.1, 1.1])
def test_estimate_cluster_number_limit_out_of_range(disconnected, limit):
    sc, _ = disconnected
    with pytest.raises(DomainError):
        sc.estimate_cluster_number(limit)


def test_project_data_shape_and_norm(disconnected):
    sc, truth = disconnected
    data = sc.project_data(3, normalize=True)
    assert data.shape == (truth.size, 3)
    np.testing.assert_allclose(np.linalg.norm(data, axis=1), 1.0)


def test_project_data_uses_top_eigenvectors(random_distances):
    sc = SpectralClustering.create_fixed_scale(random_distances, 1.0)
    data = sc.project_data(2, normalize=False)
    top = sc.eigenpairs[-1][1]
    second = sc.eigenpairs[-2][1]
    np.testing.assert_array_equal(data[:, 0], top)
    np.testing.assert_array_equal(data[:, 1], second)


def test_project_data_pads_with_zeros(random_distances):
    n = random_distances.shape[0]
    sc = SpectralClustering.create_fixed_scale(random_distances, 1.0)
    data = sc.project_data(n + 2, normalize=False)
    assert data.shape == (n, n + 2)
    np.testing.assert_array_equal(data[:, n:], 0.0)


def test_project_data_needs_a_coordinate(disconnected):
    sc, _ = disconnected
    with pytest.raises(DimensionError):
        sc.project_data(0, normalize=True)


def test_projection_separates_blobs(disconnected):
    """Ng-Jordan-Weiss: clustering the normalized rows recovers the blobs."""
    sc, truth = disconnected
    k = sc.estimate_cluster_number(0.99)
    embedded = sc.project_data(k, normalize=True)
    labels, prototypes = kmeans(embedded, k)
    assert prototypes.shape == (k, k)
    assert adjusted_rand_index(truth, labels) == pytest.approx(1.0)
