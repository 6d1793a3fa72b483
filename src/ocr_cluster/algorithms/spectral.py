"""
Spectral clustering (Ng, Jordan & Weiss).

Builds a Gaussian affinity graph from a distance matrix, normalizes it as
``D^-1/2 W D^-1/2`` and eigendecomposes it. The top eigenvectors give an
embedding of the population in which clusters are easy to separate, e.g.
with k-means, and the eigenvalues close to 1 hint at the number of
clusters.

Instances are created through one of the scale policies:

- ``create_local_scale_from_nn``: one bandwidth per element, from its
  k-th nearest neighbour (Zelnik-Manor & Perona).
- ``create_global_scale_from_nn``: mean of those per-element bandwidths.
- ``create_global_scale_from_dimension``: derived from the spread of the
  data and the dimension of the original space.
- ``create_fixed_scale``: bandwidth given by the caller.
"""

from __future__ import annotations

from typing import List, Tuple
import numpy as np

from ..errors import DimensionError, DomainError
from ..utils.logging_config import get_logger
from ._shared import MatrixLike, as_square_matrix

logger = get_logger(__name__)


def _nonempty_matrix(distance_matrix: MatrixLike, context: str) -> np.ndarray:
    D = as_square_matrix(distance_matrix, context)
    if D.shape[0] == 0:
        raise DimensionError(f"{context}: empty distance matrix.")
    return D


def _neighbour_distances(D: np.ndarray, neighborhood: int) -> np.ndarray:
    """Distance from each element to its *neighborhood*-th nearest distinct distance."""
    n = D.shape[0]
    sigmas = np.zeros(n)
    for r in range(n):
        others = np.unique(np.delete(D[r], r))
        if others.size == 0:
            continue
        sigmas[r] = others[min(neighborhood, others.size) - 1]
    return sigmas


def _gaussian_affinity(D: np.ndarray, denominator: np.ndarray, epsilon: float) -> np.ndarray:
    """``exp(-d^2 / denominator)``, zero on the diagonal and beyond *epsilon*."""
    sq = D * D
    denominator = np.broadcast_to(denominator, D.shape)
    # a null bandwidth only links elements at distance zero
    scaled = np.divide(
        sq,
        denominator,
        out=np.where(sq == 0, 0.0, np.inf),
        where=denominator > 0,
    )
    W = np.exp(-scaled)
    W[D > epsilon] = 0.0
    np.fill_diagonal(W, 0.0)
    return W


class SpectralClustering:
    """
    Eigen-decomposition of a normalized affinity graph.

    Use the ``create_*`` class methods to build an instance.
    """

    def __init__(self, affinity: np.ndarray):
        """
        Compute the eigenpairs of the normalized affinity matrix.

        Args:
            affinity: Symmetric (n, n) affinity matrix W
        """
        W = np.asarray(affinity, dtype=np.float64)
        degree = W.sum(axis=1)
        inv_sqrt = np.zeros_like(degree)
        nz = degree != 0
        inv_sqrt[nz] = 1.0 / np.sqrt(degree[nz])
        L = inv_sqrt[:, None] * W * inv_sqrt[None, :]

        values, vectors = np.linalg.eigh(L)
        self._eigenpairs: List[Tuple[float, np.ndarray]] = [
            (float(values[i]), vectors[:, i].copy()) for i in range(values.size)
        ]
        logger.debug(
            "Spectral decomposition of %d elements, top eigenvalue %.6g",
            W.shape[0],
            values[-1] if values.size else float("nan"),
        )

    # ------------------------------------------------------------------
    # Scale policies
    # ------------------------------------------------------------------

    @classmethod
    def create_local_scale_from_nn(
        cls,
        distance_matrix: MatrixLike,
        sigma_neighborhood: int = 7,
        epsilon: float = np.inf,
    ) -> "SpectralClustering":
        """
        Clustering with a local automatic scale.

        Args:
            distance_matrix: Square distance matrix
            sigma_neighborhood: Rank of the neighbour whose distance is the
                local scale of each element
            epsilon: Elements farther apart than this are never linked

        Raises:
            ValueError: If sigma_neighborhood < 1
            DimensionError: If the matrix is empty or not square
        """
        if sigma_neighborhood < 1:
            raise ValueError("Neighborhood to compute sigma must be >= 1.")
        D = _nonempty_matrix(distance_matrix, "create_local_scale_from_nn")
        sigmas = _neighbour_distances(D, sigma_neighborhood)
        return cls(_gaussian_affinity(D, 2.0 * np.outer(sigmas, sigmas), epsilon))

    @classmethod
    def create_global_scale_from_nn(
        cls,
        distance_matrix: MatrixLike,
        sigma_neighborhood: int = 1,
        epsilon: float = np.inf,
    ) -> "SpectralClustering":
        """
        Clustering with a global scale: the mean distance of the elements
        to their *sigma_neighborhood*-th neighbour.

        Raises:
            ValueError: If sigma_neighborhood < 1
            DimensionError: If the matrix is empty or not square
        """
        if sigma_neighborhood < 1:
            raise ValueError("Neighborhood to compute sigma must be >= 1.")
        D = _nonempty_matrix(distance_matrix, "create_global_scale_from_nn")
        sigma = float(_neighbour_distances(D, sigma_neighborhood).mean())
        return cls.create_fixed_scale(D, sigma, epsilon)

    @classmethod
    def create_global_scale_from_dimension(
        cls,
        distance_matrix: MatrixLike,
        dimension: int,
        epsilon: float = np.inf,
    ) -> "SpectralClustering":
        """
        Clustering with a global scale: ``max distance / (2 n^(1/dimension))``.

        Args:
            distance_matrix: Square distance matrix
            dimension: Dimension of the space the original data lives in
            epsilon: Elements farther apart than this are never linked

        Raises:
            ValueError: If dimension < 1
            DimensionError: If the matrix is empty or not square
        """
        if dimension < 1:
            raise ValueError("Dimension must be >= 1.")
        D = _nonempty_matrix(distance_matrix, "create_global_scale_from_dimension")
        n = D.shape[0]
        sigma = float(np.triu(D).max()) / (2.0 * n ** (1.0 / dimension))
        return cls.create_fixed_scale(D, sigma, epsilon)

    @classmethod
    def create_fixed_scale(
        cls,
        distance_matrix: MatrixLike,
        sigma: float,
        epsilon: float = np.inf,
    ) -> "SpectralClustering":
        """
        Clustering with a scale given by the caller.

        Raises:
            ValueError: If sigma < 0
            DimensionError: If the matrix is empty or not square
        """
        if sigma < 0.0:
            raise ValueError("Sigma must be positive.")
        D = _nonempty_matrix(distance_matrix, "create_fixed_scale")
        return cls(_gaussian_affinity(D, np.array(2.0 * sigma * sigma), epsilon))

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def eigenpairs(self) -> List[Tuple[float, np.ndarray]]:
        """(eigenvalue, eigenvector) pairs sorted by increasing eigenvalue."""
        return self._eigenpairs

    def get_eigenpairs(self) -> List[Tuple[float, np.ndarray]]:
        return self._eigenpairs

    def get_eigenvalues(self) -> List[float]:
        """Eigenvalues sorted from highest to lowest."""
        return [value for value, _ in reversed(self._eigenpairs)]

    def estimate_cluster_number(self, limit: float = 1.0) -> int:
        """
        Estimate the number of clusters.

        Counts the eigenvalues that reach *limit*. Ideally each cluster
        contributes an eigenvalue of exactly 1; numerical errors may make a
        slightly lower limit (e.g. 0.9) necessary.

        Args:
            limit: Minimal eigenvalue to count, in [0, 1]

        Returns:
            The estimated number of clusters (at least 1), which is also
            the dimension to use with ``project_data``.

        Raises:
            DomainError: If limit is outside [0, 1]
        """
        if limit < 0.0 or limit > 1.0:
            raise DomainError("Eigenvalues should be in [0, 1].")
        count = 0
        for value in self.get_eigenvalues():
            if value < limit:
                break
            count += 1
        return max(count, 1)

    def project_data(self, n_coordinates: int, normalize: bool) -> np.ndarray:
        """
        Project the population on the eigenvectors of the highest eigenvalues.

        Args:
            n_coordinates: Dimension of the projection space. Coordinates
                beyond the population size are left at zero.
            normalize: Scale every projected element to unit length (last
                step of Ng-Jordan-Weiss, before running k-means on the rows)

        Returns:
            Array of shape (n, n_coordinates)

        Raises:
            DimensionError: If n_coordinates < 1
        """
        if n_coordinates < 1:
            raise DimensionError("Cannot project on less than one coordinate.")
        n = len(self._eigenpairs)
        data = np.zeros((n, n_coordinates))
        top = list(reversed(self._eigenpairs))[:n_coordinates]
        for coord, (_, vector) in enumerate(top):
            data[:, coord] = vector
        if normalize:
            norms = np.linalg.norm(data, axis=1, keepdims=True)
            data = np.divide(data, norms, out=np.zeros_like(data), where=norms > 0)
        return data
