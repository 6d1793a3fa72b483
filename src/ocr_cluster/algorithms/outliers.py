"""
Outlier scores.

- Density based scores computed from a distance matrix: Local Outlier
  Factor (Breunig et al., 2000) and Local Outlier Probability (Kriegel et
  al., 2009).
- Statistics for sets of angles: Mardia's E (1975) and Collett's C (1980).
"""

from __future__ import annotations

import math
from typing import Iterable
import numpy as np

from ..errors import DomainError
from ._shared import MatrixLike, as_square_matrix


def _knn(D: np.ndarray, k: int) -> np.ndarray:
    """Indices of the k nearest neighbours of each element, itself excluded."""
    n = D.shape[0]
    masked = D.copy()
    np.fill_diagonal(masked, np.inf)
    order = np.argsort(masked, axis=1, kind="stable")
    return order[:, : min(k, n - 1)]


def _check_neighbourhood(D: np.ndarray, k: int, context: str) -> None:
    if k <= 1:
        raise DomainError(f"{context}: the neighborhood must be > 1.")
    if D.shape[0] <= k:
        raise ValueError(
            f"{context}: the neighborhood ({k}) must be smaller than the "
            f"number of elements ({D.shape[0]})."
        )


def compute_lof(distance_matrix: MatrixLike, k: int) -> np.ndarray:
    """
    Local Outlier Factor of each element.

    About 1 for elements as dense as their neighbours, larger for outliers.

    Args:
        distance_matrix: Square distance matrix
        k: Size of the neighbourhood (> 1 and < number of elements)

    Returns:
        Array of LOFs, shape (n,)

    Raises:
        DimensionError: If the matrix is not square
        DomainError: If k <= 1
        ValueError: If k >= n
    """
    D = as_square_matrix(distance_matrix, "compute_lof")
    _check_neighbourhood(D, k, "compute_lof")
    rows = np.arange(D.shape[0])[:, None]
    knn = _knn(D, k)
    k_distance = D[rows[:, 0], knn[:, -1]]

    # reach-dist(p, o) = max(d(p, o), k-distance(o))
    reach = np.maximum(D[rows, knn], k_distance[knn])
    with np.errstate(divide="ignore", invalid="ignore"):
        lrd = k / reach.sum(axis=1)
        lof = lrd[knn].sum(axis=1) / (k * lrd)
    return lof


def compute_loop(distance_matrix: MatrixLike, k: int, lam: float) -> np.ndarray:
    """
    Local Outlier Probability of each element.

    Args:
        distance_matrix: Square distance matrix
        k: Size of the neighbourhood (> 1 and < number of elements)
        lam: Precision of the density estimation (1 -> 68%, 2 -> 95%,
            3 -> 99.7%)

    Returns:
        Array of probabilities in [0, 1], shape (n,)

    Raises:
        DimensionError: If the matrix is not square
        DomainError: If k <= 1 or lam <= 0
        ValueError: If k >= n
    """
    D = as_square_matrix(distance_matrix, "compute_loop")
    _check_neighbourhood(D, k, "compute_loop")
    if lam <= 0:
        raise DomainError("compute_loop: lambda must be > 0.")
    rows = np.arange(D.shape[0])[:, None]
    knn = _knn(D, k)

    pdist = lam * np.sqrt((D[rows, knn] ** 2).sum(axis=1) / k)
    with np.errstate(divide="ignore", invalid="ignore"):
        plof = pdist / pdist[knn].mean(axis=1) - 1.0
        plof = np.nan_to_num(plof, nan=0.0)
        nplof = lam * math.sqrt(float(np.mean(plof ** 2)))
        if nplof == 0.0:
            return np.zeros(D.shape[0])
        scores = np.array([math.erf(v / (nplof * math.sqrt(2.0))) for v in plof])
    return np.maximum(scores, 0.0)


def _angle_sums(angles: Iterable[float], context: str):
    a = np.asarray(list(angles), dtype=np.float64)
    if a.size < 2:
        raise DomainError(f"{context}: at least two angles are needed.")
    return a, float(np.cos(a).sum()), float(np.sin(a).sum())


def angular_outliers_e(angles: Iterable[float]) -> np.ndarray:
    """
    Outlier E statistic of each angle (Mardia, Statistics of directional
    data, 1975). The lower the value, the more outlying the angle.

    Args:
        angles: Angles in radians

    Raises:
        DomainError: If fewer than two angles are given
    """
    a, c, s = _angle_sums(angles, "angular_outliers_e")
    n = a.size
    spread = 1.0 - math.hypot(c / n, s / n)
    without = np.hypot((c - np.cos(a)) / (n - 1), (s - np.sin(a)) / (n - 1))
    with np.errstate(divide="ignore", invalid="ignore"):
        return (1.0 - without) / spread


def angular_outliers_c(angles: Iterable[float]) -> np.ndarray:
    """
    Outlier C statistic of each angle (Collett, Outliers in circular data,
    1980). The higher the value, the more outlying the angle.

    Args:
        angles: Angles in radians

    Raises:
        DomainError: If fewer than two angles are given
    """
    a, c, s = _angle_sums(angles, "angular_outliers_c")
    n = a.size
    resultant = math.hypot(c / n, s / n)
    without = np.hypot((c - np.cos(a)) / (n - 1), (s - np.sin(a)) / (n - 1))
    with np.errstate(divide="ignore", invalid="ignore"):
        return without / resultant
