"""
k-means clustering of vectors.

Typically run on the rows returned by ``SpectralClustering.project_data``,
or on any (n, d) feature array. Prototypes are either given by the caller
or seeded with k-means++.
"""

from __future__ import annotations

from typing import Sequence, Tuple, Union
import numpy as np

from ..errors import DimensionError, DomainError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def kmeanspp_seeds(X: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    Indices of *k* distinct rows of *X* picked by k-means++.

    The first row is drawn uniformly; each following one with probability
    proportional to its squared distance to the nearest row already picked.
    When every remaining row coincides with a picked one, the next row is
    drawn uniformly among the remaining rows.
    """
    n = X.shape[0]
    selected = [int(rng.integers(0, n))]
    for _ in range(k - 1):
        sq_dists = ((X[:, None, :] - X[selected][None, :, :]) ** 2).sum(axis=2)
        min_sq = sq_dists.min(axis=1)
        min_sq[selected] = 0.0
        total = min_sq.sum()
        if total == 0.0:
            remaining = np.setdiff1d(np.arange(n), selected)
            selected.append(int(rng.choice(remaining)))
        else:
            selected.append(int(rng.choice(n, p=min_sq / total)))
    return np.array(selected, dtype=int)


def kmeans(
    data: Union[np.ndarray, Sequence],
    prototypes: Union[int, np.ndarray, Sequence],
    max_iter: int = 100,
    seed: int = 0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    k-means clustering.

    Alternates assigning every sample to its nearest prototype (first
    prototype on ties) and moving each prototype to the mean of its
    samples. A prototype whose cluster is empty stays where it is. Stops
    when an assignment repeats the previous one or after *max_iter*
    iterations.

    Args:
        data: (n, d) samples, or (n,) scalars
        prototypes: Number of clusters k (seeded with k-means++ from the
            samples), or the (k, d) initial prototypes
        max_iter: Maximal number of iterations (>= 1)
        seed: Random seed of the k-means++ seeding

    Returns:
        Tuple of:
        - labels: cluster index of each sample, shape (n,)
        - prototypes: final prototypes, shape (k, d), or (k,) for scalar data

    Raises:
        DimensionError: If there are no samples or the prototypes do not
            have the dimension of the samples
        DomainError: If k is not in [1, n] or max_iter < 1
    """
    X = np.asarray(data, dtype=np.float64)
    scalar = X.ndim == 1
    if scalar:
        X = X[:, None]
    if X.ndim != 2 or X.shape[0] == 0:
        raise DimensionError("kmeans: no samples.")
    if max_iter < 1:
        raise DomainError(f"kmeans: max_iter must be >= 1, got {max_iter}.")
    n, d = X.shape

    if np.isscalar(prototypes):
        k = int(prototypes)
        if k < 1 or k > n:
            raise DomainError(f"kmeans: the number of clusters must be in [1, {n}], got {k}.")
        P = X[kmeanspp_seeds(X, k, np.random.default_rng(seed))].copy()
    else:
        P = np.array(prototypes, dtype=np.float64)
        if scalar and P.ndim == 1:
            P = P[:, None]
        if P.ndim != 2 or P.shape[1] != d or P.shape[0] == 0:
            raise DimensionError(
                f"kmeans: prototypes of shape {P.shape} for samples of dimension {d}."
            )
        k = P.shape[0]
        if k > n:
            raise DomainError(f"kmeans: the number of clusters must be in [1, {n}], got {k}.")

    labels = np.full(n, -1, dtype=int)
    for n_iter in range(1, max_iter + 1):
        sq_dists = ((X[:, None, :] - P[None, :, :]) ** 2).sum(axis=2)
        new_labels = np.argmin(sq_dists, axis=1)
        for c in range(k):
            members = new_labels == c
            if members.any():
                P[c] = X[members].mean(axis=0)
        if np.array_equal(new_labels, labels):
            break
        labels = new_labels
    else:
        logger.info("kmeans stopped at max_iter=%d before convergence (k=%d)", max_iter, k)

    logger.debug("kmeans: k=%d after %d iterations", k, n_iter)
    return labels.astype(int), (P[:, 0] if scalar else P)
