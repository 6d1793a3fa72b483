"""
k-medoids clustering on a precomputed distance matrix.

The engine alternates an assignment step and a medoid update step. How the
medoids are seeded and how they move are pluggable:

- init strategies: ``init_central(k)`` (Park & Jun) and ``init_pam(k)``
  (PAM build phase), each returning a callable ``init(D) -> medoids``.
- update strategies: ``update_local`` (Park & Jun) and ``update_pam`` (PAM
  swap phase), called as ``update(medoids, clusters, D) -> medoids``.

Any callable with the same signature can be plugged in.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple
import numpy as np

from ..errors import DomainError
from ..utils.logging_config import get_logger
from ._shared import MatrixLike, as_square_matrix

logger = get_logger(__name__)

# One sorted list of (distance to medoid, element index) per cluster
Clusters = List[List[Tuple[float, int]]]
InitStrategy = Callable[[np.ndarray], List[int]]
UpdateStrategy = Callable[[List[int], Clusters, np.ndarray], List[int]]


def _check_k(k: int, n: int, context: str) -> None:
    if k < 1 or k > n:
        raise DomainError(
            f"{context}: the number of clusters must be in [1, {n}], got {k}."
        )


# ------------------------------------------------------------------
# Initialization strategies
# ------------------------------------------------------------------


def init_central(k: int) -> InitStrategy:
    """
    Seed with the k most central elements.

    Each element gets the score ``v[j] = sum_i D[i][j] / sum(D[i])`` and
    the k lowest scores are picked, lowest index first on ties.

    Park H-S, Jun C-H, A simple and fast algorithm for K-medoids
    clustering, Expert Systems with Applications 36(2), 2009.

    Args:
        k: Number of clusters

    Returns:
        ``init(D) -> list of k medoid indices``
    """

    def central(distance_matrix: np.ndarray) -> List[int]:
        D = np.asarray(distance_matrix, dtype=np.float64)
        _check_k(k, D.shape[0], "init_central")
        lsum = D.sum(axis=1, keepdims=True)
        ratios = np.divide(D, lsum, out=np.zeros_like(D), where=lsum != 0)
        v = ratios.sum(axis=0)
        medoids = []
        for _ in range(k):
            m = int(np.argmin(v))
            medoids.append(m)
            v[m] = np.inf
        return medoids

    return central


def init_pam(k: int) -> InitStrategy:
    """
    Seed with the PAM build phase.

    The first medoid is the element with the lowest distance sum; each
    following one is the non-medoid that most reduces the distance of the
    population to its nearest medoid.

    Args:
        k: Number of clusters

    Returns:
        ``init(D) -> list of k medoid indices``
    """

    def pam(distance_matrix: np.ndarray) -> List[int]:
        D = np.asarray(distance_matrix, dtype=np.float64)
        _check_k(k, D.shape[0], "init_pam")
        medoids = [int(np.argmin(D.sum(axis=1)))]
        for _ in range(1, k):
            nearest = D[:, medoids].min(axis=1)
            # gain[i] = sum_j max(0, nearest[j] - D[j][i])
            gains = np.maximum(nearest[:, None] - D, 0.0).sum(axis=0)
            gains[medoids] = -np.inf
            medoids.append(int(np.argmax(gains)))
        return medoids

    return pam


# ------------------------------------------------------------------
# Update strategies
# ------------------------------------------------------------------


def update_local(
    medoids: List[int], clusters: Clusters, distance_matrix: np.ndarray
) -> List[int]:
    """
    Move each medoid to the member of its cluster with the lowest distance
    sum to the other members.

    Ties go to the first member in the cluster's order, i.e. the one
    closest to the previous medoid. An empty cluster keeps its medoid.
    """
    D = np.asarray(distance_matrix, dtype=np.float64)
    new_medoids = list(medoids)
    for m, cluster in enumerate(clusters):
        if not cluster:
            logger.debug("Cluster %d is empty, medoid %d kept", m, medoids[m])
            continue
        members = np.array([o for _, o in cluster], dtype=int)
        sums = D[np.ix_(members, members)].sum(axis=0)
        new_medoids[m] = int(members[int(np.argmin(sums))])
    return new_medoids


def update_pam(
    medoids: List[int], clusters: Clusters, distance_matrix: np.ndarray
) -> List[int]:
    """
    PAM swap phase: perform the single best medoid/non-medoid swap.

    For every medoid position i and non-medoid h, the cost change T_ih of
    replacing medoid i by h is evaluated over the whole population. The
    lowest T_ih wins (first found on ties, visiting medoids in order and
    candidates in cluster order); the swap is applied only if T_ih < 0, so
    at most one medoid changes per call.

    T_ih is the exact change of the total distance: an element whose
    nearest medoid is i falls back on its nearest medoid other than i. An
    element at a distance tie between i and another medoid therefore loses
    nothing when i is removed, whichever cluster it was assigned to.
    """
    D = np.asarray(distance_matrix, dtype=np.float64)
    k = len(medoids)
    medoid_set = set(medoids)

    elements = np.array([o for cluster in clusters for _, o in cluster], dtype=int)
    current = np.array([d for cluster in clusters for d, _ in cluster], dtype=np.float64)
    candidates = np.array(
        [o for cluster in clusters for _, o in cluster if o not in medoid_set],
        dtype=int,
    )
    if candidates.size == 0:
        return list(medoids)

    to_medoids = D[np.ix_(elements, medoids)]
    to_candidates = D[np.ix_(elements, candidates)]

    best_cost, best_i, best_h = np.inf, 0, 0
    for i in range(k):
        # elements whose nearest medoid is medoid i
        in_i = to_medoids[:, i] <= current
        if k > 1:
            second = np.delete(to_medoids, i, axis=1).min(axis=1)
        else:
            second = np.full(elements.size, np.inf)
        delta = np.where(
            in_i[:, None],
            np.minimum(to_candidates, second[:, None]) - current[:, None],
            np.minimum(to_candidates - current[:, None], 0.0),
        )
        costs = delta.sum(axis=0)
        c = int(np.argmin(costs))
        if costs[c] < best_cost:
            best_cost, best_i, best_h = float(costs[c]), i, int(candidates[c])

    new_medoids = list(medoids)
    if best_cost < 0:
        logger.debug(
            "PAM swap: medoid %d -> %d (cost change %.6g)",
            medoids[best_i],
            best_h,
            best_cost,
        )
        new_medoids[best_i] = best_h
    return new_medoids


# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------


def _assign(D: np.ndarray, medoids: List[int]) -> Tuple[np.ndarray, Clusters, float]:
    """Assign each element to its nearest medoid (first medoid on ties)."""
    n = D.shape[0]
    sub = D[:, medoids]
    labels = np.argmin(sub, axis=1)
    nearest = sub[np.arange(n), labels]
    clusters: Clusters = []
    for c in range(len(medoids)):
        members = np.flatnonzero(labels == c)
        order = np.lexsort((members, nearest[members]))
        clusters.append([(float(nearest[o]), int(o)) for o in members[order]])
    return labels.astype(int), clusters, float(nearest.sum())


def run_kmedoids(
    init: InitStrategy,
    update: UpdateStrategy,
    distance_matrix: MatrixLike,
    max_iter: Optional[int] = None,
) -> Tuple[np.ndarray, Clusters, List[int]]:
    """
    k-medoids clustering.

    Iterates assignment and update until the total distance of the
    elements to their medoid is exactly equal to the previous iteration's
    (no tolerance), or until *max_iter* iterations were run.

    Args:
        init: ``init(D) -> medoids``; k is the length of the returned list
        update: ``update(medoids, clusters, D) -> new medoids``
        distance_matrix: Square (n, n) distance matrix
        max_iter: Maximal number of iterations (None for no limit)

    Returns:
        Tuple of:
        - labels: cluster index of each element, shape (n,)
        - clusters: per cluster, (distance to medoid, element) pairs sorted
          by distance then element index
        - medoids: final medoid indices

    Raises:
        DimensionError: If the distance matrix is not square
    """
    D = as_square_matrix(distance_matrix, "run_kmedoids")
    n = D.shape[0]

    medoids = [int(m) for m in init(D)]
    k = len(medoids)

    labels = np.zeros(n, dtype=int)
    clusters: Clusters = [[] for _ in range(k)]
    objective, previous = 0.0, np.inf
    n_iter = 0
    while previous != objective:
        previous = objective
        labels, clusters, objective = _assign(D, medoids)
        medoids = [int(m) for m in update(medoids, clusters, D)]
        n_iter += 1
        if max_iter is not None and n_iter >= max_iter:
            break

    if previous != objective:
        logger.info(
            "k-medoids stopped at max_iter=%d before convergence (k=%d, cost=%.6g)",
            n_iter,
            k,
            objective,
        )
    else:
        logger.debug(
            "k-medoids converged after %d iterations (k=%d, cost=%.6g)",
            n_iter,
            k,
            objective,
        )
    return labels, clusters, medoids
