"""
Affinity propagation clustering.

Frey B.J., Dueck D., Clustering by passing messages between data points,
Science 315, 2007.

Elements exchange responsibility and availability messages until a stable
set of exemplars emerges. The number of clusters is driven by the
"preference" (self-similarity) of each element rather than given upfront.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence, Tuple, Union
import numpy as np

from ..errors import DimensionError, DomainError
from ..utils.logging_config import get_logger
from ._shared import MatrixLike, as_square_matrix

logger = get_logger(__name__)


class AffinityClusters(Enum):
    """Heuristics to pick the preference from the distances."""

    MEDIUM = "medium"  # self-similarity = -median distance
    LOW = "low"  # self-similarity = -maximal distance, fewer clusters


Preference = Union[AffinityClusters, float, Sequence[float], np.ndarray]


def _preference_vector(D: np.ndarray, preference: Preference) -> np.ndarray:
    """Self-similarity of each element for the given preference policy."""
    n = D.shape[0]
    if isinstance(preference, AffinityClusters):
        if n == 0:
            return np.zeros(0)
        if preference is AffinityClusters.MEDIUM:
            # the n diagonal zeros sort first and are skipped
            values = np.sort(D, axis=None)
            value = values[min((values.size + n) // 2, values.size - 1)]
        else:
            value = D.max()
        return np.full(n, -float(value))
    if np.isscalar(preference):
        return np.full(n, float(preference))
    pref = np.asarray(preference, dtype=np.float64)
    if pref.ndim != 1 or pref.shape[0] != n:
        raise DimensionError(
            "affinity_propagation: the preference is not the same dimension "
            f"as the distance matrix ({pref.shape} vs {n})."
        )
    return pref


def affinity_propagation(
    distance_matrix: MatrixLike,
    preference: Preference = AffinityClusters.MEDIUM,
    damping: float = 0.5,
    stable_iters_stop: int = 10,
    max_iter: int = 100,
) -> Tuple[np.ndarray, List[int]]:
    """
    Compute clusters and their exemplars.

    The similarity of two elements is their negated distance. The
    preference sets the self-similarity of each element: the higher it is,
    the more likely the element is to become an exemplar, and the more
    clusters are produced.

    Args:
        distance_matrix: Square (n, n) distance matrix
        preference: ``AffinityClusters.MEDIUM`` / ``AffinityClusters.LOW``,
            a scalar self-similarity shared by all elements, or one
            self-similarity per element
        damping: Weight of the previous message in each update, in [0, 1).
            Higher values converge slower; low values may oscillate.
        stable_iters_stop: Number of consecutive iterations with the same
            non-empty set of exemplars needed to stop (must be > 1)
        max_iter: Maximal number of iterations (must be > 1)

    Returns:
        Tuple of:
        - labels: cluster index of each element, shape (n,)
        - exemplars: element index of each cluster's exemplar

    Raises:
        DimensionError: If the matrix is not square or the preference
            vector has the wrong length
        DomainError: If damping, stable_iters_stop or max_iter is out of range
    """
    if damping < 0.0 or damping >= 1.0:
        raise DomainError("affinity_propagation: the damping must be in [0, 1[.")
    if stable_iters_stop <= 1:
        raise DomainError(
            "affinity_propagation: the number of stable iterations to stop must be > 1."
        )
    if max_iter <= 1:
        raise DomainError(
            "affinity_propagation: the maximal number of iterations must be > 1."
        )

    D = as_square_matrix(distance_matrix, "affinity_propagation")
    n = D.shape[0]
    S = -D.copy()
    S[np.diag_indices(n)] = _preference_vector(D, preference)
    if n == 0:
        return np.zeros(0, dtype=int), []
    if n == 1:
        return np.zeros(1, dtype=int), [0]

    R = np.zeros((n, n))
    A = np.zeros((n, n))
    rows = np.arange(n)
    exemplars = np.zeros(0, dtype=int)
    identical = 0
    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        # responsibility: r(i,k) = s(i,k) - max_{k' != k} (a(i,k') + s(i,k'))
        AS = A + S
        first = np.argmax(AS, axis=1)
        first_val = AS[rows, first]
        AS[rows, first] = -np.inf
        second_val = AS.max(axis=1) if n > 1 else np.full(n, -np.inf)
        competing = np.repeat(first_val[:, None], n, axis=1)
        competing[rows, first] = second_val
        R = damping * R + (1.0 - damping) * (S - competing)

        # availability: a(i,k) = min(0, r(k,k) + sum_{i' not in {i,k}} max(0, r(i',k)))
        #               a(k,k) = sum_{i' != k} max(0, r(i',k))
        Rp = np.maximum(R, 0.0)
        Rp[rows, rows] = R[rows, rows]
        column = Rp.sum(axis=0)
        new_A = column[None, :] - Rp
        diag = new_A[rows, rows].copy()
        new_A = np.minimum(new_A, 0.0)
        new_A[rows, rows] = diag
        A = damping * A + (1.0 - damping) * new_A

        decision = np.argmax(A + R, axis=1)
        new_exemplars = np.flatnonzero(decision == rows)
        if new_exemplars.size == 0:
            # no exemplar yet: nothing to be stable about
            exemplars = new_exemplars
            identical = 0
        elif np.array_equal(new_exemplars, exemplars):
            identical += 1
        else:
            exemplars = new_exemplars
            identical = 0
        if identical >= stable_iters_stop:
            break
    else:
        logger.info(
            "affinity_propagation reached max_iter=%d before %d stable iterations",
            max_iter,
            stable_iters_stop,
        )

    if exemplars.size == 0:
        fallback = int(np.argmax(np.diag(A + R)))
        logger.warning(
            "affinity_propagation found no exemplar, using element %d", fallback
        )
        exemplars = np.array([fallback])

    labels = np.argmax(S[:, exemplars], axis=1)
    labels[exemplars] = np.arange(exemplars.size)
    logger.debug(
        "affinity_propagation: %d clusters after %d iterations", exemplars.size, n_iter
    )
    return labels.astype(int), [int(e) for e in exemplars]
