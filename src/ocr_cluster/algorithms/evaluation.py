"""
Clustering quality metrics on precomputed distance matrices.

Provides the silhouette score, the adjusted Rand index and the medoid cost,
used to compare clusterings and to pick k.
"""

from __future__ import annotations

from typing import Sequence
import numpy as np

from ._shared import MatrixLike, as_square_matrix


def medoid_cost(distance_matrix: MatrixLike, medoids: Sequence[int]) -> float:
    """
    Total distance of the elements to their nearest medoid.

    Args:
        distance_matrix: Square (n, n) distance matrix
        medoids: Medoid indices

    Returns:
        Sum over elements of the distance to the closest medoid
    """
    D = as_square_matrix(distance_matrix, "medoid_cost")
    if D.shape[0] == 0 or len(medoids) == 0:
        return 0.0
    return float(D[:, list(medoids)].min(axis=1).sum())


def _pair_count(sizes: np.ndarray) -> float:
    """Number of unordered pairs inside groups of the given sizes."""
    sizes = np.asarray(sizes, dtype=np.float64)
    return float((sizes * (sizes - 1.0)).sum() / 2.0)


def adjusted_rand_index(labels_a: np.ndarray, labels_b: np.ndarray) -> float:
    """
    Agreement of two labelings of the same elements, corrected for chance
    (Hubert & Arabie).

    Label values are only compared for equality, so renaming the clusters
    of either labeling does not change the score. 1 means the same
    partition, about 0 means chance agreement.

    Raises:
        ValueError: If the labelings differ in shape
    """
    labels_a = np.asarray(labels_a)
    labels_b = np.asarray(labels_b)
    if labels_a.shape != labels_b.shape:
        raise ValueError(
            f"Label arrays differ in shape: {labels_a.shape} vs {labels_b.shape}"
        )
    n = labels_a.size
    if n < 2:
        return 1.0

    # group sizes of both labelings and of their intersection
    _, sizes_a = np.unique(labels_a, return_counts=True)
    _, sizes_b = np.unique(labels_b, return_counts=True)
    _, sizes_ab = np.unique(
        np.stack([labels_a.ravel(), labels_b.ravel()], axis=1), axis=0, return_counts=True
    )

    together = _pair_count(sizes_ab)
    pairs_a = _pair_count(sizes_a)
    pairs_b = _pair_count(sizes_b)
    expected = pairs_a * pairs_b / _pair_count([n])
    best = (pairs_a + pairs_b) / 2.0
    if best == expected:
        return 1.0
    return (together - expected) / (best - expected)


def silhouette_score_precomputed(labels: np.ndarray, distance_matrix: MatrixLike) -> float:
    """
    Mean silhouette of a clustering, from a precomputed distance matrix.

    Elements alone in their cluster score 0. A clustering with a single
    cluster scores 0.

    Args:
        labels: Cluster index of each element
        distance_matrix: Square (n, n) distance matrix

    Returns:
        Mean silhouette score in [-1, 1], higher is better
    """
    D = as_square_matrix(distance_matrix, "silhouette_score_precomputed")
    labels = np.asarray(labels)
    if labels.shape[0] != D.shape[0]:
        raise ValueError(
            f"{labels.shape[0]} labels for a {D.shape[0]}x{D.shape[0]} distance matrix"
        )
    unique = np.unique(labels)
    if unique.size < 2:
        return 0.0

    masks = [labels == c for c in unique]
    sil = np.zeros(labels.size)
    for i in range(labels.size):
        own = int(np.searchsorted(unique, labels[i]))
        same_count = masks[own].sum()
        if same_count <= 1:
            continue
        a = D[i, masks[own]].sum() / (same_count - 1)
        b = min(D[i, m].mean() for c, m in enumerate(masks) if c != own)
        denom = max(a, b)
        sil[i] = (b - a) / denom if denom > 0 else 0.0
    return float(sil.mean())
