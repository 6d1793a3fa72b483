"""
Online clustering by pairwise association.

Elements are grouped as pairs are declared related: a pair either starts a
new cluster, joins an existing one or bridges two clusters which are then
merged. Used to group text lines or words incrementally.
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, Hashable, List, Set, TypeVar

T = TypeVar("T", bound=Hashable)


class Operation(Enum):
    """What ``IterativeClustering.associate`` did."""

    NONE = "none"  # the pair was already in the same cluster
    CREATE = "create"  # a new cluster was created
    ADD = "add"  # one element was added to an existing cluster
    MERGE = "merge"  # two clusters were merged


class IterativeClustering(Generic[T]):
    """
    A list of disjoint clusters grown one association at a time.

    Lookups scan the clusters linearly, which is fine for the small
    numbers of clusters this is meant for.
    """

    def __init__(self):
        self._clusters: List[Set[T]] = []

    @property
    def clusters(self) -> List[Set[T]]:
        """Current clusters (do not modify)."""
        return self._clusters

    def get_clusters(self) -> List[Set[T]]:
        return self._clusters

    def associate(self, v1: T, v2: T) -> Operation:
        """
        Associate two elements, merging clusters if needed.

        Args:
            v1: First element
            v2: Second element

        Returns:
            NONE if the pair was already associated, CREATE if a new
            cluster was created, ADD if one element joined the cluster of
            the other, MERGE if the pair bridged two clusters.
        """
        found = None
        leftover = v1
        for index, cluster in enumerate(self._clusters):
            if v1 in cluster:
                if v2 in cluster:
                    return Operation.NONE
                cluster.add(v2)
                found, leftover = index, v2
                break
            if v2 in cluster:
                cluster.add(v1)
                found, leftover = index, v1
                break

        if found is None:
            self._clusters.append({v1, v2})
            return Operation.CREATE

        # the added element may already belong to a later cluster
        for index in range(found + 1, len(self._clusters)):
            if leftover in self._clusters[index]:
                self._clusters[found].update(self._clusters[index])
                del self._clusters[index]
                return Operation.MERGE
        return Operation.ADD

    def __len__(self) -> int:
        return len(self._clusters)

    def __str__(self) -> str:
        return "".join(
            "{ " + "".join(f"{v} " for v in sorted(cluster)) + "} "
            for cluster in self._clusters
        )
