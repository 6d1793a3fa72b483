"""
Lazy pairwise distance matrix.

Distances between elements of a population are computed on first access
and memoized, so algorithms that only look at part of the matrix never pay
for the whole of it.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence
import numpy as np

from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class DistanceCache:
    """
    Distance matrix whose cells are computed on demand.

    The population is borrowed, not copied: it must stay alive and
    unchanged for as long as the cache is used. Each unordered pair is
    evaluated at most once and both symmetric cells are filled from that
    single evaluation. The distance function must be pure.

    Not safe for concurrent use.

    Example:
        cache = DistanceCache(points, lambda a, b: abs(a - b))
        d = cache.at(0, 3)
        full = cache.get_distance_matrix()
    """

    def __init__(self, population: Sequence[Any], distance: Callable[[Any, Any], float]):
        """
        Args:
            population: The elements to compare (kept by reference)
            distance: ``(a, b) -> float`` distance function
        """
        self.population = population
        self.distance = distance
        n = len(population)
        self._distmat = np.zeros((n, n), dtype=np.float64)
        self._computed = np.zeros((n, n), dtype=bool)
        self._n_evaluations = 0

    def __len__(self) -> int:
        return len(self.population)

    @property
    def n_rows(self) -> int:
        return len(self.population)

    @property
    def n_cols(self) -> int:
        return len(self.population)

    @property
    def n_computed(self) -> int:
        """Number of distance evaluations performed so far."""
        return self._n_evaluations

    def at(self, i: int, j: int) -> float:
        """
        Distance between elements *i* and *j*.

        No bound check is performed beyond Python's own indexing.
        """
        if not self._computed[i, j]:
            d = float(self.distance(self.population[i], self.population[j]))
            self._distmat[i, j] = d
            self._distmat[j, i] = d
            self._computed[i, j] = True
            self._computed[j, i] = True
            self._n_evaluations += 1
        return float(self._distmat[i, j])

    def __getitem__(self, index: tuple[int, int]) -> float:
        i, j = index
        return self.at(i, j)

    def get_distance_matrix(self) -> np.ndarray:
        """
        Compute every missing off-diagonal cell and return the full matrix.

        The diagonal is left at zero unless it was read through ``at(i, i)``.

        Returns:
            Read-only (n, n) view of the cache's matrix
        """
        n = len(self.population)
        before = self._n_evaluations
        for i in range(n):
            for j in range(i + 1, n):
                if not self._computed[i, j]:
                    self.at(i, j)
        logger.debug(
            "Distance matrix of %d elements completed with %d new evaluations",
            n,
            self._n_evaluations - before,
        )
        view = self._distmat.view()
        view.flags.writeable = False
        return view
