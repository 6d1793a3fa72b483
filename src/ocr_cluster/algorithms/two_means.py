"""
2-means clustering of scalar data.

Splits a set of values around two prototypes, typically to find a
threshold between two populations (e.g. small and large gaps between
words).
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from ..errors import DomainError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def two_means(
    values: Iterable[Any],
    prototypes: Optional[Tuple[Any, Any]] = None,
    stop_crit: float = 0.00001,
) -> Tuple[Any, Any]:
    """
    2-means clustering.

    Values closer to the first prototype than to the second (strictly) go
    to the first group, the others to the second. Prototypes are moved to
    the mean of their group until their summed displacement drops to
    *stop_crit*. A prototype whose group is empty stays where it is.

    Works with any value type supporting ``<``, ``abs(a - b)``, ``+`` and
    multiplication by a float.

    Args:
        values: The data
        prototypes: Initial (p1, p2); defaults to (min, max) of the data
        stop_crit: Maximal displacement between two iterations to stop

    Returns:
        The two prototypes (p1, p2)

    Raises:
        DomainError: If *values* is empty
    """
    data = list(values)
    if not data:
        raise DomainError("two_means(): empty range.")

    if prototypes is None:
        p1 = p2 = data[0]
        for v in data:
            if v < p1:
                p1 = v
            if not v < p2:
                p2 = v
    else:
        p1, p2 = prototypes

    n_iter = 0
    while True:
        n_iter += 1
        group1 = [v for v in data if abs(v - p1) < abs(v - p2)]
        group2 = [v for v in data if not abs(v - p1) < abs(v - p2)]
        m1 = sum(group1[1:], group1[0]) * (1.0 / len(group1)) if group1 else p1
        m2 = sum(group2[1:], group2[0]) * (1.0 / len(group2)) if group2 else p2
        moved = abs(p1 - m1) + abs(p2 - m2)
        p1, p2 = m1, m2
        if not moved > stop_crit:
            break

    logger.debug("two_means converged after %d iterations: %s, %s", n_iter, p1, p2)
    return p1, p2
