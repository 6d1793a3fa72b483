"""Shared helpers for the algorithm modules.

Centralises the distance matrix checks that every engine performs before
touching its input.
"""

from __future__ import annotations

from typing import Sequence, Union
import numpy as np

from ..errors import DimensionError

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


def as_square_matrix(distance_matrix: MatrixLike, context: str) -> np.ndarray:
    """Return *distance_matrix* as a float64 array, checking it is square.

    Ragged row lists are rejected before any conversion so that they raise
    ``DimensionError`` rather than numpy's own error.

    Args:
        distance_matrix: ndarray or sequence of rows
        context: Name of the calling operation, used in the error message

    Raises:
        DimensionError: If the matrix is not n x n
    """
    if not isinstance(distance_matrix, np.ndarray):
        n = len(distance_matrix)
        for row in distance_matrix:
            if len(row) != n:
                raise DimensionError(f"{context}: the distance matrix is not square.")
    D = np.asarray(distance_matrix, dtype=np.float64)
    if D.size == 0 and D.ndim == 1:
        D = D.reshape(0, 0)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise DimensionError(
            f"{context}: the distance matrix is not square (shape {D.shape})."
        )
    return D
