"""
Failure kinds raised by the clustering algorithms.

Both concrete errors derive from ``ValueError`` so callers that only guard
against bad arguments keep working, while callers that care can tell a
shape problem from a meaningless input domain.
"""


class ClusteringError(Exception):
    """Base class for precondition failures of the clustering algorithms."""


class DimensionError(ClusteringError, ValueError):
    """A matrix or vector does not have the expected shape."""


class DomainError(ClusteringError, ValueError):
    """The input is outside the domain where the operation is defined."""
