"""
OCR Cluster - Core Package

Clustering algorithms for document image analysis: grouping glyphs, words
and text lines, estimating thresholds and spotting outliers.

This package provides:
- A lazy distance matrix cache
- k-medoids with pluggable init/update strategies
- Affinity propagation and spectral clustering
- Iterative pairwise clustering and 2-means
- Outlier scores and clustering evaluation helpers
"""

__version__ = "0.1.0"

from .errors import ClusteringError, DimensionError, DomainError

# Explicitly import subpackages to ensure they're discoverable
from . import algorithms
from . import utils

__all__ = [
    "ClusteringError",
    "DimensionError",
    "DomainError",
    "algorithms",
    "utils",
]
