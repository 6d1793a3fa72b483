"""
Algorithm Core Library - clustering engines and their helpers.

All engines work in memory on plain numeric data: square distance
matrices, or a population plus a distance function through DistanceCache.
"""

from .distance_cache import DistanceCache
from .kmedoids import (
    run_kmedoids,
    init_central,
    init_pam,
    update_local,
    update_pam,
)
from .affinity_propagation import AffinityClusters, affinity_propagation
from .spectral import SpectralClustering
from .iterative import IterativeClustering, Operation
from .two_means import two_means
from .kmeans import kmeans, kmeanspp_seeds
from .outliers import (
    compute_lof,
    compute_loop,
    angular_outliers_e,
    angular_outliers_c,
)
from .evaluation import (
    adjusted_rand_index,
    medoid_cost,
    silhouette_score_precomputed,
)
from .sweep import SweepConfig, SweepResult, run_kmedoids_sweep

__all__ = [
    # Distance cache
    "DistanceCache",
    # k-medoids
    "run_kmedoids",
    "init_central",
    "init_pam",
    "update_local",
    "update_pam",
    # Affinity propagation
    "AffinityClusters",
    "affinity_propagation",
    # Spectral clustering
    "SpectralClustering",
    # Iterative clustering
    "IterativeClustering",
    "Operation",
    # 2-means and k-means
    "two_means",
    "kmeans",
    "kmeanspp_seeds",
    # Outliers
    "compute_lof",
    "compute_loop",
    "angular_outliers_e",
    "angular_outliers_c",
    # Evaluation
    "adjusted_rand_index",
    "medoid_cost",
    "silhouette_score_precomputed",
    # Sweep orchestration
    "SweepConfig",
    "SweepResult",
    "run_kmedoids_sweep",
]
