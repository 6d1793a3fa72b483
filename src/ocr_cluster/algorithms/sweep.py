"""
Sweep orchestration for k-medoids across multiple k values.

Runs k-medoids for every k in a range on the same distance matrix, scores
each clustering and reports the k with the best silhouette.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import numpy as np
import pandas as pd

from ..utils.logging_config import get_logger
from ._shared import MatrixLike, as_square_matrix
from .evaluation import adjusted_rand_index, medoid_cost, silhouette_score_precomputed
from .kmedoids import init_central, init_pam, run_kmedoids, update_local, update_pam

logger = get_logger(__name__)

INIT_STRATEGIES = {"central": init_central, "pam": init_pam}
UPDATE_STRATEGIES = {"local": update_local, "pam": update_pam}


@dataclass
class SweepConfig:
    """Configuration for a k-medoids sweep."""

    k_min: int = 2
    k_max: int = 10
    init: str = "pam"  # "central" or "pam"
    update: str = "pam"  # "local" or "pam"
    max_iter: Optional[int] = 100

    def __post_init__(self):
        """Validate the parameters."""
        if self.init not in INIT_STRATEGIES:
            raise ValueError(
                f"init must be one of {sorted(INIT_STRATEGIES)}, got {self.init!r}"
            )
        if self.update not in UPDATE_STRATEGIES:
            raise ValueError(
                f"update must be one of {sorted(UPDATE_STRATEGIES)}, got {self.update!r}"
            )
        if self.k_min < 1:
            raise ValueError(f"k_min must be >= 1, got {self.k_min}")
        if self.k_min > self.k_max:
            raise ValueError(f"k_min ({self.k_min}) must be <= k_max ({self.k_max})")
        if self.max_iter is not None and self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1 or None, got {self.max_iter}")

    @classmethod
    def from_config(cls, **overrides: Any) -> "SweepConfig":
        """Build a SweepConfig from the environment defaults, with overrides."""
        from ..config import config

        params: Dict[str, Any] = {
            "k_min": config.sweep.k_min,
            "k_max": config.sweep.k_max,
            "max_iter": config.sweep.max_iter,
        }
        params.update(overrides)
        return cls(**params)


@dataclass
class SweepResult:
    """Results from a k-medoids sweep."""

    by_k: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    best_k: Optional[int] = None

    def to_dataframe(self) -> pd.DataFrame:
        """
        One row per k with its scores.

        Returns:
            DataFrame with columns k, cost, silhouette, n_clusters and,
            when reference labels were given, ari
        """
        rows = []
        for k, result in sorted(self.by_k.items()):
            row = {
                "k": k,
                "cost": result["cost"],
                "silhouette": result["silhouette"],
                "n_clusters": len(result["medoids"]),
            }
            if "ari" in result:
                row["ari"] = result["ari"]
            rows.append(row)
        if not rows:
            return pd.DataFrame(columns=["k", "cost", "silhouette", "n_clusters"])
        return pd.DataFrame(rows)


def run_kmedoids_sweep(
    distance_matrix: MatrixLike,
    cfg: Optional[SweepConfig] = None,
    *,
    reference_labels: Optional[np.ndarray] = None,
) -> SweepResult:
    """
    Run k-medoids for every k in [cfg.k_min, cfg.k_max].

    Args:
        distance_matrix: Square (n, n) distance matrix
        cfg: Sweep parameters (defaults to ``SweepConfig.from_config()``)
        reference_labels: Optional ground truth, scored with the adjusted
            Rand index

    Returns:
        SweepResult with labels, medoids, cost and silhouette per k, and
        the k with the highest silhouette

    Raises:
        DimensionError: If the matrix is not square
        ValueError: If k_max exceeds the number of elements
    """
    cfg = cfg or SweepConfig.from_config()
    D = as_square_matrix(distance_matrix, "run_kmedoids_sweep")
    n = D.shape[0]
    if cfg.k_max > n:
        raise ValueError(f"k_max ({cfg.k_max}) must be <= n_samples ({n})")

    init_factory = INIT_STRATEGIES[cfg.init]
    update = UPDATE_STRATEGIES[cfg.update]

    result = SweepResult()
    best_score = -np.inf
    for k in range(cfg.k_min, cfg.k_max + 1):
        labels, clusters, medoids = run_kmedoids(
            init_factory(k), update, D, max_iter=cfg.max_iter
        )
        entry: Dict[str, Any] = {
            "labels": labels,
            "medoids": medoids,
            "cluster_sizes": [len(c) for c in clusters],
            "cost": medoid_cost(D, medoids),
            "silhouette": silhouette_score_precomputed(labels, D),
        }
        if reference_labels is not None:
            entry["ari"] = adjusted_rand_index(reference_labels, labels)
        result.by_k[k] = entry
        logger.debug(
            "k=%d: cost=%.6g silhouette=%.4f", k, entry["cost"], entry["silhouette"]
        )
        if entry["silhouette"] > best_score:
            best_score = entry["silhouette"]
            result.best_k = k

    logger.info("k-medoids sweep %d..%d: best k=%s", cfg.k_min, cfg.k_max, result.best_k)
    return result
