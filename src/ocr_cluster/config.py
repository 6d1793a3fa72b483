"""
Configuration management for OCR Cluster.

Loads configuration from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Only the ambient behaviour is configurable here (logging and the defaults
of the k-medoids sweep). The algorithms themselves keep their documented
defaults in their signatures.

Usage:
    from ocr_cluster.config import config

    level = config.logging.level
    k_range = (config.sweep.k_min, config.sweep.k_max)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "" or raw.strip().lower() == "none":
        return None
    return _env_int(name, 0)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self):
        """Normalize and validate the level name."""
        self.level = (self.level or "WARNING").upper()
        if not isinstance(logging.getLevelName(self.level), int):
            raise ValueError(
                f"Unknown log level {self.level!r}. "
                f"Set OCR_CLUSTER_LOG_LEVEL to DEBUG, INFO, WARNING or ERROR."
            )
        if not self.format:
            self.format = DEFAULT_LOG_FORMAT


@dataclass
class SweepDefaults:
    """Default parameters of the k-medoids sweep."""
    k_min: int = 2
    k_max: int = 10
    max_iter: Optional[int] = 100

    def __post_init__(self):
        """Validate the k range."""
        if self.k_min < 1:
            raise ValueError(f"k_min must be >= 1, got {self.k_min}")
        if self.k_min > self.k_max:
            raise ValueError(f"k_min ({self.k_min}) must be <= k_max ({self.k_max})")
        if self.max_iter is not None and self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1 or None, got {self.max_iter}")


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.logging = LoggingConfig(
            level=os.getenv("OCR_CLUSTER_LOG_LEVEL", "WARNING"),
            format=os.getenv("OCR_CLUSTER_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        )
        max_iter = 100
        if "OCR_CLUSTER_SWEEP_MAX_ITER" in os.environ:
            max_iter = _env_optional_int("OCR_CLUSTER_SWEEP_MAX_ITER")
        self.sweep = SweepDefaults(
            k_min=_env_int("OCR_CLUSTER_SWEEP_K_MIN", 2),
            k_max=_env_int("OCR_CLUSTER_SWEEP_K_MAX", 10),
            max_iter=max_iter,
        )


# Global config instance
config = Config()


def reload_config() -> Config:
    """
    Re-read the environment and replace the global config instance.

    Returns:
        The new Config
    """
    global config
    config = Config()
    return config
