"""Config module exports."""

from canonicalcat.config.loader import load_config, repo_config_path
from canonicalcat.config.models import (
    CacheConfig,
    CanonicalCatConfig,
    IndexerConfig,
    LoggingConfig,
    OutputConfig,
    ScanConfig,
)

__all__ = [
    "load_config",
    "repo_config_path",
    "CanonicalCatConfig",
    "CacheConfig",
    "IndexerConfig",
    "LoggingConfig",
    "OutputConfig",
    "ScanConfig",
]
