"""Core module exports."""

from canonicalcat.core.errors import (
    CanonicalCatError,
    CatalogError,
    ConfigError,
    DiscoveryError,
    ErrorCode,
    ParseError,
)
from canonicalcat.core.logging import bind_run_id, configure_logging
from canonicalcat.core.progress import pluralize, status, task

__all__ = [
    # Errors
    "CanonicalCatError",
    "CatalogError",
    "ConfigError",
    "DiscoveryError",
    "ErrorCode",
    "ParseError",
    # Logging
    "bind_run_id",
    "configure_logging",
    # Progress
    "pluralize",
    "status",
    "task",
]
