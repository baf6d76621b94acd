"""canonical-cat error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index (discovery, parsing)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Index (3xxx)
    INDEX_DISCOVERY_FAILED = 3001
    INDEX_PARSE_FAILED = 3002


@dataclass(frozen=True, slots=True)
class CanonicalCatError(Exception):
    """Base error with structured context for logs and CLI output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CanonicalCatError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class CatalogError(CanonicalCatError):
    """Catalog indexing errors (discovery, parsing)."""


class DiscoveryError(CatalogError):
    """The source tree could not be enumerated."""

    @classmethod
    def root_not_found(cls, root: str) -> "DiscoveryError":
        return cls(
            code=ErrorCode.INDEX_DISCOVERY_FAILED,
            message=f"Source root does not exist: {root}",
            details={"root": root},
        )

    @classmethod
    def unreadable(cls, root: str, reason: str) -> "DiscoveryError":
        return cls(
            code=ErrorCode.INDEX_DISCOVERY_FAILED,
            message=f"Cannot list source root {root}: {reason}",
            details={"root": root, "reason": reason},
        )


class ParseError(CatalogError):
    """A single source file could not be parsed.

    Never escalated past the file-set parser; kept as a value on
    ``FileSet.failures`` so callers can report it.
    """

    @classmethod
    def for_file(cls, path: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.INDEX_PARSE_FAILED,
            message=f"Failed to parse {path}: {reason}",
            details={"path": path, "reason": reason},
        )
