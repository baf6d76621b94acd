"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CANONICALCAT__SECTION__KEY)
3. Repo YAML (.canonicalcat/config.yaml)
4. Global YAML (~/.config/canonicalcat/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CANONICALCAT__<SECTION>__<KEY>=<VALUE>

Examples:
    CANONICALCAT__LOGGING__LEVEL=DEBUG
    CANONICALCAT__CACHE__SIMILARITY_THRESHOLD=0.9
    CANONICALCAT__INDEXER__MAX_WORKERS=4

Run ``ccat init`` to write a documented config.yaml.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from canonicalcat.config.constants import (
    DEFAULT_BARREL_PATTERNS,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    DEFAULT_STORY_PATTERNS,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CANONICALCAT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every resolved import and cache decision.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ScanConfig(BaseModel):
    """Source discovery configuration.

    Patterns are POSIX globs relative to the project root. ``**`` spans
    directories and ``{a,b}`` expands to alternatives.
    """

    include: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS),
        description="Files to catalog.",
    )
    exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Files to skip even when included.",
    )
    barrel_file_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BARREL_PATTERNS),
        description="Re-export-only files. Imports inside them are never counted as usages.",
    )
    story_file_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STORY_PATTERNS),
        description="Storybook files. Never cataloged; linked to the entities of the "
        "source file with the same base name.",
    )

    @field_validator("include")
    @classmethod
    def validate_include(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one include pattern is required")
        return v


class CacheConfig(BaseModel):
    """Change-detection cache configuration.

    Env vars:
        CANONICALCAT__CACHE__CACHE_DIR: Cache directory, relative to the project root
        CANONICALCAT__CACHE__SIMILARITY_THRESHOLD: Regeneration threshold in [0, 1]
    """

    cache_dir: str = Field(
        default=".canonicalcat",
        description="Directory holding catalog-cache.json. Relative paths are "
        "resolved against the project root.",
    )
    similarity_threshold: float = Field(
        default=0.85,
        description="Entities whose stored hashes score below this are regenerated. "
        "Comparison is exact-match, so any value in (0, 1] means 'on any change' "
        "and 0 means 'never for known entities'.",
    )

    @field_validator("similarity_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not (0.0 <= v <= 1.0):
            raise ValueError(f"similarity_threshold must be between 0 and 1, got {v}")
        return v


class IndexerConfig(BaseModel):
    """Parallel parsing and usage scanning.

    Env vars:
        CANONICALCAT__INDEXER__MAX_WORKERS: Worker threads per phase
    """

    max_workers: int = Field(
        default=4,
        description="Worker threads for parsing, hashing and usage scanning.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class OutputConfig(BaseModel):
    """Catalog output configuration."""

    output_path: str = Field(
        default="docs/catalog",
        description="Output directory, relative to the project root.",
    )
    json_enabled: bool = Field(default=True, description="Write the JSON catalog.")
    json_filename: str = Field(default="catalog.json")


class CanonicalCatConfig(BaseModel):
    """Root configuration (type hint target for the settings class)."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    indexer: IndexerConfig = Field(default_factory=IndexerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
