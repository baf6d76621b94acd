"""Configuration constants.

Values here are format and protocol constraints, not user settings.
For configurable values, see models.py.
"""

# =============================================================================
# Default scan patterns
# =============================================================================

DEFAULT_INCLUDE_PATTERNS: tuple[str, ...] = ("src/**/*.{ts,tsx,js,jsx}",)

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/*.test.{ts,tsx,js,jsx}",
    "**/*.spec.{ts,tsx,js,jsx}",
)

DEFAULT_BARREL_PATTERNS: tuple[str, ...] = ("**/index.{ts,tsx,js,jsx}",)

DEFAULT_STORY_PATTERNS: tuple[str, ...] = (
    "**/*.stories.{ts,tsx,js,jsx}",
    "**/*.story.{ts,tsx,js,jsx}",
)

PRUNED_DIRS: frozenset[str] = frozenset(
    {".git", "node_modules", "dist", "build", ".canonicalcat", "coverage", ".next"}
)
"""Directories never walked during discovery, whatever the patterns say."""

# =============================================================================
# Import resolution
# =============================================================================

RESOLVE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")
"""Extensions tried, in order, after the exact specifier path."""

RESOLVE_INDEX_SUFFIXES: tuple[str, ...] = (
    "/index.ts",
    "/index.tsx",
    "/index.js",
    "/index.jsx",
)
"""Directory-index suffixes tried, in order, after the extensions."""

# =============================================================================
# Cache format
# =============================================================================

CACHE_FORMAT_VERSION = "1.0.0"
"""Bumped on any incompatible change to catalog-cache.json. No migrations."""

CACHE_FILENAME = "catalog-cache.json"

CONFIG_DIRNAME = ".canonicalcat"
CONFIG_FILENAME = "config.yaml"

# =============================================================================
# Parsing
# =============================================================================

MAX_ERROR_RATIO = 0.10
"""Files whose parse tree has at least this share of error nodes are dropped."""
