"""Persisted change-detection cache.

One JSON file per project, ``<cache_dir>/catalog-cache.json``::

    {
      "formatVersion": "1.0.0",
      "lastGenerated": "2026-01-01T00:00:00+00:00",
      "entries": {
        "src/components/Button.tsx:Button": {
          "implementationHash": "…64 hex…",
          "interfaceHash": "…64 hex…",
          "lastEnhanced": "…",        # only after an enrichment
          "enrichment": {...}         # opaque, only after an enrichment
        }
      }
    }

Lifecycle: loaded once at run start, updated only for entities processed in
the run, saved once at run end. An unreadable, corrupt or version-mismatched
file is replaced by an empty cache rather than migrated. Concurrent runs
against one cache directory are not coordinated: the last writer wins.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from canonicalcat.config.constants import CACHE_FILENAME, CACHE_FORMAT_VERSION

log = structlog.get_logger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class CacheRecord(BaseModel):
    """Last-seen hashes (and optional enrichment) for one entity."""

    model_config = ConfigDict(populate_by_name=True)

    implementation_hash: str = Field(alias="implementationHash")
    interface_hash: str = Field(alias="interfaceHash")
    last_enhanced: str | None = Field(default=None, alias="lastEnhanced")
    enrichment: dict[str, Any] | None = None


class CatalogCache(BaseModel):
    """The whole cache file."""

    model_config = ConfigDict(populate_by_name=True)

    format_version: str = Field(default=CACHE_FORMAT_VERSION, alias="formatVersion")
    last_generated: str = Field(default_factory=_now, alias="lastGenerated")
    entries: dict[str, CacheRecord] = Field(default_factory=dict)

    def get(self, key: str) -> CacheRecord | None:
        return self.entries.get(key)

    def __len__(self) -> int:
        return len(self.entries)


def cache_file(cache_dir: Path) -> Path:
    return cache_dir / CACHE_FILENAME


def empty_cache() -> CatalogCache:
    return CatalogCache()


def load_cache(path: Path) -> CatalogCache:
    """Load the cache file, falling back to an empty cache.

    A missing file is the normal first-run state and is not logged above
    DEBUG. Anything unreadable, unparseable or written by another format
    version is logged as a warning and discarded.
    """
    if not path.exists():
        log.debug("cache_missing", path=str(path))
        return empty_cache()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("cache_unreadable", path=str(path), error=str(e))
        return empty_cache()

    if not isinstance(raw, dict):
        log.warning("cache_unreadable", path=str(path), error="top level is not an object")
        return empty_cache()

    version = raw.get("formatVersion")
    if version != CACHE_FORMAT_VERSION:
        log.warning(
            "cache_version_mismatch",
            path=str(path),
            found=version,
            expected=CACHE_FORMAT_VERSION,
        )
        return empty_cache()

    try:
        cache = CatalogCache.model_validate(raw)
    except ValidationError as e:
        log.warning("cache_unreadable", path=str(path), error=str(e))
        return empty_cache()

    log.debug("cache_loaded", path=str(path), entries=len(cache))
    return cache


def similarity(stored: str, current: str) -> float:
    """1.0 for identical digests, otherwise 0.0.

    Digests carry no notion of partial similarity, so the comparison is
    binary even though callers compare it against a continuous threshold.
    """
    return 1.0 if stored == current else 0.0


def needs_regeneration(
    key: str,
    implementation_hash: str,
    interface_hash: str,
    cache: CatalogCache,
    threshold: float,
) -> bool:
    """Decide whether an entity must be reprocessed.

    True when the entity is unknown, or when either stored hash scores below
    ``threshold`` against the new one.
    """
    record = cache.get(key)
    if record is None:
        return True
    return (
        similarity(record.implementation_hash, implementation_hash) < threshold
        or similarity(record.interface_hash, interface_hash) < threshold
    )


def update_cache(
    cache: CatalogCache,
    key: str,
    implementation_hash: str,
    interface_hash: str,
    enrichment: dict[str, Any] | None = None,
) -> CacheRecord:
    """Replace the record for ``key``.

    With ``enrichment`` the record also gets a fresh ``lastEnhanced`` stamp.
    Without it, any previously stored enrichment is dropped along with the
    old record.
    """
    record = CacheRecord(
        implementation_hash=implementation_hash,
        interface_hash=interface_hash,
        enrichment=enrichment,
        last_enhanced=_now() if enrichment is not None else None,
    )
    cache.entries[key] = record
    return record


def save_cache(cache: CatalogCache, path: Path) -> bool:
    """Persist the whole cache atomically.

    Refreshes ``lastGenerated``, creates the directory, writes to a temporary
    sibling and renames it over the target so readers see either the old or
    the new file, never a partial one. Failures are logged, not raised.

    Returns:
        True if the file was written.
    """
    cache.last_generated = _now()
    payload = cache.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
        os.replace(tmp_name, path)
    except OSError as e:
        log.error("cache_save_failed", path=str(path), error=str(e))
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        return False

    log.debug("cache_saved", path=str(path), entries=len(cache))
    return True
