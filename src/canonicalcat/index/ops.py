"""High-level orchestration of one catalog run.

Pipeline::

    discover -> parse -> extract entities -> hash -> cache decisions
             -> usage index -> stories -> merge -> write -> save cache

The usage index is built once over the whole file set and queried per
entity. The cache is an explicit value loaded at the start and saved once
at the end, whether or not anything changed.
"""

from __future__ import annotations

import fnmatch
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import structlog

from canonicalcat.config.models import CanonicalCatConfig
from canonicalcat.index.cache import (
    CatalogCache,
    cache_file,
    load_cache,
    needs_regeneration,
    save_cache,
    update_cache,
)
from canonicalcat.index.catalog import extract_entities
from canonicalcat.index.discovery import discover_source_files
from canonicalcat.index.fileset import parse_file_set
from canonicalcat.index.hasher import hash_entity
from canonicalcat.index.models import (
    CatalogResult,
    Entity,
    EntityMetadata,
    FileSet,
    GenerateStats,
    HashPair,
)
from canonicalcat.index.stories import StoryIndex, find_stories
from canonicalcat.index.usages import UsageIndex, build_usage_index
from canonicalcat.index.writer import write_json_catalog

log = structlog.get_logger(__name__)


class CatalogGenerator:
    """Runs the catalog pipeline for one project root.

    Usage::

        config = load_config(root)
        result = CatalogGenerator(config, root).generate(force=False)
    """

    def __init__(self, config: CanonicalCatConfig, root: Path) -> None:
        self.config = config
        self.root = root.resolve()

    @property
    def cache_path(self) -> Path:
        cache_dir = Path(self.config.cache.cache_dir).expanduser()
        if not cache_dir.is_absolute():
            cache_dir = self.root / cache_dir
        return cache_file(cache_dir)

    @property
    def output_dir(self) -> Path:
        out = Path(self.config.output.output_path).expanduser()
        return out if out.is_absolute() else self.root / out

    # -- pipeline steps ------------------------------------------------------

    def parse_sources(self) -> FileSet:
        """Discover and parse source files.

        Raises:
            DiscoveryError: If the project root cannot be enumerated.
        """
        scan = self.config.scan
        # Story files are linked to entities, never cataloged themselves
        exclude = [*scan.exclude, *scan.story_file_patterns]
        paths = discover_source_files(self.root, scan.include, exclude)
        return parse_file_set(self.root, paths, max_workers=self.config.indexer.max_workers)

    def extract(self, file_set: FileSet, name_filter: str | None = None) -> list[Entity]:
        entities: list[Entity] = []
        for source in sorted(file_set.files.values(), key=lambda s: s.rel_path):
            entities.extend(extract_entities(source))
        if name_filter:
            entities = [e for e in entities if fnmatch.fnmatchcase(e.name, name_filter)]
        return entities

    def hash_all(self, entities: list[Entity]) -> list[HashPair]:
        workers = self.config.indexer.max_workers
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hash") as pool:
            return list(pool.map(hash_entity, entities))

    def decide(
        self,
        entities: list[Entity],
        hashes: list[HashPair],
        cache: CatalogCache,
        force: bool,
    ) -> list[bool]:
        threshold = self.config.cache.similarity_threshold
        decisions: list[bool] = []
        for entity, pair in zip(entities, hashes, strict=True):
            changed = force or needs_regeneration(
                entity.cache_key,
                pair.implementation_hash,
                pair.interface_hash,
                cache,
                threshold,
            )
            log.debug("cache_decision", key=entity.cache_key, regenerate=changed)
            decisions.append(changed)
        return decisions

    def build_usages(self, file_set: FileSet) -> UsageIndex:
        return build_usage_index(
            file_set,
            self.config.scan.barrel_file_patterns,
            max_workers=self.config.indexer.max_workers,
        )

    def collect_stories(self) -> StoryIndex:
        scan = self.config.scan
        return find_stories(self.root, scan.story_file_patterns, scan.exclude)

    # -- entry point ---------------------------------------------------------

    def generate(self, force: bool = False, name_filter: str | None = None) -> CatalogResult:
        """Run the whole pipeline.

        Args:
            force: Mark every entity for regeneration regardless of the cache
            name_filter: fnmatch pattern restricting which entity names are processed

        Per-file parse failures and cache write failures are logged, not raised.

        Raises:
            DiscoveryError: If the project root cannot be enumerated.
            OSError: If the catalog cannot be written. The cache is left
                untouched so the next run retries the same entities.
        """
        started = time.perf_counter()
        stats = GenerateStats()

        file_set = self.parse_sources()
        stats.files_parsed = len(file_set)
        stats.files_failed = len(file_set.failures)
        stats.files_discovered = stats.files_parsed + stats.files_failed

        entities = self.extract(file_set, name_filter)
        stats.entities_found = len(entities)
        log.info("entities_extracted", count=len(entities), filter=name_filter)

        hashes = self.hash_all(entities)
        cache = load_cache(self.cache_path)
        decisions = self.decide(entities, hashes, cache, force)

        usage_index = self.build_usages(file_set)
        stories = self.collect_stories()
        stats.stories_found = len(stories)

        metadata: list[EntityMetadata] = []
        for entity, pair, changed in zip(entities, hashes, decisions, strict=True):
            meta = EntityMetadata(
                entity=entity,
                hashes=pair,
                used_in=usage_index.usages_for_entity(entity),
                stories=stories.stories_for_entity(entity),
                needs_regeneration=changed,
            )
            metadata.append(meta)
            stats.usages_found += len(meta.used_in)
            if changed:
                stats.entities_changed += 1
                update_cache(cache, entity.cache_key, pair.implementation_hash, pair.interface_hash)

        catalog_path: Path | None = None
        if self.config.output.json_enabled:
            catalog_path = write_json_catalog(
                metadata, self.output_dir / self.config.output.json_filename
            )

        save_cache(cache, self.cache_path)

        stats.elapsed_seconds = time.perf_counter() - started
        log.info(
            "catalog_generated",
            files=stats.files_parsed,
            failed=stats.files_failed,
            entities=stats.entities_found,
            changed=stats.entities_changed,
            usages=stats.usages_found,
            stories=stats.stories_found,
            elapsed_s=round(stats.elapsed_seconds, 3),
        )
        return CatalogResult(
            entities=metadata,
            stats=stats,
            failures=list(file_set.failures),
            catalog_path=catalog_path,
        )
