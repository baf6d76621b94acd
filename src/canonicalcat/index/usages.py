"""Reverse usage index: (definition file, exported name) -> usage locations.

Built in one pass over the whole file set. Each non-barrel file is scanned
independently (in a thread pool) into its own contribution map; the maps are
merged once every scan has finished, then deduplicated and sorted.

For one file, every import statement is resolved to a target file. Each
binding's local name is then looked up in the file's identifier stream; an
occurrence outside the import clause becomes a reference to
``(target, imported_name)``. An aliased import ``{ Button as B }`` is scanned
under ``B`` and attributed to ``Button``. Default imports are attributed to
``"default"``.

Invariants of the finished index:
- a file never references its own definitions
- files matching a barrel pattern contribute nothing
- references are unique per (file, line) and ordered by path, then line
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from canonicalcat.index.globs import matches_any
from canonicalcat.index.models import (
    DEFAULT_EXPORT_NAME,
    Entity,
    EntityKey,
    ExportType,
    FileSet,
    SourceFile,
    UsageReference,
)
from canonicalcat.index.resolver import resolve_import

log = structlog.get_logger(__name__)

_Contribution = dict[EntityKey, set[UsageReference]]


class UsageIndex:
    """Immutable reverse index. Queries are dictionary lookups."""

    def __init__(self, references: dict[EntityKey, tuple[UsageReference, ...]]) -> None:
        self._references = references

    def __len__(self) -> int:
        return len(self._references)

    def __contains__(self, key: object) -> bool:
        return key in self._references

    def keys(self) -> Iterable[EntityKey]:
        return self._references.keys()

    @property
    def reference_count(self) -> int:
        return sum(len(refs) for refs in self._references.values())

    def usages_for(self, key: EntityKey) -> list[UsageReference]:
        """Ordered usage locations for an entity key (empty if never used)."""
        return list(self._references.get(key, ()))

    def usages_for_entity(self, entity: Entity) -> list[UsageReference]:
        """Usages of an entity, including default imports of a default export."""
        refs = self.usages_for(entity.key)
        if entity.export_type is ExportType.DEFAULT and entity.name != DEFAULT_EXPORT_NAME:
            default_refs = self._references.get(EntityKey(entity.file_id, DEFAULT_EXPORT_NAME), ())
            refs = sorted(set(refs).union(default_refs))
        return refs


def is_barrel_file(rel_path: str, barrel_patterns: Sequence[str]) -> bool:
    return matches_any(rel_path, barrel_patterns)


def scan_file(source: SourceFile, known_files: frozenset[str]) -> _Contribution:
    """Collect the usage references one file contributes.

    Args:
        source: Parsed file to scan
        known_files: File ids of the whole file set, for import resolution

    Returns:
        Map of entity key to references originating in ``source``.
    """
    # local name -> canonical keys it is bound to
    bound: dict[str, list[EntityKey]] = defaultdict(list)
    unresolved = 0
    for stmt in source.imports:
        if not stmt.bindings:
            continue
        target = resolve_import(stmt.specifier, source.file_id, known_files)
        if target is None:
            unresolved += 1
            continue
        if target == source.file_id:
            continue
        for binding in stmt.bindings:
            bound[binding.local].append(EntityKey(target, binding.imported))

    if unresolved:
        log.debug("imports_unresolved", file=source.rel_path, count=unresolved)

    contribution: _Contribution = defaultdict(set)
    if not bound:
        return contribution

    for occ in source.occurrences:
        if occ.in_import:
            continue
        keys = bound.get(occ.name)
        if not keys:
            continue
        ref = UsageReference(file_path=source.rel_path, line=occ.line)
        for key in keys:
            contribution[key].add(ref)
    return contribution


def build_usage_index(
    file_set: FileSet,
    barrel_patterns: Sequence[str],
    *,
    max_workers: int = 4,
) -> UsageIndex:
    """Build the reverse usage index for a whole file set.

    Args:
        file_set: Parsed files of this run
        barrel_patterns: Globs naming re-export-only files to skip
        max_workers: Thread pool size for per-file scans

    Returns:
        A fully merged, queryable UsageIndex.
    """
    known_files = file_set.file_ids
    sources = [
        src
        for src in file_set.files.values()
        if not is_barrel_file(src.rel_path, barrel_patterns)
    ]
    skipped = len(file_set) - len(sources)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="usages") as pool:
        contributions = list(pool.map(lambda src: scan_file(src, known_files), sources))

    merged: dict[EntityKey, set[UsageReference]] = defaultdict(set)
    for contribution in contributions:
        for key, refs in contribution.items():
            merged[key].update(refs)

    index = UsageIndex({key: tuple(sorted(refs)) for key, refs in merged.items()})
    log.info(
        "usage_index_built",
        files_scanned=len(sources),
        barrel_files_skipped=skipped,
        entities_referenced=len(index),
        references=index.reference_count,
    )
    return index
