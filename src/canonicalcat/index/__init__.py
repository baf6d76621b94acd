"""Index module - incremental analysis engine for the symbol catalog.

This module provides:
- Import resolution for relative specifiers
- A reverse usage index (definition -> usage locations)
- Formatting-insensitive implementation/interface hashes
- A persisted change-detection cache

Public API entry point is ``canonicalcat.index.ops.CatalogGenerator``.
Tree-sitter parsing lives in ``canonicalcat.index._internal``.
"""

from canonicalcat.index.cache import (
    CacheRecord,
    CatalogCache,
    load_cache,
    needs_regeneration,
    save_cache,
    similarity,
    update_cache,
)
from canonicalcat.index.hasher import hash_entity, implementation_hash, interface_hash
from canonicalcat.index.models import (
    CatalogResult,
    Entity,
    EntityKey,
    EntityKind,
    EntityMetadata,
    ExportType,
    FileSet,
    HashPair,
    SourceFile,
    UsageReference,
)
from canonicalcat.index.ops import CatalogGenerator
from canonicalcat.index.resolver import resolve_import
from canonicalcat.index.usages import UsageIndex, build_usage_index

__all__ = [
    # Orchestration
    "CatalogGenerator",
    "CatalogResult",
    # Models
    "Entity",
    "EntityKey",
    "EntityKind",
    "EntityMetadata",
    "ExportType",
    "FileSet",
    "HashPair",
    "SourceFile",
    "UsageReference",
    # Resolver / usages
    "resolve_import",
    "UsageIndex",
    "build_usage_index",
    # Hashing
    "hash_entity",
    "implementation_hash",
    "interface_hash",
    # Cache
    "CacheRecord",
    "CatalogCache",
    "load_cache",
    "needs_regeneration",
    "save_cache",
    "similarity",
    "update_cache",
]
