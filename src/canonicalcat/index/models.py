"""Value types for the catalog index.

Everything here is transient and rebuilt on every run. The only persisted
structure is the change-detection cache (see ``cache.py``).

Identifiers:
- File id: absolute POSIX path string of a parsed source file. Used by the
  import resolver and as the definition half of an entity key.
- Relative path: POSIX path relative to the project root. Used in usage
  references, cache keys and catalog output so they survive moving the checkout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from canonicalcat.core.errors import ParseError

DEFAULT_EXPORT_NAME = "default"


# ============================================================================
# ENUMS
# ============================================================================


class EntityKind(str, Enum):
    """What an exported declaration is, as reported in the catalog."""

    COMPONENT = "component"  # Function returning JSX
    HOOK = "hook"  # Function whose name starts with "use"
    UTILITY = "utility"  # Any other exported function
    CLASS = "class"
    TYPE = "type"  # Interface, type alias or enum


class ExportType(str, Enum):
    NAMED = "named"
    DEFAULT = "default"


# ============================================================================
# FILE-SET VIEW
# ============================================================================


@dataclass(frozen=True, slots=True)
class ImportBinding:
    """One local name bound by an import clause.

    ``imported`` is the exported name on the target side: the original name
    for ``{ Button as B }`` and ``"default"`` for a default import.
    """

    local: str
    imported: str


@dataclass(frozen=True, slots=True)
class ImportStatement:
    file_id: str
    specifier: str
    bindings: tuple[ImportBinding, ...]
    line: int

    @property
    def local_names(self) -> frozenset[str]:
        return frozenset(b.local for b in self.bindings)


@dataclass(frozen=True, slots=True)
class IdentifierOccurrence:
    """An identifier occurrence (not a semantic reference)."""

    name: str
    line: int
    column: int
    in_import: bool = False


@dataclass
class SourceFile:
    """A successfully parsed source file."""

    file_id: str
    rel_path: str
    language: str
    imports: list[ImportStatement] = field(default_factory=list)
    occurrences: list[IdentifierOccurrence] = field(default_factory=list)
    root_node: Any = field(default=None, repr=False, compare=False)


@dataclass
class FileSet:
    """All successfully parsed files of one run, keyed by file id."""

    root: Path
    files: dict[str, SourceFile] = field(default_factory=dict)
    failures: list[ParseError] = field(default_factory=list)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self.files

    def __len__(self) -> int:
        return len(self.files)

    @property
    def file_ids(self) -> frozenset[str]:
        return frozenset(self.files)


# ============================================================================
# ENTITIES
# ============================================================================


@dataclass(frozen=True, slots=True)
class EntityKey:
    """(definition file id, exported name)."""

    file_id: str
    name: str


@dataclass(frozen=True, slots=True)
class PropDefinition:
    """A member of a component's inline props type literal."""

    name: str
    type: str
    required: bool
    description: str = ""


@dataclass
class Entity:
    """An exported declaration of interest."""

    name: str
    kind: EntityKind
    file_id: str
    rel_path: str
    line: int
    signature: str
    declaration: Any = field(repr=False, compare=False)
    type_node: Any = field(default=None, repr=False, compare=False)
    export_type: ExportType = ExportType.NAMED
    doc: str = ""
    props: list[PropDefinition] = field(default_factory=list)

    @property
    def key(self) -> EntityKey:
        return EntityKey(self.file_id, self.name)

    @property
    def cache_key(self) -> str:
        return f"{self.rel_path}:{self.name}"


@dataclass(frozen=True, slots=True, order=True)
class UsageReference:
    """A line in another file that reads an entity's imported binding.

    Field order gives the catalog ordering: path, then line.
    """

    file_path: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        return {"filePath": self.file_path, "line": self.line}


@dataclass(frozen=True, slots=True, order=True)
class StoryReference:
    """A Storybook file documenting an entity."""

    file_path: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "filePath": self.file_path}


@dataclass(frozen=True, slots=True)
class HashPair:
    implementation_hash: str
    interface_hash: str


@dataclass
class EntityMetadata:
    """An entity merged with its hashes, usages and cache decision."""

    entity: Entity
    hashes: HashPair
    used_in: list[UsageReference] = field(default_factory=list)
    stories: list[StoryReference] = field(default_factory=list)
    needs_regeneration: bool = True

    def to_dict(self) -> dict[str, Any]:
        e = self.entity
        return {
            "name": e.name,
            "kind": e.kind.value,
            "filePath": e.rel_path,
            "line": e.line,
            "exportType": e.export_type.value,
            "signature": e.signature,
            "doc": e.doc,
            "props": [
                {
                    "name": p.name,
                    "type": p.type,
                    "required": p.required,
                    "description": p.description,
                }
                for p in e.props
            ],
            "implementationHash": self.hashes.implementation_hash,
            "interfaceHash": self.hashes.interface_hash,
            "needsRegeneration": self.needs_regeneration,
            "usedIn": [u.to_dict() for u in self.used_in],
            "stories": [s.to_dict() for s in self.stories],
        }


# ============================================================================
# RUN RESULTS
# ============================================================================


@dataclass
class GenerateStats:
    files_discovered: int = 0
    files_parsed: int = 0
    files_failed: int = 0
    entities_found: int = 0
    entities_changed: int = 0
    usages_found: int = 0
    stories_found: int = 0
    elapsed_seconds: float = 0.0


@dataclass
class CatalogResult:
    entities: list[EntityMetadata] = field(default_factory=list)
    stats: GenerateStats = field(default_factory=GenerateStats)
    failures: list[ParseError] = field(default_factory=list)
    catalog_path: Path | None = None
