"""LanguagePack: tree-sitter grammar config for the JavaScript family.

Each supported language has exactly ONE LanguagePack holding grammar install
metadata and file extension detection. Lookup goes through ``get_pack`` and
``get_pack_for_ext``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LanguagePack:
    """Tree-sitter configuration for a single language."""

    # -- Identity --
    name: str  # Canonical language name ("typescript", "tsx", ...)
    grammar_name: str  # tree-sitter grammar key

    # -- Grammar install --
    grammar_package: str  # PyPI package ("tree-sitter-typescript")
    grammar_module: str  # Python import ("tree_sitter_typescript")
    min_version: str
    # Non-standard function name (e.g. "language_typescript", "language_tsx")
    language_func: str | None = None

    # -- File detection --
    extensions: frozenset[str] = field(default_factory=frozenset)


JAVASCRIPT_PACK = LanguagePack(
    name="javascript",
    grammar_name="javascript",
    grammar_package="tree-sitter-javascript",
    grammar_module="tree_sitter_javascript",
    min_version="0.23.0",
    extensions=frozenset({"js", "jsx", "mjs", "cjs"}),
)

TYPESCRIPT_PACK = LanguagePack(
    name="typescript",
    grammar_name="typescript",
    grammar_package="tree-sitter-typescript",
    grammar_module="tree_sitter_typescript",
    min_version="0.23.0",
    language_func="language_typescript",
    extensions=frozenset({"ts", "mts", "cts"}),
)

TSX_PACK = LanguagePack(
    name="tsx",
    grammar_name="tsx",
    grammar_package="tree-sitter-typescript",
    grammar_module="tree_sitter_typescript",
    min_version="0.23.0",
    language_func="language_tsx",
    extensions=frozenset({"tsx"}),
)

_ALL_PACKS: tuple[LanguagePack, ...] = (JAVASCRIPT_PACK, TYPESCRIPT_PACK, TSX_PACK)

PACKS: dict[str, LanguagePack] = {pack.name: pack for pack in _ALL_PACKS}

_EXT_TO_PACK: dict[str, LanguagePack] = {}
for _pack in _ALL_PACKS:
    for _ext in _pack.extensions:
        _EXT_TO_PACK[_ext] = _pack


def get_pack_for_ext(ext: str) -> LanguagePack | None:
    """Get a LanguagePack for a file extension (without leading dot)."""
    return _EXT_TO_PACK.get(ext.lower())


def get_pack(name: str) -> LanguagePack | None:
    """Get a LanguagePack by language name."""
    return PACKS.get(name)


def supported_extensions() -> frozenset[str]:
    return frozenset(_EXT_TO_PACK)
