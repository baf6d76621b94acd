"""Tree-sitter parsing for syntactic analysis."""

from canonicalcat.index._internal.parsing.packs import (
    LanguagePack,
    get_pack,
    get_pack_for_ext,
    supported_extensions,
)
from canonicalcat.index._internal.parsing.treesitter import (
    ParseResult,
    ProbeValidation,
    TreeSitterParser,
    is_comment,
    node_line,
    node_text,
)

__all__ = [
    "LanguagePack",
    "ParseResult",
    "ProbeValidation",
    "TreeSitterParser",
    "get_pack",
    "get_pack_for_ext",
    "is_comment",
    "node_line",
    "node_text",
    "supported_extensions",
]
