"""Tree-sitter parsing for the file-set view.

This module provides Tree-sitter parsing for:
- Import extraction (``import`` statements with their local bindings)
- Identifier occurrence tracking (where identifiers appear, flagged when
  they sit inside an import clause)
- Probe validation (does this file parse well enough to catalog?)

Note: "identifier_occurrences" != "references". At the syntactic layer,
we only know "an identifier named X appears at line Y". Attributing an
occurrence to a definition is the usage index's job.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tree_sitter

from canonicalcat.config.constants import MAX_ERROR_RATIO
from canonicalcat.index._internal.parsing.packs import LanguagePack, get_pack_for_ext
from canonicalcat.index.models import (
    DEFAULT_EXPORT_NAME,
    IdentifierOccurrence,
    ImportBinding,
    ImportStatement,
)

_IMPORT_NODE = "import_statement"
_COMMENT_TYPES = frozenset({"comment", "html_comment"})


@dataclass
class ProbeValidation:
    """Result of validating a parsed file."""

    is_valid: bool
    error_count: int
    total_nodes: int
    has_meaningful_content: bool
    error_ratio: float = 0.0


@dataclass
class ParseResult:
    """Result of parsing a file."""

    tree: Any  # Tree-sitter Tree (not serializable)
    language: str
    error_count: int
    total_nodes: int
    root_node: Any  # Tree-sitter Node


def node_text(node: Any) -> str:
    return node.text.decode("utf-8") if node is not None and node.text else ""


def node_line(node: Any) -> int:
    return int(node.start_point[0]) + 1


@dataclass
class TreeSitterParser:
    """
    Tree-sitter parser for JavaScript, TypeScript and TSX.

    Not thread-safe: the file-set parser keeps one instance per worker thread.

    Usage::

        parser = TreeSitterParser()
        result = parser.parse(Path("src/Button.tsx"), content)

        imports = parser.extract_imports(result, file_id)
        occurrences = parser.extract_identifier_occurrences(result)
        validation = parser.validate_code_file(result)
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._languages = {}

    def _get_language(self, pack: LanguagePack) -> Any:
        """Get or load the tree-sitter Language for a pack."""
        if pack.grammar_name in self._languages:
            return self._languages[pack.grammar_name]

        try:
            mod = importlib.import_module(pack.grammar_module)
            lang_fn = getattr(mod, pack.language_func or "language")
        except (ImportError, AttributeError) as err:
            raise ValueError(f"Language not available: {pack.grammar_name}") from err

        lang = tree_sitter.Language(lang_fn())
        self._languages[pack.grammar_name] = lang
        return lang

    def parse(self, path: Path, content: bytes | None = None) -> ParseResult:
        """
        Parse a file with Tree-sitter.

        Args:
            path: Path to file (used for language detection)
            content: File content as bytes. If None, reads from path.

        Returns:
            ParseResult with tree, language, and error info.

        Raises:
            ValueError: If the extension has no grammar.
        """
        if content is None:
            content = path.read_bytes()

        ext = path.suffix.lower().lstrip(".")
        pack = get_pack_for_ext(ext)
        if pack is None:
            raise ValueError(f"Unsupported file extension: {ext}")

        self._parser.language = self._get_language(pack)
        tree = self._parser.parse(content)

        error_count = 0
        total_nodes = 0
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            total_nodes += 1
            if node.type == "ERROR" or node.is_missing:
                error_count += 1
            stack.extend(node.children)

        return ParseResult(
            tree=tree,
            language=pack.name,
            error_count=error_count,
            total_nodes=total_nodes,
            root_node=tree.root_node,
        )

    def extract_imports(self, result: ParseResult, file_id: str) -> list[ImportStatement]:
        """
        Extract ``import`` statements with their bound local names.

        Side-effect imports (``import "./styles.css"``) carry no bindings and
        are still returned. Namespace imports (``import * as ns``) bind no
        entity name and are ignored. ``require()`` calls are not bindings.

        Args:
            result: ParseResult from parse()
            file_id: Canonical id of the parsed file

        Returns:
            Import statements in source order.
        """
        imports: list[ImportStatement] = []
        stack = [result.root_node]
        while stack:
            node = stack.pop()
            if node.type == _IMPORT_NODE:
                stmt = self._process_import_node(node, file_id)
                if stmt is not None:
                    imports.append(stmt)
                continue
            stack.extend(reversed(node.children))
        return imports

    def _process_import_node(self, node: Any, file_id: str) -> ImportStatement | None:
        source_node = node.child_by_field_name("source")
        if source_node is None:
            return None
        specifier = node_text(source_node).strip("'\"`")
        if not specifier:
            return None

        bindings: list[ImportBinding] = []
        for child in node.children:
            if child.type != "import_clause":
                continue
            for clause_child in child.children:
                if clause_child.type == "identifier":
                    bindings.append(
                        ImportBinding(local=node_text(clause_child), imported=DEFAULT_EXPORT_NAME)
                    )
                elif clause_child.type == "named_imports":
                    for spec in clause_child.children:
                        if spec.type != "import_specifier":
                            continue
                        name_node = spec.child_by_field_name("name")
                        alias_node = spec.child_by_field_name("alias")
                        name = node_text(name_node).strip("'\"")
                        if not name:
                            continue
                        local = node_text(alias_node) if alias_node is not None else name
                        bindings.append(ImportBinding(local=local, imported=name))

        return ImportStatement(
            file_id=file_id,
            specifier=specifier,
            bindings=tuple(bindings),
            line=node_line(node),
        )

    def extract_identifier_occurrences(self, result: ParseResult) -> list[IdentifierOccurrence]:
        """
        Extract all identifier occurrences from a parse result.

        Occurrences with an enclosing ``import_statement`` are flagged
        ``in_import`` so usage scanning can skip the binding sites themselves.

        Args:
            result: ParseResult from parse()

        Returns:
            List of IdentifierOccurrence objects in source order.
        """
        occurrences: list[IdentifierOccurrence] = []
        stack: list[tuple[Any, bool]] = [(result.root_node, False)]
        while stack:
            node, in_import = stack.pop()
            if node.type == "identifier" or node.type.endswith("_identifier"):
                name = node_text(node)
                if name:
                    occurrences.append(
                        IdentifierOccurrence(
                            name=name,
                            line=node_line(node),
                            column=int(node.start_point[1]),
                            in_import=in_import,
                        )
                    )
            child_in_import = in_import or node.type == _IMPORT_NODE
            stack.extend((child, child_in_import) for child in reversed(node.children))
        return occurrences

    def validate_code_file(self, result: ParseResult) -> ProbeValidation:
        """
        Validate a code file before cataloging.

        Valid if error nodes are under 10% of all nodes. Comment-only files
        are valid but reported through ``has_meaningful_content``.
        """
        if result.total_nodes == 0:
            return ProbeValidation(
                is_valid=False,
                error_count=0,
                total_nodes=0,
                has_meaningful_content=False,
            )

        error_ratio = result.error_count / result.total_nodes
        has_meaningful = self._has_meaningful_nodes(result.root_node)

        return ProbeValidation(
            is_valid=error_ratio < MAX_ERROR_RATIO,
            error_count=result.error_count,
            total_nodes=result.total_nodes,
            has_meaningful_content=has_meaningful,
            error_ratio=error_ratio,
        )

    def _has_meaningful_nodes(self, node: Any) -> bool:
        """Check if tree has meaningful (non-comment, non-whitespace) nodes."""
        meaningless_types = _COMMENT_TYPES | {"ERROR", "MISSING"}

        stack = [node]
        while stack:
            n = stack.pop()
            if n.is_named and n.type not in meaningless_types and n.type != "program":
                return True
            stack.extend(n.children)
        return False


def is_comment(node: Any) -> bool:
    return node.type in _COMMENT_TYPES

