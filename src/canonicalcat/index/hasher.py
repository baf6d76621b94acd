"""Formatting-insensitive content hashes for declarations.

Two digests per entity:
- implementation hash: every non-trivia token of the declaration
- interface hash: the rendered signature, then every non-trivia token of the
  optional type/props node

Normalization walks the syntax tree depth-first in source order, skips
comment subtrees and appends the trimmed text of each leaf token. Composite
nodes are never read as a whole because their text includes interior
whitespace and comments. Tokens are joined with NUL, which cannot appear in
JS/TS identifiers or literal source text, and the result is SHA-256 digested.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator, Sequence
from typing import Any, Protocol

import tree_sitter

from canonicalcat.index._internal.parsing import is_comment, node_text
from canonicalcat.index.models import Entity, HashPair

TOKEN_SEPARATOR = "\x00"


class SyntaxNode(Protocol):
    """The slice of a syntax tree the hasher needs."""

    @property
    def children(self) -> Sequence[SyntaxNode]: ...

    @property
    def is_trivia(self) -> bool: ...

    @property
    def text(self) -> str: ...


class TreeSitterNode:
    """SyntaxNode adapter over a tree-sitter node."""

    __slots__ = ("_node",)

    def __init__(self, node: Any) -> None:
        self._node = node

    @property
    def children(self) -> Sequence[TreeSitterNode]:
        return [TreeSitterNode(child) for child in self._node.children]

    @property
    def is_trivia(self) -> bool:
        return is_comment(self._node)

    @property
    def text(self) -> str:
        return node_text(self._node)


def iter_tokens(node: SyntaxNode) -> Iterator[str]:
    """Yield the trimmed, non-empty leaf token texts under ``node``."""
    stack: list[SyntaxNode] = [node]
    while stack:
        current = stack.pop()
        if current.is_trivia:
            continue
        children = current.children
        if children:
            stack.extend(reversed(children))
            continue
        token = current.text.strip()
        if token:
            yield token


def _digest(tokens: Sequence[str]) -> str:
    return hashlib.sha256(TOKEN_SEPARATOR.join(tokens).encode("utf-8")).hexdigest()


def _as_syntax(node: Any) -> SyntaxNode:
    if isinstance(node, tree_sitter.Node):
        return TreeSitterNode(node)
    return node  # type: ignore[no-any-return]


def implementation_hash(declaration: Any) -> str:
    """Hex SHA-256 over the declaration's normalized tokens."""
    return _digest(list(iter_tokens(_as_syntax(declaration))))


def interface_hash(signature: str, type_node: Any | None = None) -> str:
    """Hex SHA-256 over the signature followed by the type node's tokens."""
    tokens = [signature]
    if type_node is not None:
        tokens.extend(iter_tokens(_as_syntax(type_node)))
    return _digest(tokens)


def hash_entity(entity: Entity) -> HashPair:
    return HashPair(
        implementation_hash=implementation_hash(entity.declaration),
        interface_hash=interface_hash(entity.signature, entity.type_node),
    )
