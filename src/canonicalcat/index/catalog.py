"""Symbol catalog: exported declarations of a parsed file.

Recognized exports::

    export function F() {}            export class C {}
    export const F = () => ...        export interface I {}
    export const F = function () {}   export type T = ...
    export default function F() {}    export enum E {}
    export default F                  export { F, G as H }

Re-exports (``export { X } from "./x"``, ``export * from``) are skipped;
they belong to the file that declares X. Non-callable ``const`` exports are
not entities.

Signatures are rendered from tokens, not raw source text, so reformatting a
declaration leaves its signature string unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

import structlog

from canonicalcat.index._internal.parsing import is_comment, node_line, node_text
from canonicalcat.index.hasher import TreeSitterNode, iter_tokens
from canonicalcat.index.models import (
    DEFAULT_EXPORT_NAME,
    Entity,
    EntityKind,
    ExportType,
    PropDefinition,
    SourceFile,
)

log = structlog.get_logger(__name__)

_FUNCTION_DECLS = frozenset({"function_declaration", "generator_function_declaration"})
_FUNCTION_VALUES = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
_CLASS_DECLS = frozenset({"class_declaration", "abstract_class_declaration"})
_CLASS_VALUES = frozenset({"class"})
_TYPE_DECLS = frozenset({"interface_declaration", "type_alias_declaration", "enum_declaration"})
_VARIABLE_DECLS = frozenset({"lexical_declaration", "variable_declaration"})

# Nested scopes whose return statements don't belong to the enclosing function
_SCOPE_BOUNDARIES = _FUNCTION_DECLS | _FUNCTION_VALUES | _CLASS_DECLS | _CLASS_VALUES | {
    "method_definition"
}
_JSX_NODES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})

_SPACE_BEFORE = re.compile(r" (?=[,;:)\]?])")
_SPACE_AFTER = re.compile(r"(?<=[(\[]) ")
_MEMBER_DOT = re.compile(r"(?<=[\w)\]]) \. (?=\w)")
_SPREAD = re.compile(r"\.\.\. ")
_GENERIC_OPEN = re.compile(r"(?<=\w) < ")
_GENERIC_CLOSE = re.compile(r" >(?!=)")


# =========================================================================
# Rendering helpers
# =========================================================================


def render_tokens(tokens: Iterable[str]) -> str:
    """Join tokens into readable, formatting-independent source text."""
    text = " ".join(tokens)
    text = _SPREAD.sub("...", text)
    text = _MEMBER_DOT.sub(".", text)
    text = _GENERIC_OPEN.sub("<", text)
    text = _GENERIC_CLOSE.sub(">", text)
    text = _SPACE_BEFORE.sub("", text)
    text = _SPACE_AFTER.sub("", text)
    return text


def render_node(node: Any) -> str:
    if node is None:
        return ""
    return render_tokens(iter_tokens(TreeSitterNode(node)))


def _render_type_annotation(node: Any) -> str:
    """``: Foo<Bar>`` -> ``Foo<Bar>``."""
    return render_node(node).removeprefix(":").strip()


def _render_params(func: Any) -> str:
    params = func.child_by_field_name("parameters")
    if params is None:
        # Arrow function with a single bare parameter: x => ...
        single = func.child_by_field_name("parameter")
        return render_node(single)
    return ", ".join(render_node(p) for p in params.named_children if not is_comment(p))


def _render_header(decl: Any, stop_field: str) -> str:
    """Render a declaration's tokens up to (not including) one of its fields."""
    stop = decl.child_by_field_name(stop_field)
    tokens: list[str] = []
    for child in decl.children:
        if stop is not None and child == stop:
            break
        if child.type == "=":
            break
        tokens.extend(iter_tokens(TreeSitterNode(child)))
    return render_tokens(tokens)


def function_signature(func: Any, name: str) -> str:
    params = _render_params(func)
    ret = _render_type_annotation(func.child_by_field_name("return_type"))
    if func.type in _FUNCTION_DECLS:
        head = f"function {name}({params})"
        return f"{head}: {ret}" if ret else head
    head = f"{name} = ({params})"
    return f"{head}: {ret} => ..." if ret else f"{head} => ..."


# =========================================================================
# Doc comments
# =========================================================================


def _clean_jsdoc(text: str) -> str:
    body = text.strip()
    if not body.startswith("/**"):
        return ""
    body = body[3:].removesuffix("*/")
    lines: list[str] = []
    for raw in body.splitlines():
        line = raw.strip().lstrip("*").strip()
        if line.startswith("@"):
            break
        if not line:
            if lines:
                break
            continue
        lines.append(line)
    return " ".join(lines)


def doc_comment(node: Any) -> str:
    """First paragraph of a ``/** ... */`` comment directly above ``node``."""
    prev = node.prev_sibling
    if prev is None or not is_comment(prev):
        return ""
    if node.start_point[0] - prev.end_point[0] > 1:
        return ""
    return _clean_jsdoc(node_text(prev))


# =========================================================================
# Kind detection
# =========================================================================


def _contains_jsx(node: Any) -> bool:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _JSX_NODES:
            return True
        if current.type == "call_expression":
            callee = current.child_by_field_name("function")
            if callee is not None and node_text(callee).endswith("createElement"):
                return True
        if current.type in _SCOPE_BOUNDARIES:
            continue
        stack.extend(current.children)
    return False


def returns_jsx(func: Any) -> bool:
    """True if the function's own return value can be JSX."""
    body = func.child_by_field_name("body")
    if body is None:
        return False
    if body.type != "statement_block":
        # Arrow function with an expression body
        return _contains_jsx(body)

    stack = list(body.children)
    while stack:
        node = stack.pop()
        if node.type in _SCOPE_BOUNDARIES:
            continue
        if node.type == "return_statement":
            if any(_contains_jsx(child) for child in node.named_children):
                return True
            continue
        stack.extend(node.children)
    return False


def callable_kind(func: Any, name: str) -> EntityKind:
    if returns_jsx(func):
        return EntityKind.COMPONENT
    if name.startswith("use"):
        return EntityKind.HOOK
    return EntityKind.UTILITY


# =========================================================================
# Props
# =========================================================================


def _first_param_annotation(func: Any) -> Any | None:
    params = func.child_by_field_name("parameters")
    if params is None:
        return None
    for param in params.named_children:
        if is_comment(param):
            continue
        return param.child_by_field_name("type")
    return None


def _type_literal_members(node: Any) -> list[PropDefinition]:
    props: list[PropDefinition] = []
    for member in node.named_children:
        if member.type != "property_signature":
            continue
        name = node_text(member.child_by_field_name("name"))
        if not name:
            continue
        type_text = _render_type_annotation(member.child_by_field_name("type"))
        optional = any(child.type == "?" for child in member.children)
        props.append(
            PropDefinition(
                name=name,
                type=type_text or "any",
                required=not optional,
                description=doc_comment(member),
            )
        )
    return props


# =========================================================================
# Extraction
# =========================================================================


class _FileExtractor:
    """Collects the entities of one parsed file."""

    def __init__(self, source: SourceFile) -> None:
        self.source = source
        self.root = source.root_node
        # local name -> (declaration node, statement node carrying the doc comment)
        self.locals: dict[str, tuple[Any, Any]] = {}
        self.entities: dict[str, Entity] = {}

    # -- local declarations ------------------------------------------------

    def _collect_locals(self) -> None:
        for stmt in self.root.named_children:
            decl = stmt
            if stmt.type == "export_statement":
                decl = stmt.child_by_field_name("declaration")
                if decl is None:
                    continue
            for name, node in self._declared_names(decl):
                self.locals.setdefault(name, (node, stmt))

    @staticmethod
    def _declared_names(decl: Any) -> list[tuple[str, Any]]:
        if decl.type in _VARIABLE_DECLS:
            names = []
            for declarator in decl.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    names.append((node_text(name_node), declarator))
            return names
        if decl.type in _FUNCTION_DECLS | _CLASS_DECLS | _TYPE_DECLS:
            name = node_text(decl.child_by_field_name("name"))
            return [(name, decl)] if name else []
        return []

    def _resolve_props_type(self, annotation: Any) -> tuple[Any, list[PropDefinition]]:
        """Props node used for the interface hash, plus its members.

        A locally declared interface or object type alias replaces a bare
        type reference so edits to it count as interface changes.
        """
        type_node = annotation.named_children[0] if annotation.named_children else None
        if type_node is None:
            return annotation, []
        if type_node.type == "object_type":
            return annotation, _type_literal_members(type_node)
        if type_node.type == "type_identifier":
            local = self.locals.get(node_text(type_node))
            if local is not None:
                decl = local[0]
                if decl.type == "interface_declaration":
                    body = decl.child_by_field_name("body")
                    if body is not None:
                        return body, _type_literal_members(body)
                if decl.type == "type_alias_declaration":
                    value = decl.child_by_field_name("value")
                    if value is not None and value.type == "object_type":
                        return value, _type_literal_members(value)
        return annotation, []

    # -- entity construction -----------------------------------------------

    def _entity(
        self,
        name: str,
        decl: Any,
        doc_anchor: Any,
        export_type: ExportType,
    ) -> Entity | None:
        if decl.type == "variable_declarator":
            value = decl.child_by_field_name("value")
            if value is None or value.type not in _FUNCTION_VALUES:
                return None
            # const/let/var is part of the implementation
            statement = decl.parent if decl.parent is not None else decl
            return self._callable_entity(name, statement, value, doc_anchor, export_type)
        if decl.type in _FUNCTION_DECLS | _FUNCTION_VALUES:
            return self._callable_entity(name, decl, decl, doc_anchor, export_type)
        if decl.type in _CLASS_DECLS | _CLASS_VALUES:
            return self._make(
                name, EntityKind.CLASS, decl, f"class {name}", None, doc_anchor, export_type
            )
        if decl.type == "interface_declaration":
            return self._make(
                name,
                EntityKind.TYPE,
                decl,
                _render_header(decl, "body"),
                decl.child_by_field_name("body"),
                doc_anchor,
                export_type,
            )
        if decl.type == "type_alias_declaration":
            return self._make(
                name,
                EntityKind.TYPE,
                decl,
                _render_header(decl, "value"),
                decl.child_by_field_name("value"),
                doc_anchor,
                export_type,
            )
        if decl.type == "enum_declaration":
            return self._make(
                name,
                EntityKind.TYPE,
                decl,
                _render_header(decl, "body"),
                decl.child_by_field_name("body"),
                doc_anchor,
                export_type,
            )
        return None

    def _callable_entity(
        self,
        name: str,
        decl: Any,
        func: Any,
        doc_anchor: Any,
        export_type: ExportType,
    ) -> Entity:
        kind = callable_kind(func, name)
        type_node: Any = None
        props: list[PropDefinition] = []
        annotation = _first_param_annotation(func)
        if annotation is not None:
            type_node, props = self._resolve_props_type(annotation)
        entity = self._make(
            name,
            kind,
            decl,
            function_signature(func, name),
            type_node,
            doc_anchor,
            export_type,
        )
        if kind is EntityKind.COMPONENT:
            entity.props = props
        return entity

    def _make(
        self,
        name: str,
        kind: EntityKind,
        decl: Any,
        signature: str,
        type_node: Any,
        doc_anchor: Any,
        export_type: ExportType,
    ) -> Entity:
        return Entity(
            name=name,
            kind=kind,
            file_id=self.source.file_id,
            rel_path=self.source.rel_path,
            line=node_line(decl),
            signature=signature,
            declaration=decl,
            type_node=type_node,
            export_type=export_type,
            doc=doc_comment(doc_anchor),
        )

    def _add(self, entity: Entity | None) -> None:
        if entity is None:
            return
        existing = self.entities.get(entity.name)
        if existing is None:
            self.entities[entity.name] = entity
        elif entity.export_type is ExportType.DEFAULT:
            # export function F() {} ... export default F
            existing.export_type = ExportType.DEFAULT

    def _add_local(self, local_name: str, exported_name: str, export_type: ExportType) -> None:
        local = self.locals.get(local_name)
        if local is None:
            log.debug("export_without_local", file=self.source.rel_path, name=local_name)
            return
        decl, stmt = local
        self._add(self._entity(exported_name, decl, stmt, export_type))

    # -- export statements -------------------------------------------------

    def _process_export(self, stmt: Any) -> None:
        if stmt.child_by_field_name("source") is not None:
            return  # re-export

        is_default = any(child.type == "default" for child in stmt.children)
        export_type = ExportType.DEFAULT if is_default else ExportType.NAMED

        decl = stmt.child_by_field_name("declaration")
        if decl is not None:
            for name, node in self._declared_names(decl):
                self._add(self._entity(name, node, stmt, export_type))
            return

        value = stmt.child_by_field_name("value")
        if value is not None:
            if value.type == "identifier":
                self._add_local(node_text(value), node_text(value), ExportType.DEFAULT)
            else:
                name = node_text(value.child_by_field_name("name")) or DEFAULT_EXPORT_NAME
                self._add(self._entity(name, value, stmt, ExportType.DEFAULT))
            return

        for child in stmt.named_children:
            if child.type != "export_clause":
                continue
            for spec in child.named_children:
                if spec.type != "export_specifier":
                    continue
                local_name = node_text(spec.child_by_field_name("name"))
                alias = node_text(spec.child_by_field_name("alias"))
                if alias == DEFAULT_EXPORT_NAME:
                    self._add_local(local_name, local_name, ExportType.DEFAULT)
                else:
                    self._add_local(local_name, alias or local_name, ExportType.NAMED)

    def extract(self) -> list[Entity]:
        if self.root is None:
            return []
        self._collect_locals()
        for stmt in self.root.named_children:
            if stmt.type == "export_statement":
                self._process_export(stmt)
        return sorted(self.entities.values(), key=lambda e: (e.line, e.name))


def extract_entities(source: SourceFile) -> list[Entity]:
    """Exported declarations of one parsed file, in source order."""
    return _FileExtractor(source).extract()
