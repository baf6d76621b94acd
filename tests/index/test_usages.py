"""Tests for the reverse usage index.

Most scenarios are built from hand-made SourceFile values so they exercise
resolution and attribution without the parser. The last class runs the
real parser end to end.
"""

from __future__ import annotations

from pathlib import Path

from canonicalcat.index.fileset import parse_file_set
from canonicalcat.index.models import (
    Entity,
    EntityKey,
    EntityKind,
    ExportType,
    FileSet,
    IdentifierOccurrence,
    ImportBinding,
    ImportStatement,
    SourceFile,
    UsageReference,
)
from canonicalcat.index.usages import UsageIndex, build_usage_index, is_barrel_file, scan_file

ROOT = "/p"
BARRELS = ("**/index.{ts,tsx,js,jsx}",)


def _source(
    rel: str,
    imports: list[tuple[str, list[tuple[str, str]], int]] | None = None,
    occurrences: list[tuple[str, int]] | None = None,
) -> SourceFile:
    file_id = f"{ROOT}/{rel}"
    imports = imports or []
    occurrences = occurrences or []
    stmts = [
        ImportStatement(
            file_id=file_id,
            specifier=spec,
            bindings=tuple(ImportBinding(local, imported) for local, imported in bindings),
            line=line,
        )
        for spec, bindings, line in imports
    ]
    occs = [IdentifierOccurrence(name, line, 0) for name, line in occurrences]
    # The import clause's own identifiers are always part of the stream.
    for stmt in stmts:
        occs.extend(IdentifierOccurrence(b.local, stmt.line, 0, in_import=True) for b in stmt.bindings)
    return SourceFile(file_id=file_id, rel_path=rel, language="tsx", imports=stmts, occurrences=occs)


def _file_set(*sources: SourceFile) -> FileSet:
    return FileSet(root=Path(ROOT), files={s.file_id: s for s in sources})


BUTTON = EntityKey(f"{ROOT}/src/Button.tsx", "Button")


class TestBuildUsageIndex:
    def test_component_used_on_two_lines(self) -> None:
        """Given Button imported by Page and used on lines 10 and 22
        When the index is built
        Then both lines are listed, in order.
        """
        fs = _file_set(
            _source("src/Button.tsx"),
            _source(
                "src/Page.tsx",
                imports=[("./Button", [("Button", "Button")], 1)],
                occurrences=[("Button", 22), ("Button", 10)],
            ),
        )

        index = build_usage_index(fs, BARRELS)

        assert index.usages_for(BUTTON) == [
            UsageReference("src/Page.tsx", 10),
            UsageReference("src/Page.tsx", 22),
        ]

    def test_import_line_is_not_a_usage(self) -> None:
        fs = _file_set(
            _source("src/Button.tsx"),
            _source("src/Page.tsx", imports=[("./Button", [("Button", "Button")], 1)]),
        )
        assert build_usage_index(fs, BARRELS).usages_for(BUTTON) == []

    def test_multiple_occurrences_on_one_line_collapse(self) -> None:
        fs = _file_set(
            _source("src/Button.tsx"),
            _source(
                "src/Page.tsx",
                imports=[("./Button", [("Button", "Button")], 1)],
                occurrences=[("Button", 5), ("Button", 5)],
            ),
        )
        assert build_usage_index(fs, BARRELS).usages_for(BUTTON) == [UsageReference("src/Page.tsx", 5)]

    def test_ordered_by_path_then_line(self) -> None:
        importer = [("./Button", [("Button", "Button")], 1)]
        fs = _file_set(
            _source("src/Button.tsx"),
            _source("src/b.tsx", imports=importer, occurrences=[("Button", 3)]),
            _source("src/a.tsx", imports=importer, occurrences=[("Button", 9), ("Button", 4)]),
        )
        refs = build_usage_index(fs, BARRELS).usages_for(BUTTON)
        assert refs == [
            UsageReference("src/a.tsx", 4),
            UsageReference("src/a.tsx", 9),
            UsageReference("src/b.tsx", 3),
        ]

    def test_aliased_import_attributed_to_original_name(self) -> None:
        """``import { Button as B }`` counts uses of ``B`` against ``Button``."""
        fs = _file_set(
            _source("src/Button.tsx"),
            _source(
                "src/Page.tsx",
                imports=[("./Button", [("B", "Button")], 1)],
                occurrences=[("B", 7), ("Button", 8)],
            ),
        )
        index = build_usage_index(fs, BARRELS)
        assert index.usages_for(BUTTON) == [UsageReference("src/Page.tsx", 7)]
        assert EntityKey(BUTTON.file_id, "B") not in index

    def test_barrel_files_contribute_nothing(self) -> None:
        fs = _file_set(
            _source("src/Button.tsx"),
            _source(
                "src/index.ts",
                imports=[("./Button", [("Button", "Button")], 1)],
                occurrences=[("Button", 3)],
            ),
        )
        index = build_usage_index(fs, BARRELS)
        assert len(index) == 0

    def test_barrel_patterns_are_configurable(self) -> None:
        fs = _file_set(
            _source("src/Button.tsx"),
            _source(
                "src/index.ts",
                imports=[("./Button", [("Button", "Button")], 1)],
                occurrences=[("Button", 3)],
            ),
        )
        index = build_usage_index(fs, ())
        assert index.usages_for(BUTTON) == [UsageReference("src/index.ts", 3)]

    def test_self_import_is_ignored(self) -> None:
        fs = _file_set(
            _source(
                "src/Button.tsx",
                imports=[("./Button", [("Button", "Button")], 1)],
                occurrences=[("Button", 4)],
            ),
        )
        assert build_usage_index(fs, BARRELS).usages_for(BUTTON) == []

    def test_unresolved_imports_are_dropped(self) -> None:
        fs = _file_set(
            _source(
                "src/Page.tsx",
                imports=[
                    ("react", [("useState", "useState")], 1),
                    ("./Missing", [("Missing", "Missing")], 2),
                ],
                occurrences=[("useState", 5), ("Missing", 6)],
            ),
        )
        assert len(build_usage_index(fs, BARRELS)) == 0

    def test_default_import_keyed_under_default(self) -> None:
        fs = _file_set(
            _source("src/Button.tsx"),
            _source(
                "src/Page.tsx",
                imports=[("./Button", [("Btn", "default")], 1)],
                occurrences=[("Btn", 6)],
            ),
        )
        index = build_usage_index(fs, BARRELS)
        assert index.usages_for(EntityKey(BUTTON.file_id, "default")) == [
            UsageReference("src/Page.tsx", 6)
        ]

    def test_unused_entity_has_no_usages(self) -> None:
        fs = _file_set(_source("src/Button.tsx"))
        assert build_usage_index(fs, BARRELS).usages_for(BUTTON) == []

    def test_single_worker_gives_same_result(self) -> None:
        importer = [("./Button", [("Button", "Button")], 1)]
        fs = _file_set(
            _source("src/Button.tsx"),
            _source("src/a.tsx", imports=importer, occurrences=[("Button", 2)]),
            _source("src/b.tsx", imports=importer, occurrences=[("Button", 2)]),
        )
        assert build_usage_index(fs, BARRELS, max_workers=1).usages_for(BUTTON) == (
            build_usage_index(fs, BARRELS, max_workers=4).usages_for(BUTTON)
        )


class TestScanFile:
    def test_shadowing_names_without_import_are_ignored(self) -> None:
        source = _source("src/Page.tsx", occurrences=[("Button", 3)])
        assert scan_file(source, frozenset({BUTTON.file_id})) == {}

    def test_same_local_bound_twice_credits_both(self) -> None:
        source = _source(
            "src/Page.tsx",
            imports=[
                ("./Button", [("X", "Button")], 1),
                ("./Card", [("X", "Card")], 2),
            ],
            occurrences=[("X", 9)],
        )
        known = frozenset({BUTTON.file_id, f"{ROOT}/src/Card.tsx"})
        contribution = scan_file(source, known)
        assert set(contribution) == {BUTTON, EntityKey(f"{ROOT}/src/Card.tsx", "Card")}


class TestUsagesForEntity:
    def _entity(self, name: str, export_type: ExportType) -> Entity:
        return Entity(
            name=name,
            kind=EntityKind.COMPONENT,
            file_id=BUTTON.file_id,
            rel_path="src/Button.tsx",
            line=1,
            signature="",
            declaration=None,
            export_type=export_type,
        )

    def test_default_export_merges_default_imports(self) -> None:
        index = UsageIndex(
            {
                BUTTON: (UsageReference("src/b.tsx", 2),),
                EntityKey(BUTTON.file_id, "default"): (
                    UsageReference("src/a.tsx", 1),
                    UsageReference("src/b.tsx", 2),
                ),
            }
        )
        refs = index.usages_for_entity(self._entity("Button", ExportType.DEFAULT))
        assert refs == [UsageReference("src/a.tsx", 1), UsageReference("src/b.tsx", 2)]

    def test_named_export_ignores_default_imports(self) -> None:
        index = UsageIndex({EntityKey(BUTTON.file_id, "default"): (UsageReference("src/a.tsx", 1),)})
        assert index.usages_for_entity(self._entity("Button", ExportType.NAMED)) == []


class TestIsBarrelFile:
    def test_nested_index(self) -> None:
        assert is_barrel_file("src/components/index.ts", BARRELS)

    def test_root_index(self) -> None:
        assert is_barrel_file("index.js", BARRELS)

    def test_regular_file(self) -> None:
        assert not is_barrel_file("src/components/Button.tsx", BARRELS)


class TestParsedProject:
    def test_usages_from_real_sources(self, make_project, button_component: str) -> None:
        """Given a parsed project with a page using Button twice
        When the index is built
        Then the JSX usage lines are reported and the barrel is ignored.
        """
        root = make_project(
            {
                "src/components/Button.tsx": button_component,
                "src/components/index.ts": 'export { Button } from "./Button";\n',
                "src/pages/Home.tsx": (
                    'import { Button } from "../components/Button";\n'
                    "\n"
                    "export function Home() {\n"
                    "  return (\n"
                    "    <div>\n"
                    '      <Button label="a" />\n'
                    '      <Button label="b" />\n'
                    "    </div>\n"
                    "  );\n"
                    "}\n"
                ),
            }
        )
        paths = sorted(root.rglob("*.ts*"))
        fs = parse_file_set(root, paths, max_workers=2)

        index = build_usage_index(fs, BARRELS)
        key = EntityKey((root / "src/components/Button.tsx").as_posix(), "Button")

        assert index.usages_for(key) == [
            UsageReference("src/pages/Home.tsx", 6),
            UsageReference("src/pages/Home.tsx", 7),
        ]
