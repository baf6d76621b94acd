"""Shared fixtures for index tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from canonicalcat.index.fileset import parse_source_file
from canonicalcat.index.models import SourceFile

ProjectFactory = Callable[[dict[str, str]], Path]


@pytest.fixture
def make_project(tmp_path: Path) -> ProjectFactory:
    """Write ``{relative path: source}`` under a fresh project root."""

    def factory(files: dict[str, str]) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root.resolve()

    return factory


@pytest.fixture
def parse_snippet(tmp_path: Path) -> Callable[[str, str], SourceFile]:
    """Parse a single source string as if it lived at ``src/<name>``."""

    def parse(content: str, name: str = "module.tsx") -> SourceFile:
        root = (tmp_path / "snippets").resolve()
        path = root / "src" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return parse_source_file(path, root)

    return parse


@pytest.fixture
def button_component() -> str:
    return """import React from "react";

export interface ButtonProps {
  /** Text shown on the button */
  label: string;
  onClick?: () => void;
}

/**
 * Primary call-to-action button.
 *
 * Renders a native button element.
 */
export function Button({ label, onClick }: ButtonProps): JSX.Element {
  return <button onClick={onClick}>{label}</button>;
}
"""
