"""Tests for CLI utilities.

Covers:
- find_project_root() marker preference
- Fallback when no marker exists
"""

from __future__ import annotations

from pathlib import Path

from canonicalcat.cli.utils import find_project_root


class TestFindProjectRoot:
    """Tests for find_project_root function."""

    def test_finds_root_from_subdirectory(self, tmp_path: Path) -> None:
        """package.json marks the root when walking up."""
        (tmp_path / "package.json").write_text("{}")
        nested = tmp_path / "src" / "components"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_config_dir_preferred_over_package_json(self, tmp_path: Path) -> None:
        """A workspace package.json below an initialized root does not win."""
        (tmp_path / ".canonicalcat").mkdir()
        package = tmp_path / "packages" / "ui"
        package.mkdir(parents=True)
        (package / "package.json").write_text("{}")

        assert find_project_root(package) == tmp_path.resolve()

    def test_package_json_preferred_over_git(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        app = tmp_path / "app"
        app.mkdir()
        (app / "package.json").write_text("{}")

        assert find_project_root(app / ".") == app.resolve()

    def test_git_dir_as_last_marker(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_falls_back_to_start(self, tmp_path: Path) -> None:
        """Without any marker the start directory is the root.

        Markers above tmp_path could exist on the test machine, so only
        assert the result is an ancestor-or-self of the start.
        """
        start = tmp_path / "lonely"
        start.mkdir()
        result = find_project_root(start)
        assert result == start.resolve() or result in start.resolve().parents
