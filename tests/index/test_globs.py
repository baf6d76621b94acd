"""Tests for glob matching."""

from __future__ import annotations

import pytest

from canonicalcat.index.globs import expand_braces, matches_any, matches_glob


class TestExpandBraces:
    def test_no_braces(self) -> None:
        assert expand_braces("src/*.ts") == ("src/*.ts",)

    def test_single_group(self) -> None:
        assert expand_braces("*.{ts,tsx}") == ("*.ts", "*.tsx")

    def test_multiple_groups(self) -> None:
        assert expand_braces("{a,b}/*.{x,y}") == ("a/*.x", "a/*.y", "b/*.x", "b/*.y")


class TestMatchesGlob:
    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("src/Button.tsx", "src/**/*.{ts,tsx}"),
            ("src/components/ui/Button.tsx", "src/**/*.{ts,tsx}"),
            ("node_modules/react/index.js", "**/node_modules/**"),
            ("packages/a/node_modules/x/y.js", "**/node_modules/**"),
            ("index.ts", "**/index.{ts,tsx,js,jsx}"),
            ("src/Button.test.tsx", "**/*.test.{ts,tsx,js,jsx}"),
        ],
    )
    def test_matches(self, path: str, pattern: str) -> None:
        assert matches_glob(path, pattern)

    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("lib/Button.tsx", "src/**/*.{ts,tsx}"),
            ("src/Button.css", "src/**/*.{ts,tsx}"),
            ("src/indexes.ts", "**/index.{ts,tsx,js,jsx}"),
            ("src/Button.tsx", "**/*.test.{ts,tsx,js,jsx}"),
        ],
    )
    def test_does_not_match(self, path: str, pattern: str) -> None:
        assert not matches_glob(path, pattern)

    def test_case_sensitive(self) -> None:
        assert not matches_glob("SRC/a.ts", "src/**/*.ts")


class TestMatchesAny:
    def test_any_pattern(self) -> None:
        assert matches_any("lib/x.js", ["src/**/*.js", "lib/*.js"])

    def test_empty_patterns(self) -> None:
        assert not matches_any("src/x.js", [])
