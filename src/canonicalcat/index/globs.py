"""Glob matching for include, exclude and barrel-file patterns.

Patterns are POSIX paths relative to the project root. ``fnmatch`` does the
matching, so ``*`` already crosses ``/``; on top of that ``**/`` may match
zero directories and ``{a,b}`` expands to alternatives.
"""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Iterable
from functools import lru_cache

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


@lru_cache(maxsize=256)
def expand_braces(pattern: str) -> tuple[str, ...]:
    """Expand ``{a,b}`` alternatives: ``*.{ts,tsx}`` -> ``*.ts``, ``*.tsx``."""
    match = _BRACE_RE.search(pattern)
    if match is None:
        return (pattern,)
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return tuple(dict.fromkeys(expanded))


def _variants(pattern: str) -> tuple[str, ...]:
    variants = [pattern]
    if pattern.startswith("**/"):
        variants.append(pattern[3:])
    if "/**/" in pattern:
        variants.append(pattern.replace("/**/", "/"))
    return tuple(variants)


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Check if a path matches a glob pattern, with ** and brace support."""
    for expanded in expand_braces(pattern):
        for variant in _variants(expanded):
            if fnmatch.fnmatchcase(rel_path, variant):
                return True
    return False


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(matches_glob(rel_path, p) for p in patterns)
