"""Relative import resolution against the current file set.

Only ``./`` and ``../`` specifiers are resolved. Bare package names and
bundler path aliases (``@/components``) are always unresolved.

Candidate order, first hit wins:
1. the joined path exactly as written
2. the joined path plus each of ``.ts .tsx .js .jsx``
3. the joined path plus each of ``/index.ts /index.tsx /index.js /index.jsx``

A candidate only counts if it names a file already in the file set; the
filesystem is never consulted.
"""

from __future__ import annotations

import posixpath
from collections.abc import Collection

from canonicalcat.config.constants import RESOLVE_EXTENSIONS, RESOLVE_INDEX_SUFFIXES


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


def candidate_paths(specifier: str, referencing_file: str) -> list[str]:
    """All file ids a relative specifier may name, in resolution order."""
    base = posixpath.normpath(posixpath.join(posixpath.dirname(referencing_file), specifier))
    return [
        base,
        *(base + ext for ext in RESOLVE_EXTENSIONS),
        *(base + suffix for suffix in RESOLVE_INDEX_SUFFIXES),
    ]


def resolve_import(
    specifier: str,
    referencing_file: str,
    known_files: Collection[str],
) -> str | None:
    """Map a module specifier to the file id it names, or None.

    Args:
        specifier: Raw module specifier, e.g. ``"./Button"``
        referencing_file: File id (absolute POSIX path) of the importing file
        known_files: File ids of the current file set

    Returns:
        The first candidate present in ``known_files``, else None.
    """
    if not is_relative_specifier(specifier):
        return None
    for candidate in candidate_paths(specifier, referencing_file):
        if candidate in known_files:
            return candidate
    return None
