"""Source file discovery with include/exclude globs."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from canonicalcat.config.constants import PRUNED_DIRS
from canonicalcat.core.errors import DiscoveryError
from canonicalcat.index._internal.parsing import supported_extensions
from canonicalcat.index.globs import matches_any

log = structlog.get_logger(__name__)


def discover_source_files(
    root: Path,
    include: Sequence[str],
    exclude: Sequence[str] = (),
) -> list[Path]:
    """Find files under ``root`` matching any include and no exclude pattern.

    Only extensions with a tree-sitter grammar are returned. Directories in
    ``PRUNED_DIRS`` are never entered.

    Args:
        root: Project root; patterns are relative to it
        include: Globs selecting files
        exclude: Globs removing files from the selection

    Returns:
        Sorted absolute paths.

    Raises:
        DiscoveryError: If ``root`` is missing or cannot be listed.
    """
    if not root.is_dir():
        raise DiscoveryError.root_not_found(str(root))

    extensions = supported_extensions()
    found: list[Path] = []
    walk_errors: list[OSError] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=walk_errors.append):
        dirnames[:] = sorted(d for d in dirnames if d not in PRUNED_DIRS)
        base = Path(dirpath)
        for filename in filenames:
            if filename.rsplit(".", 1)[-1].lower() not in extensions:
                continue
            path = base / filename
            rel = path.relative_to(root).as_posix()
            if not matches_any(rel, include):
                continue
            if matches_any(rel, exclude):
                continue
            found.append(path)

    for err in walk_errors:
        if Path(err.filename or "") == root:
            raise DiscoveryError.unreadable(str(root), str(err))
        log.warning("directory_unreadable", path=err.filename, error=str(err))

    found = sorted(set(found))
    log.debug("files_discovered", root=str(root), count=len(found))
    return found
