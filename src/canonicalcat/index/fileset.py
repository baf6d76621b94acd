"""Parse discovered files into the file-set view.

Every file is parsed independently on a worker thread. Tree-sitter parsers
are not thread-safe, so each worker keeps its own ``TreeSitterParser``.
A file that cannot be read, decoded or parsed cleanly is recorded as a
failure and left out of the file set; it never aborts the run.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import structlog

from canonicalcat.core.errors import ParseError
from canonicalcat.index._internal.parsing import TreeSitterParser
from canonicalcat.index.models import FileSet, SourceFile

log = structlog.get_logger(__name__)

_local = threading.local()


def _parser() -> TreeSitterParser:
    parser: TreeSitterParser | None = getattr(_local, "parser", None)
    if parser is None:
        parser = TreeSitterParser()
        _local.parser = parser
    return parser


def file_id_for(path: Path) -> str:
    """Canonical file id: resolved absolute POSIX path."""
    return path.resolve().as_posix()


def parse_source_file(path: Path, root: Path) -> SourceFile:
    """Parse one file into a SourceFile.

    Raises:
        ParseError: If the file cannot be read, decoded or parsed cleanly.
    """
    file_id = file_id_for(path)
    rel_path = Path(os.path.relpath(file_id, root)).as_posix()
    parser = _parser()
    try:
        result = parser.parse(path)
        validation = parser.validate_code_file(result)
        if not validation.is_valid:
            raise ParseError.for_file(
                rel_path,
                f"{validation.error_count} of {validation.total_nodes} nodes are errors",
            )
        imports = parser.extract_imports(result, file_id)
        occurrences = parser.extract_identifier_occurrences(result)
    except (OSError, ValueError, RecursionError) as e:
        raise ParseError.for_file(rel_path, str(e) or type(e).__name__) from e

    if not validation.has_meaningful_content:
        log.debug("file_without_code", file=rel_path)

    return SourceFile(
        file_id=file_id,
        rel_path=rel_path,
        language=result.language,
        imports=imports,
        occurrences=occurrences,
        root_node=result.root_node,
    )


def parse_file_set(root: Path, paths: Sequence[Path], *, max_workers: int = 4) -> FileSet:
    """Parse ``paths`` in parallel into a FileSet rooted at ``root``."""
    root = root.resolve()
    file_set = FileSet(root=root)

    def work(path: Path) -> SourceFile | ParseError:
        try:
            return parse_source_file(path, root)
        except ParseError as e:
            return e

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="parse") as pool:
        outcomes = list(pool.map(work, paths))

    for outcome in outcomes:
        if isinstance(outcome, ParseError):
            log.warning(
                "file_parse_failed",
                file=outcome.details["path"],
                reason=outcome.details["reason"],
            )
            file_set.failures.append(outcome)
        else:
            file_set.files[outcome.file_id] = outcome

    log.info("file_set_parsed", parsed=len(file_set), failed=len(file_set.failures))
    return file_set
