"""CLI utilities."""

from pathlib import Path

from canonicalcat.config.constants import CONFIG_DIRNAME

_ROOT_MARKERS = (CONFIG_DIRNAME, "package.json", ".git")


def find_project_root(start_path: Path | None = None) -> Path:
    """Find the project root from the given path.

    Walks up the directory tree looking, in order of preference, for a
    ``.canonicalcat`` directory, a ``package.json`` or a ``.git`` directory.
    Falls back to the start path itself.

    Args:
        start_path: Starting directory to search from (default: cwd)

    Returns:
        Path to project root
    """
    start = (start_path or Path.cwd()).resolve()
    chain = [start, *start.parents]

    for marker in _ROOT_MARKERS:
        for candidate in chain:
            if (candidate / marker).exists():
                return candidate
    return start
