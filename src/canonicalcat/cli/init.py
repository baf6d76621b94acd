"""ccat init command - write a documented config for a project."""

from pathlib import Path

import click

from canonicalcat.cli.utils import find_project_root
from canonicalcat.config import repo_config_path
from canonicalcat.core.progress import status
from canonicalcat.templates import get_config_template, get_gitignore_template


def initialize_project(project_root: Path, *, force: bool = False) -> bool:
    """Create ``.canonicalcat/config.yaml``, returning True if written.

    An existing config is left alone unless ``force`` is set.
    """
    config_path = repo_config_path(project_root)

    if config_path.exists() and not force:
        status(f"Already initialized: {config_path}", style="info")
        status("Use --force to overwrite", style="info")
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(get_config_template(), encoding="utf-8")

    gitignore_path = config_path.parent / ".gitignore"
    if not gitignore_path.exists() or force:
        gitignore_path.write_text(get_gitignore_template(), encoding="utf-8")

    status(f"Wrote {config_path}", style="success")
    status("Run 'ccat generate' to build the catalog", style="info")
    return True


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config.yaml")
def init_command(path: Path | None, force: bool) -> None:
    """Initialize a project for canonical-cat.

    Creates .canonicalcat/config.yaml with every default documented.

    PATH is the project root. If not specified, auto-detects by walking
    up from the current directory.
    """
    project_root = path.resolve() if path is not None else find_project_root()
    initialize_project(project_root, force=force)
