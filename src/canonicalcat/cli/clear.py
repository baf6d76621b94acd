"""ccat clear command - drop the change-detection cache."""

from pathlib import Path

import click
import questionary

from canonicalcat.cli.utils import find_project_root
from canonicalcat.config import load_config
from canonicalcat.core.errors import ConfigError
from canonicalcat.core.progress import get_console
from canonicalcat.index.ops import CatalogGenerator


def clear_cache(project_root: Path, *, yes: bool = False) -> bool:
    """Delete the cache file so the next run regenerates every entity.

    Returns True if a cache file was removed, False if cancelled or absent.
    """
    console = get_console()
    cache_path = CatalogGenerator(load_config(project_root), project_root).cache_path

    if not cache_path.exists():
        console.print("[yellow]Nothing to clear[/yellow] - no cache file found")
        return False

    console.print(f"\n[bold]This will delete:[/bold] [cyan]{cache_path}[/cyan]\n")

    if not yes:
        answer = questionary.confirm(
            "Every entity will be regenerated on the next run. Continue?",
            default=False,
        ).ask()
        if not answer:
            console.print("[dim]Cancelled[/dim]")
            return False

    try:
        cache_path.unlink()
    except OSError as e:
        console.print(f"  [red]✗[/red] Failed to remove {cache_path}: {e}")
        raise click.ClickException(f"Failed to remove {cache_path}: {e}") from e

    console.print(f"  [green]✓[/green] Removed {cache_path}")
    return True


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
def clear_command(path: Path | None, yes: bool) -> None:
    """Remove the change-detection cache of a project.

    PATH is the project root. If not specified, auto-detects by walking
    up from the current directory.
    """
    project_root = path.resolve() if path is not None else find_project_root()
    try:
        clear_cache(project_root, yes=yes)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
