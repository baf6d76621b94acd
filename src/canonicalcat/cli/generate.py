"""ccat generate command - build the symbol catalog."""

from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from canonicalcat.cli.utils import find_project_root
from canonicalcat.config import load_config
from canonicalcat.core.errors import ConfigError, DiscoveryError
from canonicalcat.core.logging import bind_run_id, configure_logging, get_log_file_path
from canonicalcat.core.progress import get_console, pluralize, status, task
from canonicalcat.index.models import CatalogResult
from canonicalcat.index.ops import CatalogGenerator


def _print_summary(result: CatalogResult) -> None:
    console = get_console()
    stats = result.stats

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Entity")
    table.add_column("Kind")
    table.add_column("File")
    table.add_column("Used in", justify="right")
    table.add_column("Status")
    for meta in result.entities:
        if not meta.needs_regeneration:
            continue
        table.add_row(
            meta.entity.name,
            meta.entity.kind.value,
            meta.entity.rel_path,
            str(len(meta.used_in)),
            "[yellow]changed[/yellow]",
        )

    console.print()
    if table.row_count:
        console.print(table)
        console.print()

    status(
        f"{pluralize(stats.entities_found, 'entity', 'entities')} in "
        f"{pluralize(stats.files_parsed, 'file')}, "
        f"{stats.entities_changed} changed, "
        f"{pluralize(stats.usages_found, 'usage')} ({stats.elapsed_seconds:.1f}s)",
        style="success",
    )
    for failure in result.failures:
        status(escape(failure.message), style="warning", indent=2)
    if result.catalog_path is not None:
        status(f"Catalog written to {result.catalog_path}", style="info")


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of .canonicalcat/config.yaml",
)
@click.option("--force", "-f", is_flag=True, help="Regenerate every entity, ignoring the cache")
@click.option("--filter", "name_filter", help="Only process entities whose name matches this glob")
@click.pass_context
def generate_command(
    ctx: click.Context,
    path: Path | None,
    config_path: Path | None,
    force: bool,
    name_filter: str | None,
) -> None:
    """Build the symbol catalog for a project.

    Finds exported declarations, records where each one is used, and marks
    the ones whose implementation or interface changed since the last run.

    PATH is the project root. If not specified, auto-detects by walking
    up from the current directory.
    """
    project_root = path.resolve() if path is not None else find_project_root()

    try:
        config = load_config(project_root, config_path=config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if ctx.obj and ctx.obj.get("verbose"):
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)
    bind_run_id()

    generator = CatalogGenerator(config, project_root)
    try:
        with task("Generating catalog"):
            result = generator.generate(force=force, name_filter=name_filter)
    except DiscoveryError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        log_file = get_log_file_path()
        hint = f" (details in {log_file})" if log_file else ""
        raise click.ClickException(f"Failed to write catalog: {e}{hint}") from e

    _print_summary(result)
