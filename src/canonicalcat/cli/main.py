"""canonical-cat CLI - ccat command."""

import click

from canonicalcat.cli.clear import clear_command
from canonicalcat.cli.generate import generate_command
from canonicalcat.cli.init import init_command
from canonicalcat.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="ccat")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """canonical-cat - incremental symbol catalog for JS/TS codebases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(init_command, name="init")
cli.add_command(generate_command, name="generate")
cli.add_command(clear_command, name="clear")


if __name__ == "__main__":
    cli()
