"""declfeat CLI - declfeat command."""

import click

from declfeat.cli.check import check_command
from declfeat.cli.resolve import resolve_command
from declfeat.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="declfeat")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """declfeat - attach and resolve declaration features for binding generators."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(resolve_command, name="resolve")
cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
