"""declfeat check command - report directives that had no effect."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console

from declfeat.cli.utils import load_cli_config, open_interface
from declfeat.core.logging import set_run_id


@click.command()
@click.argument("interface_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of .declfeat.yaml next to INTERFACE_FILE",
)
@click.option("--strict", is_flag=True, help="Exit with status 1 when diagnostics were reported")
def check_command(
    interface_file: Path, as_json: bool, config_file: Path | None, strict: bool
) -> None:
    """Validate INTERFACE_FILE and list its diagnostics."""
    set_run_id()
    config = load_cli_config(interface_file, config_file=config_file)
    interface = open_interface(interface_file, config)
    diagnostics = interface.diagnostics

    if as_json:
        click.echo(json.dumps([d.to_dict() for d in diagnostics], indent=2))
    else:
        console = Console()
        if not diagnostics:
            console.print(
                f"[green]✓[/green] {len(interface.table)} feature entries, "
                f"{len(interface.variants)} variants, no diagnostics"
            )
        for d in diagnostics:
            console.print(
                f"[yellow]![/yellow] #{d.sequence_index} [bold]{d.code}[/bold]: {d.message}"
            )

    if strict and diagnostics:
        sys.exit(1)
