"""declfeat resolve command - show the features every emitted variant receives."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from declfeat.cli.utils import load_cli_config, open_interface
from declfeat.core.logging import get_logger, set_run_id
from declfeat.expand.substitution import FactSheet
from declfeat.session import Interface

log = get_logger("cli.resolve")


def _collect(interface: Interface, features: tuple[str, ...]) -> list[dict[str, Any]]:
    rows = []
    for variant in interface.variants:
        if features:
            resolved = {name: interface.resolve(variant, name) for name in features}
        else:
            resolved = interface.resolver.resolve_all(variant)
        facts = FactSheet.for_variant(variant, config=interface.config.expansion)
        rows.append(
            {
                "declaration": variant.decl_text(),
                "wrapper": facts.wrapper_name,
                "features": {name: r.to_dict() for name, r in resolved.items()},
            }
        )
    return rows


def _state(result: dict[str, Any]) -> str:
    if result["active"]:
        return "[green]active[/green]"
    if result["value"] is not None:
        return "[yellow]disabled[/yellow]"
    return "[dim]-[/dim]"


def _render(rows: list[dict[str, Any]], console: Console) -> None:
    table = Table(show_header=True, header_style="bold", pad_edge=False)
    table.add_column("declaration", style="cyan")
    table.add_column("feature")
    table.add_column("state")
    table.add_column("body", overflow="fold")
    for row in rows:
        features = row["features"]
        if not features:
            table.add_row(row["declaration"], "", "[dim]-[/dim]", "")
            continue
        for i, (name, result) in enumerate(features.items()):
            table.add_row(
                row["declaration"] if i == 0 else "",
                name,
                _state(result),
                result["body"] or "",
            )
    console.print(table)


@click.command()
@click.argument("interface_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-f", "--feature", "features", multiple=True, help="Only resolve these features")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of .declfeat.yaml next to INTERFACE_FILE",
)
@click.option(
    "--compact-default-args/--expand-default-args",
    default=None,
    help="Override default-argument expansion from config",
)
def resolve_command(
    interface_file: Path,
    features: tuple[str, ...],
    as_json: bool,
    config_file: Path | None,
    compact_default_args: bool | None,
) -> None:
    """Resolve features for every declaration variant in INTERFACE_FILE."""
    set_run_id()
    config = load_cli_config(
        interface_file, config_file=config_file, compact=compact_default_args
    )
    interface = open_interface(interface_file, config)
    rows = _collect(interface, features)
    log.info("resolve_complete", variants=len(rows), file=str(interface_file))

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    _render(rows, Console())
