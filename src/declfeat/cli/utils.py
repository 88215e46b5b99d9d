"""CLI utilities."""

from pathlib import Path

import click

from declfeat.config.loader import load_config
from declfeat.config.models import DeclFeatConfig
from declfeat.core.errors import DeclFeatError
from declfeat.core.logging import configure_logging
from declfeat.loader import build_interface
from declfeat.session import Interface


def load_cli_config(
    interface_file: Path, *, config_file: Path | None = None, compact: bool | None = None
) -> DeclFeatConfig:
    """Load config for an interface file, applying CLI overrides.

    Without ``--config`` the .declfeat.yaml next to the interface file is used.

    Raises:
        click.ClickException: On invalid configuration
    """
    try:
        config = load_config(interface_file.resolve().parent, config_file=config_file)
    except DeclFeatError as e:
        raise click.ClickException(str(e)) from e
    if compact is not None:
        config.expansion = config.expansion.model_copy(update={"compact_default_args": compact})

    root = click.get_current_context().find_root()
    if not (root.obj or {}).get("verbose"):
        # -v keeps the DEBUG console setup made by the group
        configure_logging(config=config.logging)
    return config


def open_interface(interface_file: Path, config: DeclFeatConfig) -> Interface:
    """Build the interface, turning engine errors into CLI errors."""
    try:
        return build_interface(interface_file, config)
    except DeclFeatError as e:
        raise click.ClickException(str(e)) from e
