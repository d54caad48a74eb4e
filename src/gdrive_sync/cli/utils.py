"""CLI utilities."""

from pathlib import Path

import click

from gdrive_sync.config.loader import load_config
from gdrive_sync.config.models import GdriveSyncConfig
from gdrive_sync.core.errors import ConfigError


def load_cli_config(ctx: click.Context) -> GdriveSyncConfig:
    """Load config for a subcommand, honoring the group's ``--config`` and ``-v``.

    Raises:
        click.ClickException: The config cannot be loaded.
    """
    obj = ctx.find_object(dict) or {}
    config_path: Path | None = obj.get("config_path")
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e
    if obj.get("verbose"):
        config.logging.level = "DEBUG"
    return config
