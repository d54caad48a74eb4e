"""gdrive-sync CLI."""

from pathlib import Path

import click

from gdrive_sync import __version__
from gdrive_sync.cli.auth import auth_command
from gdrive_sync.cli.run import run_command
from gdrive_sync.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="gdrive-sync")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ~/.config/gdrive-sync/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """gdrive-sync - upload finished files from a directory to Google Drive."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(run_command, name="run")
cli.add_command(auth_command, name="auth")


if __name__ == "__main__":
    cli()
