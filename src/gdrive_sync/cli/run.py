"""gdrive-sync run - watch a directory and upload finished files."""

import asyncio
from pathlib import Path

import click

from gdrive_sync.cli.utils import load_cli_config
from gdrive_sync.core.errors import GdriveSyncError
from gdrive_sync.core.progress import status


@click.command()
@click.option(
    "--input-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to watch for new files to upload",
)
@click.option("--output-dir", help="Drive folder where files will be uploaded")
@click.option(
    "--creds-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the OAuth client secrets",
)
@click.option(
    "--token-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the cached OAuth token",
)
@click.option(
    "--upload-on-startup/--no-upload-on-startup",
    default=None,
    help="Upload files already in the input directory when starting",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    input_dir: Path | None,
    output_dir: str | None,
    creds_file: Path | None,
    token_file: Path | None,
    upload_on_startup: bool | None,
) -> None:
    """Watch the input directory and move every finished file into a Drive folder.

    A file is uploaded once its size has stopped changing and no process
    holds it open. After a successful upload the local copy is deleted.
    Runs in the foreground until SIGINT or SIGTERM.
    """
    from gdrive_sync.core.logging import configure_logging
    from gdrive_sync.daemon.lifecycle import build_store, run_uploader

    config = load_cli_config(ctx)
    if input_dir is not None:
        config.watch.input_dir = str(input_dir)
    if output_dir is not None:
        config.drive.output_dir = output_dir
    if creds_file is not None:
        config.drive.creds_file = str(creds_file)
    if token_file is not None:
        config.drive.token_file = str(token_file)
    if upload_on_startup is not None:
        config.watch.upload_on_startup = upload_on_startup

    configure_logging(config=config.logging)

    try:
        store = build_store(config)
        asyncio.run(run_uploader(config, store))
    except GdriveSyncError as e:
        status(e.message, style="error")
        raise click.exceptions.Exit(1) from e
    except KeyboardInterrupt:
        click.echo("\nStopped")
