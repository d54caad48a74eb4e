"""gdrive-sync auth - authorize Drive access and cache the token."""

from pathlib import Path

import click

from gdrive_sync.cli.utils import load_cli_config
from gdrive_sync.core.errors import SetupError
from gdrive_sync.core.progress import status


@click.command()
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
@click.option("--force", is_flag=True, help="Re-authorize even if a valid token is cached")
@click.pass_context
def auth_command(
    ctx: click.Context,
    creds_file: Path | None,
    token_file: Path | None,
    force: bool,
) -> None:
    """Authorize gdrive-sync for Drive and cache the token.

    Prints an authorization URL; open it in a browser and approve access.
    Useful on headless hosts before starting ``gdrive-sync run`` as a service.
    """
    from gdrive_sync.remote.credentials import authorize, load_credentials, save_token

    config = load_cli_config(ctx)
    creds_path = creds_file or Path(config.drive.creds_file).expanduser()
    token_path = token_file or Path(config.drive.token_file).expanduser()

    try:
        if force:
            save_token(authorize(creds_path), token_path)
        else:
            load_credentials(creds_path, token_path, interactive=True)
    except SetupError as e:
        status(e.message, style="error")
        raise click.exceptions.Exit(1) from e

    status(f"Token saved to {token_path}", style="success")
