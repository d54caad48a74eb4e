"""OAuth credentials for Drive, cached in a token file.

The token file holds the user's access and refresh tokens. It is written the
first time the authorization flow completes and refreshed in place when the
access token expires. Changing ``SCOPES`` requires deleting the cached token.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog
from google.auth.exceptions import GoogleAuthError, RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gdrive_sync.core.errors import SetupError

logger = structlog.get_logger()

SCOPES = ["https://www.googleapis.com/auth/drive"]


def load_credentials(
    creds_file: Path,
    token_file: Path,
    *,
    interactive: bool = True,
) -> Credentials:
    """Return valid Drive credentials, refreshing or authorizing as needed.

    Args:
        creds_file: OAuth client secrets (credentials.json).
        token_file: Cached authorized-user token (token.json).
        interactive: Allow the browser authorization flow when there is no
            usable cached token.

    Raises:
        SetupError: No usable token and authorization is impossible or failed.
    """
    creds = _read_token(token_file)

    if creds is not None and creds.valid:
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as e:
            logger.warning("token_refresh_failed", token_file=str(token_file), error=str(e))
        else:
            logger.info("token_refreshed", token_file=str(token_file))
            save_token(creds, token_file)
            return creds

    if not interactive:
        raise SetupError.credentials_unavailable(
            str(token_file), "no valid cached token; run 'gdrive-sync auth' first"
        )

    creds = authorize(creds_file)
    save_token(creds, token_file)
    return creds


def authorize(creds_file: Path) -> Credentials:
    """Run the installed-app authorization flow against ``creds_file``."""
    if not creds_file.exists():
        raise SetupError.credentials_unavailable(str(creds_file), "client secrets file not found")
    try:
        flow = InstalledAppFlow.from_client_secrets_file(str(creds_file), SCOPES)
        creds = flow.run_local_server(
            port=0,
            open_browser=False,
            authorization_prompt_message="Go to the following link in your browser: {url}",
        )
    except (GoogleAuthError, ValueError, OSError) as e:
        raise SetupError.credentials_unavailable(str(creds_file), str(e)) from e
    logger.info("authorization_complete")
    return creds  # type: ignore[no-any-return]


def save_token(creds: Credentials, token_file: Path) -> None:
    """Write the token cache readable by the owner only."""
    logger.info("saving_token", token_file=str(token_file))
    try:
        token_file.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(token_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(creds.to_json())
    except OSError as e:
        raise SetupError.credentials_unavailable(
            str(token_file), f"unable to cache oauth token: {e}"
        ) from e


def _read_token(token_file: Path) -> Credentials | None:
    if not token_file.exists():
        return None
    try:
        creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
    except (ValueError, OSError) as e:
        logger.warning("token_unreadable", token_file=str(token_file), error=str(e))
        return None
    return creds  # type: ignore[no-any-return]
