"""Google Drive RemoteStore."""

from __future__ import annotations

import mimetypes
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, BinaryIO

import structlog
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from gdrive_sync.core.errors import RunError, SetupError
from gdrive_sync.remote.base import ProgressCallback

if TYPE_CHECKING:
    from google.oauth2.credentials import Credentials

logger = structlog.get_logger()

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


@dataclass
class DriveStore:
    """Uploads into a Drive folder via the v3 files API.

    ``service`` is a ``googleapiclient`` Drive resource. Build one with
    ``DriveStore.from_credentials``.
    """

    service: Any
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def from_credentials(
        cls, creds: Credentials, *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> DriveStore:
        service = build("drive", "v3", credentials=creds, cache_discovery=False)
        return cls(service=service, chunk_size=chunk_size)

    def resolve_folder(self, name: str) -> str:
        query = (
            f"name = '{_escape_query_value(name)}' "
            f"and mimeType = '{FOLDER_MIME_TYPE}' "
            "and trashed = false"
        )
        page_token: str | None = None
        while True:
            try:
                resp = (
                    self.service.files()
                    .list(
                        q=query,
                        fields="nextPageToken, files(id, name)",
                        pageToken=page_token,
                    )
                    .execute()
                )
            except HttpError as e:
                raise SetupError.folder_not_found(
                    name, f"unable to retrieve Drive folder: {e}"
                ) from e

            for f in resp.get("files", []):
                if f.get("name") == name:
                    return str(f["id"])

            page_token = resp.get("nextPageToken")
            if not page_token:
                raise SetupError.folder_not_found(name)

    def upload(
        self,
        fh: BinaryIO,
        name: str,
        size: int,
        folder_id: str,
        progress: ProgressCallback,
        cancel: threading.Event | None = None,
    ) -> None:
        mime_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        media = MediaIoBaseUpload(fh, mimetype=mime_type, chunksize=self.chunk_size, resumable=True)
        request = self.service.files().create(
            body={"name": name, "parents": [folder_id]},
            media_body=media,
            fields="id",
        )

        # Drive creates the file only when the final chunk lands
        response = None
        while response is None:
            if cancel is not None and cancel.is_set():
                logger.info("drive_upload_cancelled", name=name, folder_id=folder_id)
                raise RunError.cancelled()
            status, response = request.next_chunk()
            if status is not None:
                progress(status.resumable_progress, size)

        progress(size, size)
        logger.debug("drive_file_created", file_id=response.get("id"), folder_id=folder_id)
