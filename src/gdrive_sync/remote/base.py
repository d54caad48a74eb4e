"""Remote store interface consumed by the uploader."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import BinaryIO, Protocol

# (bytes_sent, total_bytes)
ProgressCallback = Callable[[int, int], None]


class RemoteStore(Protocol):
    """Destination for uploaded files.

    Both methods block; the uploader runs them off the event loop. Errors
    are opaque to the uploader and end the current attempt.
    """

    def resolve_folder(self, name: str) -> str:
        """Return the id of the folder called ``name``.

        Raises:
            SetupError: No such folder, or the lookup failed.
        """
        ...

    def upload(
        self,
        fh: BinaryIO,
        name: str,
        size: int,
        folder_id: str,
        progress: ProgressCallback,
        cancel: threading.Event | None = None,
    ) -> None:
        """Stream ``size`` bytes from ``fh`` into ``folder_id`` as ``name``.

        ``cancel`` is checked between chunks. Once it is set the transfer
        stops without creating the remote file.

        Raises:
            RunError: ``cancel`` was set before the last chunk was sent.
        """
        ...
