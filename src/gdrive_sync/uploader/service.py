"""Uploader facade: wires the watch loop to one directory and one Drive folder."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from gdrive_sync.uploader.coordinator import UploadCoordinator
from gdrive_sync.uploader.events import DirectoryEventSource, WatchfilesEventSource
from gdrive_sync.uploader.ignore import DEFAULT_IGNORE_NAMES, IgnoreFilter
from gdrive_sync.uploader.loop import WatchLoop
from gdrive_sync.uploader.probe import DEFAULT_LSOF, OpenHandleProbe
from gdrive_sync.uploader.stability import (
    DEFAULT_POLL_INTERVAL_SEC,
    DEFAULT_STABLE_SAMPLES,
    FileStabilityDetector,
)

if TYPE_CHECKING:
    from gdrive_sync.remote.base import RemoteStore

logger = structlog.get_logger()


class Uploader:
    """Watches ``input_dir`` and moves every finished file into a Drive folder."""

    def __init__(
        self,
        loop: WatchLoop,
        source: DirectoryEventSource,
        folder_id: str,
    ) -> None:
        self._loop = loop
        self._source = source
        self.folder_id = folder_id

    @classmethod
    def create(
        cls,
        input_dir: Path | str,
        output_dir: str,
        store: RemoteStore,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SEC,
        stable_samples: int = DEFAULT_STABLE_SAMPLES,
        lsof_executable: str = DEFAULT_LSOF,
        ignore_names: Iterable[str] = DEFAULT_IGNORE_NAMES,
        upload_on_startup: bool = True,
        debounce_ms: int = 200,
        source: DirectoryEventSource | None = None,
    ) -> Uploader:
        """Set up the directory watch and resolve the destination folder.

        Raises:
            SetupError: The directory cannot be watched or the folder cannot
                be resolved. Nothing is left running.
        """
        directory = Path(input_dir).expanduser().resolve()
        if source is None:
            source = WatchfilesEventSource(directory, debounce_ms=debounce_ms)

        folder_id = store.resolve_folder(output_dir)
        logger.info("destination_resolved", folder=output_dir, folder_id=folder_id)

        coordinator = UploadCoordinator(
            store=store,
            folder_id=folder_id,
            stability=FileStabilityDetector(interval=poll_interval, threshold=stable_samples),
            probe=OpenHandleProbe(interval=poll_interval, executable=lsof_executable),
        )
        loop = WatchLoop(
            directory=directory,
            source=source,
            coordinator=coordinator,
            ignore=IgnoreFilter.from_names(ignore_names),
            upload_on_startup=upload_on_startup,
        )
        return cls(loop, source, folder_id)

    @property
    def directory(self) -> Path:
        return self._loop.directory

    @property
    def pending_uploads(self) -> int:
        return self._loop.pending_tasks

    async def run(self, stop_event: asyncio.Event) -> None:
        """Block until the event source closes (return) or fails / is stopped (raise)."""
        await self._loop.run(stop_event)

    async def close(self) -> None:
        """Release the directory watch. Idempotent."""
        await self._source.close()

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for in-flight uploads; see ``WatchLoop.drain``."""
        return await self._loop.drain(timeout)
