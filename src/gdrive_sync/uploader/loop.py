"""Directory-watch dispatch loop.

One long-lived dispatcher turns filesystem changes into detached upload
tasks. The dispatcher never awaits the tasks it spawns; they synchronize
with the rest of the system only through the coordinator's in-flight set
and the shared stop event.
"""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from gdrive_sync.core.errors import InternalError, SetupError
from gdrive_sync.core.formatting import pluralize
from gdrive_sync.core.logging import log_error
from gdrive_sync.uploader.coordinator import UploadCoordinator
from gdrive_sync.uploader.events import DirectoryEventSource
from gdrive_sync.uploader.ignore import IgnoreFilter
from gdrive_sync.uploader.models import ChangeKind, FileEvent, UploadState
from gdrive_sync.uploader.polling import check_stopped, wait_or_stop

logger = structlog.get_logger()

# Re-announce "waiting" only after the dispatcher has sat idle this long
WAITING_LOG_INTERVAL_SEC = 1.0


@dataclass
class WatchLoop:
    """Initial sweep, then live event dispatch, for one directory."""

    directory: Path
    source: DirectoryEventSource
    coordinator: UploadCoordinator
    ignore: IgnoreFilter = field(default_factory=IgnoreFilter)
    upload_on_startup: bool = True

    _tasks: set[asyncio.Task[UploadState | None]] = field(default_factory=set, init=False)

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def run(self, stop_event: asyncio.Event) -> None:
        """Dispatch until the source closes (returns), fails or the run is stopped (raises).

        Raises:
            SetupError: The directory could not be listed for the initial sweep.
            EventSourceError: The event source failed.
            RunError: ``stop_event`` was set.
        """
        if self.upload_on_startup:
            self._initial_sweep(stop_event)
        await self._dispatch(stop_event)

    def _initial_sweep(self, stop_event: asyncio.Event) -> None:
        logger.info("looking_for_existing_files", directory=str(self.directory))
        try:
            with os.scandir(self.directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise SetupError.watch_failed(
                str(self.directory), f"failed to list directory contents: {e}"
            ) from e

        scheduled = 0
        for entry in entries:
            check_stopped(stop_event)
            if self.ignore.should_ignore(entry.name):
                logger.debug("path_ignored", path=entry.path)
                continue
            if not entry.is_file():
                continue
            self._schedule(Path(entry.path), stop_event)
            scheduled += 1

        logger.info("existing_files_scheduled", summary=pluralize(scheduled, "file"))

    async def _dispatch(self, stop_event: asyncio.Event) -> None:
        last_iteration: float | None = None
        while True:
            now = time.monotonic()
            if last_iteration is None or now - last_iteration > WAITING_LOG_INTERVAL_SEC:
                logger.info("waiting_for_new_files", directory=str(self.directory))
            last_iteration = now

            event = await wait_or_stop(self.source.next_event(), stop_event)
            if event is None:
                logger.info("event_source_closed", directory=str(self.directory))
                return

            reason = self._drop_reason(event)
            if reason is not None:
                logger.debug("event_dropped", path=str(event.path), reason=reason)
                continue

            logger.info("found_new_file", path=str(event.path))
            self._schedule(event.path, stop_event)

    def _drop_reason(self, event: FileEvent) -> str | None:
        if self.coordinator.is_claimed(event.path):
            return "in_progress"
        if event.kind is not ChangeKind.WRITE:
            return "not_a_write"
        if self.ignore.should_ignore(event.path):
            return "ignored"
        if not event.path.is_file():
            # Removed between the change firing and now
            return "missing"
        return None

    def _schedule(self, path: Path, stop_event: asyncio.Event) -> None:
        task = asyncio.create_task(
            self.coordinator.process(path, stop_event),
            name=f"upload:{path.name}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[UploadState | None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_error(
                logger,
                "upload_task_crashed",
                InternalError.unexpected(
                    str(exc), task=task.get_name(), error_type=type(exc).__name__
                ),
            )

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for outstanding upload tasks.

        Tasks still running after ``timeout`` are cancelled. Returns how many
        had to be cancelled.
        """
        if not self._tasks:
            return 0
        tasks = set(self._tasks)
        _done, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if pending:
            logger.warning("upload_tasks_cancelled", count=len(pending))
        return len(pending)
