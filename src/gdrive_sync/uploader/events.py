"""Directory change source backed by watchfiles.

A single non-recursive watch on one directory. Raw change batches from
``awatch`` are flattened into ``FileEvent`` items on a queue that the
dispatcher drains with ``next_event``.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import structlog
from watchfiles import Change, awatch

from gdrive_sync.core.errors import EventSourceError, SetupError
from gdrive_sync.uploader.models import ChangeKind, FileEvent

logger = structlog.get_logger()

_CHANGE_KINDS: dict[Change, ChangeKind] = {
    Change.added: ChangeKind.ADDED,
    Change.modified: ChangeKind.WRITE,
    Change.deleted: ChangeKind.DELETED,
}

# Queue items: an event, a fatal error, or None once the stream has ended
_Item = FileEvent | EventSourceError | None


class DirectoryEventSource(Protocol):
    """Stream of changes for one directory."""

    async def next_event(self) -> FileEvent | None:
        """Next change, or None once the stream is closed.

        Raises:
            EventSourceError: The source failed; no further events follow.
        """
        ...

    async def close(self) -> None:
        """Tear down the watch. Safe to call more than once."""
        ...


@dataclass
class WatchfilesEventSource:
    """DirectoryEventSource over ``watchfiles.awatch``.

    The watch starts lazily on the first ``next_event`` call, so it can be
    constructed before an event loop is running.
    """

    directory: Path
    debounce_ms: int = 200
    stop_timeout: float = 2.0

    _queue: asyncio.Queue[_Item] = field(default_factory=asyncio.Queue, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _pump_task: asyncio.Task[None] | None = field(default=None, init=False)
    _closed: bool = field(default=False, init=False)
    _exhausted: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if not self.directory.is_dir():
            raise SetupError.watch_failed(str(self.directory), "not a directory")
        if not os.access(self.directory, os.R_OK | os.X_OK):
            raise SetupError.watch_failed(str(self.directory), "permission denied")

    async def next_event(self) -> FileEvent | None:
        if self._exhausted:
            return None
        if self._pump_task is None and not self._closed:
            self._pump_task = asyncio.create_task(self._pump())
            logger.info("directory_watch_started", directory=str(self.directory))

        item = await self._queue.get()
        if item is None:
            self._exhausted = True
            return None
        if isinstance(item, EventSourceError):
            self._exhausted = True
            raise item
        return item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop_event.set()

        if self._pump_task is not None and not self._pump_task.done():
            self._pump_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, TimeoutError):
                await asyncio.wait_for(self._pump_task, timeout=self.stop_timeout)
        self._pump_task = None

        # Wake any reader still parked in next_event
        self._queue.put_nowait(None)
        logger.info("directory_watch_closed", directory=str(self.directory))

    async def _pump(self) -> None:
        try:
            async for changes in awatch(
                self.directory,
                recursive=False,
                debounce=self.debounce_ms,
                stop_event=self._stop_event,
                watch_filter=None,
            ):
                for change, raw_path in sorted(changes, key=lambda c: c[1]):
                    kind = _CHANGE_KINDS.get(change)
                    if kind is None:
                        continue
                    self._queue.put_nowait(FileEvent(path=Path(raw_path), kind=kind))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("watcher_error", directory=str(self.directory), error=str(e))
            self._queue.put_nowait(EventSourceError.source_failed(str(self.directory), str(e)))
            return
        self._queue.put_nowait(None)
