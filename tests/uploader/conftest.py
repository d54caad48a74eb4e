"""Shared fakes for uploader tests."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import BinaryIO

import pytest

from gdrive_sync.core.errors import GdriveSyncError, RunError
from gdrive_sync.remote.base import ProgressCallback
from gdrive_sync.uploader.models import FileEvent
from gdrive_sync.uploader.stability import FileStabilityDetector

FAST_INTERVAL = 0.001


class FakeStore:
    """In-memory RemoteStore that sends each file in ``chunks`` steps.

    ``started`` is set once the first chunk is in flight. When ``gate`` is
    given every chunk waits on it, so a test can hold a chunk in flight.
    ``cancel`` is honoured between chunks.
    """

    def __init__(
        self,
        *,
        folders: dict[str, str] | None = None,
        error: Exception | None = None,
        gate: threading.Event | None = None,
        chunks: int = 1,
    ) -> None:
        self.folders = folders if folders is not None else {"Incoming Scans": "folder-1"}
        self.error = error
        self.gate = gate
        self.chunks = chunks
        self.chunks_sent = 0
        self.uploads: list[tuple[str, bytes, str]] = []
        self.progress: list[tuple[int, int]] = []
        self.cancel: threading.Event | None = None
        self.started = threading.Event()
        self.finished = threading.Event()

    def resolve_folder(self, name: str) -> str:
        from gdrive_sync.core.errors import SetupError

        if name not in self.folders:
            raise SetupError.folder_not_found(name)
        return self.folders[name]

    def upload(
        self,
        fh: BinaryIO,
        name: str,
        size: int,
        folder_id: str,
        progress: ProgressCallback,
        cancel: threading.Event | None = None,
    ) -> None:
        self.cancel = cancel
        try:
            if self.error is not None:
                raise self.error
            for n in range(1, self.chunks + 1):
                if cancel is not None and cancel.is_set():
                    raise RunError.cancelled()
                self.started.set()
                if self.gate is not None:
                    self.gate.wait(timeout=5)
                self.chunks_sent = n
                progress(size * n // self.chunks, size)
            self.uploads.append((name, fh.read(), folder_id))
            self.progress.append((size, size))
        finally:
            self.finished.set()


class StubProbe:
    """OpenHandleProbe stand-in that never shells out."""

    def __init__(self, error: GdriveSyncError | None = None) -> None:
        self.error = error
        self.calls: list[Path] = []

    async def wait_until_closed(self, path: Path, stop_event: asyncio.Event) -> None:
        self.calls.append(path)
        if self.error is not None:
            raise self.error


class FakeEventSource:
    """Queue-backed DirectoryEventSource."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[FileEvent | Exception | None] = asyncio.Queue()
        self.closed = False

    def push(self, item: FileEvent | Exception | None) -> None:
        self.queue.put_nowait(item)

    async def next_event(self) -> FileEvent | None:
        item = await self.queue.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True
        self.queue.put_nowait(None)


@pytest.fixture
def fast_stability() -> FileStabilityDetector:
    return FileStabilityDetector(interval=FAST_INTERVAL, threshold=2)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_store() -> type[FakeStore]:
    return FakeStore


@pytest.fixture
def make_probe() -> type[StubProbe]:
    return StubProbe


@pytest.fixture
def source() -> FakeEventSource:
    return FakeEventSource()
