"""End-to-end tests for the Uploader facade with in-memory fakes."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from gdrive_sync.core.errors import ErrorCode, SetupError
from gdrive_sync.uploader.models import ChangeKind, FileEvent
from gdrive_sync.uploader.service import Uploader

if TYPE_CHECKING:
    from conftest import FakeEventSource, FakeStore


def _fake_lsof(tmp_path: Path) -> str:
    """lsof stand-in that always reports the file closed."""
    script = tmp_path / "bin" / "lsof"
    script.parent.mkdir()
    script.write_text("#!/bin/sh\nexit 1\n")
    script.chmod(0o755)
    return str(script)


def _create(
    tmp_path: Path, store: FakeStore, source: FakeEventSource, **kwargs: object
) -> Uploader:
    inbox = tmp_path / "inbox"
    inbox.mkdir(exist_ok=True)
    return Uploader.create(
        inbox,
        "Incoming Scans",
        store,  # type: ignore[arg-type]
        poll_interval=0.001,
        stable_samples=2,
        lsof_executable=_fake_lsof(tmp_path),
        source=source,  # type: ignore[arg-type]
        **kwargs,  # type: ignore[arg-type]
    )


class TestCreate:
    def test_resolves_folder(
        self, tmp_path: Path, store: FakeStore, source: FakeEventSource
    ) -> None:
        uploader = _create(tmp_path, store, source)

        assert uploader.folder_id == "folder-1"
        assert uploader.directory == (tmp_path / "inbox").resolve()

    def test_unknown_folder_is_setup_error(
        self, tmp_path: Path, make_store: type[FakeStore], source: FakeEventSource
    ) -> None:
        with pytest.raises(SetupError) as exc_info:
            _create(tmp_path, make_store(folders={}), source)
        assert exc_info.value.code == ErrorCode.FOLDER_NOT_FOUND

    def test_missing_directory_is_setup_error(
        self, tmp_path: Path, store: FakeStore
    ) -> None:
        with pytest.raises(SetupError) as exc_info:
            Uploader.create(tmp_path / "missing", "Incoming Scans", store)  # type: ignore[arg-type]
        assert exc_info.value.code == ErrorCode.WATCH_SETUP_FAILED


class TestRun:
    @pytest.mark.asyncio
    async def test_sweep_and_live_event_upload_then_delete(
        self, tmp_path: Path, store: FakeStore, source: FakeEventSource
    ) -> None:
        uploader = _create(tmp_path, store, source)
        existing = uploader.directory / "existing.pdf"
        existing.write_bytes(b"old scan")
        fresh = uploader.directory / "fresh.pdf"
        fresh.write_bytes(b"new scan")
        source.push(FileEvent(fresh, ChangeKind.WRITE))
        source.push(None)

        await uploader.run(asyncio.Event())
        cancelled = await uploader.drain(timeout=5)

        assert cancelled == 0
        assert sorted(name for name, _, _ in store.uploads) == ["existing.pdf", "fresh.pdf"]
        assert not existing.exists()
        assert not fresh.exists()

    @pytest.mark.asyncio
    async def test_no_sweep_when_disabled(
        self, tmp_path: Path, store: FakeStore, source: FakeEventSource
    ) -> None:
        uploader = _create(tmp_path, store, source, upload_on_startup=False)
        existing = uploader.directory / "existing.pdf"
        existing.write_bytes(b"old scan")
        source.push(None)

        await uploader.run(asyncio.Event())
        await uploader.drain(timeout=5)

        assert store.uploads == []
        assert existing.exists()

    @pytest.mark.asyncio
    async def test_close_releases_source(
        self, tmp_path: Path, store: FakeStore, source: FakeEventSource
    ) -> None:
        uploader = _create(tmp_path, store, source)

        await uploader.close()

        assert source.closed is True
        await uploader.run(asyncio.Event())
