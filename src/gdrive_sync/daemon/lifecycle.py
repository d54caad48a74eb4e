"""Uploader lifecycle: credentials, signal handling, graceful shutdown."""

from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from gdrive_sync import __version__
from gdrive_sync.core.errors import ErrorCode, RunError
from gdrive_sync.core.logging import get_log_file_path
from gdrive_sync.core.progress import print_banner
from gdrive_sync.remote.credentials import load_credentials
from gdrive_sync.remote.drive import DriveStore
from gdrive_sync.uploader.service import Uploader

if TYPE_CHECKING:
    from gdrive_sync.config.models import GdriveSyncConfig
    from gdrive_sync.remote.base import RemoteStore

logger = structlog.get_logger()


def build_store(config: GdriveSyncConfig, *, interactive: bool = True) -> DriveStore:
    """Load OAuth credentials and build the Drive store.

    Blocking: may run the browser authorization flow when ``interactive``.
    """
    creds = load_credentials(
        Path(config.drive.creds_file).expanduser(),
        Path(config.drive.token_file).expanduser(),
        interactive=interactive,
    )
    return DriveStore.from_credentials(creds, chunk_size=config.drive.chunk_size_mb * 1024 * 1024)


def create_uploader(config: GdriveSyncConfig, store: RemoteStore) -> Uploader:
    """Build an ``Uploader`` from config. Raises ``SetupError`` on failure."""
    return Uploader.create(
        config.watch.input_dir,
        config.drive.output_dir,
        store,
        poll_interval=config.stability.poll_interval_sec,
        stable_samples=config.stability.stable_samples,
        lsof_executable=config.stability.lsof_executable,
        ignore_names=config.watch.ignore_names,
        upload_on_startup=config.watch.upload_on_startup,
        debounce_ms=config.watch.debounce_ms,
    )


def _print_banner(uploader: Uploader, config: GdriveSyncConfig) -> None:
    rows = [
        ("Watching", str(uploader.directory)),
        ("Drive folder", f"{config.drive.output_dir} ({uploader.folder_id})"),
        ("Startup sweep", "on" if config.watch.upload_on_startup else "off"),
    ]
    log_file = get_log_file_path()
    if log_file is not None:
        rows.append(("Log file", str(log_file)))
    print_banner(f"gdrive-sync v{__version__} · Ready", rows)


async def run_uploader(config: GdriveSyncConfig, store: RemoteStore) -> None:
    """Run the uploader until SIGINT/SIGTERM or until the watch ends.

    The first signal sets the stop event: the dispatcher returns and every
    in-flight upload unwinds at its next checkpoint, a transfer at its next
    chunk boundary. When the watch ends on its own the stop event is left
    alone. Either way in-flight tasks get ``timeouts.shutdown_drain_sec`` to
    finish before they are cancelled. A second signal cancels the run
    outright.

    Raises:
        SetupError: The directory or the destination folder is unusable.
        EventSourceError: The directory watch failed mid-run.
    """
    uploader = create_uploader(config, store)
    _print_banner(uploader, config)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()
    signal_count = 0

    def signal_handler() -> None:
        nonlocal signal_count
        signal_count += 1
        logger.info("shutdown_signal_received", count=signal_count)
        stop_event.set()
        if signal_count > 1 and main_task is not None:
            main_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await uploader.run(stop_event)
    except RunError as e:
        if e.code != ErrorCode.RUN_CANCELLED:
            raise
        logger.info("uploader_stopped")
    finally:
        # Only a signal sets stop; uploads in flight when the watch ends keep running
        await uploader.close()
        pending = uploader.pending_uploads
        if pending:
            logger.info("draining_uploads", count=pending)
        cancelled = await uploader.drain(timeout=config.timeouts.shutdown_drain_sec)
        if cancelled:
            logger.warning("uploads_cancelled_on_shutdown", count=cancelled)
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
