"""Per-path upload orchestration.

Drives one claimed path through
``CLAIMED -> STABILIZING -> CLOSED_CHECK -> UPLOADING -> DELETING -> DONE``,
or to ``FAILED`` from any step. Failures are logged and terminal for the
task: the file stays in place and is picked up again by a later write event
or the next startup sweep.
"""

from __future__ import annotations

import asyncio
import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from gdrive_sync.core.errors import GdriveSyncError, RunError, UploadError
from gdrive_sync.core.formatting import format_bytes, format_duration
from gdrive_sync.core.logging import log_error, upload_context
from gdrive_sync.uploader.inflight import InFlightSet
from gdrive_sync.uploader.models import UploadState, UploadTask
from gdrive_sync.uploader.polling import check_stopped, wait_or_stop
from gdrive_sync.uploader.probe import OpenHandleProbe
from gdrive_sync.uploader.stability import FileStabilityDetector

if TYPE_CHECKING:
    from gdrive_sync.remote.base import RemoteStore

logger = structlog.get_logger()


@dataclass
class UploadCoordinator:
    """Guarantees at most one active upload per path.

    The in-flight set is private; other components only ask
    ``is_claimed``.
    """

    store: RemoteStore
    folder_id: str
    stability: FileStabilityDetector = field(default_factory=FileStabilityDetector)
    probe: OpenHandleProbe = field(default_factory=OpenHandleProbe)

    _inflight: InFlightSet = field(default_factory=InFlightSet, init=False)

    def is_claimed(self, path: Path) -> bool:
        return self._inflight.is_claimed(path)

    async def process(self, path: Path, stop_event: asyncio.Event) -> UploadState | None:
        """Upload ``path`` once it is fully written, then delete it locally.

        Returns the final state, or None when another task already holds the
        path (duplicate events for one write burst are expected).
        """
        if not self._inflight.try_claim(path):
            logger.debug("upload_already_in_progress", path=str(path))
            return None

        task = UploadTask(path=path, stop_event=stop_event)
        try:
            with upload_context(path):
                await self._run(task)
        finally:
            self._inflight.release(path)
        return task.state

    async def _run(self, task: UploadTask) -> None:
        started = time.monotonic()
        try:
            self._transition(task, UploadState.STABILIZING)
            await self.stability.wait_until_stable(task)

            self._transition(task, UploadState.CLOSED_CHECK)
            await self.probe.wait_until_closed(task.path, task.stop_event)

            self._transition(task, UploadState.UPLOADING)
            size = await self._upload(task)
        except RunError as e:
            logger.info("upload_abandoned", reason=e.error_name, state=task.state.value)
            task.state = UploadState.FAILED
            return
        except GdriveSyncError as e:
            if e.retryable:
                # Left in place for the next write event or startup sweep
                logger.warning("upload_deferred", **e.to_dict(), state=task.state.value)
            else:
                log_error(logger, "upload_failed", e, state=task.state.value)
            task.state = UploadState.FAILED
            return

        self._transition(task, UploadState.DELETING)
        try:
            task.path.unlink()
        except OSError as e:
            # Upload already succeeded; the local file is left behind, not retried
            log_error(
                logger,
                "local_delete_failed",
                UploadError.delete_failed(str(task.path), e.strerror or str(e)),
            )

        task.state = UploadState.DONE
        logger.info(
            "upload_complete",
            size=format_bytes(size),
            duration=format_duration(time.monotonic() - started),
        )

    async def _upload(self, task: UploadTask) -> int:
        check_stopped(task.stop_event)
        logger.info("uploading_file", folder_id=self.folder_id)
        cancel = threading.Event()
        work = asyncio.ensure_future(asyncio.to_thread(self._upload_blocking, task.path, cancel))
        try:
            try:
                return await wait_or_stop(asyncio.shield(work), task.stop_event)
            except RunError:
                # The worker stops at the next chunk boundary. An upload that
                # finished first is kept so the local file is still removed.
                cancel.set()
                return await work
        except asyncio.CancelledError:
            cancel.set()
            work.add_done_callback(_discard_result)
            raise
        except GdriveSyncError:
            raise
        except Exception as e:
            raise UploadError.failed(str(task.path), str(e)) from e

    def _upload_blocking(self, path: Path, cancel: threading.Event) -> int:
        with path.open("rb") as fh:
            size = os.fstat(fh.fileno()).st_size

            def progress(sent: int, total: int) -> None:
                logger.info(
                    "upload_progress",
                    uploaded=format_bytes(sent),
                    total=format_bytes(total),
                )

            self.store.upload(fh, path.name, size, self.folder_id, progress, cancel=cancel)
        return size

    @staticmethod
    def _transition(task: UploadTask, state: UploadState) -> None:
        logger.debug("upload_state", previous=task.state.value, state=state.value)
        task.state = state


def _discard_result(fut: asyncio.Future[int]) -> None:
    if not fut.cancelled():
        fut.exception()
