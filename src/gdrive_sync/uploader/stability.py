"""Write-completion heuristic based on file size.

Size alone cannot prove a writer has finished, since a writer may pause
indefinitely. A slow writer only delays detection here; the open-handle
probe that runs afterwards is the authoritative check.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from gdrive_sync.core.errors import FileCheckError
from gdrive_sync.uploader.models import UploadTask
from gdrive_sync.uploader.polling import poll_until

logger = structlog.get_logger()

DEFAULT_POLL_INTERVAL_SEC = 1.0
DEFAULT_STABLE_SAMPLES = 10


def _file_size(path: Path) -> int:
    return os.stat(path).st_size


@dataclass
class FileStabilityDetector:
    """Declares a file stable once its size is unchanged for N consecutive polls.

    The first sample only sets the baseline, so with the default threshold a
    file that never changes is stable on its 11th sample. Any size change
    resets the count.
    """

    interval: float = DEFAULT_POLL_INTERVAL_SEC
    threshold: int = DEFAULT_STABLE_SAMPLES
    size_of: Callable[[Path], int] = field(default=_file_size)

    async def wait_until_stable(self, task: UploadTask) -> None:
        """Return once ``task.path`` is stable.

        Raises:
            FileCheckError: The file could not be stat'ed (including removal).
            RunError: The run was stopped.
        """
        task.last_size = None
        task.stable_samples = 0
        logger.info("waiting_for_file_to_stop_growing", interval=self.interval)

        async def step() -> bool:
            size = self._sample(task.path)
            if task.last_size is not None and size == task.last_size:
                task.stable_samples += 1
                if task.stable_samples >= self.threshold:
                    logger.debug("file_stable", size=size, samples=task.stable_samples)
                    return True
            else:
                # A stall followed by more growth must not count toward stability
                task.stable_samples = 0
            task.last_size = size
            return False

        await poll_until(step, interval=self.interval, stop_event=task.stop_event)

    def _sample(self, path: Path) -> int:
        try:
            return self.size_of(path)
        except OSError as e:
            raise FileCheckError.stat_failed(str(path), e.strerror or str(e)) from e
