"""Open-handle probe backed by lsof.

``lsof -w -F p <file>`` exits 0 and prints one ``p<pid>`` line per process
holding the file open. When nothing holds it open it exits non-zero with an
empty stderr. Anything else, including lsof missing from the host, is an
error: the caller must never upload on a probe that could not run.
"""

from __future__ import annotations

import asyncio
import contextlib
import shutil
from dataclasses import dataclass
from pathlib import Path

import structlog

from gdrive_sync.core.errors import FileCheckError
from gdrive_sync.uploader.polling import poll_until, wait_or_stop

logger = structlog.get_logger()

DEFAULT_LSOF = "lsof"


@dataclass
class OpenHandleProbe:
    """Checks, and waits until, no process holds a file open."""

    interval: float = 1.0
    executable: str = DEFAULT_LSOF

    async def is_open(self, path: Path, stop_event: asyncio.Event) -> bool:
        lsof = shutil.which(self.executable)
        if lsof is None:
            raise FileCheckError.probe_unavailable(self.executable)

        try:
            proc = await asyncio.create_subprocess_exec(
                lsof,
                "-w",
                "-F",
                "p",
                str(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise FileCheckError.probe_failed(str(path), str(e)) from e

        try:
            stdout_bytes, stderr_bytes = await wait_or_stop(proc.communicate(), stop_event)
        finally:
            # Stopped or cancelled mid-probe: don't leave lsof running
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        stdout = stdout_bytes.decode(errors="replace").strip()
        stderr = stderr_bytes.decode(errors="replace").strip()

        if proc.returncode == 0:
            return bool(stdout)
        if not stderr:
            return False
        raise FileCheckError.probe_failed(str(path), stderr, proc.returncode)

    async def wait_until_closed(self, path: Path, stop_event: asyncio.Event) -> None:
        """Poll until no process holds ``path`` open.

        Raises:
            FileCheckError: The probe could not run or reported an error.
            RunError: The run was stopped.
        """
        logger.info("waiting_for_file_to_close", interval=self.interval)

        async def step() -> bool:
            return not await self.is_open(path, stop_event)

        await poll_until(step, interval=self.interval, stop_event=stop_event)
