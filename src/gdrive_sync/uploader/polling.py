"""Cancellable waiting primitives shared by the detectors and the dispatcher.

Every suspension point in the uploader races the process-wide stop event,
so setting it unwinds all outstanding polls within one interval instead of
waiting for the next scheduled wake-up.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from gdrive_sync.core.errors import RunError


def check_stopped(stop_event: asyncio.Event) -> None:
    """Raise the cancellation error if the run has been stopped."""
    if stop_event.is_set():
        raise RunError.cancelled()


async def wait_or_stop[T](aw: Awaitable[T], stop_event: asyncio.Event) -> T:
    """Await ``aw`` unless the stop event fires first.

    The loser of the race is cancelled. If the stop event wins, the
    cancellation error is raised and ``aw`` never completes.
    """
    if stop_event.is_set():
        if asyncio.iscoroutine(aw):
            aw.close()
        raise RunError.cancelled()
    work = asyncio.ensure_future(aw)
    stopper = asyncio.ensure_future(stop_event.wait())
    try:
        await asyncio.wait({work, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for fut in (work, stopper):
            if not fut.done():
                fut.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await fut

    if work.done() and not work.cancelled():
        return work.result()
    raise RunError.cancelled()


async def sleep_or_stop(interval: float, stop_event: asyncio.Event) -> None:
    """Sleep for ``interval`` seconds, returning early with an error on stop."""
    check_stopped(stop_event)
    with contextlib.suppress(TimeoutError):
        await asyncio.wait_for(stop_event.wait(), timeout=interval)
    check_stopped(stop_event)


async def poll_until(
    step: Callable[[], Awaitable[bool]],
    *,
    interval: float,
    stop_event: asyncio.Event,
) -> None:
    """Run ``step`` every ``interval`` seconds until it returns True.

    Errors raised by ``step`` propagate unchanged. The stop event is checked
    before each step and raced against each sleep.
    """
    while True:
        check_stopped(stop_event)
        if await step():
            return
        await sleep_or_stop(interval, stop_event)
