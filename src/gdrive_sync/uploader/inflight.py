"""Lock-guarded set of paths with an active upload task."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class InFlightSet:
    """Paths currently claimed by an upload task.

    The lock is held only for the check-and-set or the clear, never across
    a poll or an upload.
    """

    _claimed: dict[Path, bool] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def try_claim(self, path: Path) -> bool:
        """Atomically claim ``path``. Returns False if it is already claimed."""
        with self._lock:
            if self._claimed.get(path, False):
                return False
            self._claimed[path] = True
            return True

    def release(self, path: Path) -> None:
        with self._lock:
            self._claimed.pop(path, None)

    def is_claimed(self, path: Path) -> bool:
        with self._lock:
            return self._claimed.get(path, False)
