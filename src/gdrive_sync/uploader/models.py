"""Uploader data types."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ChangeKind(Enum):
    """Filesystem change kinds the dispatcher distinguishes."""

    ADDED = "added"
    WRITE = "write"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class FileEvent:
    """One change reported by a DirectoryEventSource."""

    path: Path
    kind: ChangeKind


class UploadState(Enum):
    """Per-path upload lifecycle."""

    UNCLAIMED = "unclaimed"
    CLAIMED = "claimed"
    STABILIZING = "stabilizing"
    CLOSED_CHECK = "closed_check"
    UPLOADING = "uploading"
    DELETING = "deleting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class UploadTask:
    """Ephemeral state for one claimed path. Never persisted."""

    path: Path
    stop_event: asyncio.Event
    state: UploadState = UploadState.CLAIMED
    last_size: int | None = field(default=None, init=False)
    stable_samples: int = field(default=0, init=False)
