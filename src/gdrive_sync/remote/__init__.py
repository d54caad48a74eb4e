"""Remote storage adapters."""

from gdrive_sync.remote.base import ProgressCallback, RemoteStore
from gdrive_sync.remote.drive import DriveStore

__all__ = [
    "DriveStore",
    "ProgressCallback",
    "RemoteStore",
]
