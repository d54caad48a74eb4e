"""Upload orchestration: write-completion detection, per-path coordination, dispatch."""

from gdrive_sync.uploader.coordinator import UploadCoordinator
from gdrive_sync.uploader.events import DirectoryEventSource, WatchfilesEventSource
from gdrive_sync.uploader.ignore import IgnoreFilter
from gdrive_sync.uploader.loop import WatchLoop
from gdrive_sync.uploader.models import ChangeKind, FileEvent, UploadState, UploadTask
from gdrive_sync.uploader.probe import OpenHandleProbe
from gdrive_sync.uploader.service import Uploader
from gdrive_sync.uploader.stability import FileStabilityDetector

__all__ = [
    "ChangeKind",
    "DirectoryEventSource",
    "FileEvent",
    "FileStabilityDetector",
    "IgnoreFilter",
    "OpenHandleProbe",
    "UploadCoordinator",
    "UploadState",
    "UploadTask",
    "Uploader",
    "WatchLoop",
    "WatchfilesEventSource",
]
