"""gdrive-sync daemon - long-running uploader process."""

from gdrive_sync.daemon.lifecycle import build_store, create_uploader, run_uploader

__all__ = [
    "build_store",
    "create_uploader",
    "run_uploader",
]
