"""Core module exports."""

from gdrive_sync.core.errors import (
    ConfigError,
    ErrorCode,
    EventSourceError,
    FileCheckError,
    GdriveSyncError,
    InternalError,
    RunError,
    SetupError,
    UploadError,
)
from gdrive_sync.core.logging import (
    configure_logging,
    get_logger,
    log_error,
    upload_context,
)
from gdrive_sync.core.progress import status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "EventSourceError",
    "FileCheckError",
    "GdriveSyncError",
    "InternalError",
    "RunError",
    "SetupError",
    "UploadError",
    # Logging
    "configure_logging",
    "get_logger",
    "log_error",
    "upload_context",
    # Console
    "status",
]
