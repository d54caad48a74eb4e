"""gdrive-sync error types with typed error codes.

Error code ranges:
- 1xxx: Setup (fatal at startup)
- 2xxx: Config
- 3xxx: File checks (stat, open-handle probe)
- 4xxx: Upload and local cleanup
- 5xxx: Run loop
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Setup (1xxx)
    WATCH_SETUP_FAILED = 1001
    FOLDER_NOT_FOUND = 1002
    CREDENTIALS_UNAVAILABLE = 1003

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # File checks (3xxx)
    STAT_FAILED = 3001
    PROBE_UNAVAILABLE = 3002
    PROBE_FAILED = 3003

    # Upload (4xxx)
    UPLOAD_FAILED = 4001
    DELETE_FAILED = 4002

    # Run loop (5xxx)
    RUN_CANCELLED = 5001
    EVENT_SOURCE_FAILED = 5002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class GdriveSyncError(Exception):
    """Base error with structured context for log records."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'STAT_FAILED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class SetupError(GdriveSyncError):
    """Startup failures. Fatal: nothing runs when one is raised."""

    @classmethod
    def watch_failed(cls, path: str, reason: str) -> "SetupError":
        return cls(
            code=ErrorCode.WATCH_SETUP_FAILED,
            message=f"Cannot watch {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def folder_not_found(cls, name: str, reason: str | None = None) -> "SetupError":
        message = f"Unable to find Drive folder: {name}"
        if reason:
            message = f"{message} ({reason})"
        return cls(
            code=ErrorCode.FOLDER_NOT_FOUND,
            message=message,
            details={"folder": name, "reason": reason},
        )

    @classmethod
    def credentials_unavailable(cls, path: str, reason: str) -> "SetupError":
        return cls(
            code=ErrorCode.CREDENTIALS_UNAVAILABLE,
            message=f"Unable to load Drive credentials from {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class ConfigError(GdriveSyncError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class FileCheckError(GdriveSyncError):
    """A file could not be confirmed as fully written.

    The file is left in place; a later write event or the next startup
    sweep picks it up again.
    """

    @classmethod
    def stat_failed(cls, path: str, reason: str) -> "FileCheckError":
        return cls(
            code=ErrorCode.STAT_FAILED,
            message=f"Cannot stat {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def probe_unavailable(cls, executable: str) -> "FileCheckError":
        return cls(
            code=ErrorCode.PROBE_UNAVAILABLE,
            message=f"Open-handle probe not available on this host: {executable}",
            details={"executable": executable},
        )

    @classmethod
    def probe_failed(
        cls, path: str, reason: str, returncode: int | None = None
    ) -> "FileCheckError":
        return cls(
            code=ErrorCode.PROBE_FAILED,
            message=f"Open-handle probe failed for {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason, "returncode": returncode},
        )


class UploadError(GdriveSyncError):
    """Remote upload or post-upload cleanup failures."""

    @classmethod
    def failed(cls, path: str, reason: str) -> "UploadError":
        return cls(
            code=ErrorCode.UPLOAD_FAILED,
            message=f"Failed to upload {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def delete_failed(cls, path: str, reason: str) -> "UploadError":
        return cls(
            code=ErrorCode.DELETE_FAILED,
            message=f"Uploaded but failed to delete {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class RunError(GdriveSyncError):
    """Run loop termination."""

    @classmethod
    def cancelled(cls) -> "RunError":
        return cls(code=ErrorCode.RUN_CANCELLED, message="Run cancelled")


class EventSourceError(RunError):
    """The directory event source failed. Ends the whole run."""

    @classmethod
    def source_failed(cls, path: str, reason: str) -> "EventSourceError":
        return cls(
            code=ErrorCode.EVENT_SOURCE_FAILED,
            message=f"Watching {path} failed: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(GdriveSyncError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
