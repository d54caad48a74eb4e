"""Config module exports."""

from gdrive_sync.config.loader import load_config
from gdrive_sync.config.models import (
    DriveConfig,
    GdriveSyncConfig,
    LoggingConfig,
    LogOutputConfig,
    StabilityConfig,
    TimeoutsConfig,
    WatchConfig,
)

__all__ = [
    "load_config",
    "DriveConfig",
    "GdriveSyncConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "StabilityConfig",
    "TimeoutsConfig",
    "WatchConfig",
]
