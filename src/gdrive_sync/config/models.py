"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI flags)
2. Environment variables (GDRIVE_SYNC__SECTION__KEY)
3. YAML config file (--config, else ~/.config/gdrive-sync/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    GDRIVE_SYNC__<SECTION>__<KEY>=<VALUE>

Examples:
    GDRIVE_SYNC__WATCH__INPUT_DIR=/share/Scans
    GDRIVE_SYNC__DRIVE__OUTPUT_DIR="Incoming Scans"
    GDRIVE_SYNC__STABILITY__POLL_INTERVAL_SEC=0.5
    GDRIVE_SYNC__LOGGING__LEVEL=DEBUG
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        GDRIVE_SYNC__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every dropped event and progress chunk.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WatchConfig(BaseModel):
    """Watched directory configuration.

    Env vars:
        GDRIVE_SYNC__WATCH__INPUT_DIR: Directory to watch for new files
        GDRIVE_SYNC__WATCH__UPLOAD_ON_STARTUP: Upload files already present at startup
    """

    input_dir: str = Field(
        default="/share/Scans",
        description="Directory to watch for new files to upload. Not recursive.",
    )
    upload_on_startup: bool = Field(
        default=True,
        description="Upload files already in input_dir when the watcher starts.",
    )
    ignore_names: list[str] = Field(
        default_factory=lambda: [".DS_Store"],
        description="Exact file names never uploaded. Hidden files are always skipped.",
    )
    debounce_ms: int = Field(
        default=200,
        description="Batching window for raw filesystem events.",
    )

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {v}")
        return v


class StabilityConfig(BaseModel):
    """Write-completion detection configuration.

    Env vars:
        GDRIVE_SYNC__STABILITY__POLL_INTERVAL_SEC: Seconds between size/lsof polls
        GDRIVE_SYNC__STABILITY__STABLE_SAMPLES: Consecutive equal sizes required
        GDRIVE_SYNC__STABILITY__LSOF_EXECUTABLE: Open-handle probe binary
    """

    poll_interval_sec: float = Field(
        default=1.0,
        description="Interval between size samples and open-handle probes. "
        "TRADEOFF: Lower detects completion sooner but polls more.",
    )
    stable_samples: int = Field(
        default=10,
        description="Consecutive unchanged size samples before a file counts as stable. "
        "RISK: Too low may upload a file a slow writer is still filling.",
    )
    lsof_executable: str = Field(
        default="lsof",
        description="Name or path of the lsof binary used to detect open handles.",
    )

    @field_validator("poll_interval_sec")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"poll_interval_sec must be > 0, got {v}")
        return v

    @field_validator("stable_samples")
    @classmethod
    def validate_samples(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"stable_samples must be >= 1, got {v}")
        return v


class DriveConfig(BaseModel):
    """Google Drive destination and credentials.

    Env vars:
        GDRIVE_SYNC__DRIVE__OUTPUT_DIR: Drive folder name to upload into
        GDRIVE_SYNC__DRIVE__CREDS_FILE: OAuth client secrets (credentials.json)
        GDRIVE_SYNC__DRIVE__TOKEN_FILE: Cached OAuth token (token.json)
    """

    output_dir: str = Field(
        default="Incoming Scans",
        description="Drive folder where files are uploaded. Must already exist.",
    )
    creds_file: str = Field(
        default="/data/credentials.json",
        description="OAuth client secrets downloaded from Google Cloud Console.",
    )
    token_file: str = Field(
        default="/data/token.json",
        description="Path to the cached OAuth token. Created on first authorization.",
    )
    chunk_size_mb: int = Field(
        default=8,
        description="Resumable upload chunk size (MB). Progress is logged once per chunk.",
    )

    @field_validator("chunk_size_mb")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"chunk_size_mb must be >= 1, got {v}")
        return v


class TimeoutsConfig(BaseModel):
    """Shutdown timing.

    Env vars:
        GDRIVE_SYNC__TIMEOUTS__SHUTDOWN_DRAIN_SEC: Wait for in-flight uploads on exit
    """

    shutdown_drain_sec: float = Field(
        default=5.0,
        description="How long to wait for in-flight upload tasks to unwind after stop.",
    )


class GdriveSyncConfig(BaseModel):
    """Root configuration for gdrive-sync.

    All settings can be configured via:
    1. Environment variables: GDRIVE_SYNC__SECTION__KEY
    2. YAML config file
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    stability: StabilityConfig = Field(default_factory=StabilityConfig)
    drive: DriveConfig = Field(default_factory=DriveConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
