"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (GDRIVE_SYNC__SECTION__KEY)
3. YAML config file (explicit path, else the global config)
4. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from gdrive_sync.config.models import (
    DriveConfig,
    GdriveSyncConfig,
    LoggingConfig,
    StabilityConfig,
    TimeoutsConfig,
    WatchConfig,
)
from gdrive_sync.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/gdrive-sync/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class GdriveSyncSettings(BaseSettings):
        """Root config. Env vars: GDRIVE_SYNC__WATCH__INPUT_DIR, GDRIVE_SYNC__DRIVE__OUTPUT_DIR."""

        model_config = SettingsConfigDict(
            env_prefix="GDRIVE_SYNC__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        watch: WatchConfig = WatchConfig()
        stability: StabilityConfig = StabilityConfig()
        drive: DriveConfig = DriveConfig()
        timeouts: TimeoutsConfig = TimeoutsConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return GdriveSyncSettings


def load_config(config_path: Path | None = None, **kwargs: Any) -> GdriveSyncConfig:
    """Load config: defaults < yaml < env vars < kwargs.

    Args:
        config_path: YAML file to read. Must exist when given explicitly.
                     Defaults to ~/.config/gdrive-sync/config.yaml if present.
        **kwargs: Override values (highest precedence), keyed by section.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing explicit file, invalid YAML, validation errors,
            or a blank watch directory or Drive folder.
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError.file_not_found(str(config_path))
        yaml_config = _load_yaml(config_path)
    else:
        yaml_config = _load_yaml(GLOBAL_CONFIG_PATH)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    config = GdriveSyncConfig.model_validate(settings.model_dump())

    required = {
        "watch.input_dir": config.watch.input_dir,
        "drive.output_dir": config.drive.output_dir,
    }
    for field, value in required.items():
        if not value.strip():
            raise ConfigError.missing_required(field)
    return config
