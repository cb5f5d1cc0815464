"""Configuration management using Pydantic and YAML."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from slumber.core.constants import (
    CONTROLS_HIDE_DELAY_MS,
    DEFAULT_TIMER_MINUTES,
    DEFAULT_VOLUME,
    EXPIRY_WARNING_SECONDS,
    GRACE_DELAY_MS,
    LOAD_TIMEOUT_MS,
    TICK_INTERVAL_MS,
    TIMER_PRESETS,
)


class AudioConfig(BaseModel):
    """Audio configuration."""

    default_volume: int = Field(ge=0, le=100, default=DEFAULT_VOLUME)
    load_timeout_ms: int = Field(gt=0, default=LOAD_TIMEOUT_MS)


class TimerConfig(BaseModel):
    """Sleep timer configuration."""

    presets: list[int] = list(TIMER_PRESETS)
    default_minutes: int = DEFAULT_TIMER_MINUTES
    tick_interval_ms: int = Field(gt=0, default=TICK_INTERVAL_MS)
    grace_delay_ms: int = Field(ge=0, default=GRACE_DELAY_MS)
    warning_threshold_seconds: int = Field(ge=0, default=EXPIRY_WARNING_SECONDS)

    @field_validator("presets")
    @classmethod
    def _presets_positive(cls, value: list[int]) -> list[int]:
        if not value or any(minutes <= 0 for minutes in value):
            raise ValueError("timer presets must be positive minute counts")
        return sorted(set(value))

    @model_validator(mode="after")
    def _default_is_preset(self) -> "TimerConfig":
        if self.default_minutes not in self.presets:
            raise ValueError(f"default_minutes {self.default_minutes} is not a preset")
        return self


class ControlsConfig(BaseModel):
    """Control overlay configuration."""

    hide_delay_ms: int = Field(gt=0, default=CONTROLS_HIDE_DELAY_MS)


class TrackConfig(BaseModel):
    """Configuration for a single library track."""

    name: str
    audio_url: str
    duration_label: str = "0:00"
    type: str | None = None
    category: str = "sleep"
    description: str = ""


class LibraryConfig(BaseModel):
    """Track library configuration."""

    include_defaults: bool = True
    tracks: list[TrackConfig] = []


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str | None = "slumber.log"


class SlumberConfig(BaseModel):
    """Main application configuration."""

    audio: AudioConfig
    timer: TimerConfig = Field(default_factory=TimerConfig)
    controls: ControlsConfig = Field(default_factory=ControlsConfig)
    library: LibraryConfig = Field(default_factory=LibraryConfig)
    logging: LoggingConfig


def load_config(config_path: Path | None = None) -> SlumberConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        SlumberConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is invalid
    """
    if config_path is None:
        possible_paths = [
            Path(__file__).parent.parent.parent / "config" / "config.yaml",
            Path.home() / ".config" / "slumber" / "config.yaml",
            Path.home() / ".slumber" / "config.yaml",
        ]

        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            config_path = possible_paths[0]

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return SlumberConfig(**data)
