"""Configuration management for blinders.

Loads settings from a YAML configuration file with ``BLINDERS_``-prefixed
environment variable overrides. Every section has defaults that match the
engine's documented behavior, so an empty config runs as-is.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/blinders.yaml")

_MOD = "<cmd>" if sys.platform == "darwin" else "<ctrl>"


class GeometryConfig(BaseModel):
    width_ratio: float = Field(default=0.55, gt=0, le=1)
    height_ratio: float = Field(default=0.76, gt=0, le=1)
    top_margin: int = Field(default=80, ge=0)


class CoverageConfig(BaseModel):
    cap_height: int = Field(default=6, ge=0)
    overlap: int = Field(default=2, ge=0, le=3, description="Seam overlap between adjoining regions")
    color: str = Field(default="#4a4a4a")
    hint_color: str = Field(default="#2b2b2b")
    exit_hint: str | None = Field(
        default=None,
        description="Label on the bottom region; derived from the hotkeys when unset",
    )
    reassert_delays: list[float] = Field(
        default_factory=lambda: [0.05, 0.15],
        description="Seconds after show at which topmost is re-asserted",
    )


class PinningConfig(BaseModel):
    interval: float = Field(default=0.6, gt=0)
    max_consecutive_failures: int = Field(default=5, gt=0)
    measure_bounds: bool = Field(default=False)
    measure_padding: int = Field(default=4, ge=0)


class WatchdogConfig(BaseModel):
    interval: float = Field(default=1.0, gt=0)


class PreferenceConfig(BaseModel):
    enabled: bool = Field(default=True)
    domain: str = Field(default="NSGlobalDomain")
    key: str = Field(default="_HIHideMenuBar")
    session_value: bool = Field(default=True)
    settle_delay: float = Field(default=0.6, ge=0)


class SessionConfig(BaseModel):
    default_minutes: float = Field(default=15.0, gt=0)
    min_minutes: float = Field(default=1.0, gt=0)


class DisplayConfig(BaseModel):
    """Insets subtracted from the primary display bounds to get the work area.

    Only used where the platform cannot report its own work area.
    """

    inset_top: int = Field(default=25 if sys.platform == "darwin" else 0, ge=0)
    inset_bottom: int = Field(default=0, ge=0)
    inset_left: int = Field(default=0, ge=0)
    inset_right: int = Field(default=0, ge=0)


class HotkeyConfig(BaseModel):
    enabled: bool = Field(default=True)
    end_session: str = Field(default=f"{_MOD}+<shift>+x")
    reopen_picker: str = Field(default=f"{_MOD}+<shift>+l")
    emergency_quit: str = Field(default=f"{_MOD}+<shift>+z")


def describe_hotkey(combo: str) -> str:
    """Render a pynput hotkey string for display, e.g. ``<cmd>+<shift>+x`` as ``Cmd+Shift+X``."""
    keys = [key.strip("<>") for key in combo.split("+")]
    return "+".join(key.capitalize() if len(key) > 1 else key.upper() for key in keys)


def exit_hint_for(hotkeys: HotkeyConfig) -> str:
    """The exit hint shown on the bottom region. Empty when hotkeys are off."""
    if not hotkeys.enabled:
        return ""
    return (
        f"EXIT: {describe_hotkey(hotkeys.end_session)}    "
        f"QUIT: {describe_hotkey(hotkeys.emergency_quit)}"
    )


class PickerConfig(BaseModel):
    command: list[str] | None = Field(
        default=None, description="Command launched by the reopen-picker hotkey"
    )


class ApiConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8765, ge=1, le=65535)
    timeout: float = Field(default=30.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for blinders.

    Loads from YAML file and supports environment variable overrides,
    e.g. ``BLINDERS_PINNING__INTERVAL=1.0``.
    """

    model_config = {
        "env_prefix": "BLINDERS_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    pinning: PinningConfig = Field(default_factory=PinningConfig)
    watchdog: WatchdogConfig = Field(default_factory=WatchdogConfig)
    preference: PreferenceConfig = Field(default_factory=PreferenceConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    hotkeys: HotkeyConfig = Field(default_factory=HotkeyConfig)
    picker: PickerConfig = Field(default_factory=PickerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _derive_exit_hint(self) -> Settings:
        if self.coverage.exit_hint is None:
            self.coverage.exit_hint = exit_hint_for(self.hotkeys)
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment wins over them.
        return env_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + environment variables.

    Priority: env vars > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
