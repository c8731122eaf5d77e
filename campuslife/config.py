"""
Settings.

Resolution order, lowest first: built-in defaults, `<home>/campuslife.toml`,
environment variables, then an explicit `home` from the command line.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from .errors import ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILE = "campuslife.toml"
AUDIT_FILE = "audit.log"

ENV_HOME = "CAMPUSLIFE_HOME"
ENV_LOG_LEVEL = "CAMPUSLIFE_LOG_LEVEL"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_home() -> Path:
    return Path.home() / ".campuslife"


@dataclass(frozen=True)
class Settings:
    home: Path
    data_file: str = "campus_life_data.json"
    default_pin: str = "0000"
    log_level: str = "WARNING"
    audit: bool = True

    @property
    def data_path(self) -> Path:
        return self.home / self.data_file

    @property
    def config_path(self) -> Path:
        return self.home / CONFIG_FILE


def _coerce_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValidationError(f"log_level must be one of {', '.join(LOG_LEVELS)} (got {value!r})")
    return level


def _apply_file(settings: Settings, data: Mapping[str, Any]) -> Settings:
    section = data.get("campuslife", data)
    if not isinstance(section, dict):
        return settings

    updates: dict[str, Any] = {}
    if "data_file" in section:
        data_file = str(section["data_file"]).strip()
        if not data_file:
            raise ValidationError("data_file must not be empty")
        updates["data_file"] = data_file
    if "default_pin" in section:
        pin = str(section["default_pin"])
        if not (len(pin) == 4 and pin.isdigit()):
            raise ValidationError("default_pin must be exactly 4 digits")
        updates["default_pin"] = pin
    if "log_level" in section:
        updates["log_level"] = _coerce_level(section["log_level"])
    if "audit" in section:
        updates["audit"] = bool(section["audit"])
    return replace(settings, **updates)


def load_settings(home: Path | None = None, *, environ: Mapping[str, str] | None = None) -> Settings:
    """
    Resolve settings for a data directory.

    Raises:
        ValidationError: the config file is not valid TOML or holds a bad value
    """
    import tomllib

    env = os.environ if environ is None else environ

    if home is None:
        env_home = env.get(ENV_HOME, "").strip()
        home = Path(env_home).expanduser() if env_home else default_home()

    settings = Settings(home=home)

    config_path = settings.config_path
    if config_path.exists():
        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ValidationError(f"Cannot read {config_path}: {exc}") from exc
        settings = _apply_file(settings, data)
        logger.debug("Loaded settings from %s", config_path)

    env_level = env.get(ENV_LOG_LEVEL, "").strip()
    if env_level:
        settings = replace(settings, log_level=_coerce_level(env_level))

    return settings
