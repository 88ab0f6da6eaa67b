"""
Settings
--------
Application settings from a YAML file with environment overrides.

Lookup order for every field:
1. QUICKLAUNCH_<FIELD> environment variable
2. settings.yaml
3. dataclass default
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os

import yaml

from core.errors import ConfigError

ENV_PREFIX = "QUICKLAUNCH_"


def default_config_dir() -> Path:
    base = os.getenv("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "quicklaunch"


@dataclass
class Settings:
    """Runtime settings for the dispatcher and its collaborators."""
    channel_path: Optional[str] = None
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False
    display: Optional[str] = None

    def resolved_channel_path(self) -> Path:
        if self.channel_path:
            return Path(self.channel_path).expanduser()
        return default_config_dir() / "channel.yaml"

    @property
    def log_level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def _coerce(name: str, raw: Any, current: Any) -> Any:
    if isinstance(current, bool) or name == "log_to_file":
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in ("1", "true", "yes", "on")
    if raw is None:
        return current
    return str(raw)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from path (default: ~/.config/quicklaunch/settings.yaml).

    A missing file yields defaults; a file that is not a mapping raises
    ConfigError.
    """
    logger = logging.getLogger("quicklaunch.settings")
    settings_path = Path(path) if path else default_config_dir() / "settings.yaml"
    data: Dict[str, Any] = {}

    if settings_path.exists():
        try:
            with open(settings_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid settings file {settings_path}: {e}") from e

        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Settings file {settings_path} is not a mapping")
        data = loaded or {}
        logger.debug(f"Loaded settings from {settings_path}")

    settings = Settings()
    for f in fields(Settings):
        env_value = os.getenv(f"{ENV_PREFIX}{f.name.upper()}")
        if env_value is not None:
            raw = env_value
        elif f.name in data:
            raw = data[f.name]
        else:
            continue
        setattr(settings, f.name, _coerce(f.name, raw, getattr(settings, f.name)))

    return settings
