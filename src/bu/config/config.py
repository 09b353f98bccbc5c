"""
Configuration management for bu.

Provides a configuration file at ~/.bu/config.json for default settings.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

BU_HOME = Path.home() / ".bu"

# Directory shipped with the package holding the builtin utilities
PACKAGE_UTILS_DIR = Path(__file__).resolve().parent.parent / "builtins"

# Default values - single source of truth
DEFAULTS = {
    "module_dirs": [str(BU_HOME / "utils"), str(PACKAGE_UTILS_DIR)],
    "file_prefix": "util_",
    "file_suffix": ".py",
    "verbose_level": 1,
    "state_file": str(BU_HOME / "state.json"),
    "history_file": str(BU_HOME / "shell_history"),
    "simple": False,
    "release": "main",
    "auto_stash": False,
    "update_check_frequency": 86400,
}


class Config(BaseModel):
    """Configuration settings for bu.

    All settings are optional. Use DEFAULTS for default values.
    """

    model_config = {"extra": "ignore"}  # Ignore unknown fields like _comment

    # Discovery settings
    module_dirs: Optional[list[str]] = Field(
        default=None,
        description="Utility directories in search priority order"
    )
    file_prefix: Optional[str] = Field(
        default=None,
        description="File name prefix of utility files"
    )
    file_suffix: Optional[str] = Field(
        default=None,
        description="File name suffix of utility files"
    )

    # Output settings
    verbose_level: Optional[int] = Field(
        default=None,
        description="-1 silent, 0 info, 1 info and warnings, 2 debug"
    )

    # Session settings
    state_file: Optional[str] = Field(
        default=None,
        description="File keeping the loaded utilities between invocations"
    )
    history_file: Optional[str] = Field(
        default=None,
        description="Interactive shell history file"
    )
    simple: Optional[bool] = Field(
        default=None,
        description="Use simple shell (no prompt_toolkit)"
    )

    # Update settings
    release: Optional[str] = Field(
        default=None,
        description="Git branch tracked by 'bu update'"
    )
    auto_stash: Optional[bool] = Field(
        default=None,
        description="Stash local changes before updating"
    )
    update_check_frequency: Optional[int] = Field(
        default=None,
        description="Seconds between automatic update checks"
    )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value with fallback to DEFAULTS, then to provided default."""
        value = getattr(self, key, None)
        if value is not None:
            return value
        return DEFAULTS.get(key, default)

    def resolved_module_dirs(self) -> list[Path]:
        """Utility directories, with $BU taking priority when set."""
        dirs = [Path(d).expanduser() for d in self.get("module_dirs")]
        env_dir = os.environ.get("BU")
        if env_dir:
            env_path = Path(env_dir).expanduser()
            dirs = [env_path] + [d for d in dirs if d != env_path]
        return dirs

    def resolved_verbose_level(self) -> int:
        """Verbosity, with $BU_VERBOSE_LEVEL taking priority when valid."""
        env_level = os.environ.get("BU_VERBOSE_LEVEL")
        if env_level is not None:
            try:
                return int(env_level)
            except ValueError:
                logger.warning(f"Ignoring invalid BU_VERBOSE_LEVEL: {env_level!r}")
        return self.get("verbose_level")


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_DIR = BU_HOME
    CONFIG_FILE = CONFIG_DIR / "config.json"

    def __init__(self):
        self._config: Optional[Config] = None

    def _ensure_dir(self) -> None:
        """Ensure config directory exists."""
        self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    @property
    def config(self) -> Config:
        """Get the current config, loading if necessary."""
        if self._config is None:
            self._config = self.load(create_if_missing=False)
        return self._config

    def load(self, create_if_missing: bool = True) -> Config:
        """Load configuration from file.

        Args:
            create_if_missing: If True, create default config file if it doesn't exist.

        Returns:
            Config object with loaded settings, or defaults if file doesn't exist.
        """
        if not self.CONFIG_FILE.exists():
            if create_if_missing:
                self._create_default_config()
            return Config()

        try:
            data = json.loads(self.CONFIG_FILE.read_text())
            return Config.model_validate(data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Invalid config file ({e}), using defaults")
            return Config()

    def _create_default_config(self) -> None:
        """Create default config file with actual default values."""
        self._ensure_dir()
        default_config = {"_comment": "bu configuration file", **DEFAULTS}
        self.CONFIG_FILE.write_text(json.dumps(default_config, indent=2) + "\n")

    def _read_raw(self) -> dict[str, Any]:
        if not self.CONFIG_FILE.exists():
            return {}
        try:
            return json.loads(self.CONFIG_FILE.read_text())
        except json.JSONDecodeError:
            return {}

    def save(self, config: Optional[Config] = None) -> Path:
        """Save configuration to file, preserving existing structure.

        Args:
            config: Config to save. If None, saves current config.

        Returns:
            Path to saved config file.
        """
        self._ensure_dir()
        if config is not None:
            self._config = config

        if self._config is None:
            self._config = Config()

        existing_data = self._read_raw()
        for key, value in self._config.model_dump().items():
            if value is not None:
                existing_data[key] = value

        self.CONFIG_FILE.write_text(json.dumps(existing_data, indent=2) + "\n")
        return self.CONFIG_FILE

    def set(self, key: str, value: Any) -> None:
        """Set a config value and save.

        Raises:
            ValueError: if the key is unknown or the value invalid.
        """
        self._config = self.load(create_if_missing=True)

        if key not in Config.model_fields:
            raise ValueError(f"Unknown config key: {key}")

        data = self._config.model_dump()
        data[key] = value
        self._config = Config.model_validate(data)
        self.save()

    def unset(self, key: str) -> None:
        """Remove a config value (reset to default)."""
        self._config = self.load(create_if_missing=True)

        if key not in Config.model_fields:
            raise ValueError(f"Unknown config key: {key}")

        setattr(self._config, key, None)

        existing_data = self._read_raw()
        if key in existing_data:
            existing_data[key] = None
        self.CONFIG_FILE.write_text(json.dumps(existing_data, indent=2) + "\n")

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def list_settings(self) -> dict[str, Any]:
        """List user-customized settings (values that differ from defaults)."""
        result = {}
        for k, v in self.config.model_dump().items():
            if v is None:
                continue
            if k not in DEFAULTS or v != DEFAULTS[k]:
                result[k] = v
        return result

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self._config = Config()
        if self.CONFIG_FILE.exists():
            self.CONFIG_FILE.unlink()


# Singleton instance
_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the singleton ConfigManager instance."""
    global _manager
    if _manager is None:
        _manager = ConfigManager()
    return _manager


def get_config() -> Config:
    """Get the current configuration."""
    return get_config_manager().config
