"""Configuration management for bu."""

from bu.config.config import (
    BU_HOME,
    DEFAULTS,
    PACKAGE_UTILS_DIR,
    Config,
    ConfigManager,
    get_config,
    get_config_manager,
)

__all__ = [
    "BU_HOME",
    "DEFAULTS",
    "PACKAGE_UTILS_DIR",
    "Config",
    "ConfigManager",
    "get_config",
    "get_config_manager",
]
