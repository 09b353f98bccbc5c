"""
bu - shell utility module loader

Discovers ``util_<name>.py`` files in a list of utility directories and
loads them into a session, where the functions and aliases they define can
be listed, run, reloaded and unloaded again.

Example usage:
    from pathlib import Path
    from bu import UtilityRegistry

    registry = UtilityRegistry([Path("~/.bu/utils").expanduser()])
    result = registry.load("git")
    if result.ok:
        registry.run("gs", [])
"""

__version__ = "0.1.0"

# Core exports
from bu.core import (
    CommandInfo,
    CommandNotFoundError,
    CommandTable,
    ModuleDescriptor,
    ModuleStatus,
    PartialFailureError,
    UtilityError,
    UtilityNotFoundError,
    UtilityNotLoadedError,
    UtilityRegistry,
    shell_alias,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "UtilityRegistry",
    "CommandTable",
    "CommandInfo",
    "ModuleDescriptor",
    "ModuleStatus",
    "shell_alias",
    "UtilityError",
    "UtilityNotFoundError",
    "UtilityNotLoadedError",
    "PartialFailureError",
    "CommandNotFoundError",
]
