"""
Core module for the bu package.

Provides the utility registry, the session command table and related models.
"""

from bu.core.commands import CommandEntry, CommandTable, shell_alias
from bu.core.datamodels import (
    CommandInfo,
    CommandListing,
    CommandRemoval,
    LoadedModule,
    LoadResult,
    ModuleDescriptor,
    ModuleStatus,
    OperationResult,
    ReloadSummary,
    UnloadResult,
)
from bu.core.exceptions import (
    CommandNotFoundError,
    InvalidNameError,
    PartialFailureError,
    UpdateError,
    UtilityError,
    UtilityImportError,
    UtilityNotFoundError,
    UtilityNotLoadedError,
)
from bu.core.registry import DescribeResult, UtilityRegistry

__all__ = [
    # Registry
    "UtilityRegistry",
    "CommandTable",
    "CommandEntry",
    "shell_alias",
    # Models
    "CommandInfo",
    "CommandListing",
    "CommandRemoval",
    "DescribeResult",
    "LoadedModule",
    "LoadResult",
    "ModuleDescriptor",
    "ModuleStatus",
    "OperationResult",
    "ReloadSummary",
    "UnloadResult",
    # Exceptions
    "UtilityError",
    "InvalidNameError",
    "UtilityNotFoundError",
    "UtilityNotLoadedError",
    "UtilityImportError",
    "PartialFailureError",
    "CommandNotFoundError",
    "UpdateError",
]
