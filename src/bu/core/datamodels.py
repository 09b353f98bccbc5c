"""
Data models for the utility registry.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from bu.core.exceptions import UtilityError


class ModuleStatus(str, Enum):
    """Health of a loaded utility's source file."""

    OK = "OK"
    MISSING = "MISSING"


class CommandInfo(BaseModel):
    """A command declared in a utility source file."""

    name: str
    description: str = ""
    kind: Literal["function", "alias"] = "function"


class ModuleDescriptor(BaseModel):
    """Metadata about a utility, independent of its load state."""

    name: str
    source_path: str
    description: str = "NA"
    commands: list[CommandInfo] = Field(default_factory=list)


class LoadedModule(BaseModel):
    """A utility currently in the loaded set."""

    name: str
    status: ModuleStatus
    source_path: str


class OperationResult(BaseModel):
    """Common shape of registry operation results."""

    model_config = {"arbitrary_types_allowed": True}

    name: str = ""
    error: Optional[UtilityError] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""


class LoadResult(OperationResult):
    """Result of loading a utility."""

    source_path: str = ""
    commands: list[CommandInfo] = Field(default_factory=list)


class CommandRemoval(BaseModel):
    """Outcome of removing one command from the session."""

    name: str
    description: str = ""
    removed: bool


class UnloadResult(OperationResult):
    """Result of unloading a utility."""

    removals: list[CommandRemoval] = Field(default_factory=list)
    source_missing: bool = False


class ReloadSummary(OperationResult):
    """Aggregate result of reloading one or more utilities."""

    succeeded: int = 0
    failed: int = 0


class CommandListing(OperationResult):
    """Commands of one loaded utility, re-parsed from its source."""

    source_path: str = ""
    description: str = "NA"
    commands: list[CommandInfo] = Field(default_factory=list)
