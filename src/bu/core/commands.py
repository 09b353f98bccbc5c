"""
Command table for a bu session.

Loaded utilities contribute commands to the table; unloading a utility
removes its entries again.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from bu.core.exceptions import CommandNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class CommandEntry:
    """Entry for a registered command."""

    name: str
    handler: Callable[..., Optional[int]]
    description: str
    module: str
    kind: Literal["function", "alias"] = "function"


def shell_alias(command: str) -> Callable[..., int]:
    """Create a command that runs ``command`` in the shell with extra args appended.

    Example:
        # util_alias.py
        lr = shell_alias("ls -lrt")  # List files sorted by modification time
    """
    def run_alias(*args: str) -> int:
        line = command
        if args:
            line = f"{command} {shlex.join(args)}"
        logger.debug(f"alias: {line}")
        return subprocess.run(line, shell=True).returncode

    run_alias.__doc__ = command
    run_alias.__bu_alias__ = command
    return run_alias


class CommandTable:
    """Dispatch table mapping command names to their handlers."""

    def __init__(self):
        self._commands: dict[str, CommandEntry] = {}

    def register(
        self,
        name: str,
        handler: Callable[..., Optional[int]],
        module: str,
        description: str = "",
        kind: Literal["function", "alias"] = "function",
    ) -> CommandEntry:
        """Register (or replace) a command owned by ``module``."""
        existing = self._commands.get(name)
        if existing is not None and existing.module != module:
            logger.warning(
                f"Command '{name}' from '{module}' overrides the one from '{existing.module}'"
            )
        entry = CommandEntry(
            name=name,
            handler=handler,
            description=description,
            module=module,
            kind=kind,
        )
        self._commands[name] = entry
        return entry

    def remove(self, name: str, module: str) -> bool:
        """Remove a command if it is still owned by ``module``.

        Returns:
            True if the entry was removed, False if it was already gone or
            now belongs to another module.
        """
        entry = self._commands.get(name)
        if entry is None or entry.module != module:
            return False
        del self._commands[name]
        return True

    def get(self, name: str) -> CommandEntry | None:
        return self._commands.get(name)

    def run(self, name: str, args: list[str] | tuple[str, ...] = ()) -> int:
        """Invoke a command and return its exit status."""
        entry = self.get(name)
        if entry is None:
            raise CommandNotFoundError(f"Unknown command: {name}")
        status = entry.handler(*args)
        return 0 if status is None else int(status)

    def owned_by(self, module: str) -> list[CommandEntry]:
        """Commands currently owned by a module, in registration order."""
        return [e for e in self._commands.values() if e.module == module]

    def all_commands(self) -> list[CommandEntry]:
        """Get all registered commands sorted by name."""
        return sorted(self._commands.values(), key=lambda e: e.name)

    def get_completions(self) -> dict[str, str]:
        """Get command names and descriptions for completion."""
        return {entry.name: entry.description for entry in self._commands.values()}

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)
