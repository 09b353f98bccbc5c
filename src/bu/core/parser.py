"""
Source introspection for utility files.

A utility file documents itself with plain comments:

    # Description: Utilities for git operations

    def git_update(*args):  # Update main repo and submodules
        ...

    gs = shell_alias("git status -sb")  # Short git status

Only top-level declarations carrying an inline ``#`` description on the
declaration line are treated as commands.
"""

from __future__ import annotations

import re
from pathlib import Path

from bu.core.datamodels import CommandInfo

DESCRIPTION_MARKER = "Description:"
DEFAULT_DESCRIPTION = "NA"

_FUNCTION_RE = re.compile(
    r"^def\s+([A-Za-z_][A-Za-z0-9_]*)\s*\(.*\)\s*(?:->\s*[^:#]+)?:\s*#(.*)$"
)
_ALIAS_RE = re.compile(
    r"^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*shell_alias\(.*\)\s*#(.*)$"
)
_USAGE_START_RE = re.compile(r"^#\s*(USAGE:|START_OF_USAGE)")
_USAGE_END_RE = re.compile(r"^#\s*END_OF_USAGE")


def extract_description(text: str) -> str:
    """Return the first ``Description:`` line of a source, or ``"NA"``."""
    for line in text.splitlines():
        if DESCRIPTION_MARKER in line:
            desc = line.split(DESCRIPTION_MARKER, 1)[1].strip()
            return desc or DEFAULT_DESCRIPTION
    return DEFAULT_DESCRIPTION


def extract_commands(text: str) -> list[CommandInfo]:
    """Parse documented top-level functions and aliases, in file order."""
    commands = []
    for line in text.splitlines():
        line = line.rstrip()
        match = _FUNCTION_RE.match(line)
        if match:
            commands.append(CommandInfo(
                name=match.group(1),
                description=match.group(2).strip(),
                kind="function",
            ))
            continue
        match = _ALIAS_RE.match(line)
        if match:
            commands.append(CommandInfo(
                name=match.group(1),
                description=match.group(2).strip(),
                kind="alias",
            ))
    return commands


def extract_usage(text: str) -> str:
    """Return the comment block between the usage markers, uncommented."""
    lines = []
    showing = False
    for line in text.splitlines():
        if _USAGE_START_RE.match(line):
            showing = True
            continue
        if _USAGE_END_RE.match(line):
            showing = False
            continue
        if showing:
            lines.append(re.sub(r"^# ?", "", line))
    return "\n".join(lines).rstrip()


def read_source(path: Path) -> str:
    """Read a utility source file."""
    return path.read_text(encoding="utf-8", errors="replace")
