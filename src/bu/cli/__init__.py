"""
CLI module for the bu package.

Provides the bu command and its interactive shell.
"""

from bu.cli.main import CliContext, build_parser, dispatch, execute_line, main

__all__ = [
    "CliContext",
    "build_parser",
    "dispatch",
    "execute_line",
    "main",
]
