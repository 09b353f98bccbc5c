"""
Plain bu shell using input() and readline, for terminals where
prompt_toolkit misbehaves.
"""

from __future__ import annotations

import atexit
import readline
from pathlib import Path
from typing import TYPE_CHECKING

from bu.cli.main import build_parser, execute_line

if TYPE_CHECKING:
    from bu.cli.main import CliContext

QUIT_COMMANDS = {"exit", "quit", "q"}


def setup_readline(history_file: Path) -> None:
    """Configure readline history persistence."""
    history_file.parent.mkdir(parents=True, exist_ok=True)
    if history_file.exists():
        try:
            readline.read_history_file(str(history_file))
        except OSError:
            pass
    readline.set_history_length(1000)
    atexit.register(lambda: readline.write_history_file(str(history_file)))


def repl(ctx: "CliContext") -> None:
    """Run the plain interactive bu shell."""
    setup_readline(Path(ctx.config.get("history_file")).expanduser())
    parser = build_parser()
    parser.prog = ""

    print("bu shell - 'help' for subcommands, '!<cmd>' for system shell, Ctrl+D to exit")
    while True:
        try:
            line = input("bu> ").strip()
        except KeyboardInterrupt:
            print()
            continue
        except EOFError:
            print("\nGoodbye!")
            break

        if line in QUIT_COMMANDS:
            print("Goodbye!")
            break
        execute_line(ctx, parser, line)
