"""
Interactive bu shell implemented with prompt_toolkit.

Provides command history, completion of bu subcommands, utility names and
loaded commands.
"""

from __future__ import annotations

import argparse
import html
from pathlib import Path
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory

from bu.cli.main import build_parser, execute_line

if TYPE_CHECKING:
    from bu.cli.main import CliContext

QUIT_COMMANDS = {"exit", "quit", "q"}

# Subcommands whose argument is a utility name
AVAILABLE_ARG = {"load", "info"}
LOADED_ARG = {"unload", "reload", "commands", "functions", "fn"}


def subcommand_names(parser: argparse.ArgumentParser) -> list[str]:
    """Names (and aliases) of the parser's subcommands."""
    names: list[str] = []
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            names.extend(action.choices)
    return names


class BuCompleter(Completer):
    """Completer for subcommands, utility names and loaded commands."""

    def __init__(self, ctx: "CliContext", verbs: list[str]):
        self.ctx = ctx
        self.verbs = verbs

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        parts = text.split()

        # First word: subcommands and loaded commands
        if len(parts) == 0 or (len(parts) == 1 and not text.endswith(" ")):
            prefix = parts[0] if parts else ""
            for verb in self.verbs:
                if verb.startswith(prefix):
                    yield Completion(verb, start_position=-len(prefix), display_meta="bu")
            for name, description in self.ctx.registry.table.get_completions().items():
                if name.startswith(prefix):
                    yield Completion(name, start_position=-len(prefix), display_meta=description)
            return

        # Second word: utility names
        if len(parts) == 1 or (len(parts) == 2 and not text.endswith(" ")):
            prefix = parts[1] if len(parts) == 2 else ""
            if parts[0] in AVAILABLE_ARG:
                names = list(self.ctx.registry.available)
            elif parts[0] in LOADED_ARG:
                names = self.ctx.registry.loaded
            else:
                return
            for name in names:
                if name.startswith(prefix):
                    yield Completion(name, start_position=-len(prefix))


def repl(ctx: "CliContext") -> None:
    """Run the interactive bu shell.

    Lines are bu subcommands (``load git``), loaded commands (``gs``) or
    system shell commands prefixed with ``!``. Ctrl+C cancels the current
    input, Ctrl+D or ``exit`` leaves the shell.

    Args:
        ctx: CLI context owning the registry for this session
    """
    history_file = Path(ctx.config.get("history_file")).expanduser()
    history_file.parent.mkdir(parents=True, exist_ok=True)
    history = FileHistory(str(history_file))

    parser = build_parser()
    parser.prog = ""
    completer = BuCompleter(ctx, subcommand_names(parser))

    def get_bottom_toolbar():
        loaded = html.escape(", ".join(ctx.registry.loaded) or "none")
        return HTML(
            f"<b>Loaded:</b> {loaded} | <b>Commands:</b> {len(ctx.registry.table)}"
        )

    session: PromptSession = PromptSession(
        history=history,
        completer=completer,
        auto_suggest=AutoSuggestFromHistory(),
        complete_while_typing=True,
        enable_history_search=True,
        bottom_toolbar=get_bottom_toolbar,
    )

    print("bu shell - 'help' for subcommands, '!<cmd>' for system shell, Ctrl+D to exit")
    status = 0
    while True:
        try:
            line = session.prompt("bu> " if status == 0 else f"bu[{status}]> ").strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("Goodbye!")
            break

        if line in QUIT_COMMANDS:
            print("Goodbye!")
            break
        status = execute_line(ctx, parser, line)
