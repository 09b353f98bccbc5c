#!/usr/bin/env python3
"""
CLI entry point for managing utilities (bu command).
"""

from __future__ import annotations

import argparse
import json
import logging
import shlex
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from bu import __version__
from bu.config import Config, get_config, get_config_manager
from bu.core import CommandInfo, CommandNotFoundError, ModuleStatus, UpdateError, UtilityRegistry
from bu.logging import GREEN, RED_BOLD, RESET, configure_logging
from bu.session import StateManager

logger = logging.getLogger("bu.cli")

# Subcommands that change the loaded set
MUTATING = {"load", "loadall", "unload", "reload"}


@dataclass
class CliContext:
    """Everything a subcommand handler needs."""

    registry: UtilityRegistry
    config: Config
    state: StateManager
    verbose_level: int = 1
    interactive: bool = False


def _color(text: str, color: str) -> str:
    if sys.stdout.isatty():
        return f"{color}{text}{RESET}"
    return text


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def print_commands(commands: list[CommandInfo], source: str) -> None:
    """Print functions and aliases of a utility with aligned descriptions."""
    filename = Path(source).name
    for kind, title in (("function", "Functions"), ("alias", "Aliases")):
        entries = [c for c in commands if c.kind == kind]
        if not entries:
            if kind == "function":
                logger.warning("No functions found.")
            continue
        width = max(len(c.name) for c in entries)
        print(f"{title} defined in [{filename}]:")
        for cmd in entries:
            print(f"  {cmd.name:<{width}} : {cmd.description}")


# ----------------------------------------------------------------------------
# Subcommand handlers
# ----------------------------------------------------------------------------

def cmd_list(ctx: CliContext, args) -> int:
    """List all available utilities."""
    descriptors = ctx.registry.list_available(args.filter)
    if args.as_json:
        _print_json([d.model_dump() for d in descriptors])
        return 0

    print("All available utilities:")
    for desc in descriptors:
        marker = "*" if ctx.registry.is_loaded(desc.name) else " "
        print(f" {marker}{desc.name:<25} : {desc.description}")
    return 0


def cmd_loaded(ctx: CliContext, args) -> int:
    """List loaded utilities with the health of their source files."""
    if not ctx.registry.loaded:
        logger.error("No utilities currently loaded.")
        return 1

    modules = ctx.registry.loaded_modules(args.filter)
    if args.as_json:
        _print_json([m.model_dump(mode="json") for m in modules])
        return 0

    print("Loaded utilities:")
    for module in modules:
        if module.status is ModuleStatus.OK:
            print(f"{_color('[OK]', GREEN)} {module.name}")
        else:
            print(f"{_color('[MISSING]', RED_BOLD)} {module.name} (file missing: {module.source_path})")
    return 0


def cmd_load(ctx: CliContext, args) -> int:
    """Load a utility."""
    result = ctx.registry.load(args.name)
    if not result.ok:
        logger.error(result.message)
        return 1
    if ctx.verbose_level != 0:
        print_commands(result.commands, result.source_path)
    return 0


def cmd_loadall(ctx: CliContext, args) -> int:
    """Load all available utilities."""
    summary = ctx.registry.load_all()
    return 0 if summary.ok else 1


def cmd_unload(ctx: CliContext, args) -> int:
    """Unload a utility and remove its commands."""
    result = ctx.registry.unload(args.name)
    if result.removals:
        width = max(len(r.name) for r in result.removals)
        print(f"Removing commands of utility '{result.name}':")
        for removal in result.removals:
            status = _color("[UNSET]", GREEN) if removal.removed else _color("[FAILED]", RED_BOLD)
            print(f"  {removal.name:<{width}} : {removal.description:<40} {status}")
    if not result.ok:
        if result.removals:
            logger.error(result.message)
        else:
            logger.warning(result.message)
        return 1
    return 0


def cmd_reload(ctx: CliContext, args) -> int:
    """Reload a utility or every loaded utility."""
    summary = ctx.registry.reload(args.name)
    if not summary.ok:
        logger.error(summary.message)
        return 1
    return 0


def cmd_commands(ctx: CliContext, args) -> int:
    """Show commands of one or all loaded utilities."""
    if args.name is None and not ctx.registry.loaded:
        logger.error("No utilities currently loaded.")
        return 1

    listings = ctx.registry.list_commands(args.name)
    if args.as_json:
        _print_json([
            {**listing.model_dump(), "error": listing.message or None}
            for listing in listings
        ])
        return 0 if all(listing.ok for listing in listings) else 1

    status = 0
    for listing in listings:
        if not listing.ok:
            logger.error(listing.message)
            status = 1
            continue
        print_commands(listing.commands, listing.source_path)
    return status


def cmd_allfunctions(ctx: CliContext, args) -> int:
    """Show commands of loaded utilities, optionally filtered."""
    if not args.filter:
        args.name = None
        args.as_json = False
        return cmd_commands(ctx, args)

    hits = ctx.registry.search_commands(args.filter)
    if not hits:
        logger.warning(f"No commands matching '{args.filter}'.")
        return 0
    width = max(len(cmd.name) for _, cmd in hits)
    for util, cmd in hits:
        print(f"  {cmd.name:<{width}} : {cmd.description} [{util}]")
    return 0


def cmd_info(ctx: CliContext, args) -> int:
    """Show a utility's description, usage and commands."""
    result = ctx.registry.describe(args.name)
    if not result.ok:
        logger.error(result.message)
        return 1

    desc = result.descriptor
    state = "loaded" if ctx.registry.is_loaded(desc.name) else "not loaded"
    print(f"\nUtility: {desc.name} ({state})")
    print(f"Source: {desc.source_path}")
    print(f"Description: {desc.description}")
    if result.usage:
        print()
        print(result.usage)
    print()
    print_commands(desc.commands, desc.source_path)
    return 0


def cmd_run(ctx: CliContext, args) -> int:
    """Run a command from a loaded utility."""
    try:
        return ctx.registry.run(args.target, args.args)
    except CommandNotFoundError as e:
        logger.error(f"{e}. Use 'bu commands' to see loaded commands.")
        return 1


def cmd_check(ctx: CliContext, args) -> int:
    """Check for updates of the utilities directory."""
    from bu.updater import check_updates

    repo = ctx.config.resolved_module_dirs()[0]
    try:
        status = check_updates(repo, ctx.config.get("release"))
    except UpdateError as e:
        logger.warning(str(e))
        return 1

    if status.up_to_date:
        logger.info(f"Utilities are up to date (last commit {status.local_date}).")
    else:
        logger.info(
            f"{status.behind} update(s) available on origin/{status.branch}: "
            f"{status.latest_message}"
        )
        logger.info("Run 'bu update' to update.")
    return 0


def cmd_update(ctx: CliContext, args) -> int:
    """Pull updates into the utilities directory."""
    from bu.updater import update

    repo = ctx.config.resolved_module_dirs()[0]
    try:
        update(repo, ctx.config.get("release"), auto_stash=ctx.config.get("auto_stash"))
    except UpdateError as e:
        logger.error(str(e))
        return 1
    return 0


def cmd_config(ctx: CliContext, args) -> int:
    """Show or change configuration."""
    manager = get_config_manager()
    if args.action != "show" and not args.key:
        logger.error(f"Usage: bu config {args.action} <key>" + (" <value>" if args.action == "set" else ""))
        return 1
    if args.action == "set" and args.value is None:
        logger.error(f"No value given for {args.key}")
        return 1
    try:
        if args.action == "set":
            try:
                value = json.loads(args.value)
            except json.JSONDecodeError:
                value = args.value
            manager.set(args.key, value)
            logger.info(f"Set {args.key} = {value!r}")
        elif args.action == "unset":
            manager.unset(args.key)
            logger.info(f"Unset {args.key}")
        else:
            _print_json({key: manager.config.get(key) for key in Config.model_fields})
    except ValueError as e:
        logger.error(str(e))
        return 1
    return 0


def cmd_completion(ctx: CliContext, args) -> int:
    """Print a shell completion script, or utility names for one."""
    from bu.cli.completion import BASH_COMPLETION, ZSH_COMPLETION

    if args.shell == "bash":
        print(BASH_COMPLETION)
    elif args.shell == "zsh":
        print(ZSH_COMPLETION)
    elif args.shell == "utils":
        for name in ctx.registry.available:
            print(name)
    elif args.shell == "loaded":
        for name in ctx.registry.loaded:
            print(name)
    return 0


def _check_updates_if_due(ctx: CliContext) -> None:
    from bu.updater import is_git_repo, update_check_due

    repo = ctx.config.resolved_module_dirs()[0]
    if not is_git_repo(repo):
        return
    if update_check_due(repo, ctx.config.get("update_check_frequency")):
        cmd_check(ctx, None)


def cmd_shell(ctx: CliContext, args) -> int:
    """Start an interactive bu session."""
    if ctx.interactive:
        logger.warning("Already in a bu shell.")
        return 1
    _check_updates_if_due(ctx)
    if args.simple or ctx.config.get("simple"):
        from bu.cli._simple_repl import repl
    else:
        from bu.cli._repl import repl

    ctx.interactive = True
    try:
        repl(ctx)
    finally:
        ctx.interactive = False
        ctx.state.persist(ctx.registry)
    return 0


# ----------------------------------------------------------------------------
# Parser and dispatch
# ----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the bu argument parser."""
    parser = argparse.ArgumentParser(
        prog="bu",
        description="Load, unload and inspect utility modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    bu list                 List all available utilities
    bu loaded               List currently loaded utilities
    bu load git             Load the 'git' utility
    bu loadall              Load all available utilities
    bu unload git           Unload the 'git' utility
    bu commands git         Show commands of the 'git' utility
    bu allfunctions path    Show loaded commands matching 'path'
    bu reload               Reload all loaded utilities
    bu run gs               Run the 'gs' command of a loaded utility
    bu shell                Start an interactive session
        """,
    )
    parser.add_argument("--version", action="version", version=f"bu {__version__}")
    parser.add_argument(
        "-v", "--verbose-level", type=int, choices=[-1, 0, 1, 2], default=None,
        help="Output verbosity (-1 silent .. 2 debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List all available utilities")
    list_parser.add_argument("filter", nargs="?", help="Substring of name or path")
    list_parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")
    list_parser.set_defaults(func=cmd_list)

    loaded_parser = subparsers.add_parser("loaded", aliases=["ls"], help="List loaded utilities")
    loaded_parser.add_argument("filter", nargs="?", help="Substring of name or path")
    loaded_parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")
    loaded_parser.set_defaults(func=cmd_loaded)

    load_parser = subparsers.add_parser("load", help="Load a utility")
    load_parser.add_argument("name", help="Utility name")
    load_parser.set_defaults(func=cmd_load)

    loadall_parser = subparsers.add_parser("loadall", help="Load all available utilities")
    loadall_parser.set_defaults(func=cmd_loadall)

    unload_parser = subparsers.add_parser("unload", help="Unload a utility")
    unload_parser.add_argument("name", help="Utility name")
    unload_parser.set_defaults(func=cmd_unload)

    reload_parser = subparsers.add_parser("reload", help="Reload a utility or all loaded ones")
    reload_parser.add_argument("name", nargs="?", help="Utility name (default: all loaded)")
    reload_parser.set_defaults(func=cmd_reload)

    commands_parser = subparsers.add_parser(
        "commands", aliases=["functions", "fn"], help="Show commands of loaded utilities"
    )
    commands_parser.add_argument("name", nargs="?", help="Utility name (default: all loaded)")
    commands_parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")
    commands_parser.set_defaults(func=cmd_commands)

    allfn_parser = subparsers.add_parser(
        "allfunctions", aliases=["allfns", "fns"], help="Search commands of loaded utilities"
    )
    allfn_parser.add_argument("filter", nargs="?", help="Case-insensitive filter")
    allfn_parser.set_defaults(func=cmd_allfunctions)

    info_parser = subparsers.add_parser("info", help="Show details for a utility")
    info_parser.add_argument("name", help="Utility name")
    info_parser.set_defaults(func=cmd_info)

    run_parser = subparsers.add_parser("run", help="Run a command of a loaded utility")
    run_parser.add_argument("target", metavar="command", help="Command name")
    run_parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    run_parser.set_defaults(func=cmd_run)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive session")
    shell_parser.add_argument(
        "--simple", action="store_true", help="Use simple shell (no prompt_toolkit)"
    )
    shell_parser.set_defaults(func=cmd_shell)

    check_parser = subparsers.add_parser(
        "check", aliases=["check-updates"], help="Check for updates"
    )
    check_parser.set_defaults(func=cmd_check)

    update_parser = subparsers.add_parser("update", help="Update the utilities directory")
    update_parser.set_defaults(func=cmd_update)

    config_parser = subparsers.add_parser("config", help="Show or change configuration")
    config_parser.add_argument("action", nargs="?", choices=["show", "set", "unset"], default="show")
    config_parser.add_argument("key", nargs="?", help="Config key")
    config_parser.add_argument("value", nargs="?", help="Value (JSON or plain string)")
    config_parser.set_defaults(func=cmd_config)

    completion_parser = subparsers.add_parser("completion", help="Print shell completion script")
    completion_parser.add_argument(
        "shell",
        choices=["bash", "zsh", "utils", "loaded"],
        help="Shell type, or a name list used by the completion scripts",
    )
    completion_parser.set_defaults(func=cmd_completion)

    help_parser = subparsers.add_parser("help", help="Show this help message")
    help_parser.set_defaults(func=None)

    return parser


def build_context(config: Config, verbose_level: int) -> CliContext:
    """Create a registry from configuration and restore the saved session."""
    registry = UtilityRegistry(
        config.resolved_module_dirs(),
        prefix=config.get("file_prefix"),
        suffix=config.get("file_suffix"),
    )
    state = StateManager(Path(config.get("state_file")))
    state.restore(registry)
    return CliContext(
        registry=registry,
        config=config,
        state=state,
        verbose_level=verbose_level,
    )


def dispatch(ctx: CliContext, parser: argparse.ArgumentParser, argv: list[str]) -> int:
    """Parse argv and run the matching handler, returning its exit code."""
    args = parser.parse_args(argv)
    func: Optional[Callable] = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0

    status = func(ctx, args)
    if args.command in MUTATING and not ctx.interactive:
        ctx.state.persist(ctx.registry)
    return status


def execute_line(ctx: CliContext, parser: argparse.ArgumentParser, line: str) -> int:
    """Execute one line typed in the interactive shell.

    Lines starting with ``!`` go to the system shell, lines naming a loaded
    command run it, anything else is parsed as a bu subcommand.
    """
    line = line.strip()
    if not line:
        return 0
    if line.startswith("!"):
        return subprocess.run(line[1:], shell=True).returncode

    try:
        tokens = shlex.split(line)
    except ValueError as e:
        logger.error(f"Cannot parse line: {e}")
        return 1

    if tokens[0] in ctx.registry.table:
        try:
            return ctx.registry.run(tokens[0], tokens[1:])
        except Exception as e:
            logger.error(f"Command '{tokens[0]}' failed: {e}")
            return 1

    try:
        return dispatch(ctx, parser, tokens)
    except SystemExit as e:
        # argparse exits on --help and on errors
        return e.code if isinstance(e.code, int) else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the bu CLI."""
    parser = build_parser()
    args_list = sys.argv[1:] if argv is None else argv

    config = get_config()
    pre_args, _ = parser.parse_known_args(args_list)
    verbose_level = pre_args.verbose_level
    if verbose_level is None:
        verbose_level = config.resolved_verbose_level()
    configure_logging(verbose_level)

    ctx = build_context(config, verbose_level)
    return dispatch(ctx, parser, args_list)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
