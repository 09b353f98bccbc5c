"""
Utility registry for managing loaded utilities in a session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from bu.core.commands import CommandTable
from bu.core.datamodels import (
    CommandInfo,
    CommandListing,
    CommandRemoval,
    LoadedModule,
    LoadResult,
    ModuleDescriptor,
    ModuleStatus,
    ReloadSummary,
    UnloadResult,
    OperationResult,
)
from bu.core.exceptions import (
    InvalidNameError,
    PartialFailureError,
    UtilityError,
    UtilityNotFoundError,
    UtilityNotLoadedError,
)
from bu.core.loader import (
    DEFAULT_PREFIX,
    DEFAULT_SUFFIX,
    discover_utils,
    forget_util,
    import_util,
    resolve_util,
)
from bu.core.parser import extract_commands, extract_description, extract_usage, read_source

logger = logging.getLogger(__name__)


class DescribeResult(OperationResult):
    """Descriptor and usage text of a single utility."""

    descriptor: Optional[ModuleDescriptor] = None
    usage: str = ""


def _matches(pattern: str | None, name: str, path: Path | str) -> bool:
    """Literal, case-sensitive substring match against name or path."""
    if not pattern:
        return True
    return pattern in name or pattern in str(path)


def _placeholder_handler(reason: str):
    def handler(*args: str) -> int:
        logger.error(reason)
        return 1
    return handler


class UtilityRegistry:
    """Registry of available and loaded utilities for one session."""

    def __init__(
        self,
        dirs: Iterable[Path],
        prefix: str = DEFAULT_PREFIX,
        suffix: str = DEFAULT_SUFFIX,
        table: CommandTable | None = None,
    ):
        self.dirs = [Path(d) for d in dirs]
        self.prefix = prefix
        self.suffix = suffix
        self.table = table if table is not None else CommandTable()
        # name -> commands attributed to the utility at load time
        self._loaded: dict[str, list[CommandInfo]] = {}

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> Path:
        return resolve_util(name, self.dirs, self.prefix, self.suffix)

    def describe_path(self, name: str, path: Path) -> ModuleDescriptor:
        text = read_source(path)
        return ModuleDescriptor(
            name=name,
            source_path=str(path),
            description=extract_description(text),
            commands=extract_commands(text),
        )

    @property
    def available(self) -> dict[str, ModuleDescriptor]:
        """All discoverable utilities keyed by name.

        Unreadable files are still listed, without description or commands.
        """
        result = {}
        for name, path in discover_utils(self.dirs, self.prefix, self.suffix).items():
            try:
                result[name] = self.describe_path(name, path)
            except OSError as e:
                logger.warning(f"Cannot read utility '{name}': {e}")
                result[name] = ModuleDescriptor(name=name, source_path=str(path))
        return result

    @property
    def loaded(self) -> list[str]:
        return list(self._loaded)

    def is_loaded(self, name: str) -> bool:
        return name in self._loaded

    def attributed_commands(self, name: str) -> list[CommandInfo]:
        return list(self._loaded.get(name, []))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list_available(self, pattern: str | None = None) -> list[ModuleDescriptor]:
        """List discoverable utilities, optionally filtered by substring."""
        return [
            desc for desc in self.available.values()
            if _matches(pattern, desc.name, desc.source_path)
        ]

    def load(self, name: str, quiet: bool = False) -> LoadResult:
        """Import a utility and register its commands in the session.

        Args:
            name: Utility name
            quiet: Log success at debug level instead of info
        """
        if not name or not name.strip():
            return LoadResult(name=name, error=InvalidNameError("No utility name specified."))

        path = self.resolve(name)
        if not path.is_file():
            return LoadResult(
                name=name,
                source_path=str(path),
                error=UtilityNotFoundError(f"Utility '{name}' not found at {path}"),
            )

        try:
            parsed = extract_commands(read_source(path))
        except OSError as e:
            return LoadResult(
                name=name,
                source_path=str(path),
                error=UtilityError(f"Cannot read utility '{name}': {e}"),
            )
        try:
            module = import_util(name, path)
        except UtilityError as e:
            return LoadResult(name=name, source_path=str(path), error=e)

        # Commands that vanished from the source since the previous load
        new_names = {cmd.name for cmd in parsed}
        for stale in self._loaded.get(name, []):
            if stale.name not in new_names:
                self.table.remove(stale.name, name)

        registered = []
        for cmd in parsed:
            handler = getattr(module, cmd.name, None)
            if not callable(handler):
                logger.warning(f"Skipping '{cmd.name}' in utility '{name}': not callable")
                continue
            self.table.register(
                cmd.name,
                handler,
                module=name,
                description=cmd.description,
                kind=cmd.kind,
            )
            registered.append(cmd)

        self._loaded[name] = registered
        log = logger.debug if quiet else logger.info
        log(f"Utility '{name}' loaded successfully.")
        return LoadResult(name=name, source_path=str(path), commands=registered)

    def unload(self, name: str) -> UnloadResult:
        """Remove a utility's commands from the session."""
        if not name or not name.strip():
            return UnloadResult(name=name, error=InvalidNameError("No utility name specified."))

        if name not in self._loaded:
            return UnloadResult(
                name=name,
                error=UtilityNotLoadedError(f"Utility '{name}' is not currently loaded."),
            )

        path = self.resolve(name)
        source_missing = not path.is_file()
        if source_missing:
            logger.warning(
                f"Utility file '{path}' not found, but will attempt to unload from memory."
            )

        logger.info(f"Unloading utility '{name}'...")
        attributed = self._loaded.pop(name)
        removals = [
            CommandRemoval(
                name=cmd.name,
                description=cmd.description,
                removed=self.table.remove(cmd.name, name),
            )
            for cmd in attributed
        ]
        forget_util(name)

        failed = sum(1 for r in removals if not r.removed)
        error = None
        if failed:
            error = PartialFailureError(
                f"{failed} of {len(removals)} commands of utility '{name}' could not be removed",
                succeeded=len(removals) - failed,
                failed=failed,
            )
        else:
            logger.info(f"Utility '{name}' unloaded successfully.")

        return UnloadResult(
            name=name,
            removals=removals,
            source_missing=source_missing,
            error=error,
        )

    def _reload_one(self, name: str) -> UtilityError | None:
        if name not in self._loaded:
            logger.warning(f"Utility '{name}' is not currently loaded. Will attempt to load it.")
            return self.load(name).error

        logger.info(f"Reloading utility '{name}'...")
        unloaded = self.unload(name)
        if unloaded.error is not None:
            if not isinstance(unloaded.error, PartialFailureError):
                logger.error(f"Failed to unload utility '{name}'. Reload aborted.")
                return unloaded.error
            logger.warning(str(unloaded.error))

        loaded = self.load(name)
        if loaded.error is None:
            logger.info(f"Utility '{name}' successfully reloaded.")
        else:
            logger.error(f"Failed to reload utility '{name}'.")
        return loaded.error

    def reload(self, name: str | None = None) -> ReloadSummary:
        """Reload one utility, or every loaded utility when no name is given."""
        if name is not None:
            error = self._reload_one(name)
            return ReloadSummary(
                name=name,
                succeeded=0 if error else 1,
                failed=1 if error else 0,
                error=error,
            )

        names = list(self._loaded)
        if not names:
            logger.warning("No utilities currently loaded.")
            return ReloadSummary()

        logger.info("Reloading all loaded utilities...")
        succeeded = failed = 0
        for util in names:
            if self._reload_one(util) is None:
                succeeded += 1
            else:
                failed += 1

        logger.info(
            f"Reload complete: {succeeded} utilities reloaded successfully, {failed} failed."
        )
        error = None
        if failed:
            error = PartialFailureError(
                f"{failed} of {len(names)} utilities failed to reload",
                succeeded=succeeded,
                failed=failed,
            )
        return ReloadSummary(succeeded=succeeded, failed=failed, error=error)

    def load_all(self) -> ReloadSummary:
        """Load every available utility."""
        succeeded = failed = 0
        for name in discover_utils(self.dirs, self.prefix, self.suffix):
            if self.load(name).ok:
                succeeded += 1
            else:
                failed += 1

        logger.info(f"Loaded {succeeded} utilities. {failed} failed.")
        error = None
        if failed:
            error = PartialFailureError(
                f"{failed} utilities failed to load",
                succeeded=succeeded,
                failed=failed,
            )
        return ReloadSummary(succeeded=succeeded, failed=failed, error=error)

    def loaded_modules(self, pattern: str | None = None) -> list[LoadedModule]:
        """Loaded utilities with the health of their source files."""
        result = []
        for name in self._loaded:
            path = self.resolve(name)
            if not _matches(pattern, name, path):
                continue
            status = ModuleStatus.OK if path.is_file() else ModuleStatus.MISSING
            result.append(LoadedModule(name=name, status=status, source_path=str(path)))
        return result

    def _listing(self, name: str) -> CommandListing:
        path = self.resolve(name)
        if not path.is_file():
            return CommandListing(
                name=name,
                source_path=str(path),
                error=UtilityNotFoundError(
                    f"Commands for utility '{name}' cannot be shown (file missing)"
                ),
            )
        try:
            desc = self.describe_path(name, path)
        except OSError as e:
            return CommandListing(
                name=name,
                source_path=str(path),
                error=UtilityError(f"Cannot read utility '{name}': {e}"),
            )
        return CommandListing(
            name=name,
            source_path=desc.source_path,
            description=desc.description,
            commands=desc.commands,
        )

    def list_commands(self, name: str | None = None) -> list[CommandListing]:
        """Commands of one or all loaded utilities, re-parsed from source."""
        if name is not None:
            if name not in self._loaded:
                return [CommandListing(
                    name=name,
                    error=UtilityNotLoadedError(f"Utility '{name}' is not currently loaded."),
                )]
            return [self._listing(name)]
        return [self._listing(util) for util in self._loaded]

    def search_commands(self, pattern: str) -> list[tuple[str, CommandInfo]]:
        """Commands of loaded utilities whose name or description contains pattern.

        Matching is case-insensitive.
        """
        needle = pattern.lower()
        hits = []
        for listing in self.list_commands():
            if not listing.ok:
                continue
            for cmd in listing.commands:
                if needle in cmd.name.lower() or needle in cmd.description.lower():
                    hits.append((listing.name, cmd))
        return hits

    def describe(self, name: str) -> DescribeResult:
        """Descriptor and usage block for a utility, loaded or not."""
        if not name or not name.strip():
            return DescribeResult(name=name, error=InvalidNameError("No utility name specified."))
        path = self.resolve(name)
        if not path.is_file():
            return DescribeResult(
                name=name,
                error=UtilityNotFoundError(f"Utility '{name}' not found at {path}"),
            )
        try:
            text = read_source(path)
        except OSError as e:
            return DescribeResult(
                name=name,
                error=UtilityError(f"Cannot read utility '{name}': {e}"),
            )
        return DescribeResult(
            name=name,
            descriptor=ModuleDescriptor(
                name=name,
                source_path=str(path),
                description=extract_description(text),
                commands=extract_commands(text),
            ),
            usage=extract_usage(text),
        )

    def run(self, command: str, args: list[str] | tuple[str, ...] = ()) -> int:
        """Run a loaded command.

        Raises:
            CommandNotFoundError: if no loaded utility provides the command.
        """
        return self.table.run(command, args)

    # ------------------------------------------------------------------
    # Persistence support
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, list[CommandInfo]]:
        """Loaded utilities and their attributed commands."""
        return {name: list(cmds) for name, cmds in self._loaded.items()}

    def restore(self, records: dict[str, list[CommandInfo]]) -> None:
        """Re-establish a previously saved loaded set.

        Utilities whose source still exists are imported again. The others,
        and those that no longer import, keep their membership and recorded
        commands, registered as placeholders that report why they cannot run.
        """
        for name, commands in records.items():
            path = self.resolve(name)
            reason = f"Source of utility '{name}' is missing: {path}"
            if path.is_file():
                result = self.load(name, quiet=True)
                if result.ok:
                    continue
                logger.warning(f"Could not restore utility '{name}': {result.message}")
                reason = f"Utility '{name}' failed to load: {result.message}"

            handler = _placeholder_handler(reason)
            for cmd in commands:
                self.table.register(
                    cmd.name,
                    handler,
                    module=name,
                    description=cmd.description,
                    kind=cmd.kind,
                )
            self._loaded[name] = list(commands)
