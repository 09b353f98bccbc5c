#!/usr/bin/env python3
"""
Tests for the utility registry.
"""

from unittest.mock import patch

import pytest

from bu.core import (
    CommandInfo,
    CommandNotFoundError,
    InvalidNameError,
    ModuleStatus,
    PartialFailureError,
    UtilityError,
    UtilityImportError,
    UtilityNotFoundError,
    UtilityNotLoadedError,
    UtilityRegistry,
)

GIT_UTIL = '''# Description: Utilities for git operations
# START_OF_USAGE
# Git shortcuts
# END_OF_USAGE
from bu.core import shell_alias

gs = shell_alias("git status -sb")  # Short git status
g = shell_alias("git")  # Run git


def git_update(*args):  # Update main repo
    return len(args)
'''

P4_UTIL = '''# Description: Perforce helpers


def p4_status(*args):  # Show opened files
    return 0
'''

ALIAS_UTIL = '''# Description: File system aliases
from bu.core import shell_alias

g = shell_alias("grep -i")  # Case-insensitive grep
lr = shell_alias("ls -lrt")  # List by modification time
'''


@pytest.fixture
def utils_dir(tmp_path):
    """Directory with the git, p4 and alias utilities."""
    path = tmp_path / "utils"
    path.mkdir()
    (path / "util_git.py").write_text(GIT_UTIL)
    (path / "util_p4.py").write_text(P4_UTIL)
    (path / "util_alias.py").write_text(ALIAS_UTIL)
    return path


@pytest.fixture
def registry(utils_dir):
    return UtilityRegistry([utils_dir])


# ============================================================================
# Listing Tests
# ============================================================================

class TestListAvailable:
    """Tests for list_available."""

    def test_all_utilities(self, registry):
        """Test every utility file is listed with its description."""
        descriptors = {d.name: d for d in registry.list_available()}
        assert set(descriptors) == {"git", "p4", "alias"}
        assert descriptors["git"].description == "Utilities for git operations"

    def test_filtered(self, registry):
        """Test a substring filter on the name."""
        assert [d.name for d in registry.list_available("p4")] == ["p4"]

    def test_filter_is_case_sensitive(self, registry):
        """Test the filter does not fold case."""
        assert registry.list_available("P4") == []

    def test_list_does_not_load(self, registry):
        """Test listing has no effect on the session."""
        registry.list_available()
        assert registry.loaded == []
        assert len(registry.table) == 0


# ============================================================================
# Load Tests
# ============================================================================

class TestLoad:
    """Tests for load."""

    def test_load_registers_commands(self, registry):
        """Test loading makes the documented commands available."""
        result = registry.load("git")
        assert result.ok
        assert [c.name for c in result.commands] == ["gs", "g", "git_update"]
        assert registry.is_loaded("git")
        assert "gs" in registry.table
        assert registry.run("git_update", ["a", "b"]) == 2

    def test_load_not_found(self, registry, utils_dir):
        """Test a missing utility is reported with its expected path."""
        result = registry.load("svn")
        assert isinstance(result.error, UtilityNotFoundError)
        assert result.message == f"Utility 'svn' not found at {utils_dir / 'util_svn.py'}"
        assert not registry.is_loaded("svn")

    def test_load_not_found_keeps_loaded_set(self, registry):
        """Test a failed load leaves an existing loaded set unchanged."""
        registry.load("git")
        result = registry.load("svn")
        assert isinstance(result.error, UtilityNotFoundError)
        assert registry.loaded == ["git"]
        assert "gs" in registry.table

    def test_load_empty_name(self, registry):
        """Test an empty name is rejected."""
        result = registry.load("")
        assert isinstance(result.error, InvalidNameError)

    def test_load_import_error(self, registry, utils_dir):
        """Test a utility failing to execute is not loaded."""
        (utils_dir / "util_bad.py").write_text("def oops(:  # broken\n")
        result = registry.load("bad")
        assert isinstance(result.error, UtilityImportError)
        assert not registry.is_loaded("bad")

    def test_load_twice_drops_stale_commands(self, registry, utils_dir):
        """Test loading again picks up changes in the source."""
        registry.load("git")
        (utils_dir / "util_git.py").write_text(
            "# Description: git\n\ndef git_log(*args):  # Show log\n    return 0\n"
        )
        result = registry.load("git")
        assert result.ok
        assert "gs" not in registry.table
        assert "git_log" in registry.table
        assert registry.loaded == ["git"]

    def test_load_all(self, registry):
        """Test every available utility is loaded."""
        summary = registry.load_all()
        assert summary.ok
        assert summary.succeeded == 3
        assert sorted(registry.loaded) == ["alias", "git", "p4"]


# ============================================================================
# Unload Tests
# ============================================================================

class TestUnload:
    """Tests for unload."""

    def test_unload_removes_commands(self, registry):
        """Test unloading removes every attributed command."""
        registry.load("git")
        result = registry.unload("git")
        assert result.ok
        assert all(r.removed for r in result.removals)
        assert not registry.is_loaded("git")
        assert len(registry.table) == 0

    def test_unload_not_loaded(self, registry):
        """Test unloading a utility outside the loaded set."""
        result = registry.unload("git")
        assert isinstance(result.error, UtilityNotLoadedError)
        assert result.message == "Utility 'git' is not currently loaded."

    def test_unload_with_missing_source(self, registry, utils_dir):
        """Test a deleted source shows MISSING and still unloads."""
        registry.load("git")
        (utils_dir / "util_git.py").unlink()

        modules = registry.loaded_modules()
        assert modules[0].status is ModuleStatus.MISSING

        result = registry.unload("git")
        assert result.ok
        assert result.source_missing
        assert "gs" not in registry.table

    def test_unload_partial_failure(self, registry):
        """Test a command taken over by another utility cannot be removed."""
        registry.load("git")
        registry.load("alias")  # takes over "g"
        result = registry.unload("git")
        assert isinstance(result.error, PartialFailureError)
        assert result.error.failed == 1
        assert result.error.succeeded == 2
        assert not registry.is_loaded("git")
        assert registry.table.get("g").module == "alias"


# ============================================================================
# Reload Tests
# ============================================================================

class TestReload:
    """Tests for reload."""

    def test_reload_nothing_loaded(self, registry):
        """Test reloading an empty set reports no work."""
        summary = registry.reload()
        assert summary.ok
        assert (summary.succeeded, summary.failed) == (0, 0)

    def test_reload_not_loaded_loads(self, registry):
        """Test reloading a utility outside the set loads it."""
        summary = registry.reload("p4")
        assert summary.ok
        assert registry.is_loaded("p4")

    def test_reload_picks_up_changes(self, registry, utils_dir):
        """Test a reload re-reads the source."""
        registry.load("p4")
        (utils_dir / "util_p4.py").write_text(
            "# Description: p4\n\ndef p4_sync(*args):  # Sync\n    return 0\n"
        )
        assert registry.reload("p4").ok
        assert "p4_sync" in registry.table
        assert "p4_status" not in registry.table

    def test_reload_all_continues_after_failure(self, registry, utils_dir):
        """Test a failing utility does not stop the others."""
        registry.load("git")
        registry.load("p4")
        (utils_dir / "util_git.py").write_text("raise RuntimeError('broken')\n")
        summary = registry.reload()
        assert isinstance(summary.error, PartialFailureError)
        assert (summary.succeeded, summary.failed) == (1, 1)
        assert registry.is_loaded("p4")
        assert not registry.is_loaded("git")

    def test_reload_missing_utility(self, registry):
        """Test reloading an unknown utility fails."""
        summary = registry.reload("svn")
        assert not summary.ok
        assert summary.failed == 1


# ============================================================================
# Command Listing Tests
# ============================================================================

class TestCommands:
    """Tests for list_commands, search_commands, describe and run."""

    def test_list_commands_all(self, registry):
        """Test listings of every loaded utility."""
        registry.load("git")
        registry.load("p4")
        listings = registry.list_commands()
        assert [listing.name for listing in listings] == ["git", "p4"]
        assert listings[1].commands == [
            CommandInfo(name="p4_status", description="Show opened files", kind="function")
        ]

    def test_list_commands_not_loaded(self, registry):
        """Test asking for a utility outside the loaded set."""
        listing = registry.list_commands("git")[0]
        assert isinstance(listing.error, UtilityNotLoadedError)

    def test_list_commands_missing_file(self, registry, utils_dir):
        """Test commands of a loaded utility whose file was removed."""
        registry.load("git")
        (utils_dir / "util_git.py").unlink()
        listing = registry.list_commands("git")[0]
        assert isinstance(listing.error, UtilityNotFoundError)
        assert "file missing" in listing.message

    def test_search_commands(self, registry):
        """Test a case-insensitive search on names and descriptions."""
        registry.load("git")
        registry.load("p4")
        hits = registry.search_commands("OPENED")
        assert [(util, cmd.name) for util, cmd in hits] == [("p4", "p4_status")]

    def test_describe(self, registry):
        """Test describing a utility without loading it."""
        result = registry.describe("git")
        assert result.ok
        assert result.descriptor.description == "Utilities for git operations"
        assert result.usage == "Git shortcuts"
        assert not registry.is_loaded("git")

    def test_describe_missing(self, registry):
        """Test describing an unknown utility."""
        assert isinstance(registry.describe("svn").error, UtilityNotFoundError)

    def test_run_unknown_command(self, registry):
        """Test running a command no utility provides."""
        with pytest.raises(CommandNotFoundError):
            registry.run("gs")


# ============================================================================
# Snapshot / Restore Tests
# ============================================================================

class TestRestore:
    """Tests for snapshot and restore."""

    def test_restore_reloads_existing(self, registry, utils_dir):
        """Test a snapshot restores into a fresh registry."""
        registry.load("p4")
        fresh = UtilityRegistry([utils_dir])
        fresh.restore(registry.snapshot())
        assert fresh.is_loaded("p4")
        assert fresh.run("p4_status") == 0

    def test_restore_missing_source_keeps_membership(self, utils_dir):
        """Test a vanished utility stays loaded as a placeholder."""
        fresh = UtilityRegistry([utils_dir])
        fresh.restore({"svn": [CommandInfo(name="svn_up", description="Update")]})
        assert fresh.is_loaded("svn")
        assert fresh.loaded_modules()[0].status is ModuleStatus.MISSING
        assert fresh.run("svn_up") == 1

        result = fresh.unload("svn")
        assert result.ok
        assert "svn_up" not in fresh.table

    def test_restore_failing_import_reports_load_error(self, utils_dir, caplog):
        """Test a utility that no longer imports says so when its commands run."""
        (utils_dir / "util_bad.py").write_text("raise RuntimeError('half edited')\n")
        fresh = UtilityRegistry([utils_dir])
        fresh.restore({"bad": [CommandInfo(name="bad_cmd", description="Broken")]})
        assert fresh.is_loaded("bad")

        caplog.clear()
        assert fresh.run("bad_cmd") == 1
        assert "failed to load" in caplog.text
        assert "half edited" in caplog.text
        assert "missing" not in caplog.text


# ============================================================================
# Unreadable Source Tests
# ============================================================================

class TestUnreadableSource:
    """Tests for utility files that cannot be read."""

    @staticmethod
    def _deny(denied):
        from bu.core.parser import read_source

        def fake_read(path):
            if path.name == denied:
                raise PermissionError(f"Permission denied: '{path}'")
            return read_source(path)
        return fake_read

    def test_list_available_skips_unreadable(self, registry, caplog):
        """Test an unreadable file is listed without description and does not raise."""
        with patch("bu.core.registry.read_source", self._deny("util_p4.py")):
            descriptors = {d.name: d for d in registry.list_available()}
        assert set(descriptors) == {"git", "p4", "alias"}
        assert descriptors["p4"].description == "NA"
        assert descriptors["p4"].commands == []
        assert descriptors["git"].description == "Utilities for git operations"
        assert "Cannot read utility 'p4'" in caplog.text

    def test_describe_unreadable(self, registry):
        """Test describe returns an error instead of raising."""
        with patch("bu.core.registry.read_source", self._deny("util_git.py")):
            result = registry.describe("git")
        assert isinstance(result.error, UtilityError)
        assert "Cannot read utility 'git'" in result.message

    def test_load_unreadable(self, registry):
        """Test load reports a read error."""
        with patch("bu.core.registry.read_source", self._deny("util_git.py")):
            result = registry.load("git")
        assert isinstance(result.error, UtilityError)
        assert not registry.is_loaded("git")
