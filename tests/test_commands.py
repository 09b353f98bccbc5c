#!/usr/bin/env python3
"""
Tests for the session command table and shell aliases.
"""

from unittest.mock import patch

import pytest

from bu.core.commands import CommandTable, shell_alias
from bu.core.exceptions import CommandNotFoundError


class TestCommandTable:
    """Tests for CommandTable."""

    def test_register_and_run(self):
        """Test a registered handler is invoked with its arguments."""
        table = CommandTable()
        calls = []
        table.register("greet", lambda *a: calls.append(a) or 3, module="demo")
        assert "greet" in table
        assert table.run("greet", ["a", "b"]) == 3
        assert calls == [("a", "b")]

    def test_none_return_is_success(self):
        """Test handlers returning None exit with 0."""
        table = CommandTable()
        table.register("noop", lambda *a: None, module="demo")
        assert table.run("noop") == 0

    def test_run_unknown(self):
        """Test running an unknown command raises."""
        with pytest.raises(CommandNotFoundError, match="nope"):
            CommandTable().run("nope")

    def test_remove_checks_owner(self):
        """Test only the owning module can remove an entry."""
        table = CommandTable()
        table.register("gs", lambda: 0, module="git")
        assert table.remove("gs", "alias") is False
        assert "gs" in table
        assert table.remove("gs", "git") is True
        assert "gs" not in table
        assert table.remove("gs", "git") is False

    def test_override_changes_owner(self, caplog):
        """Test a later registration takes over the name."""
        table = CommandTable()
        table.register("g", lambda: 0, module="git")
        table.register("g", lambda: 1, module="alias")
        assert table.get("g").module == "alias"
        assert "overrides" in caplog.text
        assert table.remove("g", "git") is False

    def test_owned_by_and_listing(self):
        """Test per-module and sorted listings."""
        table = CommandTable()
        table.register("zz", lambda: 0, module="a", description="last")
        table.register("aa", lambda: 0, module="a", description="first")
        table.register("mm", lambda: 0, module="b")
        assert [e.name for e in table.owned_by("a")] == ["zz", "aa"]
        assert [e.name for e in table.all_commands()] == ["aa", "mm", "zz"]
        assert table.get_completions()["aa"] == "first"
        assert len(table) == 3


class TestShellAlias:
    """Tests for shell_alias."""

    def test_runs_command_in_shell(self):
        """Test the alias command line is passed to the shell."""
        alias = shell_alias("git status -sb")
        with patch("bu.core.commands.subprocess.run") as mock_run:
            mock_run.return_value.returncode = 0
            assert alias() == 0
        mock_run.assert_called_once_with("git status -sb", shell=True)

    def test_arguments_are_quoted(self):
        """Test extra arguments are appended shell-quoted."""
        alias = shell_alias("grep -i")
        with patch("bu.core.commands.subprocess.run") as mock_run:
            mock_run.return_value.returncode = 1
            assert alias("two words", "file.txt") == 1
        mock_run.assert_called_once_with("grep -i 'two words' file.txt", shell=True)

    def test_alias_marker(self):
        """Test the alias keeps its command line."""
        alias = shell_alias("ls -lrt")
        assert alias.__bu_alias__ == "ls -lrt"
