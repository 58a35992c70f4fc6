"""Tests for slash command text parsing."""

from __future__ import annotations

import pytest

from groupbot.core.command import CommandKind, parse_command
from groupbot.core.errors import CommandError


class TestParseCommand:
    """parse_command() picks menu, help, or quick mode."""

    @pytest.mark.parametrize("text", [None, "", "   ", "\n"])
    def test_empty_opens_menu(self, text):
        assert parse_command(text).kind == CommandKind.MENU

    @pytest.mark.parametrize("text", ["help", "HELP", " ? "])
    def test_help(self, text):
        assert parse_command(text).kind == CommandKind.HELP

    def test_table_format(self):
        text = "2 | Elena |\n| --- |\n| Anatoly |\n| Anastasia |"
        command = parse_command(text)
        assert command.kind == CommandKind.QUICK
        assert command.group_size == 2
        assert command.names == ["Elena", "Anatoly", "Anastasia"]

    def test_single_line(self):
        command = parse_command("3 | Alice | Bob | Carol | Dave")
        assert command.group_size == 3
        assert command.names == ["Alice", "Bob", "Carol", "Dave"]

    def test_names_keep_inner_spaces(self):
        command = parse_command("2 | Mary Ann | Jo Lee")
        assert command.names == ["Mary Ann", "Jo Lee"]

    def test_blank_lines_ignored(self):
        command = parse_command("2 | A |\n\n| --- |\n\n| B |\n")
        assert command.names == ["A", "B"]

    def test_aligned_separator_skipped(self):
        command = parse_command("2 | A |\n| :---: |\n| B |")
        assert command.names == ["A", "B"]

    def test_missing_size_rejected(self):
        with pytest.raises(CommandError):
            parse_command("Alice | Bob")

    @pytest.mark.parametrize("size", ["0", "1", "6", "42"])
    def test_size_out_of_range_rejected(self, size):
        with pytest.raises(CommandError) as excinfo:
            parse_command("{} | Alice | Bob".format(size))
        assert "between 2 and 5" in str(excinfo.value)

    def test_no_names_rejected(self):
        with pytest.raises(CommandError):
            parse_command("3 |\n| --- |")

    def test_command_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_command("nonsense")
