"""Tests for the output rendering system.

Covers:
- DisplayMode resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- render_data in json, yaml, csv and table formats
- render_result for successful and failed command results
- Global instance management
"""

from __future__ import annotations

import json

import pytest
import yaml

from nouncli.models import CommandResult
from nouncli.output import (
    DisplayMode,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("nouncli.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("nouncli.output._is_tty", lambda: True)


@pytest.fixture()
def plain(non_tty) -> OutputManager:
    return OutputManager(mode=DisplayMode.PLAIN, no_color=True)


# ------------------------------------------------------------------ #
# DisplayMode resolution
# ------------------------------------------------------------------ #


class TestDisplayModeResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager().mode == DisplayMode.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager().mode == DisplayMode.RICH

    def test_auto_resolves_to_plain_when_no_color(self, tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert OutputManager().mode == DisplayMode.PLAIN

    def test_explicit_mode_is_kept(self, non_tty):
        assert OutputManager(mode=DisplayMode.RICH).mode == DisplayMode.RICH


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, plain):
        plain.print_data("payload")
        captured = capfd.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    def test_error_goes_to_stderr(self, capfd, plain):
        plain.error("boom")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: boom\n"

    def test_suggest_has_arrow_prefix(self, capfd, plain):
        plain.suggest("Did you mean 'order'?")
        assert capfd.readouterr().err == "→ Did you mean 'order'?\n"

    def test_warning_prefix(self, capfd, plain):
        plain.warning("careful")
        assert capfd.readouterr().err == "Warning: careful\n"

    def test_debug_hidden_by_default(self, capfd, plain):
        plain.debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(mode=DisplayMode.PLAIN, no_color=True, verbose=True)
        mgr.debug("details")
        assert capfd.readouterr().err == "[debug] details\n"
        assert mgr.is_verbose is True


# ------------------------------------------------------------------ #
# render_data
# ------------------------------------------------------------------ #


ROWS = [
    {"id": "c1", "name": "Ada", "tags": ["a", "b"]},
    {"id": "c2", "name": "Grace", "tags": None},
]


class TestRenderData:
    def test_json_is_default(self, capfd, plain):
        plain.render_data({"id": "c1"})
        assert json.loads(capfd.readouterr().out) == {"id": "c1"}

    def test_yaml(self, capfd, plain):
        plain.render_data(ROWS, "yaml")
        assert yaml.safe_load(capfd.readouterr().out) == ROWS

    def test_csv(self, capfd, plain):
        plain.render_data(ROWS, "csv")
        lines = capfd.readouterr().out.splitlines()
        assert lines[0] == "id,name,tags"
        assert lines[1] == 'c1,Ada,"[""a"", ""b""]"'
        assert lines[2] == "c2,Grace,"

    def test_csv_single_object(self, capfd, plain):
        plain.render_data({"id": "c1", "name": "Ada"}, "csv")
        assert capfd.readouterr().out.splitlines() == ["id,name", "c1,Ada"]

    def test_plain_table(self, capfd, plain):
        plain.render_data([{"id": "c1", "name": "Ada"}, {"id": "c22", "name": "Bo"}], "table")
        lines = capfd.readouterr().out.splitlines()
        assert lines == [
            "id  | name",
            "----+-----",
            "c1  | Ada ",
            "c22 | Bo  ",
        ]

    def test_plain_table_for_object(self, capfd, plain):
        plain.render_data({"id": "c1"}, "table")
        lines = capfd.readouterr().out.splitlines()
        assert lines[0].split(" | ")[0].strip() == "Field"
        assert lines[2].startswith("id")

    def test_empty_table(self, capfd, plain):
        plain.render_data([], "table")
        assert capfd.readouterr().out == "No data\n"

    def test_rich_table_contains_values(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(mode=DisplayMode.RICH)
        mgr.render_data([{"id": "c1", "name": "Ada"}], "table")
        out = capfd.readouterr().out
        assert "Ada" in out
        assert "name" in out


# ------------------------------------------------------------------ #
# render_result
# ------------------------------------------------------------------ #


class TestRenderResult:
    def test_success_with_format_renders_data(self, capfd, plain):
        result = CommandResult.ok("[]", data=[{"id": "c1"}], format="csv")
        plain.render_result(result)
        captured = capfd.readouterr()
        assert captured.out.splitlines() == ["id", "c1"]
        assert captured.err == ""

    def test_success_without_format_prints_output(self, capfd, plain):
        result = CommandResult.ok(
            "Order o1 deleted", message="Order deleted successfully!"
        )
        plain.render_result(result)
        captured = capfd.readouterr()
        assert captured.out == "Order o1 deleted\n"
        assert captured.err == "Order deleted successfully!\n"

    def test_message_equal_to_output_not_repeated(self, capfd, plain):
        plain.render_result(CommandResult.ok("Done", message="Done"))
        captured = capfd.readouterr()
        assert captured.out == "Done\n"
        assert captured.err == ""

    def test_failure_goes_to_stderr(self, capfd, plain):
        result = CommandResult(
            success=False,
            error="Missing required argument: id",
            usage="customer get <id>",
            exit_code=2,
        )
        plain.render_result(result)
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == [
            "Error: Missing required argument: id",
            "→ Usage: customer get <id>",
        ]

    def test_failure_with_suggestion(self, capfd, plain):
        result = CommandResult(
            success=False, error="Unknown command: ordr", suggestion="Did you mean 'order'?"
        )
        plain.render_result(result)
        assert capfd.readouterr().err.splitlines()[-1] == "→ Did you mean 'order'?"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self, non_tty):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_replaces_instance(self, plain):
        set_output(plain)
        assert get_output() is plain

    def test_reset_output(self, plain):
        set_output(plain)
        reset_output()
        assert get_output() is not plain
