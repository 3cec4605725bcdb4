"""Terminal rendering of command results with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (records, JSON, tables). This is what
  downstream tools pipe and parse.
* **stderr** -- all diagnostics (status messages, errors, suggestions,
  usage). Never contaminates the data stream.
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The dispatcher itself never prints; :func:`~nouncli.app.main` hands the
:class:`~nouncli.models.CommandResult` to :meth:`OutputManager.render_result`.
"""

from __future__ import annotations

import csv
import io
import json
import os
import sys
from enum import Enum
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from nouncli.models import CommandResult


class DisplayMode(str, Enum):
    """How the terminal is driven.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    PLAIN = "plain"
    RICH = "rich"


class DataFormat(str, Enum):
    """Formats accepted by ``--output`` / ``-o``."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    CSV = "csv"


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Maintains two Rich :class:`~rich.console.Console` instances -- one for
    stdout (data) and one for stderr (diagnostics).

    Args:
        mode: Desired display mode. ``AUTO`` resolves based on TTY detection.
        no_color: Disable all colour and Rich markup.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        mode: DisplayMode = DisplayMode.AUTO,
        no_color: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._verbose = verbose

        if mode == DisplayMode.AUTO:
            self._mode = (
                DisplayMode.RICH if _is_tty() and not self._no_color else DisplayMode.PLAIN
            )
        else:
            self._mode = mode

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._mode == DisplayMode.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def mode(self) -> DisplayMode:
        """The resolved display mode."""
        return self._mode

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def render_data(self, data: Any, fmt: Optional[str] = None) -> None:
        """Render *data* to stdout in the requested format.

        Args:
            data: Response payload -- typically a dict or a list of dicts.
            fmt: One of :class:`DataFormat`'s values. ``None`` means JSON.

        Example::

            get_output().render_data([{"id": "c1", "name": "Ada"}], "table")
        """
        fmt = fmt or DataFormat.JSON.value
        if fmt == DataFormat.YAML.value:
            self.print_data(
                yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip("\n")
            )
        elif fmt == DataFormat.CSV.value:
            self.print_data(_to_csv(data))
        elif fmt == DataFormat.TABLE.value:
            self._print_table(data)
        else:
            self._print_json(data)

    def render_result(self, result: CommandResult) -> None:
        """Write a :class:`~nouncli.models.CommandResult` to the terminal.

        Data (``result.data`` when a format was requested, else
        ``result.output``) goes to stdout. The message, error, suggestion
        and usage go to stderr.
        """
        if result.success:
            if result.format is not None and result.data is not None:
                self.render_data(result.data, result.format)
            elif result.output:
                self.print_data(result.output)
            if result.message and result.message != result.output:
                self.success(result.message)
            return

        self.error(result.error or "Unknown error")
        if result.usage:
            self.suggest(f"Usage: {result.usage}")
        if result.suggestion:
            self.suggest(result.suggestion)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message)

    def success(self, message: str) -> None:
        """Print a green success message to stderr."""
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        """Print a dimmed next-step suggestion to stderr, prefixed with an arrow."""
        formatted = f"→ {message}"
        if self._no_color:
            print(formatted, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[dim]{formatted}[/dim]")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim][debug] {message}[/dim]")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _print_json(self, data: Any) -> None:
        json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._mode == DisplayMode.RICH:
            self._stdout.print(Syntax(json_str, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(json_str)

    def _print_table(self, data: Any) -> None:
        if isinstance(data, dict):
            headers = ["Field", "Value"]
            rows = [[str(k), _cell(v)] for k, v in data.items()]
        elif isinstance(data, list):
            if not data:
                self.print_data("No data")
                return
            headers = _columns(data)
            rows = [
                [_cell(item.get(h)) if isinstance(item, dict) else _cell(item) for h in headers]
                for item in data
            ]
        else:
            self.print_data(_cell(data))
            return

        if self._mode == DisplayMode.RICH:
            table = Table(show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)
            return

        widths = [
            max([len(h)] + [len(row[i]) for row in rows]) for i, h in enumerate(headers)
        ]
        self.print_data(" | ".join(h.ljust(w) for h, w in zip(headers, widths)))
        self.print_data("-+-".join("-" * w for w in widths))
        for row in rows:
            self.print_data(" | ".join(c.ljust(w) for c, w in zip(row, widths)))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _columns(rows: list[Any]) -> list[str]:
    """Column names: keys of the first object, or a single ``value`` column."""
    first = rows[0]
    if isinstance(first, dict):
        return [str(k) for k in first]
    return ["value"]


def _to_csv(data: Any) -> str:
    rows = data if isinstance(data, list) else [data]
    if not rows:
        return ""
    buffer = io.StringIO()
    headers = _columns(rows)
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for item in rows:
        if isinstance(item, dict):
            writer.writerow([_cell(item.get(h)) for h in headers])
        else:
            writer.writerow([_cell(item)])
    return buffer.getvalue().rstrip("\n")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None
