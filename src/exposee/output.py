"""Terminal output for the ``exposee`` CLI.

Two kinds of output leave the process, and they never share a stream:

* **Data on stdout**: decoded key batches (:meth:`OutputManager.print_records`)
  and the effective configuration (:meth:`OutputManager.print_config`).
  Schedulers pipe and parse this.
* **Diagnostics on stderr**: outcome summaries, errors and debug traces.

The data format is ``json``, ``plain`` (tab-separated) or ``rich`` (tables,
chosen automatically on an interactive terminal with colour). ``NO_COLOR``,
``TERM=dumb`` and ``--no-color`` disable colour and markup.

Library modules never print; they log. Only the CLI layer writes, through
the :class:`OutputManager` installed by :func:`set_output`.
"""

from __future__ import annotations

import base64
import json
import os
import sys
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from exposee.models import ExposedRecord, GlobalConfig


class OutputFormat(str, Enum):
    """Data formats for stdout. ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def record_to_dict(record: ExposedRecord) -> dict[str, Any]:
    """Printable form of one record: base64 key, ISO onset, raw ``keyDate``."""
    return {
        "key": base64.b64encode(record.key).decode("ascii"),
        "onset": record.onset.isoformat(),
        "keyDate": record.key_date,
    }


def flatten_config(config: GlobalConfig) -> list[tuple[str, Any]]:
    """``(section.field, value)`` pairs in the dot notation ``config set`` accepts."""
    pairs: list[tuple[str, Any]] = []
    for section, fields in config.model_dump(mode="json").items():
        for name, value in fields.items():
            pairs.append((f"{section}.{name}", value))
    return pairs


class OutputManager:
    """Writes batches and configuration to stdout, diagnostics to stderr.

    Args:
        format: stdout data format. ``AUTO`` resolves to ``RICH`` on a colour
            TTY and to ``PLAIN`` otherwise.
        no_color: Disable colour and Rich markup on both streams.
        quiet: Drop informational and success messages. Errors still print.
        verbose: Print debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose
        if format is OutputFormat.AUTO:
            format = OutputFormat.PLAIN
            if _stdout_is_terminal() and not self._no_color:
                format = OutputFormat.RICH
        self._format = format
        self._data = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format is OutputFormat.RICH,
        )
        self._diagnostics = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def _line(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def _json(self, payload: Any) -> None:
        self._line(json.dumps(payload, indent=2, ensure_ascii=False))

    def print_records(self, records: Iterable[ExposedRecord], title: Optional[str] = None) -> None:
        """Print a decoded batch, one record per row, in wire order."""
        rows = [record_to_dict(record) for record in records]
        if self._format is OutputFormat.JSON:
            self._json(rows)
            return
        if self._format is OutputFormat.PLAIN:
            self._line("key\tonset")
            for row in rows:
                self._line(f"{row['key']}\t{row['onset']}")
            return
        table = Table(title=title, header_style="bold cyan")
        table.add_column("key", no_wrap=True)
        table.add_column("onset")
        for row in rows:
            table.add_row(row["key"], row["onset"])
        self._data.print(table)

    def print_config(self, config: GlobalConfig) -> None:
        """Print *config*: nested JSON, or one ``section.field`` per line or row."""
        if self._format is OutputFormat.JSON:
            self._json(config.model_dump(mode="json"))
            return
        pairs = flatten_config(config)
        if self._format is OutputFormat.PLAIN:
            for key, value in pairs:
                self._line(f"{key}\t{value}")
            return
        table = Table(header_style="bold cyan")
        table.add_column("setting")
        table.add_column("value")
        for key, value in pairs:
            table.add_row(key, "" if value is None else str(value))
        self._data.print(table)

    # --- stderr ---

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._diagnostics.print(markup)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        """Never suppressed, not even by ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")


def _stdout_is_terminal() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env(environ: Mapping[str, str] = os.environ) -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb``."""
    return "NO_COLOR" in environ or environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed :class:`OutputManager`; a default one is created on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def print_records(records: Iterable[ExposedRecord], title: Optional[str] = None) -> None:
    get_output().print_records(records, title)


def print_config(config: GlobalConfig) -> None:
    get_output().print_config(config)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
