"""Typer application and CLI entry point for exposee.

Registers the built-in sub-commands (``fetch``, ``report``, ``config``) on
the top-level Typer application. :func:`main` is the console-script entry
point declared in ``pyproject.toml``; it installs signal handlers, invokes
the app, and turns unexpected exceptions into a crash log under the data
directory.

See Also:
    :mod:`exposee.config`: Configuration resolution.
    :mod:`exposee.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from exposee import __version__
from exposee.commands.config import config_app
from exposee.commands.sync import fetch_command, report_command
from exposee.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SUCCESS


app = typer.Typer(
    name="exposee",
    help="Fetch and publish exposure-notification diagnosis keys.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("fetch")(fetch_command)
app.command("report")(report_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"exposee {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


def _configure_logging(verbose: bool) -> None:
    """Route the ``exposee`` library loggers to stderr when verbose."""
    package_logger = logging.getLogger("exposee")
    if not verbose:
        package_logger.setLevel(logging.WARNING)
        return
    package_logger.setLevel(logging.DEBUG)
    if not any(getattr(h, "_exposee_cli", False) for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        handler._exposee_cli = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback: install the global OutputManager and logging level."""
    from exposee.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from exposee.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``exposee`` console script.

    :class:`~exposee.exceptions.ExposeeError` instances exit with their
    ``exit_code``; anything else writes a crash log and exits with
    :data:`~exposee.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from exposee.exceptions import ExposeeError
        from exposee.output import error

        if isinstance(exc, ExposeeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
