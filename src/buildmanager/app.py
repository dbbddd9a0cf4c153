"""Typer application factory and CLI entry point for buildmanager.

This module wires together the top-level Typer application and registers the
built-in commands (``player``, ``bundles``, ``window``, ``resolve``,
``targets``, ``switch-target``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`buildmanager.config`: Configuration and precedence resolution.
    :mod:`buildmanager.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from buildmanager import __version__
from buildmanager.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="buildmanager",
    help="Build Unity players and asset bundles for a chosen platform.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from buildmanager.commands.build import (  # noqa: E402
    bundles_command,
    player_command,
    resolve_command,
    window_command,
)
from buildmanager.commands.config import config_app  # noqa: E402
from buildmanager.commands.targets import switch_target_command, targets_command  # noqa: E402

app.command("player")(player_command)
app.command("bundles")(bundles_command)
app.command("window")(window_command)
app.command("resolve")(resolve_command)
app.command("targets")(targets_command)
app.command("switch-target")(switch_target_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"buildmanager {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-P",
        help="Unity project directory (default: current directory).",
        file_okay=False,
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Resolve and print without building."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~buildmanager.output.OutputManager` and
    log routing from CLI flags, and stores shared options (``project``,
    ``dry_run``, ``force``) in the Typer context for sub-commands.
    """
    from buildmanager.output import (
        OutputFormat,
        OutputManager,
        configure_logging,
        set_output,
        warning,
    )
    from buildmanager.project import is_unity_project

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(output)

    project_root = (project or Path.cwd()).resolve()
    if ctx.invoked_subcommand not in (None, "config", "targets") and not is_unity_project(
        project_root
    ):
        warning(f"{project_root} does not look like a Unity project (no Assets/ or ProjectSettings/).")

    ctx.ensure_object(dict)
    ctx.obj["project"] = project_root
    ctx.obj["dry_run"] = dry_run
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _configured_format():
    """Default output format from the global config.

    An unreadable config falls back to ``auto`` here; the command that loads
    it reports the problem.
    """
    from buildmanager.config import load_global_config
    from buildmanager.exceptions import ConfigError
    from buildmanager.output import OutputFormat

    try:
        value = load_global_config().output.format
    except ConfigError:
        return OutputFormat.AUTO
    try:
        return OutputFormat(value)
    except ValueError:
        return OutputFormat.AUTO


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from buildmanager.config import get_logs_dir

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = get_logs_dir() / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``buildmanager`` console script.

    Unhandled :class:`~buildmanager.exceptions.BuildManagerError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
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
        from buildmanager.exceptions import BuildManagerError
        from buildmanager.output import error

        if isinstance(exc, BuildManagerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
