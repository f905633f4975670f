"""Typer application factories and console-script entry points.

Three console scripts share one registry:

* ``pb`` -- :func:`main_pb`, the full registry plus ``pb config`` and
  ``pb backends``.
* ``piral`` -- :func:`main_piral`, the ``piral`` view.
* ``pilet`` -- :func:`main_pilet`, the ``pilet`` view.

Each app is produced by :func:`create_app`: the command view is turned into
Typer commands by :func:`~piralcli.generator.build_command_app`, a root
callback initialises output and logging, and a ``commands`` listing is
added. Unhandled exceptions are reported the same way by every entry point;
see :func:`run`.

See Also:
    :mod:`piralcli.registry`: The command registry and its views.
    :mod:`piralcli.output`: Output formatting initialised in the root callback.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Callable

import typer
from rich.console import Console
from rich.logging import RichHandler

from piralcli import __version__
from piralcli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED

_PROGRAMS = {
    "all": ("pb", "Build, debug, scaffold, and publish Piral instances and pilets."),
    "piral": ("piral", "Develop and ship a Piral instance."),
    "pilet": ("pilet", "Develop and ship pilets for a Piral instance."),
}

_LISTING = "commands"
_BACKENDS = "backends"


def _version_callback(prog: str) -> Callable[[bool], None]:
    def _callback(value: bool) -> None:
        if value:
            typer.echo(f"{prog} {__version__}")
            raise typer.Exit()

    return _callback


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Route the ``piralcli`` logger to stderr through Rich."""
    logger = logging.getLogger("piralcli")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    logger.addHandler(handler)
    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARNING)


def _make_root_callback(prog: str) -> Callable[..., None]:
    def main_callback(
        ctx: typer.Context,
        version: bool = typer.Option(
            False,
            "--version",
            callback=_version_callback(prog),
            is_eager=True,
            help="Show version and exit.",
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
    ) -> None:
        """Root callback executed before every sub-command.

        Initialises the global :class:`~piralcli.output.OutputManager` from
        the CLI flags and the configured default format, and configures the
        ``piralcli`` logger.
        """
        from piralcli.config import resolve_config
        from piralcli.exceptions import ConfigError
        from piralcli.output import OutputFormat, OutputManager, set_output

        cli_format = None
        if json_output:
            cli_format = OutputFormat.JSON.value
        elif plain_output:
            cli_format = OutputFormat.PLAIN.value

        config = resolve_config(cli_format)
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            raise ConfigError(
                f"Invalid output format '{config.output.format}' in configuration"
            ) from None

        set_output(
            OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
        )
        _configure_logging(verbose, quiet)

        ctx.ensure_object(dict)
        ctx.obj["verbose"] = verbose

    return main_callback


def create_app(view: str = "all") -> typer.Typer:
    """Build the Typer app for the command view *view*.

    Args:
        view: ``all``, ``piral``, or ``pilet``.

    Raises:
        InvalidUsageError: If *view* is unknown.
    """
    from piralcli.commands.listing import make_listing_command
    from piralcli.generator import build_command_app
    from piralcli.registry import commands

    view_commands = commands.view(view)
    prog, help_text = _PROGRAMS[view]
    reserved = [_LISTING, _BACKENDS, "config"] if view == "all" else [_LISTING]

    app = build_command_app(view_commands, name=prog, help=help_text, reserved=reserved)
    app.callback()(_make_root_callback(prog))
    app.command(_LISTING)(make_listing_command(view_commands))

    if view == "all":
        from piralcli.commands.backends import list_backends
        from piralcli.commands.config import config_app

        app.command(_BACKENDS)(list_backends)
        app.add_typer(config_app, name="config", help="Configuration management.")

    return app


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from piralcli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def run(view: str) -> None:
    """Build the app for *view* and run it with the shared error handling.

    :class:`~piralcli.exceptions.PiralCliError` instances cause a clean exit
    with the error's ``exit_code``. All other exceptions produce a crash log
    and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app = create_app(view)
        app(prog_name=_PROGRAMS[view][0])
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from piralcli.exceptions import PiralCliError
        from piralcli.output import error

        if isinstance(exc, PiralCliError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
    finally:
        from piralcli.backends import shutdown_backends

        shutdown_backends()


def main_pb() -> None:
    """Entry point of the ``pb`` console script."""
    run("all")


def main_piral() -> None:
    """Entry point of the ``piral`` console script."""
    run("piral")


def main_pilet() -> None:
    """Entry point of the ``pilet`` console script."""
    run("pilet")
