"""Terminal output for the pb, piral, and pilet scripts.

Data a user may want to pipe (the ``commands`` listing, ``config show``,
``backends``) goes to **stdout**. Everything else, from status lines to
errors, goes to **stderr**, so ``pb --json config show | jq`` always sees
clean JSON.

Formatting follows the terminal: Rich markup when stdout is an interactive
terminal, plain text when it is piped, and no colour when ``NO_COLOR`` is
set, ``TERM=dumb``, or ``--no-color`` is passed.

The root callback of each script installs one :class:`OutputManager` with
:func:`set_output`; the apps layer only calls the module-level helpers
(:func:`info`, :func:`warning`, ...). A command's ``--log-level`` adjusts
verbosity afterwards through :meth:`OutputManager.apply_log_level`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Output formats. ``AUTO`` becomes ``RICH`` on a colour terminal, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Diagnostic(NamedTuple):
    plain: str
    markup: str
    quiet_hides: bool


# "{}" is replaced by the message
_DIAGNOSTICS: dict[str, _Diagnostic] = {
    "info": _Diagnostic("{}", "{}", True),
    "success": _Diagnostic("{}", "[green]{}[/green]", True),
    "suggest": _Diagnostic("→ {}", "[dim]→ {}[/dim]", True),
    "progress": _Diagnostic("{}", "[dim]{}[/dim]", True),
    "debug": _Diagnostic("[debug] {}", "[dim]\\[debug] {}[/dim]", True),
    "warning": _Diagnostic("Warning: {}", "[yellow]Warning:[/yellow] {}", False),
    "error": _Diagnostic("Error: {}", "[bold red]Error:[/bold red] {}", False),
}


class OutputManager:
    """Format preferences plus one Rich console per stream.

    Args:
        format: Output format for data on stdout.
        no_color: Strip colour and markup from both streams.
        quiet: Hide informational diagnostics; warnings and errors remain.
        verbose: Show debug diagnostics.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    def apply_log_level(self, level: int) -> None:
        """Translate a 1-5 ``--log-level`` into quiet/verbose.

        1-2 hide informational output, 3 is normal, 4-5 add debug output.
        """
        self._quiet = level <= 2
        self._verbose = level >= 4

    # -- stdout ------------------------------------------------------- #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Write a dict or list to stdout in the active format.

        Plain output is one line per top-level entry: ``key<TAB>json`` for a
        dict, ``str(item)`` for a list.
        """
        if self._format == OutputFormat.PLAIN:
            if isinstance(data, dict):
                lines = [f"{key}\t{json.dumps(value, default=str)}" for key, value in data.items()]
            else:
                lines = [str(item) for item in data]
            for line in lines:
                self.print_data(line)
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Rows as a Rich table, JSON records keyed by header, or TSV lines."""
        if self._format == OutputFormat.JSON:
            self.print_data(
                json.dumps([dict(zip(headers, row)) for row in rows], indent=2, ensure_ascii=False)
            )
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # -- stderr ------------------------------------------------------- #

    def _diagnose(self, kind: str, message: str) -> None:
        diagnostic = _DIAGNOSTICS[kind]
        if diagnostic.quiet_hides and self._quiet:
            return
        if self._no_color:
            print(diagnostic.plain.format(message), file=sys.stderr, flush=True)
        else:
            self._stderr.print(diagnostic.markup.format(escape(message)))

    def info(self, message: str) -> None:
        self._diagnose("info", message)

    def success(self, message: str) -> None:
        self._diagnose("success", message)

    def suggest(self, message: str) -> None:
        """A next step for the user, e.g. the command to run after scaffolding."""
        self._diagnose("suggest", message)

    def warning(self, message: str) -> None:
        self._diagnose("warning", message)

    def error(self, message: str) -> None:
        self._diagnose("error", message)

    def progress(self, message: str) -> None:
        """Transient status; skipped unless attached to a terminal."""
        if _is_tty():
            self._diagnose("progress", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnose("debug", message)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# -- process-wide manager --------------------------------------------- #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed manager; a default one is created on first use."""
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


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def progress(message: str) -> None:
    get_output().progress(message)


def debug(message: str) -> None:
    get_output().debug(message)
