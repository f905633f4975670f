"""The ``commands`` listing: every command of a view with its aliases."""

from __future__ import annotations

from typing import Callable, Sequence

from piralcli.output import print_table
from piralcli.registry import ToolCommand


def command_rows(view: Sequence[ToolCommand]) -> list[list[str]]:
    """Return ``[name, aliases, description]`` rows for *view*."""
    return [
        [command.name, ", ".join(a for a in command.aliases if a), command.description]
        for command in view
        if command.name
    ]


def make_listing_command(view: Sequence[ToolCommand]) -> Callable[[], None]:
    """Build the ``commands`` callback for a console script showing *view*."""

    def list_commands() -> None:
        """List all available commands and their aliases."""
        print_table(["Command", "Aliases", "Description"], command_rows(view))

    return list_commands
