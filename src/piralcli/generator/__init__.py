"""CLI generator -- turn command descriptors into a Typer application.

Typical usage::

    from piralcli.generator import build_command_app
    from piralcli.registry import commands

    app = build_command_app(commands.pilet, name="pilet", help="Pilet tooling.")
    app()

Sub-modules:

* :mod:`~piralcli.generator.argv` -- the fluent argument builder that command
  flag schemas populate, plus flag-name conversions.
* :mod:`~piralcli.generator.command_tree` -- maps recorded flags to Typer
  parameters and generates the command functions.
"""

from piralcli.generator.argv import ArgumentBuilder, camel_case
from piralcli.generator.command_tree import build_command_app, register_commands

__all__ = ["ArgumentBuilder", "build_command_app", "camel_case", "register_commands"]
