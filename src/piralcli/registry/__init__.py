"""Command registry -- descriptors, scoped views, and routing.

Sub-modules:

* :mod:`~piralcli.registry.base` -- :class:`ToolCommand` and the capability
  interfaces it carries.
* :mod:`~piralcli.registry.specialize` -- derive a scoped view by suffix.
* :mod:`~piralcli.registry.commands` -- the registry of every command.
* :mod:`~piralcli.registry.router` -- token resolution and dispatch.
"""

from piralcli.registry.base import (
    ArgumentSchema,
    CommandAction,
    FlagsCallback,
    RunCallback,
    Scope,
    ToolCommand,
)
from piralcli.registry.commands import ALL_COMMANDS, Commands, commands
from piralcli.registry.router import CommandRouter, invoke_command
from piralcli.registry.specialize import specialize_command, specialize_commands

__all__ = [
    "ALL_COMMANDS",
    "ArgumentSchema",
    "CommandAction",
    "CommandRouter",
    "Commands",
    "FlagsCallback",
    "RunCallback",
    "Scope",
    "ToolCommand",
    "commands",
    "invoke_command",
    "specialize_command",
    "specialize_commands",
]
