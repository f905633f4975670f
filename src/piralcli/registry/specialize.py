"""Derive scope-specific command views from the full registry.

A scoped view contains only the commands whose canonical name ends with the
scope suffix, renamed with that suffix removed. Aliases are filtered the same
way: only aliases that also carry the suffix survive (stripped), everything
else is dropped. So with suffix ``-piral``::

    debug-piral  [watch-piral, debug-portal, watch-portal]
    -> debug     [watch]

Both functions are pure: the input descriptors are never mutated, and the
copies share ``description``, ``arguments``, ``flags``, and ``run`` with the
source by reference.
"""

from __future__ import annotations

from typing import Iterable, Optional

from piralcli.registry.base import ToolCommand


def strip_suffix(value: str, suffix: str) -> str:
    """Remove one trailing occurrence of *suffix* from *value*.

    Only the trailing occurrence is removed, so ``"x-pilet-y-pilet"`` with
    ``"-pilet"`` becomes ``"x-pilet-y"``. An empty suffix leaves *value*
    unchanged.
    """
    if suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value


def specialize_command(command: ToolCommand, suffix: str) -> Optional[ToolCommand]:
    """Rewrite *command* for the scope identified by *suffix*.

    Args:
        command: A descriptor from the full registry.
        suffix: Scope suffix such as ``"-piral"``. Matching is
            case-sensitive. The empty string matches every command and strips
            nothing.

    Returns:
        A copy of *command* with the suffix stripped from its name and only
        the suffixed aliases (stripped) kept, or ``None`` when the name does
        not end with *suffix*. A name equal to *suffix* yields an empty name.
    """
    if not command.name.endswith(suffix):
        return None
    aliases = tuple(
        strip_suffix(alias, suffix) for alias in command.aliases if alias.endswith(suffix)
    )
    return command.model_copy(
        update={"name": strip_suffix(command.name, suffix), "aliases": aliases}
    )


def specialize_commands(
    commands: Iterable[ToolCommand], suffix: str
) -> tuple[ToolCommand, ...]:
    """Build the scoped view of *commands* for *suffix*.

    Registry order is preserved. A suffix that matches nothing yields an
    empty tuple.
    """
    view: list[ToolCommand] = []
    for command in commands:
        specialized = specialize_command(command, suffix)
        if specialized is not None:
            view.append(specialized)
    return tuple(view)
