"""Resolve command tokens within a view and invoke the matching command.

The router works on any sequence of :class:`~piralcli.registry.base.ToolCommand`
-- the full registry or one of its scoped views. Every canonical name and
alias becomes a *token*. When two commands claim the same token the first
one in registry order wins and the later claim is recorded as a collision;
nothing is deduplicated or rejected.
"""

from __future__ import annotations

import asyncio
import difflib
import inspect
import logging
from typing import Any, Awaitable, Iterator, Sequence

from piralcli.exceptions import CommandNotFoundError
from piralcli.registry.base import ToolCommand

logger = logging.getLogger(__name__)


class CommandRouter:
    """Token lookup and dispatch over one command view.

    Tokens are indexed command by command in registry order, each name
    before its own aliases; the first command to claim a token keeps it.
    Empty tokens (a name that was equal to its scope suffix) cannot be typed
    and are not indexed.

    Args:
        commands: The view to route over, in registry order.

    Example::

        router = CommandRouter(commands.pilet)
        router.resolve("package").name   # "pack"
        router.invoke("pack", {"base": ".", "source": "./package.json"})
    """

    def __init__(self, commands: Sequence[ToolCommand]) -> None:
        self._commands = tuple(commands)
        self._table: dict[str, ToolCommand] = {}
        self._collisions: list[tuple[str, ToolCommand, ToolCommand]] = []

        for token, command in self._iter_tokens():
            if not token:
                continue
            winner = self._table.get(token)
            if winner is None:
                self._table[token] = command
            elif winner is not command:
                logger.debug(
                    "Token '%s' of '%s' is shadowed by '%s'",
                    token,
                    command.name,
                    winner.name,
                )
                self._collisions.append((token, winner, command))

    def _iter_tokens(self) -> Iterator[tuple[str, ToolCommand]]:
        for command in self._commands:
            for token in command.tokens:
                yield token, command

    @property
    def commands(self) -> tuple[ToolCommand, ...]:
        """The routed view, in registry order."""
        return self._commands

    @property
    def table(self) -> dict[str, ToolCommand]:
        """Mapping of every routable token to the command it resolves to."""
        return dict(self._table)

    def collisions(self) -> list[tuple[str, ToolCommand, ToolCommand]]:
        """Return ``(token, winner, shadowed)`` for every token claimed twice."""
        return list(self._collisions)

    def resolve(self, token: str) -> ToolCommand:
        """Return the command registered under *token*.

        Raises:
            CommandNotFoundError: If no name or alias matches. The error
                carries up to three close matches as suggestions.
        """
        try:
            return self._table[token]
        except KeyError:
            suggestions = difflib.get_close_matches(token, list(self._table), n=3)
            raise CommandNotFoundError(token, suggestions) from None

    def invoke(self, token: str, args: dict[str, Any]) -> Any:  # noqa: ANN401
        """Resolve *token* and run the command once with *args*."""
        return invoke_command(self.resolve(token), args)


def invoke_command(command: ToolCommand, args: dict[str, Any]) -> Any:  # noqa: ANN401
    """Run *command* exactly once and return its outcome unchanged.

    Exceptions raised by the command propagate untouched. An awaitable result
    is driven to completion on a fresh event loop.
    """
    logger.debug("Running '%s'", command.name)
    result = command.run.run(args)
    if inspect.isawaitable(result):
        result = asyncio.run(_await(result))
    return result


async def _await(awaitable: Awaitable[Any]) -> Any:  # noqa: ANN401
    return await awaitable
