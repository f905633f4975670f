"""Command descriptors and the capability interfaces they carry.

A :class:`ToolCommand` is the static record describing one CLI operation.
Its two behaviour-bearing fields are capability objects rather than bare
functions:

* :class:`ArgumentSchema` -- *can populate an argument builder* with the
  command's positional arguments and flags.
* :class:`CommandAction` -- *can execute* given a validated options record.

Keeping them behind small ABCs lets an alternate argument parser or execution
back end be substituted without touching the registry or the specialization
engine. :class:`FlagsCallback` and :class:`RunCallback` adapt plain functions
to these interfaces, which is how the built-in registry declares its commands.

Example::

    ToolCommand(
        name="pack-pilet",
        aliases=("package-pilet", "pack", "package"),
        description="Creates a pilet package that can be published.",
        arguments=("[source]",),
        flags=FlagsCallback(_pack_pilet_flags),
        run=RunCallback(_pack_pilet_run),
    )
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class Scope(str, enum.Enum):
    """Operational context a command belongs to, keyed by its name suffix."""

    PIRAL = "piral"
    PILET = "pilet"

    @property
    def suffix(self) -> str:
        """The name suffix identifying commands of this scope (``"-piral"``)."""
        return f"-{self.value}"


class ArgumentSchema(ABC):
    """Capability: declare a command's arguments on an argument builder."""

    @abstractmethod
    def populate(self, builder: Any) -> Any:  # noqa: ANN401
        """Register positionals and flags on *builder* and return it.

        Args:
            builder: An argument builder, normally
                :class:`~piralcli.generator.argv.ArgumentBuilder`.

        Returns:
            The same builder, allowing fluent chaining.
        """
        ...


class CommandAction(ABC):
    """Capability: execute a command with a validated options record."""

    @abstractmethod
    def run(self, args: dict[str, Any]) -> Any:  # noqa: ANN401
        """Execute the command.

        Args:
            args: Options record keyed by camel-cased flag name
                (``cache-dir`` arrives as ``cacheDir``).

        Returns:
            Whatever the underlying operation returns. May be an awaitable,
            in which case the router drives it to completion.
        """
        ...


class FlagsCallback(ArgumentSchema):
    """Adapt a ``(builder) -> builder`` function to :class:`ArgumentSchema`."""

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self._fn = fn

    def populate(self, builder: Any) -> Any:  # noqa: ANN401
        return self._fn(builder)

    def __repr__(self) -> str:
        return f"FlagsCallback({getattr(self._fn, '__name__', self._fn)!r})"


class RunCallback(CommandAction):
    """Adapt a ``(args) -> result`` function to :class:`CommandAction`."""

    def __init__(self, fn: Callable[[dict[str, Any]], Any]) -> None:
        self._fn = fn

    def run(self, args: dict[str, Any]) -> Any:  # noqa: ANN401
        return self._fn(args)

    def __repr__(self) -> str:
        return f"RunCallback({getattr(self._fn, '__name__', self._fn)!r})"


class ToolCommand(BaseModel):
    """Immutable record describing one invocable CLI operation.

    ``name`` is unique within the full registry. ``aliases`` may be empty and
    are not checked for uniqueness; the router applies first-match-wins when
    two commands in a view claim the same token.

    The model is frozen: descriptors are created once at import time and never
    mutated. Scoped views are produced by copying with a new ``name`` and
    ``aliases`` (see :func:`~piralcli.registry.specialize.specialize_command`).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    aliases: tuple[str, ...] = ()
    description: str = ""
    arguments: tuple[str, ...] = Field(
        default=(), description="Positional placeholders, e.g. '[source]'"
    )
    flags: ArgumentSchema
    run: CommandAction

    @property
    def scope(self) -> Optional[Scope]:
        """The scope this command is tagged with, or ``None`` for unscoped names."""
        for scope in Scope:
            if self.name.endswith(scope.suffix):
                return scope
        return None

    @property
    def tokens(self) -> tuple[str, ...]:
        """Canonical name followed by all aliases, in declaration order."""
        return (self.name, *self.aliases)
