"""Fluent argument builder consumed by command flag schemas.

Commands declare their arguments by chaining calls on an
:class:`ArgumentBuilder`, in the style of yargs::

    builder.positional("source", type="string", describe="...", default="./")
    builder.number("port").describe("port", "...").default("port", 1234)
    builder.choices("type", ["all", "release"]).default("type", "all")

The builder only records :class:`~piralcli.models.FlagSpec` entries; turning
them into Typer parameters is the job of
:mod:`~piralcli.generator.command_tree`. Calling :meth:`describe` or
:meth:`default` on a name that was never declared implicitly declares it as a
string flag.
"""

from __future__ import annotations

import keyword
import re
from typing import Any, Iterable, Optional

from piralcli.models import FlagKind, FlagSpec


class ArgumentBuilder:
    """Records positional arguments and flags in declaration order."""

    def __init__(self) -> None:
        self._specs: dict[str, FlagSpec] = {}

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def positional(
        self,
        name: str,
        type: str = "string",
        describe: Optional[str] = None,
        default: Any = None,
    ) -> ArgumentBuilder:
        """Declare an optional positional argument."""
        self._specs[name] = FlagSpec(
            name=name,
            kind=FlagKind(type),
            positional=True,
            description=describe,
            default=default,
        )
        return self

    def string(self, name: str) -> ArgumentBuilder:
        return self._declare(name, FlagKind.STRING)

    def number(self, name: str) -> ArgumentBuilder:
        return self._declare(name, FlagKind.NUMBER)

    def boolean(self, name: str) -> ArgumentBuilder:
        return self._declare(name, FlagKind.BOOLEAN)

    def choices(self, name: str, values: Iterable[str]) -> ArgumentBuilder:
        """Declare a flag restricted to a closed set of string *values*."""
        return self._declare(name, FlagKind.CHOICES, choices=tuple(values))

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def describe(self, name: str, text: str) -> ArgumentBuilder:
        return self._update(name, description=text)

    def default(self, name: str, value: Any) -> ArgumentBuilder:  # noqa: ANN401
        return self._update(name, default=value)

    def demand_option(self, name: str) -> ArgumentBuilder:
        """Mark flag *name* as required."""
        return self._update(name, required=True)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def specs(self) -> list[FlagSpec]:
        """All declared arguments, positionals first, each group in declaration order."""
        positionals = [s for s in self._specs.values() if s.positional]
        flags = [s for s in self._specs.values() if not s.positional]
        return positionals + flags

    def defaults(self) -> dict[str, Any]:
        """Return the options record produced when no flag is given."""
        return {camel_case(s.name): s.default for s in self._specs.values()}

    def _declare(self, name: str, kind: FlagKind, **extra: Any) -> ArgumentBuilder:
        existing = self._specs.get(name)
        if existing is None:
            self._specs[name] = FlagSpec(name=name, kind=kind, **extra)
        else:
            self._specs[name] = existing.model_copy(update={"kind": kind, **extra})
        return self

    def _update(self, name: str, **changes: Any) -> ArgumentBuilder:
        if name not in self._specs:
            self._declare(name, FlagKind.STRING)
        self._specs[name] = self._specs[name].model_copy(update=changes)
        return self


# ---------------------------------------------------------------------------
# Name conversion
# ---------------------------------------------------------------------------

_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def camel_case(name: str) -> str:
    """Convert a kebab-case flag name to its options-record key.

    >>> camel_case("cache-dir")
    'cacheDir'
    >>> camel_case("autoinstall")
    'autoinstall'
    """
    head, *rest = name.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def python_name(name: str) -> str:
    """Convert a flag name to a valid Python identifier for a generated signature.

    ``cache-dir`` becomes ``cache_dir``; keywords get a trailing underscore.
    """
    result = _INVALID_IDENT_RE.sub("_", name.replace("-", "_")).strip("_") or "arg"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result
