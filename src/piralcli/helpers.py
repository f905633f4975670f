"""Closed option domains and their key/value lookups.

Several commands accept a ``--force-overwrite``, ``--language``, or
``--template`` flag whose accepted values form a closed set of string keys.
Each key maps to an internal enum value consumed by the apps layer. The
lookups are deliberately forgiving: an unknown key falls back to the domain's
default instead of raising, since the argument parser already restricts the
flag to the known keys.
"""

from __future__ import annotations

import enum
from typing import TypeVar

_E = TypeVar("_E", bound=enum.Enum)


class ForceOverwrite(enum.IntEnum):
    """How existing files are treated when a command writes into a directory."""

    no = 0
    prompt = 1
    yes = 2


class PiletLanguage(enum.IntEnum):
    """Programming language of scaffolded sources."""

    ts = 0
    js = 1


class TemplateType(str, enum.Enum):
    """Boilerplate template used when scaffolding."""

    default = "default"
    empty = "empty"


force_overwrite_keys: list[str] = [m.name for m in ForceOverwrite]
pilet_language_keys: list[str] = [m.name for m in PiletLanguage]
template_type_keys: list[str] = [m.name for m in TemplateType]


def _key_of(enum_cls: type[_E], value: object, fallback: _E) -> str:
    for member in enum_cls:
        if member is value or member.value == value:
            return member.name
    return fallback.name


def _value_of(enum_cls: type[_E], key: str | None, fallback: _E) -> _E:
    if key is not None and key in enum_cls.__members__:
        return enum_cls.__members__[key]
    return fallback


def key_of_force_overwrite(value: object) -> str:
    """Return the CLI key for a :class:`ForceOverwrite` value (``"no"`` if unknown)."""
    return _key_of(ForceOverwrite, value, ForceOverwrite.no)


def value_of_force_overwrite(key: str | None) -> ForceOverwrite:
    """Return the :class:`ForceOverwrite` for a CLI key (``no`` if unknown)."""
    return _value_of(ForceOverwrite, key, ForceOverwrite.no)


def key_of_pilet_language(value: object) -> str:
    """Return the CLI key for a :class:`PiletLanguage` value (``"ts"`` if unknown)."""
    return _key_of(PiletLanguage, value, PiletLanguage.ts)


def value_of_pilet_language(key: str | None) -> PiletLanguage:
    """Return the :class:`PiletLanguage` for a CLI key (``ts`` if unknown)."""
    return _value_of(PiletLanguage, key, PiletLanguage.ts)


def value_of_template_type(key: str | None) -> TemplateType:
    """Return the :class:`TemplateType` for a CLI key (``default`` if unknown)."""
    return _value_of(TemplateType, key, TemplateType.default)
