"""Build a Typer application from a view of command descriptors.

This is where the registry meets the argument parser. For every command in the
view:

1. Its flag schema populates an :class:`~piralcli.generator.argv.ArgumentBuilder`.
2. Each recorded :class:`~piralcli.models.FlagSpec` is mapped to a
   :func:`typer.Argument` or :func:`typer.Option` with the matching Python type.
3. A function whose signature mirrors those parameters is generated, so that
   Typer (which reads ``inspect.signature``) can parse and validate the
   command line.
4. The generated function collects the parsed values into an options record
   keyed by camel-cased flag name and hands it to
   :func:`~piralcli.registry.router.invoke_command`.

The canonical name is registered as a visible command and every routable
alias as a hidden one. Which tokens are routable is decided by
:class:`~piralcli.registry.router.CommandRouter` (first match wins).
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, Optional, Sequence

import typer

from piralcli.generator.argv import ArgumentBuilder, camel_case, python_name
from piralcli.models import FlagKind, FlagSpec
from piralcli.registry.base import ToolCommand
from piralcli.registry.router import CommandRouter, invoke_command

# ---------------------------------------------------------------------------
# Flag kind -> Python type
# ---------------------------------------------------------------------------

# Numeric flags in the registry are ports and log levels, so NUMBER is int.
_KIND_TO_TYPE: dict[FlagKind, type] = {
    FlagKind.STRING: str,
    FlagKind.NUMBER: int,
    FlagKind.BOOLEAN: bool,
}


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build_command_app(
    commands: Sequence[ToolCommand],
    *,
    name: str,
    help: str,
    reserved: Iterable[str] = (),
) -> typer.Typer:
    """Build a :class:`typer.Typer` app exposing every command in *commands*.

    Args:
        commands: A command view (``commands.all``, ``commands.piral``, or
            ``commands.pilet``).
        name: Program name shown in usage lines.
        help: Top-level help text.
        reserved: Tokens owned by built-in sub-commands; registry commands
            never shadow them.

    Returns:
        The Typer app. Callers may still add a callback or extra sub-commands.
    """
    app = typer.Typer(
        name=name,
        help=help,
        no_args_is_help=True,
        rich_markup_mode="rich",
    )
    register_commands(app, CommandRouter(commands), reserved=reserved)
    return app


def register_commands(
    app: typer.Typer,
    router: CommandRouter,
    reserved: Iterable[str] = (),
) -> list[str]:
    """Attach every routable token of *router* to *app*.

    Returns:
        The registered tokens, canonical names and aliases alike, in
        registration order.
    """
    blocked = set(reserved)
    table = router.table
    registered: list[str] = []

    for command in router.commands:
        tokens = [
            t for t in command.tokens
            if t and t not in blocked and table.get(t) is command
        ]
        if not tokens:
            continue

        fn = build_command_function(command)
        help_text = _build_help_text(command)
        primary, *aliases = tokens
        app.command(name=primary, help=help_text)(fn)
        for alias in aliases:
            app.command(name=alias, help=help_text, hidden=True)(fn)
        registered.extend(tokens)

    return registered


def collect_flags(command: ToolCommand) -> list[FlagSpec]:
    """Return the flag specs declared by *command*'s schema."""
    builder = ArgumentBuilder()
    command.flags.populate(builder)
    return builder.specs


# ---------------------------------------------------------------------------
# Flag -> Typer parameter
# ---------------------------------------------------------------------------


def map_flag_to_typer(spec: FlagSpec) -> dict[str, Any]:
    """Describe how *spec* becomes a parameter of the generated function.

    Returns:
        A dict with ``name`` (Python identifier), ``key`` (options-record
        key), ``type`` (annotation), and ``default`` (a Typer
        ``Argument``/``Option`` object carrying the real default).
    """
    annotation: Any
    default = spec.default

    if spec.kind == FlagKind.CHOICES:
        annotation = _choice_enum(spec)
        default = annotation(default) if default in spec.choices else None
    else:
        annotation = _KIND_TO_TYPE[spec.kind]
        if spec.kind == FlagKind.BOOLEAN and default is None:
            default = False

    if default is None and not spec.required:
        annotation = Optional[annotation]

    if spec.positional:
        param = typer.Argument(default, help=spec.description, show_default=True)
    else:
        decl = f"--{spec.name}"
        if spec.kind == FlagKind.BOOLEAN:
            decl = f"--{spec.name}/--no-{spec.name}"
        param = typer.Option(
            ... if spec.required else default,
            decl,
            help=spec.description,
        )

    return {
        "name": python_name(spec.name),
        "key": camel_case(spec.name),
        "type": annotation,
        "default": param,
    }


def _choice_enum(spec: FlagSpec) -> type[enum.Enum]:
    class_name = "".join(p.capitalize() for p in python_name(spec.name).split("_"))
    return enum.Enum(  # type: ignore[return-value]
        f"{class_name}Choice", [(c, c) for c in spec.choices], type=str
    )


# ---------------------------------------------------------------------------
# Dynamic command function builder
# ---------------------------------------------------------------------------


def build_command_function(command: ToolCommand) -> Callable[..., Any]:
    """Generate a Typer-compatible function for *command*.

    The function source is built as a string, compiled, and executed into a
    namespace so that :mod:`inspect` (which Typer relies on) can read its
    signature. Defaults and annotations are injected through sentinel names
    in that namespace.
    """
    descriptors = [map_flag_to_typer(spec) for spec in collect_flags(command)]
    func_name = f"_cmd_{python_name(command.name or 'default')}"

    namespace: dict[str, Any] = {}
    sig_parts: list[str] = []
    body_lines = ["    args = {}"]

    for idx, desc in enumerate(descriptors):
        namespace[f"_ann_{idx}"] = desc["type"]
        namespace[f"_default_{idx}"] = desc["default"]
        sig_parts.append(f"{desc['name']}: _ann_{idx} = _default_{idx}")
        body_lines.append(f"    args[{desc['key']!r}] = {desc['name']}")

    body_lines.append("    _dispatch(args)")

    source = f"def {func_name}({', '.join(sig_parts)}):\n" + "\n".join(body_lines) + "\n"
    namespace["_dispatch"] = _make_dispatch(command)

    code = compile(source, f"<piralcli:{command.name}>", "exec")
    exec(code, namespace)  # noqa: S102 -- controlled code generation
    fn = namespace[func_name]

    fn.__doc__ = command.description
    return fn


def _make_dispatch(command: ToolCommand) -> Callable[[dict[str, Any]], Any]:
    """Return the function that unwraps choice enums and runs *command*."""

    def _dispatch(args: dict[str, Any]) -> Any:  # noqa: ANN401
        record = {
            key: value.value if isinstance(value, enum.Enum) else value
            for key, value in args.items()
        }
        return invoke_command(command, record)

    return _dispatch


# ---------------------------------------------------------------------------
# Help helpers
# ---------------------------------------------------------------------------


def _build_help_text(command: ToolCommand) -> str:
    """Compose the help string: description plus the alias list."""
    text = command.description or command.name
    if command.aliases:
        text += f"\n\nAliases: {', '.join(a for a in command.aliases if a)}"
    return text
