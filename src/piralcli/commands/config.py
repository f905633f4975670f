"""``pb config`` -- inspect and edit the user configuration file.

Keys use dot notation matching :class:`~piralcli.models.GlobalConfig`
(``feed.url``, ``backends.disabled``, ``output.format``, ``registry``).
"""

from __future__ import annotations

from typing import Any

import pydantic
import typer

from piralcli.exit_codes import EXIT_INVALID_USAGE
from piralcli.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


def _fail(message: str) -> typer.Exit:
    error(message)
    return typer.Exit(code=EXIT_INVALID_USAGE)


def _locate(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Return the dict holding the leaf *key* and the leaf's name."""
    *sections, leaf = key.split(".")
    parent = data
    for section in sections:
        child = parent.get(section)
        if not isinstance(child, dict):
            raise _fail(f"Invalid config key: {key}")
        parent = child
    if leaf not in parent or isinstance(parent[leaf], dict):
        raise _fail(f"Unknown config key: {key}")
    return parent, leaf


def _coerce(key: str, current: Any, raw: str) -> Any:  # noqa: ANN401
    """Convert *raw* to the type of the value it replaces."""
    if isinstance(current, bool):
        return raw.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            raise _fail(f"Expected integer for {key}, got: {raw}") from None
    if isinstance(current, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


@config_app.command("show")
def config_show(
    resolved: bool = typer.Option(
        False,
        "--resolved",
        help="Include piral-cli.json and PIRAL_CLI_* overrides.",
    ),
) -> None:
    """Print the configuration.

    Example::

        pb config show
        pb --json config show --resolved
    """
    from piralcli.config import get_config_dir, load_global_config, resolve_config

    config = resolve_config() if resolved else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted key, e.g. 'feed.url'."),
    value: str = typer.Argument(help="New value; lists take comma-separated items."),
) -> None:
    """Change one configuration value.

    Example::

        pb config set feed.url https://feed.piral.cloud/api/v1/pilet/demo
        pb config set feed.api_key_source env:PILET_API_KEY
        pb config set backends.disabled webpack,parcel
    """
    from piralcli.config import load_global_config, save_global_config
    from piralcli.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")
    parent, leaf = _locate(data, key)
    parent[leaf] = _coerce(key, parent[leaf], value)

    try:
        updated = GlobalConfig.model_validate(data)
    except pydantic.ValidationError as exc:
        raise _fail(f"Validation error: {exc}") from None

    save_global_config(updated)
    success(f"Set {key} = {parent[leaf]}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Restore the default configuration.

    Example::

        pb config reset --yes
    """
    from piralcli.config import save_global_config
    from piralcli.models import GlobalConfig

    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
