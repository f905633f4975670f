"""User, project, and environment configuration for piralcli.

Layers, from lowest to highest precedence:

1. :class:`~piralcli.models.GlobalConfig` defaults.
2. The user file ``config.json`` in :func:`get_config_dir`.
3. ``piral-cli.json`` in the working directory, deep-merged over (2).
4. ``PIRAL_CLI_FEED_URL`` and ``PIRAL_CLI_API_KEY_SOURCE``.
5. The ``--json`` / ``--plain`` root flags.

:func:`resolve_config` produces the effective result. The feed API key is
never stored directly; ``feed.api_key_source`` names where to read it from
and :func:`resolve_credential` does the reading.

Every file piralcli rewrites (the user config and a project's
``package.json``) goes through :func:`atomic_write`.
"""

from __future__ import annotations

import contextlib
import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from piralcli.exceptions import ConfigError
from piralcli.models import GlobalConfig

_APP_NAME = "piralcli"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "piral-cli.json"

ENV_FEED_URL = "PIRAL_CLI_FEED_URL"
ENV_API_KEY_SOURCE = "PIRAL_CLI_API_KEY_SOURCE"

# env var -> (section, field) of GlobalConfig
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    ENV_FEED_URL: ("feed", "url"),
    ENV_API_KEY_SOURCE: ("feed", "api_key_source"),
}

# kind -> (XDG variable, default below $HOME, sub-directory on other platforms)
_APP_DIRS: dict[str, tuple[str, tuple[str, ...], Optional[str]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), None),
    "data": ("XDG_DATA_HOME", (".local", "share"), "logs"),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    """Linux and the BSDs follow the XDG base directory layout."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_segments, fallback_subdir = _APP_DIRS[kind]
    if _is_xdg_platform():
        root = os.environ.get(env_var) or Path.home().joinpath(*home_segments)
        path = Path(root) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback_subdir:
            path = path / fallback_subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``, created on demand.

    ``$XDG_CONFIG_HOME/piralcli`` on Linux/BSD, ``~/.piralcli`` elsewhere.
    """
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for crash logs, created on demand.

    ``$XDG_DATA_HOME/piralcli`` on Linux/BSD, ``~/.piralcli/logs`` elsewhere.
    """
    return _app_dir("data")


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* without ever leaving a half-written file.

    The content goes to a temporary sibling first, which is fsynced and then
    renamed over *path*. If anything fails the sibling is removed and *path*
    keeps its previous content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise

    try:
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise


# --- Files ---


def _read_json(path: Path, label: str) -> Any:  # noqa: ANN401
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Read the user's ``config.json``; defaults when it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or does not match the schema.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    payload = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    atomic_write(get_config_dir() / _CONFIG_FILENAME, payload)


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./piral-cli.json`` as a raw dict, or ``None`` if absent.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence ---


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Merge every configuration layer into the effective settings.

    Args:
        cli_format: Output format chosen on the command line, if any.

    Raises:
        ConfigError: If the user or project file is invalid.
    """
    data = load_global_config().model_dump(mode="json")
    project = load_project_config()
    if project:
        data = _deep_merge(data, project)

    try:
        config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid project config: {exc}") from exc

    for env_var, (section, field) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            setattr(getattr(config, section), field, value)

    if cli_format is not None:
        config.output.format = cli_format
    return config


# --- Credentials ---


def resolve_credential(source: str) -> str:
    """Read a secret from the place *source* describes.

    ``env:NAME`` reads an environment variable, ``file:PATH`` reads a file
    (surrounding whitespace stripped), and ``prompt`` asks on the terminal.

    Raises:
        ConfigError: If the secret cannot be obtained.
    """
    kind, _, location = source.partition(":")

    if kind == "env" and location:
        value = os.environ.get(location)
        if value is None:
            raise ConfigError(f"Environment variable '{location}' is not set (source: {source})")
        return value

    if kind == "file" and location:
        path = Path(location).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path}")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for the API key: stdin is not a TTY")
        return getpass.getpass("Feed API key: ")

    raise ConfigError(f"Unknown credential source '{source}' (use env:, file:, or prompt)")
