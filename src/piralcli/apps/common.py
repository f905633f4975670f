"""Helpers shared by the Piral instance and pilet operations."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from piralcli.backends import get_backend_manager
from piralcli.config import atomic_write
from piralcli.exceptions import BackendError, NotFoundError, PiralCliError
from piralcli.output import get_output

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"

# Probed in order when an entry is given without extension or as a directory.
ENTRY_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js", ".html")

_LOG_LEVELS = {
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
    5: logging.DEBUG,
}


def apply_log_level(level: int) -> None:
    """Apply a 1-5 ``--log-level`` to the output manager and the package logger."""
    get_output().apply_log_level(level)
    logging.getLogger("piralcli").setLevel(_LOG_LEVELS.get(level, logging.INFO))


def resolve_path(base_dir: str | Path, path: str) -> Path:
    """Resolve *path* against *base_dir* (absolute paths are kept)."""
    return (Path(base_dir) / path).resolve()


def find_entry(path: Path) -> Optional[Path]:
    """Locate an entry module.

    An existing file is returned as-is. For a directory, ``index`` plus each
    of :data:`ENTRY_EXTENSIONS` is probed inside it; for a missing file,
    each extension is appended to it. Returns ``None`` when nothing matches.
    """
    if path.is_file():
        return path
    stem = path / "index" if path.is_dir() else path
    for ext in ENTRY_EXTENSIONS:
        candidate = stem.with_name(stem.name + ext)
        if candidate.is_file():
            return candidate
    return None


def require_entry(path: Path) -> Path:
    entry = find_entry(path)
    if entry is None:
        raise NotFoundError(f"Entry module not found: {path}")
    return entry


def find_package_json(start: Path) -> Optional[Path]:
    """Walk up from *start* and return the nearest ``package.json``."""
    current = start if start.is_dir() else start.parent
    for directory in (current, *current.parents):
        candidate = directory / PACKAGE_JSON
        if candidate.is_file():
            return candidate
    return None


def read_package_json(path: Path) -> dict[str, Any]:
    """Load a ``package.json`` file.

    Raises:
        NotFoundError: If the file does not exist.
        PiralCliError: If it is not a JSON object.
    """
    if not path.is_file():
        raise NotFoundError(f"No package.json found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PiralCliError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PiralCliError(f"Invalid package.json at {path}: expected a JSON object")
    return data


def dependency_section(package: dict[str, Any], field: str) -> dict[str, Any]:
    """Return ``package[field]``; a missing or ``null`` section is empty.

    Raises:
        PiralCliError: If the section is present but not a JSON object.
    """
    section = package.get(field)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise PiralCliError(f"The package.json '{field}' section is not an object.")
    return section


def write_package_json(path: Path, data: dict[str, Any]) -> None:
    atomic_write(path, json.dumps(data, indent=2) + "\n")


def remove_path(path: Path) -> None:
    """Delete a file or directory tree if it exists."""
    if path.is_dir():
        logger.debug("Removing directory %s", path)
        shutil.rmtree(path)
    elif path.exists():
        logger.debug("Removing file %s", path)
        path.unlink()


def run_backend(capability: str, *args: Any) -> Any:  # noqa: ANN401
    """Call the *capability* method of the first backend that provides it.

    Errors from piralcli itself propagate unchanged; anything else a backend
    raises is wrapped in :class:`~piralcli.exceptions.BackendError`.
    """
    backend = get_backend_manager().for_capability(capability)
    logger.debug("Delegating '%s' to backend '%s'", capability, backend.name)
    try:
        return getattr(backend, capability)(*args)
    except PiralCliError:
        raise
    except Exception as exc:
        raise BackendError(
            f"Backend '{backend.name}' failed to {capability}: {exc}"
        ) from exc
