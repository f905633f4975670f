"""Backend manager -- discovery, loading, and capability lookup.

:class:`BackendManager` discovers backends registered as Python entry points,
applies enable/disable filtering from the global configuration, and answers
"which backend bundles?" style questions for the apps layer.

Third-party packages register backends in their ``pyproject.toml``::

    [project.entry-points."piralcli.backends"]
    esbuild = "piralcli_esbuild:EsbuildBackend"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from piralcli.backends.base import Backend
from piralcli.exceptions import BackendError, BackendUnavailableError
from piralcli.models import GlobalConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "piralcli.backends"
"""The entry-point group name used for backend discovery."""


class BackendManager:
    """Discovers, loads, and manages the lifecycle of piralcli backends.

    When ``backends.enabled`` is non-empty only those backends are loaded;
    otherwise every discovered backend not listed in ``backends.disabled`` is
    loaded. Capability lookups return the first loaded backend, in load
    order, that declares the capability.
    """

    def __init__(self) -> None:
        self._backends: dict[str, Backend] = {}

    def discover(self, config: GlobalConfig) -> list[str]:
        """Discover and load available backends via Python entry points.

        Returns:
            The names of the backends that were loaded. Backends that fail to
            load are logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        enabled_set = set(config.backends.enabled)
        disabled_set = set(config.backends.disabled)

        for ep in importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            name = ep.name

            if enabled_set and name not in enabled_set:
                logger.debug("Backend '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Backend '%s' is disabled, skipping", name)
                continue

            try:
                backend_cls = ep.load()
                backend: Backend = backend_cls()
                self.load_backend(name, backend, config)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load backend '%s': %s", name, exc)

        return loaded_names

    def load_backend(self, name: str, backend: Backend, config: GlobalConfig) -> None:
        """Initialise *backend* and register it under *name*.

        Raises:
            BackendError: If a backend with the same *name* is already loaded.
        """
        if name in self._backends:
            raise BackendError(f"Backend '{name}' is already loaded")

        backend.on_init(config)
        self._backends[name] = backend
        logger.info("Loaded backend '%s' v%s", name, backend.version)

    def get_backend(self, name: str) -> Backend:
        try:
            return self._backends[name]
        except KeyError:
            raise BackendError(f"Backend '{name}' is not loaded") from None

    def for_capability(self, capability: str) -> Backend:
        """Return the first loaded backend providing *capability*.

        Raises:
            BackendUnavailableError: If no loaded backend provides it.
        """
        for backend in self._backends.values():
            if capability in backend.capabilities:
                return backend
        raise BackendUnavailableError(capability)

    def list_backends(self) -> list[dict[str, str]]:
        return [
            {
                "name": backend.name,
                "version": backend.version,
                "capabilities": ", ".join(sorted(backend.capabilities)),
            }
            for backend in self._backends.values()
        ]

    def cleanup(self) -> None:
        """Clean up all loaded backends and reset internal state.

        Exceptions from individual backends are logged and swallowed so that
        one backend's failure does not prevent others from cleaning up.
        """
        for name, backend in self._backends.items():
            try:
                backend.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up backend '%s': %s", name, exc)
        self._backends.clear()


# ---------------------------------------------------------------------------
# Process-wide manager (created lazily on first use)
# ---------------------------------------------------------------------------

_manager: Optional[BackendManager] = None


def get_backend_manager() -> BackendManager:
    """Return the process-wide manager, discovering backends on first use."""
    global _manager
    if _manager is None:
        from piralcli.config import resolve_config

        _manager = BackendManager()
        _manager.discover(resolve_config())
    return _manager


def set_backend_manager(manager: Optional[BackendManager]) -> None:
    """Install *manager* as the process-wide manager (``None`` resets it)."""
    global _manager
    _manager = manager


def shutdown_backends() -> None:
    """Clean up the process-wide manager if one was created."""
    global _manager
    if _manager is not None:
        _manager.cleanup()
        _manager = None
