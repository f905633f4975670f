"""Pluggable backends for bundling, serving, scaffolding, and publishing.

Public API:

* :class:`Backend` -- abstract base class for backends.
* :class:`BackendManager` -- entry-point discovery and capability lookup.
* :func:`get_backend_manager` / :func:`set_backend_manager` -- the
  process-wide manager.
"""

from piralcli.backends.base import BUNDLE, CAPABILITIES, PUBLISH, SCAFFOLD, SERVE, Backend
from piralcli.backends.manager import (
    ENTRY_POINT_GROUP,
    BackendManager,
    get_backend_manager,
    set_backend_manager,
    shutdown_backends,
)

__all__ = [
    "BUNDLE",
    "CAPABILITIES",
    "ENTRY_POINT_GROUP",
    "PUBLISH",
    "SCAFFOLD",
    "SERVE",
    "Backend",
    "BackendManager",
    "get_backend_manager",
    "set_backend_manager",
    "shutdown_backends",
]
