"""Abstract base class for piralcli backends.

Bundling, dev-serving, scaffolding, and publishing to a pilet feed are not
implemented by piralcli itself. They are provided by backends: classes
registered as entry points in the ``piralcli.backends`` group and discovered
at runtime by :class:`~piralcli.backends.manager.BackendManager`.

A backend declares which capabilities it provides through
:attr:`Backend.capabilities` and overrides the matching methods. Methods of
undeclared capabilities raise :class:`~piralcli.exceptions.BackendError`.

Example:
    Minimal bundler backend::

        class EsbuildBackend(Backend):
            @property
            def name(self) -> str:
                return "esbuild"

            @property
            def capabilities(self) -> frozenset[str]:
                return frozenset({SERVE, BUNDLE})

            def bundle(self, target, base_dir, options):
                ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from piralcli.exceptions import BackendError
from piralcli.models import GlobalConfig

SERVE = "serve"
BUNDLE = "bundle"
SCAFFOLD = "scaffold"
PUBLISH = "publish"

CAPABILITIES = (SERVE, BUNDLE, SCAFFOLD, PUBLISH)


class Backend(ABC):
    """Base class for all piralcli backends.

    The lifecycle is:

    1. Instantiation -- the manager calls the no-arg constructor.
    2. :meth:`on_init` -- called once with the resolved configuration.
    3. Capability methods -- called zero or more times.
    4. :meth:`cleanup` -- called once during shutdown.

    ``target`` arguments are ``"piral"`` or ``"pilet"``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique backend name used for discovery and logging."""
        ...

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def capabilities(self) -> frozenset[str]:
        """Return the capabilities this backend implements. Defaults to none."""
        return frozenset()

    def on_init(self, config: GlobalConfig) -> None:
        """Called once when the backend is loaded by the manager."""

    def serve(self, target: str, base_dir: Path, options: Any) -> Any:  # noqa: ANN401
        """Start a development server for a Piral instance or pilet."""
        raise BackendError(f"Backend '{self.name}' cannot serve")

    def bundle(self, target: str, base_dir: Path, options: Any) -> Any:  # noqa: ANN401
        """Produce a production bundle for a Piral instance or pilet."""
        raise BackendError(f"Backend '{self.name}' cannot bundle")

    def scaffold(self, target: str, base_dir: Path, options: Any) -> Any:  # noqa: ANN401
        """Write the files of a new Piral instance or pilet."""
        raise BackendError(f"Backend '{self.name}' cannot scaffold")

    def publish(
        self, archive: Path, url: str, api_key: str | None
    ) -> Any:  # noqa: ANN401
        """Upload a packed pilet tarball to a pilet feed."""
        raise BackendError(f"Backend '{self.name}' cannot publish")

    def cleanup(self) -> None:
        """Called once during shutdown to release backend resources."""
