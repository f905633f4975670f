"""Shared test fixtures for piralcli.

Provides reusable fixtures for isolated config environments, output state,
fake backends, on-disk pilet and Piral instance projects, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from piralcli.backends import (
    BUNDLE,
    PUBLISH,
    SCAFFOLD,
    SERVE,
    Backend,
    BackendManager,
    set_backend_manager,
)
from piralcli.models import GlobalConfig
from piralcli.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_backends_between_tests() -> None:
    """Drop the process-wide backend manager after every test."""
    yield
    set_backend_manager(None)


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Undo log levels and handlers installed by --log-level and the CLI."""
    yield
    logger = logging.getLogger("piralcli")
    logger.setLevel(logging.NOTSET)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all PIRAL_CLI_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("piralcli.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["PIRAL_CLI_FEED_URL", "PIRAL_CLI_API_KEY_SOURCE"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class RecordingBackend(Backend):
    """Backend that records every capability call instead of doing work."""

    def __init__(self, capabilities: frozenset[str] = frozenset({SERVE, BUNDLE, SCAFFOLD, PUBLISH})):
        self._capabilities = capabilities
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.cleaned_up = False

    @property
    def name(self) -> str:
        return "recording"

    @property
    def capabilities(self) -> frozenset[str]:
        return self._capabilities

    def serve(self, target, base_dir, options):
        self.calls.append((SERVE, (target, base_dir, options)))
        return "served"

    def bundle(self, target, base_dir, options):
        self.calls.append((BUNDLE, (target, base_dir, options)))
        return "bundled"

    def scaffold(self, target, base_dir, options):
        self.calls.append((SCAFFOLD, (target, base_dir, options)))
        return "scaffolded"

    def publish(self, archive, url, api_key):
        self.calls.append((PUBLISH, (archive, url, api_key)))
        return "published"

    def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.fixture
def backend() -> RecordingBackend:
    """Install a manager holding a single :class:`RecordingBackend`."""
    recording = RecordingBackend()
    manager = BackendManager()
    manager.load_backend("recording", recording, GlobalConfig())
    set_backend_manager(manager)
    return recording


# ---------------------------------------------------------------------------
# Project fixtures
# ---------------------------------------------------------------------------


def write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def pilet_project(tmp_path: Path) -> Path:
    """A minimal pilet: package.json, src/index.tsx, README, node_modules."""
    root = tmp_path / "my-pilet"
    write_json(
        root / "package.json",
        {
            "name": "@demo/my-pilet",
            "version": "1.2.3",
            "main": "dist/index.js",
            "piral": {"name": "my-app"},
            "devDependencies": {"my-app": "1.0.0"},
        },
    )
    (root / "src").mkdir()
    (root / "src" / "index.tsx").write_text("export function setup() {}\n")
    (root / "README.md").write_text("# my-pilet\n")
    (root / "node_modules" / "react").mkdir(parents=True)
    (root / "node_modules" / "react" / "index.js").write_text("module.exports = {};\n")
    return root


@pytest.fixture
def piral_project(tmp_path: Path) -> Path:
    """A minimal Piral instance: package.json with app field and index.html."""
    root = tmp_path / "my-app"
    write_json(
        root / "package.json",
        {
            "name": "my-app",
            "version": "1.0.0",
            "app": "./src/index.html",
            "pilets": {"files": []},
            "dependencies": {"piral": "^1.0.0"},
        },
    )
    (root / "src").mkdir()
    (root / "src" / "index.html").write_text("<div id='app'></div>\n")
    (root / "src" / "index.tsx").write_text("import 'piral';\n")
    return root


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
