"""Tests for piralcli.backends -- the Backend ABC and BackendManager."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from piralcli.backends import (
    BUNDLE,
    ENTRY_POINT_GROUP,
    PUBLISH,
    SERVE,
    Backend,
    BackendManager,
    get_backend_manager,
    set_backend_manager,
    shutdown_backends,
)
from piralcli.exceptions import BackendError, BackendUnavailableError
from piralcli.models import BackendsConfig, GlobalConfig


class _Bundler(Backend):
    def __init__(self) -> None:
        self.config = None

    @property
    def name(self) -> str:
        return "bundler"

    @property
    def version(self) -> str:
        return "2.0.0"

    @property
    def capabilities(self) -> frozenset[str]:
        return frozenset({SERVE, BUNDLE})

    def on_init(self, config: GlobalConfig) -> None:
        self.config = config


class _Publisher(Backend):
    @property
    def name(self) -> str:
        return "publisher"

    @property
    def capabilities(self) -> frozenset[str]:
        return frozenset({PUBLISH})


def _entry_point(name: str, cls: type) -> MagicMock:
    ep = MagicMock()
    ep.name = name
    ep.load.return_value = cls
    return ep


def _patched_entry_points(*eps: MagicMock):
    selection = MagicMock()
    selection.select.return_value = list(eps)
    return patch("importlib.metadata.entry_points", return_value=selection)


class TestBackendDefaults:
    def test_undeclared_capability_raises(self) -> None:
        with pytest.raises(BackendError, match="cannot publish"):
            _Bundler().publish(Path("x.tgz"), "https://feed", None)

    def test_default_capabilities_empty(self) -> None:
        class _Bare(Backend):
            @property
            def name(self) -> str:
                return "bare"

        assert _Bare().capabilities == frozenset()
        assert _Bare().version == "0.1.0"


class TestDiscover:
    def test_loads_all_entry_points(self) -> None:
        manager = BackendManager()
        with _patched_entry_points(
            _entry_point("bundler", _Bundler), _entry_point("publisher", _Publisher)
        ) as entry_points:
            loaded = manager.discover(GlobalConfig())
        entry_points.return_value.select.assert_called_once_with(group=ENTRY_POINT_GROUP)
        assert loaded == ["bundler", "publisher"]
        assert manager.for_capability(BUNDLE).name == "bundler"
        assert manager.for_capability(PUBLISH).name == "publisher"

    def test_on_init_receives_config(self) -> None:
        manager = BackendManager()
        config = GlobalConfig()
        with _patched_entry_points(_entry_point("bundler", _Bundler)):
            manager.discover(config)
        assert manager.get_backend("bundler").config is config

    def test_disabled_skipped(self) -> None:
        manager = BackendManager()
        config = GlobalConfig(backends=BackendsConfig(disabled=["bundler"]))
        with _patched_entry_points(
            _entry_point("bundler", _Bundler), _entry_point("publisher", _Publisher)
        ):
            assert manager.discover(config) == ["publisher"]

    def test_enabled_list_is_exclusive(self) -> None:
        manager = BackendManager()
        config = GlobalConfig(backends=BackendsConfig(enabled=["bundler"]))
        with _patched_entry_points(
            _entry_point("bundler", _Bundler), _entry_point("publisher", _Publisher)
        ):
            assert manager.discover(config) == ["bundler"]

    def test_broken_backend_logged_and_skipped(self, caplog) -> None:
        broken = MagicMock()
        broken.name = "broken"
        broken.load.side_effect = ImportError("missing module")
        manager = BackendManager()
        with _patched_entry_points(broken, _entry_point("publisher", _Publisher)):
            assert manager.discover(GlobalConfig()) == ["publisher"]
        assert "Failed to load backend 'broken'" in caplog.text


class TestManager:
    def test_duplicate_name_rejected(self) -> None:
        manager = BackendManager()
        manager.load_backend("bundler", _Bundler(), GlobalConfig())
        with pytest.raises(BackendError, match="already loaded"):
            manager.load_backend("bundler", _Bundler(), GlobalConfig())

    def test_unknown_backend(self) -> None:
        with pytest.raises(BackendError, match="not loaded"):
            BackendManager().get_backend("nope")

    def test_capability_unavailable(self) -> None:
        with pytest.raises(BackendUnavailableError) as exc_info:
            BackendManager().for_capability(PUBLISH)
        assert exc_info.value.capability == PUBLISH

    def test_list_backends(self) -> None:
        manager = BackendManager()
        manager.load_backend("bundler", _Bundler(), GlobalConfig())
        assert manager.list_backends() == [
            {"name": "bundler", "version": "2.0.0", "capabilities": "bundle, serve"}
        ]

    def test_cleanup_survives_failures(self) -> None:
        failing = _Publisher()
        failing.cleanup = MagicMock(side_effect=RuntimeError("boom"))
        manager = BackendManager()
        manager.load_backend("publisher", failing, GlobalConfig())
        manager.cleanup()
        failing.cleanup.assert_called_once()
        assert manager.list_backends() == []


class TestProcessManager:
    def test_lazy_discovery(self, isolated_config: Path) -> None:
        with _patched_entry_points(_entry_point("bundler", _Bundler)):
            manager = get_backend_manager()
        assert get_backend_manager() is manager
        assert manager.for_capability(SERVE).name == "bundler"

    def test_shutdown_resets(self) -> None:
        manager = BackendManager()
        backend = _Publisher()
        backend.cleanup = MagicMock()
        manager.load_backend("publisher", backend, GlobalConfig())
        set_backend_manager(manager)
        shutdown_backends()
        backend.cleanup.assert_called_once()

    def test_shutdown_without_manager_is_noop(self) -> None:
        set_backend_manager(None)
        shutdown_backends()
