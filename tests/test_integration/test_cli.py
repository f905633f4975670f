"""End-to-end tests for the pb, piral, and pilet console scripts.

Covers:
- Root flags (--version, --plain, --json) and the ``commands`` listing
- Scoped views expose stripped names and aliases only
- Registry commands run through the generated Typer commands
- pb config show/set/reset
- Exit codes, crash logs, and backend cleanup in the entry points
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from piralcli import __version__
from piralcli.app import create_app, main_pb, main_pilet, main_piral
from piralcli.config import get_data_dir, load_global_config
from piralcli.exceptions import ValidationError
from piralcli.registry import commands


def _run_main(monkeypatch: pytest.MonkeyPatch, entry, argv: list[str]) -> int:
    monkeypatch.setattr("piralcli.app._setup_signal_handlers", lambda: None)
    monkeypatch.setattr(sys, "argv", argv)
    with pytest.raises(SystemExit) as exc_info:
        entry()
    return exc_info.value.code


# ---------------------------------------------------------------------------
# Root flags and listing
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("pilet"), ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"pilet {__version__}"

    def test_piral_help_lists_scoped_names(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("piral"), ["--help"])
        assert result.exit_code == 0
        for name in ("debug", "build", "new", "validate", "commands"):
            assert name in result.output
        assert "debug-piral" not in result.output

    def test_commands_listing_plain(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("pilet"), ["--plain", "commands"])
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert lines[0] == "Command\tAliases\tDescription"
        assert "pack\tpackage\tCreates a pilet package that can be published." in lines
        assert len(lines) == len(commands.pilet) + 1

    def test_commands_listing_json(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("all"), ["--json", "commands"])
        assert result.exit_code == 0, result.output
        records = json.loads(result.stdout)
        assert [r["Command"] for r in records] == [c.name for c in commands.all]

    def test_unknown_view(self) -> None:
        from piralcli.exceptions import InvalidUsageError

        with pytest.raises(InvalidUsageError):
            create_app("portal")


# ---------------------------------------------------------------------------
# Registry commands
# ---------------------------------------------------------------------------


class TestPiletCommands:
    def test_pack(self, cli_runner, isolated_config: Path, pilet_project: Path) -> None:
        result = cli_runner.invoke(create_app("pilet"), ["pack", "--base", str(pilet_project)])
        assert result.exit_code == 0, result.output
        assert (pilet_project / "demo-my-pilet-1.2.3.tgz").is_file()

    def test_pack_alias(self, cli_runner, isolated_config: Path, pilet_project: Path) -> None:
        result = cli_runner.invoke(
            create_app("pilet"),
            ["package", "--base", str(pilet_project), "--target", "out"],
        )
        assert result.exit_code == 0, result.output
        assert (pilet_project / "out" / "demo-my-pilet-1.2.3.tgz").is_file()

    def test_upgrade(self, cli_runner, isolated_config: Path, pilet_project: Path) -> None:
        result = cli_runner.invoke(
            create_app("pilet"),
            ["upgrade", "--base", str(pilet_project), "--tag", "2.0.0"],
        )
        assert result.exit_code == 0, result.output
        package = json.loads((pilet_project / "package.json").read_text())
        assert package["devDependencies"]["my-app"] == "2.0.0"

    def test_publish(self, cli_runner, isolated_config: Path, pilet_project: Path, backend) -> None:
        (pilet_project / "demo-my-pilet-1.2.3.tgz").write_bytes(b"")
        result = cli_runner.invoke(
            create_app("pilet"),
            ["post", "--base", str(pilet_project), "--url", "https://feed.example.com", "--api-key", "k"],
        )
        assert result.exit_code == 0, result.output
        [(_, (archive, url, api_key))] = backend.calls
        assert archive.name == "demo-my-pilet-1.2.3.tgz"
        assert (url, api_key) == ("https://feed.example.com", "k")

    def test_debug_flags_reach_backend(
        self, cli_runner, isolated_config: Path, pilet_project: Path, backend
    ) -> None:
        result = cli_runner.invoke(
            create_app("pilet"),
            ["watch", "--base", str(pilet_project), "--port", "4000", "--no-hmr", "--app", "shell"],
        )
        assert result.exit_code == 0, result.output
        options = backend.calls[0][1][2]
        assert (options.port, options.hmr, options.app) == (4000, False, "shell")

    def test_new_language_choice(self, cli_runner, isolated_config: Path, backend) -> None:
        result = cli_runner.invoke(
            create_app("pilet"),
            ["scaffold", "my-app", "--base", str(isolated_config), "--language", "js"],
        )
        assert result.exit_code == 0, result.output
        options = backend.calls[0][1][2]
        assert options.source == "my-app"
        assert options.language.name == "js"

    def test_invalid_choice(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("pilet"), ["new", "--force-overwrite", "always"])
        assert result.exit_code == 2

    def test_validation_failure_propagates(
        self, cli_runner, isolated_config: Path, pilet_project: Path
    ) -> None:
        (pilet_project / "src" / "index.tsx").unlink()
        result = cli_runner.invoke(create_app("pilet"), ["lint", "--base", str(pilet_project)])
        assert isinstance(result.exception, ValidationError)


class TestScopedRouting:
    def test_piral_view_has_no_pilet_commands(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("piral"), ["pack"])
        assert result.exit_code == 2

    def test_bare_alias_in_full_view(self, cli_runner, isolated_config: Path, pilet_project: Path) -> None:
        result = cli_runner.invoke(create_app("all"), ["pack", "--base", str(pilet_project)])
        assert result.exit_code == 0, result.output

    def test_full_name_in_pb(self, cli_runner, isolated_config: Path, piral_project: Path) -> None:
        result = cli_runner.invoke(
            create_app("all"), ["check-piral", "--base", str(piral_project)]
        )
        assert result.exit_code == 0, result.output


# ---------------------------------------------------------------------------
# pb config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_set_and_show(self, cli_runner, isolated_config: Path) -> None:
        app = create_app("all")
        result = cli_runner.invoke(app, ["config", "set", "feed.url", "https://feed.example.com"])
        assert result.exit_code == 0, result.output
        assert load_global_config().feed.url == "https://feed.example.com"

        result = cli_runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["feed"]["url"] == "https://feed.example.com"

    def test_set_list(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            create_app("all"), ["config", "set", "backends.disabled", "webpack, parcel"]
        )
        assert result.exit_code == 0, result.output
        assert load_global_config().backends.disabled == ["webpack", "parcel"]

    def test_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("all"), ["config", "set", "feed.token", "x"])
        assert result.exit_code == 2

    def test_set_section_rejected(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("all"), ["config", "set", "feed", "x"])
        assert result.exit_code == 2

    def test_show_resolved(self, cli_runner, isolated_config: Path, monkeypatch) -> None:
        monkeypatch.setenv("PIRAL_CLI_FEED_URL", "https://env.example.com")
        result = cli_runner.invoke(create_app("all"), ["--json", "config", "show", "--resolved"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["feed"]["url"] == "https://env.example.com"

    def test_reset(self, cli_runner, isolated_config: Path) -> None:
        app = create_app("all")
        cli_runner.invoke(app, ["config", "set", "registry", "https://npm.example.com/"])
        result = cli_runner.invoke(app, ["config", "reset", "--yes"])
        assert result.exit_code == 0, result.output
        assert load_global_config().registry == "https://registry.npmjs.org/"

    def test_reset_cancelled(self, cli_runner, isolated_config: Path) -> None:
        app = create_app("all")
        cli_runner.invoke(app, ["config", "set", "registry", "https://npm.example.com/"])
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_global_config().registry == "https://npm.example.com/"

    def test_config_not_in_scoped_apps(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("pilet"), ["config", "show"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# pb backends
# ---------------------------------------------------------------------------


class TestBackendsCommand:
    def test_lists_loaded_backends(self, cli_runner, isolated_config: Path, backend) -> None:
        result = cli_runner.invoke(create_app("all"), ["--plain", "backends"])
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert lines[0] == "Name\tVersion\tCapabilities"
        assert lines[1].startswith("recording\t")
        assert lines[1].endswith("bundle, publish, scaffold, serve")

    def test_none_loaded(self, cli_runner, isolated_config: Path, monkeypatch) -> None:
        monkeypatch.setattr("importlib.metadata.entry_points", lambda: _NoEntryPoints())
        result = cli_runner.invoke(create_app("all"), ["--plain", "backends"])
        assert result.exit_code == 0, result.output
        assert result.stdout == ""
        assert "No backends are loaded." in result.output

    def test_only_in_pb(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(create_app("pilet"), ["backends"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


class TestEntryPoints:
    def test_success_exit_code(self, monkeypatch, isolated_config: Path, pilet_project: Path) -> None:
        code = _run_main(monkeypatch, main_pilet, ["pilet", "pack", "--base", str(pilet_project)])
        assert code in (0, None)

    def test_validation_exit_code(
        self, monkeypatch, isolated_config: Path, piral_project: Path, capsys
    ) -> None:
        (piral_project / "src" / "index.html").unlink()
        code = _run_main(monkeypatch, main_piral, ["piral", "validate", "--base", str(piral_project)])
        assert code == 5
        assert "Validation failed" in capsys.readouterr().err

    def test_missing_backend_exit_code(
        self, monkeypatch, isolated_config: Path, pilet_project: Path
    ) -> None:
        monkeypatch.setattr("importlib.metadata.entry_points", lambda: _NoEntryPoints())
        code = _run_main(monkeypatch, main_pilet, ["pilet", "build", "--base", str(pilet_project)])
        assert code == 10

    def test_publish_without_url_exit_code(
        self, monkeypatch, isolated_config: Path, pilet_project: Path
    ) -> None:
        code = _run_main(monkeypatch, main_pilet, ["pilet", "publish", "--base", str(pilet_project)])
        assert code == 2

    def test_crash_writes_log(self, monkeypatch, isolated_config: Path) -> None:
        def _crash(*args):
            raise RuntimeError("unexpected")

        monkeypatch.setattr("piralcli.apps.pack_pilet", _crash)
        code = _run_main(monkeypatch, main_pb, ["pb", "pack-pilet"])
        assert code == 1
        logs = list((get_data_dir() / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: unexpected" in logs[0].read_text()

    def test_keyboard_interrupt(self, monkeypatch, isolated_config: Path) -> None:
        def _interrupt(view):
            raise KeyboardInterrupt

        monkeypatch.setattr("piralcli.app.create_app", _interrupt)
        assert _run_main(monkeypatch, main_pb, ["pb", "pack"]) == 130

    def test_backends_cleaned_up(
        self, monkeypatch, isolated_config: Path, pilet_project: Path, backend
    ) -> None:
        _run_main(monkeypatch, main_pilet, ["pilet", "build", "--base", str(pilet_project)])
        assert backend.calls
        assert backend.cleaned_up is True


class _NoEntryPoints:
    def select(self, group: str) -> list:
        return []
