"""Tests for validate_piral and validate_pilet."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from piralcli.apps import validate_pilet, validate_piral
from piralcli.exceptions import ValidationError
from piralcli.models import ValidatePiletOptions, ValidatePiralOptions


def _update_package(root: Path, **changes) -> None:
    path = root / "package.json"
    data = json.loads(path.read_text())
    for key, value in changes.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
    path.write_text(json.dumps(data))


def _set_raw(root: Path, key: str, value) -> None:
    path = root / "package.json"
    data = json.loads(path.read_text())
    data[key] = value
    path.write_text(json.dumps(data))


class TestValidatePiral:
    def test_valid_instance(self, piral_project: Path, quiet_output) -> None:
        assert validate_piral(piral_project) == []

    def test_missing_app_field(self, piral_project: Path, quiet_output) -> None:
        _update_package(piral_project, app=None)
        with pytest.raises(ValidationError) as exc_info:
            validate_piral(piral_project)
        assert any("'app'" in e for e in exc_info.value.errors)

    def test_missing_app_file(self, piral_project: Path, quiet_output) -> None:
        (piral_project / "src" / "index.html").unlink()
        with pytest.raises(ValidationError) as exc_info:
            validate_piral(piral_project)
        assert exc_info.value.errors == ["The app file './src/index.html' does not exist."]

    def test_missing_piral_dependency(self, piral_project: Path, quiet_output) -> None:
        _update_package(piral_project, dependencies={"react": "^18"})
        with pytest.raises(ValidationError) as exc_info:
            validate_piral(piral_project)
        assert exc_info.value.exit_code == 5

    def test_piral_core_dev_dependency_accepted(self, piral_project: Path, quiet_output) -> None:
        _update_package(piral_project, dependencies=None, devDependencies={"piral-core": "1.0.0"})
        assert validate_piral(piral_project) == []

    def test_null_dependency_sections(self, piral_project: Path, quiet_output) -> None:
        _set_raw(piral_project, "devDependencies", None)
        _set_raw(piral_project, "dependencies", None)
        with pytest.raises(ValidationError) as exc_info:
            validate_piral(piral_project)
        assert exc_info.value.errors == ["Neither 'piral' nor 'piral-core' is a dependency."]

    def test_null_dev_dependencies_with_piral(self, piral_project: Path, quiet_output) -> None:
        _set_raw(piral_project, "devDependencies", None)
        assert validate_piral(piral_project) == []

    def test_dependencies_not_an_object(self, piral_project: Path, quiet_output) -> None:
        _set_raw(piral_project, "dependencies", "piral")
        with pytest.raises(ValidationError) as exc_info:
            validate_piral(piral_project)
        assert exc_info.value.errors == [
            "The package.json 'dependencies' section is not an object."
        ]

    def test_missing_pilets_section_warns(self, piral_project: Path, quiet_output) -> None:
        _update_package(piral_project, pilets=None)
        assert len(validate_piral(piral_project)) == 1

    def test_source_option(self, piral_project: Path, quiet_output) -> None:
        warnings = validate_piral(piral_project.parent, ValidatePiralOptions(entry="my-app"))
        assert warnings == []

    def test_errors_reported_on_stderr(self, piral_project: Path, capsys) -> None:
        _update_package(piral_project, app=None)
        with pytest.raises(ValidationError):
            validate_piral(piral_project)
        assert "'app' field" in capsys.readouterr().err


class TestValidatePilet:
    def test_valid_pilet(self, pilet_project: Path, quiet_output) -> None:
        assert validate_pilet(pilet_project) == []

    def test_entry_without_extension_is_probed(self, pilet_project: Path, quiet_output) -> None:
        assert validate_pilet(pilet_project, ValidatePiletOptions(entry="src/index")) == []

    def test_missing_entry(self, pilet_project: Path, quiet_output) -> None:
        (pilet_project / "src" / "index.tsx").unlink()
        with pytest.raises(ValidationError) as exc_info:
            validate_pilet(pilet_project)
        assert exc_info.value.errors == ["The entry module './src/index' does not exist."]

    def test_missing_app_reference(self, pilet_project: Path, quiet_output) -> None:
        _update_package(pilet_project, piral=None)
        with pytest.raises(ValidationError):
            validate_pilet(pilet_project)

    def test_app_option_replaces_reference(self, pilet_project: Path, quiet_output) -> None:
        _update_package(pilet_project, piral=None)
        warnings = validate_pilet(pilet_project, ValidatePiletOptions(app="my-app"))
        assert warnings == []

    def test_mismatched_app_warns(self, pilet_project: Path, quiet_output) -> None:
        warnings = validate_pilet(pilet_project, ValidatePiletOptions(app="other-app"))
        assert any("other-app" in w for w in warnings)

    def test_missing_main_is_error(self, pilet_project: Path, quiet_output) -> None:
        _update_package(pilet_project, main=None)
        with pytest.raises(ValidationError) as exc_info:
            validate_pilet(pilet_project)
        assert exc_info.value.errors == ["The package.json does not declare a 'main' field."]

    def test_null_dev_dependencies(self, pilet_project: Path, quiet_output) -> None:
        _set_raw(pilet_project, "devDependencies", None)
        assert validate_pilet(pilet_project) == [
            "The Piral instance 'my-app' is not a devDependency."
        ]

    def test_dev_dependencies_not_an_object(self, pilet_project: Path, quiet_output) -> None:
        _set_raw(pilet_project, "devDependencies", ["my-app"])
        with pytest.raises(ValidationError) as exc_info:
            validate_pilet(pilet_project)
        assert exc_info.value.errors == [
            "The package.json 'devDependencies' section is not an object."
        ]
