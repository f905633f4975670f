"""Operations on a Piral instance: debug, build, new, validate."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from piralcli.apps.common import (
    apply_log_level,
    dependency_section,
    find_entry,
    find_package_json,
    read_package_json,
    remove_path,
    require_entry,
    resolve_path,
    run_backend,
)
from piralcli.backends import BUNDLE, SCAFFOLD, SERVE
from piralcli.exceptions import PiralCliError, ValidationError
from piralcli.models import (
    BuildPiralOptions,
    DebugPiralOptions,
    NewPiralOptions,
    ValidatePiralOptions,
)
from piralcli.output import debug, error, info, success, suggest, warning

debug_piral_defaults = DebugPiralOptions()
build_piral_defaults = BuildPiralOptions()
new_piral_defaults = NewPiralOptions()
validate_piral_defaults = ValidatePiralOptions()

_PIRAL_PACKAGES = ("piral", "piral-core")


def _resolve_app_entry(root: Path, entry: str) -> Path:
    """Locate the entry of a Piral instance.

    A directory holding a package.json with an ``app`` field resolves to that
    file; anything else is probed like a module entry.
    """
    path = resolve_path(root, entry)
    package_path = path / "package.json"
    if path.is_dir() and package_path.is_file():
        app = read_package_json(package_path).get("app")
        if app:
            return require_entry(path / app)
    return require_entry(path)


def debug_piral(
    base_dir: str | Path, options: DebugPiralOptions = debug_piral_defaults
) -> Any:  # noqa: ANN401
    """Start the development server for the Piral instance at *base_dir*."""
    apply_log_level(options.log_level)
    root = Path(base_dir)
    entry = _resolve_app_entry(root, options.entry)
    cache_dir = resolve_path(root, options.cache_dir)

    if options.fresh:
        remove_path(cache_dir)

    info(f"Starting development server for {entry} on port {options.port}.")
    return run_backend(
        SERVE,
        "piral",
        root,
        options.model_copy(update={"entry": str(entry), "cache_dir": str(cache_dir)}),
    )


def build_piral(
    base_dir: str | Path, options: BuildPiralOptions = build_piral_defaults
) -> Any:  # noqa: ANN401
    """Create a production build of the Piral instance at *base_dir*."""
    apply_log_level(options.log_level)
    root = Path(base_dir)
    entry = _resolve_app_entry(root, options.entry)
    target = resolve_path(root, options.target)
    cache_dir = resolve_path(root, options.cache_dir)

    if options.fresh:
        remove_path(target)

    debug(f"Building {entry} ({options.type.value}) into {target}")
    result = run_backend(
        BUNDLE,
        "piral",
        root,
        options.model_copy(
            update={"entry": str(entry), "target": str(target), "cache_dir": str(cache_dir)}
        ),
    )
    success(f"Piral instance built into {target}.")
    return result


def new_piral(
    base_dir: str | Path, options: NewPiralOptions = new_piral_defaults
) -> Any:  # noqa: ANN401
    """Turn the project at ``base_dir/target`` into a Piral instance."""
    root = Path(base_dir)
    target = resolve_path(root, options.target)
    target.mkdir(parents=True, exist_ok=True)
    package = "piral-core" if options.only_core else "piral"

    info(f"Scaffolding a Piral instance using {package}@{options.version} in {target}.")
    result = run_backend(
        SCAFFOLD, "piral", root, options.model_copy(update={"target": str(target)})
    )
    success("Piral instance created.")
    if options.skip_install:
        suggest("Dependencies were not installed. Run 'npm install' first.")
    suggest("Start debugging: piral debug")
    return result


def validate_piral(
    base_dir: str | Path, options: ValidatePiralOptions = validate_piral_defaults
) -> list[str]:
    """Check that the project at *base_dir* is a well-formed Piral instance.

    Returns:
        The warnings that were reported.

    Raises:
        ValidationError: If any error was found.
    """
    apply_log_level(options.log_level)
    root = Path(base_dir)
    source = resolve_path(root, options.entry)
    errors: list[str] = []
    warnings: list[str] = []

    package_path = find_package_json(source)
    if package_path is None:
        errors.append(f"No package.json found for {source}.")
    else:
        package = read_package_json(package_path)
        app = package.get("app")
        if not app:
            errors.append("The package.json does not declare an 'app' field.")
        elif find_entry(package_path.parent / app) is None:
            errors.append(f"The app file '{app}' does not exist.")

        try:
            dependencies = {
                **dependency_section(package, "devDependencies"),
                **dependency_section(package, "dependencies"),
            }
        except PiralCliError as exc:
            errors.append(str(exc))
        else:
            if not any(name in dependencies for name in _PIRAL_PACKAGES):
                errors.append("Neither 'piral' nor 'piral-core' is a dependency.")
        if "pilets" not in package:
            warnings.append("No 'pilets' section found; scaffolded pilets use defaults.")

    for message in warnings:
        warning(message)
    if errors:
        for message in errors:
            error(message)
        raise ValidationError(
            f"Validation failed with {len(errors)} error(s).", errors
        )

    success("Piral instance is valid.")
    return warnings
