"""Operations on a pilet: debug, build, pack, publish, new, upgrade, validate."""

from __future__ import annotations

import glob
import logging
import tarfile
from pathlib import Path
from typing import Any, Iterable, Optional

from piralcli.apps.common import (
    PACKAGE_JSON,
    apply_log_level,
    dependency_section,
    find_entry,
    find_package_json,
    read_package_json,
    remove_path,
    require_entry,
    resolve_path,
    run_backend,
    write_package_json,
)
from piralcli.backends import BUNDLE, PUBLISH, SCAFFOLD, SERVE
from piralcli.config import resolve_config, resolve_credential
from piralcli.exceptions import (
    InvalidUsageError,
    NotFoundError,
    PiralCliError,
    ValidationError,
)
from piralcli.models import (
    BuildPiletOptions,
    DebugPiletOptions,
    NewPiletOptions,
    PackPiletOptions,
    PublishPiletOptions,
    UpgradePiletOptions,
    ValidatePiletOptions,
)
from piralcli.output import debug, error, info, progress, success, suggest, warning

logger = logging.getLogger(__name__)

debug_pilet_defaults = DebugPiletOptions()
build_pilet_defaults = BuildPiletOptions()
pack_pilet_defaults = PackPiletOptions()
publish_pilet_defaults = PublishPiletOptions()
new_pilet_defaults = NewPiletOptions()
upgrade_pilet_defaults = UpgradePiletOptions()
validate_pilet_defaults = ValidatePiletOptions()

# Always shipped by npm regardless of the "files" field.
_ALWAYS_PACKED = ("README*", "LICENSE*", "LICENCE*", "CHANGELOG*")
_NEVER_PACKED = {"node_modules", ".git"}


def _app_of(package: dict[str, Any]) -> Optional[str]:
    piral = package.get("piral")
    if isinstance(piral, dict):
        return piral.get("name")
    return None


def _resolve_app(source: Path, explicit: Optional[str]) -> str:
    if explicit:
        return explicit
    package_path = find_package_json(source)
    app = _app_of(read_package_json(package_path)) if package_path else None
    if not app:
        raise InvalidUsageError(
            "No Piral instance given. Pass --app or set 'piral.name' in package.json."
        )
    return app


# ---------------------------------------------------------------------------
# debug / build
# ---------------------------------------------------------------------------


def debug_pilet(
    base_dir: str | Path, options: DebugPiletOptions = debug_pilet_defaults
) -> Any:  # noqa: ANN401
    """Start the development server for the pilet at *base_dir*."""
    apply_log_level(options.log_level)
    root = Path(base_dir)
    entry = require_entry(resolve_path(root, options.entry))
    app = _resolve_app(entry, options.app)
    cache_dir = resolve_path(root, options.cache_dir)

    if options.fresh:
        remove_path(cache_dir)

    info(f"Debugging {entry} in {app} on port {options.port}.")
    return run_backend(
        SERVE,
        "pilet",
        root,
        options.model_copy(
            update={"entry": str(entry), "app": app, "cache_dir": str(cache_dir)}
        ),
    )


def build_pilet(
    base_dir: str | Path, options: BuildPiletOptions = build_pilet_defaults
) -> Any:  # noqa: ANN401
    """Create a production bundle of the pilet at *base_dir*."""
    apply_log_level(options.log_level)
    root = Path(base_dir)
    entry = require_entry(resolve_path(root, options.entry))
    target = resolve_path(root, options.target)
    cache_dir = resolve_path(root, options.cache_dir)

    if options.fresh:
        remove_path(target.parent if target.suffix else target)

    debug(f"Bundling {entry} into {target}")
    result = run_backend(
        BUNDLE,
        "pilet",
        root,
        options.model_copy(
            update={"entry": str(entry), "target": str(target), "cache_dir": str(cache_dir)}
        ),
    )
    success(f"Pilet built into {target}.")
    return result


# ---------------------------------------------------------------------------
# pack
# ---------------------------------------------------------------------------


def tarball_name(name: str, version: str) -> str:
    """npm tarball file name: ``@scope/name`` + ``1.0.0`` -> ``scope-name-1.0.0.tgz``."""
    return f"{name.lstrip('@').replace('/', '-')}-{version}.tgz"


def _walk(directory: Path) -> Iterable[Path]:
    for path in directory.rglob("*"):
        relative = path.relative_to(directory)
        if _NEVER_PACKED.intersection(relative.parts):
            continue
        if path.is_file() and path.suffix != ".tgz":
            yield path


def collect_package_files(package_dir: Path, files: Optional[list[str]]) -> list[Path]:
    """Return the files that go into the tarball, sorted by relative path.

    Without a ``files`` list every file is packed except ``node_modules``,
    ``.git``, and previous ``*.tgz`` archives. With one, only the listed
    files, directories, and glob patterns are packed, plus ``package.json``
    and the README/LICENSE/CHANGELOG files.
    """
    selected: set[Path] = {package_dir / PACKAGE_JSON}

    if files is None:
        selected.update(_walk(package_dir))
    else:
        for pattern in _ALWAYS_PACKED:
            selected.update(p for p in package_dir.glob(pattern) if p.is_file())
        for entry in files:
            path = package_dir / entry
            if path.is_dir():
                selected.update(_walk(path))
            elif path.is_file():
                selected.add(path)
            else:
                selected.update(p for p in package_dir.glob(entry) if p.is_file())

    return sorted(selected, key=lambda p: p.relative_to(package_dir).as_posix())


def pack_pilet(
    base_dir: str | Path, options: PackPiletOptions = pack_pilet_defaults
) -> Path:
    """Pack the pilet described by ``options.source`` into an npm tarball.

    Returns:
        Path of the written ``.tgz`` archive.

    Raises:
        NotFoundError: If the package.json does not exist.
        ValidationError: If it lacks a ``name`` or ``version``.
    """
    root = Path(base_dir)
    source = resolve_path(root, options.source)
    if source.is_dir():
        source = source / PACKAGE_JSON
    package = read_package_json(source)

    missing = [field for field in ("name", "version") if not package.get(field)]
    if missing:
        raise ValidationError(
            f"Cannot pack {source}: missing {', '.join(missing)}.", missing
        )

    target = resolve_path(root, options.target)
    archive = target if target.suffix == ".tgz" else target / tarball_name(
        package["name"], package["version"]
    )
    archive.parent.mkdir(parents=True, exist_ok=True)

    package_dir = source.parent
    files = collect_package_files(package_dir, package.get("files"))
    progress(f"Packing {package['name']}@{package['version']}...")
    with tarfile.open(archive, "w:gz") as tar:
        for path in files:
            arcname = f"package/{path.relative_to(package_dir).as_posix()}"
            tar.add(path, arcname=arcname, recursive=False)
            logger.debug("Packed %s", arcname)

    success(f"Packed {len(files)} file(s) into {archive}.")
    return archive


# ---------------------------------------------------------------------------
# publish
# ---------------------------------------------------------------------------


def find_tarball(root: Path, source: str) -> Path:
    """Resolve *source* (a path or glob) to one tarball, newest match first."""
    if glob.has_magic(source):
        matches = [p for p in root.glob(source) if p.is_file()]
        if not matches:
            raise NotFoundError(f"No tarball matching '{source}' in {root}")
        return max(matches, key=lambda p: p.stat().st_mtime)

    path = resolve_path(root, source)
    if not path.is_file():
        raise NotFoundError(f"Tarball not found: {path}")
    return path


def publish_pilet(
    base_dir: str | Path, options: PublishPiletOptions = publish_pilet_defaults
) -> Any:  # noqa: ANN401
    """Publish a packed pilet to a pilet feed.

    The feed URL and API key fall back to the ``feed`` section of the
    resolved configuration. With ``fresh`` the pilet is built and packed
    first, and the new tarball is published.

    Raises:
        InvalidUsageError: If no feed URL is configured.
        NotFoundError: If no tarball matches ``options.source``.
    """
    config = resolve_config()
    url = options.url or config.feed.url
    if not url:
        raise InvalidUsageError(
            "Missing feed URL. Pass --url or set feed.url in the configuration."
        )

    api_key = options.api_key
    if api_key is None and config.feed.api_key_source:
        api_key = resolve_credential(config.feed.api_key_source)

    root = Path(base_dir)
    if options.fresh:
        build_pilet(root)
        archive = pack_pilet(root)
    else:
        archive = find_tarball(root, options.source)

    info(f"Publishing {archive.name} to {url}.")
    result = run_backend(PUBLISH, archive, url, api_key)
    success(f"Published {archive.name}.")
    return result


# ---------------------------------------------------------------------------
# new / upgrade
# ---------------------------------------------------------------------------


def new_pilet(
    base_dir: str | Path, options: NewPiletOptions = new_pilet_defaults
) -> Any:  # noqa: ANN401
    """Scaffold a pilet for the Piral instance ``options.source``."""
    root = Path(base_dir)
    target = resolve_path(root, options.target)
    target.mkdir(parents=True, exist_ok=True)
    registry = options.registry or resolve_config().registry

    info(f"Scaffolding a pilet for {options.source} in {target}.")
    debug(f"Resolving {options.source} from {registry}")
    result = run_backend(
        SCAFFOLD,
        "pilet",
        root,
        options.model_copy(update={"target": str(target), "registry": registry}),
    )
    success("Pilet created.")
    if options.skip_install:
        suggest("Dependencies were not installed. Run 'npm install' first.")
    suggest("Start debugging: pilet debug")
    return result


def upgrade_pilet(
    base_dir: str | Path, options: UpgradePiletOptions = upgrade_pilet_defaults
) -> str:
    """Point the pilet at ``options.version`` of its Piral instance.

    Rewrites the app entry in ``devDependencies`` of the pilet's
    package.json. Installing the new version is left to the package manager.

    Returns:
        The name of the upgraded Piral instance.
    """
    root = Path(base_dir)
    package_path = resolve_path(root, options.target) / PACKAGE_JSON
    package = read_package_json(package_path)
    app = _app_of(package)
    if not app:
        raise InvalidUsageError(
            f"{package_path} does not reference a Piral instance ('piral.name' is missing)."
        )

    dev_dependencies = dict(dependency_section(package, "devDependencies"))
    previous = dev_dependencies.get(app)
    dev_dependencies[app] = options.version
    package["devDependencies"] = dev_dependencies
    write_package_json(package_path, package)

    debug(f"Force-overwrite policy: {options.force_overwrite.name}")
    success(f"Upgraded {app} from {previous or 'none'} to {options.version}.")
    suggest("Run 'npm install' to install the new version.")
    return app


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


def validate_pilet(
    base_dir: str | Path, options: ValidatePiletOptions = validate_pilet_defaults
) -> list[str]:
    """Check that the pilet at *base_dir* is well-formed.

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

    if find_entry(source) is None:
        errors.append(f"The entry module '{options.entry}' does not exist.")

    package_path = find_package_json(source if source.exists() else root)
    if package_path is None:
        errors.append("No package.json found for the pilet.")
    else:
        package = read_package_json(package_path)
        declared = _app_of(package)
        app = options.app or declared
        if not app:
            errors.append("No Piral instance referenced ('piral.name' is missing).")
        elif declared and options.app and declared != options.app:
            warnings.append(f"package.json references '{declared}', validating against '{options.app}'.")
        try:
            dev_dependencies = dependency_section(package, "devDependencies")
        except PiralCliError as exc:
            errors.append(str(exc))
        else:
            if app and app not in dev_dependencies:
                warnings.append(f"The Piral instance '{app}' is not a devDependency.")
        if not package.get("main"):
            errors.append("The package.json does not declare a 'main' field.")

    for message in warnings:
        warning(message)
    if errors:
        for message in errors:
            error(message)
        raise ValidationError(
            f"Validation failed with {len(errors)} error(s).", errors
        )

    success("Pilet is valid.")
    return warnings
