"""The command registry: every operation of the tool under its full name.

:data:`ALL_COMMANDS` is the authoritative, ordered tuple of descriptors. The
:class:`Commands` object exposes it unmodified as ``commands.all`` and derives
the scoped views ``commands.piral`` and ``commands.pilet`` on each access.

Each command's flags are declared through an
:class:`~piralcli.generator.argv.ArgumentBuilder`; defaults are read from the
``*_defaults`` records of :mod:`piralcli.apps`. Run handlers translate the
camel-cased options record into the operation's Pydantic options model and
call the operation.
"""

from __future__ import annotations

import os
from typing import Any, TypeVar

import pydantic

from piralcli import apps
from piralcli.exceptions import InvalidUsageError
from piralcli.helpers import (
    force_overwrite_keys,
    key_of_force_overwrite,
    key_of_pilet_language,
    pilet_language_keys,
    template_type_keys,
    value_of_force_overwrite,
    value_of_pilet_language,
    value_of_template_type,
)
from piralcli.models import (
    BuildPiletOptions,
    BuildPiralOptions,
    DebugPiletOptions,
    DebugPiralOptions,
    NewPiletOptions,
    NewPiralOptions,
    PackPiletOptions,
    PublishPiletOptions,
    UpgradePiletOptions,
    ValidatePiletOptions,
    ValidatePiralOptions,
)
from piralcli.registry.base import FlagsCallback, RunCallback, Scope, ToolCommand
from piralcli.registry.specialize import specialize_commands

_M = TypeVar("_M", bound=pydantic.BaseModel)


def _options(model: type[_M], **values: Any) -> _M:
    """Build an options model, reporting bad values as usage errors."""
    try:
        return model(**values)
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidUsageError(f"Invalid options: {problems}") from None


def _with_base(argv: Any) -> Any:  # noqa: ANN401
    return (
        argv.string("base")
        .default("base", os.getcwd())
        .describe("base", "Sets the base directory. By default the current directory is used.")
    )


# ---------------------------------------------------------------------------
# debug-piral
# ---------------------------------------------------------------------------


def _debug_piral_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.debug_piral_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source root directory or index.html file for collecting all the information.",
            default=d.entry,
        )
        .number("port")
        .describe("port", "Sets the port of the local development server.")
        .default("port", d.port)
        .string("cache-dir")
        .describe("cache-dir", "Sets the cache directory for bundling.")
        .default("cache-dir", d.cache_dir)
        .string("public-url")
        .describe("public-url", "Sets the public URL (path) of the bundle.")
        .default("public-url", d.public_url)
        .number("log-level")
        .describe("log-level", "Sets the log level to use (1-5).")
        .default("log-level", d.log_level)
        .boolean("fresh")
        .describe("fresh", "Resets the cache before starting the debug mode.")
        .default("fresh", d.fresh)
        .boolean("open")
        .describe("open", "Opens the Piral instance directly in the browser.")
        .default("open", d.open)
        .boolean("scope-hoist")
        .describe("scope-hoist", "Tries to reduce bundle size by introducing tree shaking.")
        .default("scope-hoist", d.scope_hoist)
        .boolean("hmr")
        .describe("hmr", "Activates Hot Module Reloading (HMR).")
        .default("hmr", d.hmr)
        .boolean("autoinstall")
        .describe("autoinstall", "Automatically installs missing Node.js packages.")
        .default("autoinstall", d.auto_install)
    )
    return _with_base(argv)


def _debug_piral_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.debug_piral(
        args["base"],
        _options(
            DebugPiralOptions,
            entry=args["source"],
            cache_dir=args["cacheDir"],
            port=args["port"],
            hmr=args["hmr"],
            auto_install=args["autoinstall"],
            scope_hoist=args["scopeHoist"],
            public_url=args["publicUrl"],
            log_level=args["logLevel"],
            fresh=args["fresh"],
            open=args["open"],
        ),
    )


# ---------------------------------------------------------------------------
# build-piral
# ---------------------------------------------------------------------------


def _build_piral_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.build_piral_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source root directory or index.html file for collecting all the information.",
            default=d.entry,
        )
        .string("target")
        .describe("target", "Sets the target directory or file of bundling.")
        .default("target", d.target)
        .string("cache-dir")
        .describe("cache-dir", "Sets the cache directory for bundling.")
        .default("cache-dir", d.cache_dir)
        .string("public-url")
        .describe("public-url", "Sets the public URL (path) of the bundle.")
        .default("public-url", d.public_url)
        .boolean("detailed-report")
        .describe("detailed-report", "Sets if a detailed report should be created.")
        .default("detailed-report", d.detailed_report)
        .number("log-level")
        .describe("log-level", "Sets the log level to use (1-5).")
        .default("log-level", d.log_level)
        .boolean("fresh")
        .describe("fresh", "Performs a fresh build by removing the target directory first.")
        .default("fresh", d.fresh)
        .boolean("minify")
        .describe("minify", "Performs minification or other post-bundle transformations.")
        .default("minify", d.minify)
        .boolean("source-maps")
        .describe("source-maps", "Create associated source maps for the bundles.")
        .default("source-maps", d.source_maps)
        .boolean("content-hash")
        .describe("content-hash", "Appends the hash to the side-bundle files.")
        .default("content-hash", d.content_hash)
        .boolean("scope-hoist")
        .describe("scope-hoist", "Tries to reduce bundle size by introducing tree shaking.")
        .default("scope-hoist", d.scope_hoist)
        .choices("type", ["all", "release", "develop"])
        .describe("type", 'Selects the target type of the build. "all" builds all target types.')
        .default("type", d.type.value)
    )
    return _with_base(argv)


def _build_piral_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.build_piral(
        args["base"],
        _options(
            BuildPiralOptions,
            entry=args["source"],
            target=args["target"],
            cache_dir=args["cacheDir"],
            public_url=args["publicUrl"],
            minify=args["minify"],
            scope_hoist=args["scopeHoist"],
            content_hash=args["contentHash"],
            source_maps=args["sourceMaps"],
            detailed_report=args["detailedReport"],
            log_level=args["logLevel"],
            fresh=args["fresh"],
            type=args["type"],
        ),
    )


# ---------------------------------------------------------------------------
# new-piral
# ---------------------------------------------------------------------------


def _new_piral_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.new_piral_defaults
    argv = (
        argv.positional(
            "target",
            type="string",
            describe="Sets the project's root directory for making the changes.",
            default=d.target,
        )
        .string("app")
        .describe("app", "Sets the path to the app's source HTML file.")
        .default("app", d.app)
        .boolean("only-core")
        .describe("only-core", 'Sets if "piral-core" should be used. Otherwise, "piral" is used.')
        .default("only-core", d.only_core)
        .boolean("skip-install")
        .describe("skip-install", "Skips the installation of the dependencies using NPM.")
        .default("skip-install", d.skip_install)
        .string("tag")
        .describe("tag", 'Sets the tag or version of the package to install. By default, it is "latest".')
        .default("tag", d.version)
        .choices("force-overwrite", force_overwrite_keys)
        .describe("force-overwrite", "Determines if files should be overwritten by the installation.")
        .default("force-overwrite", key_of_force_overwrite(d.force_overwrite))
        .choices("language", pilet_language_keys)
        .describe("language", "Determines the programming language for the new Piral instance.")
        .default("language", key_of_pilet_language(d.language))
        .choices("template", template_type_keys)
        .describe("template", "Sets the boilerplate template to be used when scaffolding.")
        .default("template", template_type_keys[0])
    )
    return _with_base(argv)


def _new_piral_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.new_piral(
        args["base"],
        _options(
            NewPiralOptions,
            app=args["app"],
            target=args["target"],
            only_core=args["onlyCore"],
            version=args["tag"],
            force_overwrite=value_of_force_overwrite(args["forceOverwrite"]),
            language=value_of_pilet_language(args["language"]),
            skip_install=args["skipInstall"],
            template=value_of_template_type(args["template"]),
        ),
    )


# ---------------------------------------------------------------------------
# validate-piral
# ---------------------------------------------------------------------------


def _validate_piral_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.validate_piral_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source root directory or index.html file for collecting all the information.",
            default=d.entry,
        )
        .number("log-level")
        .describe("log-level", "Sets the log level to use (1-5).")
        .default("log-level", d.log_level)
    )
    return _with_base(argv)


def _validate_piral_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.validate_piral(
        args["base"],
        _options(ValidatePiralOptions, entry=args["source"], log_level=args["logLevel"]),
    )


# ---------------------------------------------------------------------------
# debug-pilet
# ---------------------------------------------------------------------------


def _debug_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.debug_pilet_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source file containing the pilet root module.",
            default=d.entry,
        )
        .number("port")
        .describe("port", "Sets the port of the local development server.")
        .default("port", d.port)
        .string("cache-dir")
        .describe("cache-dir", "Sets the cache directory for bundling.")
        .default("cache-dir", d.cache_dir)
        .number("log-level")
        .describe("log-level", "Sets the log level to use (1-5).")
        .default("log-level", d.log_level)
        .boolean("fresh")
        .describe("fresh", "Resets the cache before starting the debug mode.")
        .default("fresh", d.fresh)
        .boolean("open")
        .describe("open", "Opens the pilet directly in the browser.")
        .default("open", d.open)
        .boolean("scope-hoist")
        .describe("scope-hoist", "Tries to reduce bundle size by introducing tree shaking.")
        .default("scope-hoist", d.scope_hoist)
        .boolean("hmr")
        .describe("hmr", "Activates Hot Module Reloading (HMR).")
        .default("hmr", d.hmr)
        .boolean("autoinstall")
        .describe("autoinstall", "Automatically installs missing Node.js packages.")
        .default("autoinstall", d.auto_install)
        .string("app")
        .describe("app", "Sets the name of the Piral instance.")
    )
    return _with_base(argv)


def _debug_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.debug_pilet(
        args["base"],
        _options(
            DebugPiletOptions,
            entry=args["source"],
            cache_dir=args["cacheDir"],
            port=args["port"],
            scope_hoist=args["scopeHoist"],
            hmr=args["hmr"],
            auto_install=args["autoinstall"],
            app=args["app"],
            log_level=args["logLevel"],
            fresh=args["fresh"],
            open=args["open"],
        ),
    )


# ---------------------------------------------------------------------------
# build-pilet
# ---------------------------------------------------------------------------


def _build_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.build_pilet_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source index.tsx file for collecting all the information.",
            default=d.entry,
        )
        .string("target")
        .describe("target", "Sets the target file of bundling.")
        .default("target", d.target)
        .string("cache-dir")
        .describe("cache-dir", "Sets the cache directory for bundling.")
        .default("cache-dir", d.cache_dir)
        .boolean("detailed-report")
        .describe("detailed-report", "Sets if a detailed report should be created.")
        .default("detailed-report", d.detailed_report)
        .number("log-level")
        .describe("log-level", "Sets the log level to use (1-5).")
        .default("log-level", d.log_level)
        .boolean("fresh")
        .describe("fresh", "Performs a fresh build by removing the target directory first.")
        .default("fresh", d.fresh)
        .boolean("minify")
        .describe("minify", "Performs minification or other post-bundle transformations.")
        .default("minify", d.minify)
        .boolean("source-maps")
        .describe("source-maps", "Creates source maps for the bundles.")
        .default("source-maps", d.source_maps)
        .boolean("content-hash")
        .describe("content-hash", "Appends the hash to the side-bundle files.")
        .default("content-hash", d.content_hash)
        .boolean("scope-hoist")
        .describe("scope-hoist", "Tries to reduce bundle size by introducing tree shaking.")
        .default("scope-hoist", d.scope_hoist)
    )
    return _with_base(argv)


def _build_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.build_pilet(
        args["base"],
        _options(
            BuildPiletOptions,
            entry=args["source"],
            target=args["target"],
            cache_dir=args["cacheDir"],
            minify=args["minify"],
            content_hash=args["contentHash"],
            source_maps=args["sourceMaps"],
            scope_hoist=args["scopeHoist"],
            detailed_report=args["detailedReport"],
            fresh=args["fresh"],
            log_level=args["logLevel"],
        ),
    )


# ---------------------------------------------------------------------------
# pack-pilet
# ---------------------------------------------------------------------------


def _pack_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.pack_pilet_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source package.json file for creating the package.",
            default=d.source,
        )
        .string("target")
        .describe("target", "Sets the target directory or file of packing.")
        .default("target", d.target)
    )
    return _with_base(argv)


def _pack_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.pack_pilet(
        args["base"],
        _options(PackPiletOptions, source=args["source"], target=args["target"]),
    )


# ---------------------------------------------------------------------------
# publish-pilet
# ---------------------------------------------------------------------------


def _publish_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.publish_pilet_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source previously packed *.tgz bundle to publish.",
            default=d.source,
        )
        .string("url")
        .describe("url", "Sets the explicit URL where to publish the pilet to.")
        .default("url", d.url)
        .string("api-key")
        .describe("api-key", "Sets the potential API key to send to the service.")
        .default("api-key", d.api_key)
        .boolean("fresh")
        .describe("fresh", "Performs a fresh build, then packages and finally publishes the pilet.")
        .default("fresh", d.fresh)
    )
    return _with_base(argv)


def _publish_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.publish_pilet(
        args["base"],
        _options(
            PublishPiletOptions,
            source=args["source"],
            api_key=args["apiKey"],
            url=args["url"],
            fresh=args["fresh"],
        ),
    )


# ---------------------------------------------------------------------------
# new-pilet
# ---------------------------------------------------------------------------


def _new_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.new_pilet_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source package containing a Piral instance for templating the scaffold process.",
            default=d.source,
        )
        .string("target")
        .describe("target", "Sets the target directory for scaffolding. By default, the current directory.")
        .default("target", d.target)
        .string("registry")
        .describe("registry", "Sets the package registry to use for resolving the specified Piral app.")
        .default("registry", d.registry)
        .boolean("skip-install")
        .describe("skip-install", "Skips the installation of the dependencies using NPM.")
        .default("skip-install", d.skip_install)
        .choices("force-overwrite", force_overwrite_keys)
        .describe("force-overwrite", "Determines if files should be overwritten by the scaffolding.")
        .default("force-overwrite", key_of_force_overwrite(d.force_overwrite))
        .choices("language", pilet_language_keys)
        .describe("language", "Determines the programming language for the new pilet.")
        .default("language", key_of_pilet_language(d.language))
        .choices("template", template_type_keys)
        .describe("template", "Sets the boilerplate template to be used when scaffolding.")
        .default("template", template_type_keys[0])
    )
    return _with_base(argv)


def _new_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.new_pilet(
        args["base"],
        _options(
            NewPiletOptions,
            target=args["target"],
            source=args["source"],
            registry=args["registry"],
            force_overwrite=value_of_force_overwrite(args["forceOverwrite"]),
            language=value_of_pilet_language(args["language"]),
            skip_install=args["skipInstall"],
            template=value_of_template_type(args["template"]),
        ),
    )


# ---------------------------------------------------------------------------
# upgrade-pilet
# ---------------------------------------------------------------------------


def _upgrade_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.upgrade_pilet_defaults
    argv = (
        argv.string("target")
        .describe("target", "Sets the target directory to upgrade. By default, the current directory.")
        .default("target", d.target)
        .string("tag")
        .describe("tag", 'Sets the tag or version of the Piral instance to upgrade to. By default, it is "latest".')
        .default("tag", d.version)
        .choices("force-overwrite", force_overwrite_keys)
        .describe("force-overwrite", "Determines if files should be overwritten by the upgrading process.")
        .default("force-overwrite", key_of_force_overwrite(d.force_overwrite))
    )
    return _with_base(argv)


def _upgrade_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.upgrade_pilet(
        args["base"],
        _options(
            UpgradePiletOptions,
            target=args["target"],
            version=args["tag"],
            force_overwrite=value_of_force_overwrite(args["forceOverwrite"]),
        ),
    )


# ---------------------------------------------------------------------------
# validate-pilet
# ---------------------------------------------------------------------------


def _validate_pilet_flags(argv: Any) -> Any:  # noqa: ANN401
    d = apps.validate_pilet_defaults
    argv = (
        argv.positional(
            "source",
            type="string",
            describe="Sets the source file containing the pilet root module.",
            default=d.entry,
        )
        .number("log-level")
        .describe("log-level", "Sets the log level to use (1-5).")
        .default("log-level", d.log_level)
        .string("app")
        .describe("app", "Sets the name of the Piral instance.")
    )
    return _with_base(argv)


def _validate_pilet_run(args: dict[str, Any]) -> Any:  # noqa: ANN401
    return apps.validate_pilet(
        args["base"],
        _options(
            ValidatePiletOptions,
            entry=args["source"],
            log_level=args["logLevel"],
            app=args["app"],
        ),
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ALL_COMMANDS: tuple[ToolCommand, ...] = (
    ToolCommand(
        name="debug-piral",
        aliases=("watch-piral", "debug-portal", "watch-portal"),
        description="Starts the debugging process for a Piral instance.",
        arguments=("[source]",),
        flags=FlagsCallback(_debug_piral_flags),
        run=RunCallback(_debug_piral_run),
    ),
    ToolCommand(
        name="build-piral",
        aliases=("bundle-piral", "build-portal", "bundle-portal"),
        description="Creates a production build for a Piral instance.",
        arguments=("[source]",),
        flags=FlagsCallback(_build_piral_flags),
        run=RunCallback(_build_piral_run),
    ),
    ToolCommand(
        name="new-piral",
        aliases=("create-piral", "scaffold-piral", "setup-piral"),
        description="Creates a new Piral instance by adding all files and changes to the current project.",
        arguments=("[target]",),
        flags=FlagsCallback(_new_piral_flags),
        run=RunCallback(_new_piral_run),
    ),
    ToolCommand(
        name="validate-piral",
        aliases=("verify-piral", "check-piral"),
        description="Checks the validity of the current project as a Piral instance.",
        arguments=("[source]",),
        flags=FlagsCallback(_validate_piral_flags),
        run=RunCallback(_validate_piral_run),
    ),
    ToolCommand(
        name="debug-pilet",
        aliases=("watch-pilet", "debug", "watch"),
        description="Starts the debugging process for a pilet using a Piral instance.",
        arguments=("[source]",),
        flags=FlagsCallback(_debug_pilet_flags),
        run=RunCallback(_debug_pilet_run),
    ),
    ToolCommand(
        name="build-pilet",
        aliases=("bundle-pilet", "build", "bundle"),
        description="Creates a production build for a pilet.",
        arguments=("[source]",),
        flags=FlagsCallback(_build_pilet_flags),
        run=RunCallback(_build_pilet_run),
    ),
    ToolCommand(
        name="pack-pilet",
        aliases=("package-pilet", "pack", "package"),
        description="Creates a pilet package that can be published.",
        arguments=("[source]",),
        flags=FlagsCallback(_pack_pilet_flags),
        run=RunCallback(_pack_pilet_run),
    ),
    ToolCommand(
        name="publish-pilet",
        aliases=("post-pilet", "publish"),
        description="Publishes a pilet package to a pilet feed.",
        arguments=("[source]",),
        flags=FlagsCallback(_publish_pilet_flags),
        run=RunCallback(_publish_pilet_run),
    ),
    ToolCommand(
        name="new-pilet",
        aliases=("create-pilet", "scaffold-pilet", "scaffold", "new", "create"),
        description="Scaffolds a new pilet for a specified Piral instance.",
        arguments=("[source]",),
        flags=FlagsCallback(_new_pilet_flags),
        run=RunCallback(_new_pilet_run),
    ),
    ToolCommand(
        name="upgrade-pilet",
        aliases=("upgrade",),
        description="Upgrades an existing pilet to the latest version of the used Piral instance.",
        arguments=(),
        flags=FlagsCallback(_upgrade_pilet_flags),
        run=RunCallback(_upgrade_pilet_run),
    ),
    ToolCommand(
        name="validate-pilet",
        aliases=("verify-pilet", "check-pilet", "lint-pilet", "assert-pilet"),
        description="Checks the validity of the current pilet according to the rules defined by the Piral instance.",
        arguments=("[source]",),
        flags=FlagsCallback(_validate_pilet_flags),
        run=RunCallback(_validate_pilet_run),
    ),
)


class Commands:
    """Read access to the registry and its scoped views.

    ``all`` is the registry itself. ``piral`` and ``pilet`` are recomputed on
    every access; they are cheap, and the registry never changes.
    """

    VIEWS = ("all", Scope.PIRAL.value, Scope.PILET.value)

    def __init__(self, registry: tuple[ToolCommand, ...] = ALL_COMMANDS) -> None:
        self._registry = registry

    @property
    def all(self) -> tuple[ToolCommand, ...]:
        return self._registry

    @property
    def piral(self) -> tuple[ToolCommand, ...]:
        return specialize_commands(self._registry, Scope.PIRAL.suffix)

    @property
    def pilet(self) -> tuple[ToolCommand, ...]:
        return specialize_commands(self._registry, Scope.PILET.suffix)

    def view(self, name: str) -> tuple[ToolCommand, ...]:
        """Return the view called *name* (``all``, ``piral``, or ``pilet``).

        Raises:
            InvalidUsageError: If *name* is not a known view.
        """
        if name not in self.VIEWS:
            raise InvalidUsageError(
                f"Unknown command view '{name}' (expected one of: {', '.join(self.VIEWS)})"
            )
        return getattr(self, name)


commands = Commands()
