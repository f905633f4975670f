"""Canonical Pydantic models shared across all piralcli modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`FeedConfig`, :class:`BackendsConfig`, and
    :class:`GlobalConfig`.

**Argument models** -- produced by the argument builder and consumed by the
command-tree generator:
    :class:`FlagKind` and :class:`FlagSpec`.

**Options records** -- the validated input of each apps operation, one per
command family (:class:`DebugPiralOptions`, :class:`PackPiletOptions`, ...).
Field names are snake_case; the CLI exposes them as kebab-case flags.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from piralcli.helpers import ForceOverwrite, PiletLanguage, TemplateType


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class FeedConfig(BaseModel):
    """Pilet feed used by ``publish-pilet`` when no ``--url`` is given."""

    url: Optional[str] = Field(default=None, description="Feed publish URL")
    api_key_source: Optional[str] = Field(
        default=None,
        description="Credential source for the feed API key: env:VAR, file:/path, prompt",
    )


class BackendsConfig(BaseModel):
    """Explicit backend allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/piralcli/config.json``.

    Loaded and saved by :func:`~piralcli.config.load_global_config` and
    :func:`~piralcli.config.save_global_config`. A project-local
    ``piral-cli.json`` and environment variables can override it; see
    :func:`~piralcli.config.resolve_config` for the precedence chain.
    """

    registry: str = Field(
        default="https://registry.npmjs.org/",
        description="Package registry used to resolve Piral instances",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    backends: BackendsConfig = Field(default_factory=BackendsConfig)


# --- Arguments ---


class FlagKind(str, enum.Enum):
    """Value types an argument can be declared with."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CHOICES = "choices"


class FlagSpec(BaseModel):
    """A single positional argument or ``--flag`` declared by a command.

    Instances are accumulated by
    :class:`~piralcli.generator.argv.ArgumentBuilder` and turned into Typer
    parameters by :mod:`~piralcli.generator.command_tree`.
    """

    name: str = Field(description="Kebab-case flag or positional name")
    kind: FlagKind = FlagKind.STRING
    positional: bool = False
    description: Optional[str] = None
    default: Any = None
    choices: tuple[str, ...] = ()
    required: bool = False


# --- Options records ---


class BuildType(str, enum.Enum):
    """Which flavours of a Piral instance a production build emits."""

    ALL = "all"
    RELEASE = "release"
    DEVELOP = "develop"


class _Options(BaseModel):
    model_config = ConfigDict(frozen=True)


class DebugPiralOptions(_Options):
    entry: str = "./"
    cache_dir: str = ".cache"
    port: int = 1234
    hmr: bool = True
    auto_install: bool = True
    scope_hoist: bool = False
    public_url: str = "/"
    log_level: int = Field(default=3, ge=1, le=5)
    fresh: bool = False
    open: bool = False


class BuildPiralOptions(_Options):
    entry: str = "./"
    target: str = "./dist"
    cache_dir: str = ".cache"
    public_url: str = "/"
    minify: bool = True
    scope_hoist: bool = False
    content_hash: bool = True
    source_maps: bool = True
    detailed_report: bool = False
    log_level: int = Field(default=3, ge=1, le=5)
    fresh: bool = False
    type: BuildType = BuildType.ALL


class NewPiralOptions(_Options):
    app: str = "./src/index.html"
    target: str = "."
    only_core: bool = False
    version: str = "latest"
    force_overwrite: ForceOverwrite = ForceOverwrite.no
    language: PiletLanguage = PiletLanguage.ts
    skip_install: bool = False
    template: TemplateType = TemplateType.default


class ValidatePiralOptions(_Options):
    entry: str = "./"
    log_level: int = Field(default=3, ge=1, le=5)


class DebugPiletOptions(_Options):
    entry: str = "./src/index"
    cache_dir: str = ".cache"
    port: int = 1234
    scope_hoist: bool = False
    hmr: bool = True
    auto_install: bool = True
    app: Optional[str] = None
    log_level: int = Field(default=3, ge=1, le=5)
    fresh: bool = False
    open: bool = False


class BuildPiletOptions(_Options):
    entry: str = "./src/index"
    target: str = "./dist/index.js"
    cache_dir: str = ".cache"
    minify: bool = True
    content_hash: bool = True
    source_maps: bool = True
    scope_hoist: bool = False
    detailed_report: bool = False
    fresh: bool = False
    log_level: int = Field(default=3, ge=1, le=5)


class PackPiletOptions(_Options):
    source: str = "./package.json"
    target: str = "./"


class PublishPiletOptions(_Options):
    source: str = "*.tgz"
    url: Optional[str] = None
    api_key: Optional[str] = None
    fresh: bool = False


class NewPiletOptions(_Options):
    source: str = "piral"
    target: str = "."
    registry: Optional[str] = None
    force_overwrite: ForceOverwrite = ForceOverwrite.no
    language: PiletLanguage = PiletLanguage.ts
    skip_install: bool = False
    template: TemplateType = TemplateType.default


class UpgradePiletOptions(_Options):
    target: str = "."
    version: str = "latest"
    force_overwrite: ForceOverwrite = ForceOverwrite.no


class ValidatePiletOptions(_Options):
    entry: str = "./src/index"
    log_level: int = Field(default=3, ge=1, le=5)
    app: Optional[str] = None
