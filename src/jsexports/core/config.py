"""Configuration models and loaders for :mod:`jsexports`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from enum import StrEnum
import os
from pathlib import Path
from typing import Any, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from jsexports.resources import get_resource

DEFAULTS_RESOURCE_NAME = "jsexports.defaults.toml"

ENV_CONFIG = "JSEXPORTS_CONFIG"
ENV_LOG_LEVEL = "JSEXPORTS_LOG_LEVEL"
ENV_REEXPORT_POLICY = "JSEXPORTS_REEXPORT_POLICY"


class ReexportPolicy(StrEnum):
    """How failures while analyzing a re-exported module are handled."""

    STRICT = "strict"
    LENIENT = "lenient"


def _normalize_suffixes(values: tuple[str, ...]) -> tuple[str, ...]:
    normalized: list[str] = []
    for value in values:
        suffix = value.strip()
        if not suffix:
            raise ValueError("Extensions cannot be blank.")
        if not suffix.startswith("."):
            suffix = f".{suffix}"
        normalized.append(suffix)
    return tuple(dict.fromkeys(normalized))


class AnalyzerSettings(BaseModel):
    """Settings consumed by :class:`jsexports.analysis.ExportAnalyzer`."""

    resolve_extensions: tuple[str, ...] = Field(
        default=(
            ".js",
            ".jsx",
            ".json",
            ".node",
            ".mjs",
            ".cjs",
            ".ts",
            ".tsx",
            ".mts",
            ".cts",
        ),
        description="Extensions tried, in order, when resolving modules.",
    )
    generic_names: tuple[str, ...] = Field(
        default=("dist", "bin", "lib", "src", "index"),
        description=(
            "Placeholder names skipped by the default export name heuristic."
        ),
    )
    interop_marker: str = Field(
        default="__esModule",
        description="Named export removed from every analysis result.",
    )
    json_suffixes: tuple[str, ...] = Field(
        default=(".json",),
        description="File suffixes analyzed as structured data.",
    )
    reexport_policy: ReexportPolicy = Field(
        default=ReexportPolicy.STRICT,
        description=(
            "Whether re-export failures abort analysis ('strict') or are "
            "logged and skipped ('lenient')."
        ),
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("resolve_extensions", "json_suffixes")
    @classmethod
    def _validate_suffixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _normalize_suffixes(value)

    @field_validator("reexport_policy", mode="before")
    @classmethod
    def _lower_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def strict(self) -> bool:
        """Return ``True`` when re-export failures should propagate."""

        return self.reexport_policy is ReexportPolicy.STRICT

    def is_structured_data(self, path: str | Path) -> bool:
        """Return ``True`` if ``path`` should use the JSON fast path.

        Example:
            >>> AnalyzerSettings().is_structured_data("pkg/package.json")
            True
        """

        return Path(path).suffix.lower() in self.json_suffixes


class AppConfig(BaseModel):
    """Root configuration for the :mod:`jsexports` application."""

    log_level: str = Field(
        default="WARNING",
        description="Default logging level for the application runtime.",
    )
    analyzer: AnalyzerSettings = Field(
        default_factory=AnalyzerSettings,
        description="Export analysis settings.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @model_validator(mode="after")
    def _post_process(self) -> "AppConfig":
        object.__setattr__(self, "log_level", self.log_level.upper())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content."""

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["analyzer"]["reexport_policy"]
        'strict'
    """

    return tomllib.loads(read_packaged_defaults_text())


def load_user_config(path: str | Path) -> dict[str, Any]:
    """Parse a user TOML configuration file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """

    with Path(path).expanduser().open("rb") as handle:
        return tomllib.load(handle)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Translate ``JSEXPORTS_*`` environment variables into config layers."""

    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    if level := env.get(ENV_LOG_LEVEL):
        overrides["log_level"] = level
    if policy := env.get(ENV_REEXPORT_POLICY):
        overrides["analyzer"] = {"reexport_policy": policy}
    return overrides


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    defaults: Mapping[str, Any],
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load configuration according to the precedence stack.

    Args:
        defaults: Packaged defaults shipped with the application.
        user_config: Parsed user TOML content.
        env_config: Settings derived from environment variables.
        cli_overrides: Settings supplied via CLI flags.

    Returns:
        A validated :class:`AppConfig` instance.

    Raises:
        TypeError: If the ``analyzer`` layer is not a table.
    """

    stack = dict(defaults)
    for layer in (user_config, env_config, cli_overrides):
        if layer:
            stack = _deep_merge(stack, layer)

    analyzer_raw = stack.pop("analyzer", None)
    if isinstance(analyzer_raw, AnalyzerSettings):
        analyzer = analyzer_raw
    elif isinstance(analyzer_raw, MappingABC):
        analyzer = AnalyzerSettings(**analyzer_raw)
    elif analyzer_raw is None:
        analyzer = AnalyzerSettings()
    else:
        raise TypeError(
            f"Unsupported analyzer configuration payload: {analyzer_raw!r}"
        )
    stack["analyzer"] = analyzer

    return AppConfig(**stack)


def render_config(config: AppConfig) -> str:
    """Render ``config`` as a TOML document.

    Example:
        >>> "reexport_policy" in render_config(AppConfig())
        True
    """

    document = tomlkit.document()
    document.add(tomlkit.comment("Effective jsexports configuration"))
    document.add(tomlkit.nl())
    document["log_level"] = config.log_level

    analyzer = config.analyzer
    table = tomlkit.table()
    table["resolve_extensions"] = list(analyzer.resolve_extensions)
    table["generic_names"] = list(analyzer.generic_names)
    table["interop_marker"] = analyzer.interop_marker
    table["json_suffixes"] = list(analyzer.json_suffixes)
    table["reexport_policy"] = analyzer.reexport_policy.value
    document["analyzer"] = table

    return tomlkit.dumps(document)


__all__ = [
    "AnalyzerSettings",
    "AppConfig",
    "DEFAULTS_RESOURCE_NAME",
    "ENV_CONFIG",
    "ENV_LOG_LEVEL",
    "ENV_REEXPORT_POLICY",
    "ReexportPolicy",
    "env_overrides",
    "load_config",
    "load_packaged_defaults",
    "load_user_config",
    "read_packaged_defaults_text",
    "render_config",
]
