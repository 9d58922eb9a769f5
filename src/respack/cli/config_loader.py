"""Config loading, layering and request assembly for the CLI.

Config files layer from lowest to highest precedence:

1. ``[tool.respack]`` in the nearest ``pyproject.toml``
2. the nearest ``respack.toml``
3. an explicit ``--config`` file (TOML, JSON or a ``pyproject.toml``)

Command-line options override all three.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import cast

import msgspec

from respack.cli.config_models import (
    PACKAGE_SECTION,
    ConfigError,
    RootConfigSpec,
    check_package_keys,
)
from respack.cli.config_source import ConfigLayer, ConfigWithSources
from respack.config import BuildRequest
from respack.core_types import JsonValue
from respack.serde_msgspec import convert, split_validation_error
from respack.utils.file_io import read_toml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "respack.toml"
PYPROJECT_FILENAME = "pyproject.toml"
TOOL_SECTION = "respack"


def load_effective_config(config_file: str | None) -> dict[str, JsonValue]:
    """Load the merged ``[package]`` table from every config layer.

    Parameters
    ----------
    config_file
        Optional explicit config file path.

    Returns
    -------
    dict[str, JsonValue]
        Merged package settings keyed by build request field name.
    """
    return load_effective_config_with_sources(config_file).to_flat_dict()


def load_effective_config_with_sources(config_file: str | None) -> ConfigWithSources:
    """Load the merged ``[package]`` table with per-key source tracking.

    Returns
    -------
    ConfigWithSources
        Configuration with the file each value came from.

    Raises
    ------
    ConfigError
        Raised when an explicit config file does not exist.
    """
    config = ConfigWithSources()
    for root, layer, location in _discover_layers():
        config = config.layered(_package_settings(root), layer=layer, location=location)
    if config_file:
        path = Path(config_file)
        if not path.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        raw, location = _resolve_explicit_payload(path)
        root = _decode_root_config(raw, location=location)
        config = config.layered(
            _package_settings(root), layer=ConfigLayer.EXPLICIT_FILE, location=location
        )
    return config


def load_config_log_level(config_file: str | None) -> str | None:
    """Return the highest-precedence ``log_level`` from the config files.

    Returns
    -------
    str | None
        Configured log level, if any layer sets one.
    """
    level: str | None = None
    layers = list(_discover_layers())
    if config_file and Path(config_file).is_file():
        raw, location = _resolve_explicit_payload(Path(config_file))
        layers.append(
            (_decode_root_config(raw, location=location), ConfigLayer.EXPLICIT_FILE, location)
        )
    for root, _layer, _location in layers:
        if root.log_level is not None:
            level = root.log_level
    return level


def build_request(
    config: Mapping[str, object],
    overrides: Mapping[str, object],
) -> BuildRequest:
    """Merge config-file settings with command-line overrides.

    Parameters
    ----------
    config
        Merged ``[package]`` table from the config files.
    overrides
        Options given on the command line; ``None`` values are ignored.

    Returns
    -------
    BuildRequest
        Validated build request.

    Raises
    ------
    ConfigError
        Raised when the merged settings do not form a valid request.
    """
    merged: dict[str, object] = dict(config)
    merged.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return convert(merged, target_type=BuildRequest, strict=False)
    except msgspec.ValidationError as exc:
        summary, path = split_validation_error(exc)
        where = f" at {path}" if path else ""
        msg = f"Invalid package settings{where}: {summary}"
        raise ConfigError(msg) from exc


def _find_in_parents(filename: str) -> Path | None:
    path = Path.cwd()
    while True:
        candidate = path / filename
        if candidate.is_file():
            return candidate
        if path.parent == path:
            return None
        path = path.parent


def _discover_layers() -> list[tuple[RootConfigSpec, ConfigLayer, str]]:
    layers: list[tuple[RootConfigSpec, ConfigLayer, str]] = []
    pyproject_path = _find_in_parents(PYPROJECT_FILENAME)
    if pyproject_path is not None:
        nested = _extract_tool_config(_read_mapping(pyproject_path))
        if nested is not None:
            location = f"{pyproject_path}:tool.{TOOL_SECTION}"
            root = _decode_root_config(nested, location=location)
            layers.append((root, ConfigLayer.PYPROJECT, location))
    config_path = _find_in_parents(CONFIG_FILENAME)
    if config_path is not None:
        raw = _read_mapping(config_path)
        root = _decode_root_config(raw, location=str(config_path))
        layers.append((root, ConfigLayer.PROJECT_FILE, str(config_path)))
    return layers


def _read_mapping(path: Path) -> dict[str, JsonValue]:
    try:
        payload = read_toml(path)
    except (msgspec.DecodeError, TypeError) as exc:
        msg = f"Config parse failed for {path}: {exc}"
        raise ConfigError(msg) from exc
    return cast("dict[str, JsonValue]", dict(payload))


def _package_settings(root: RootConfigSpec) -> dict[str, JsonValue]:
    return cast("dict[str, JsonValue]", dict(root.package))


def _decode_root_config(raw: Mapping[str, JsonValue], *, location: str) -> RootConfigSpec:
    try:
        config = msgspec.convert(raw, type=RootConfigSpec, strict=True)
    except msgspec.ValidationError as exc:
        summary, path = split_validation_error(exc)
        where = f" at {path}" if path else ""
        msg = f"Config validation failed for {location}{where}: {summary}"
        raise ConfigError(msg) from exc
    check_package_keys(config.package, location=location)
    logger.debug("Loaded %d package settings from %s", len(config.package), location)
    return config


def _resolve_explicit_payload(path: Path) -> tuple[Mapping[str, JsonValue], str]:
    if path.suffix == ".json":
        try:
            raw = msgspec.json.decode(path.read_bytes())
        except msgspec.DecodeError as exc:
            msg = f"Config parse failed for {path}: {exc}"
            raise ConfigError(msg) from exc
        if not isinstance(raw, dict):
            msg = f"Config validation failed for {path}: JSON root must be an object."
            raise ConfigError(msg)
        return cast("Mapping[str, JsonValue]", raw), str(path)
    raw = _read_mapping(path)
    if path.name == PYPROJECT_FILENAME:
        nested = _extract_tool_config(raw)
        if nested is None:
            msg = f"Config validation failed for {path}: missing [tool.{TOOL_SECTION}] section."
            raise ConfigError(msg)
        return nested, f"{path}:tool.{TOOL_SECTION}"
    return raw, str(path)


def _extract_tool_config(raw: Mapping[str, JsonValue]) -> dict[str, JsonValue] | None:
    tool_section = raw.get("tool")
    if not isinstance(tool_section, dict):
        return None
    nested = tool_section.get(TOOL_SECTION)
    if not isinstance(nested, dict):
        return None
    return cast("dict[str, JsonValue]", nested)


__all__ = [
    "CONFIG_FILENAME",
    "PACKAGE_SECTION",
    "build_request",
    "load_config_log_level",
    "load_effective_config",
    "load_effective_config_with_sources",
]
