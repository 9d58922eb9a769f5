"""Typed configuration models for respack config files."""

from __future__ import annotations

from collections.abc import Mapping

import msgspec

from respack.config import BuildRequest
from respack.serde_msgspec import StructBaseStrict

PACKAGE_SECTION = "package"


class ConfigError(ValueError):
    """Raised when a config file or merged request fails validation."""


class RootConfigSpec(StructBaseStrict, frozen=True):
    """Root configuration file model.

    ``package`` holds :class:`respack.config.BuildRequest` fields by name. It
    may be partial; the remaining fields come from the command line.
    """

    package: dict[str, object] = msgspec.field(default_factory=dict)
    log_level: str | None = None


def package_field_names() -> frozenset[str]:
    """Return the keys accepted inside a ``[package]`` table.

    Returns
    -------
    frozenset[str]
        Build request field names.
    """
    return frozenset(BuildRequest.__struct_fields__)


def check_package_keys(package: Mapping[str, object], *, location: str) -> None:
    """Reject unknown ``[package]`` keys early, before fields are merged.

    Raises
    ------
    ConfigError
        Raised when ``package`` contains keys that are not build request fields.
    """
    unknown = sorted(set(package) - package_field_names())
    if unknown:
        msg = (
            f"Config validation failed for {location}: unknown [package] keys "
            f"{', '.join(unknown)}."
        )
        raise ConfigError(msg)


__all__ = [
    "PACKAGE_SECTION",
    "ConfigError",
    "RootConfigSpec",
    "check_package_keys",
    "package_field_names",
]
