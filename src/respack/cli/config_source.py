"""Track which config layer supplied each ``[package]`` setting."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from respack.core_types import JsonValue


class ConfigLayer(StrEnum):
    """Config file layers, lowest precedence first."""

    PYPROJECT = "pyproject"
    PROJECT_FILE = "respack_toml"
    EXPLICIT_FILE = "config_option"


@dataclass(frozen=True)
class ConfigValue:
    """A setting together with the layer that won and the ones it shadowed.

    Parameters
    ----------
    key
        ``BuildRequest`` field name.
    value
        Value from the winning layer.
    layer
        Layer the value came from.
    location
        File (and table, for ``pyproject.toml``) holding the value.
    shadowed
        Locations of lower layers that also set ``key``.
    """

    key: str
    value: JsonValue
    layer: ConfigLayer
    location: str
    shadowed: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {
            "value": self.value,
            "layer": self.layer.value,
            "location": self.location,
        }
        if self.shadowed:
            result["overrides"] = list(self.shadowed)
        return result


@dataclass(frozen=True)
class ConfigWithSources:
    """Merged ``[package]`` settings with per-key provenance."""

    values: Mapping[str, ConfigValue] = field(default_factory=dict)

    def layered(
        self,
        settings: Mapping[str, JsonValue],
        *,
        layer: ConfigLayer,
        location: str,
    ) -> ConfigWithSources:
        """Return a copy with ``settings`` applied on top.

        Returns
        -------
        ConfigWithSources
            Settings after the new layer wins every key it sets.
        """
        merged = dict(self.values)
        for key, value in settings.items():
            previous = merged.get(key)
            shadowed = () if previous is None else (*previous.shadowed, previous.location)
            merged[key] = ConfigValue(
                key=key, value=value, layer=layer, location=location, shadowed=shadowed
            )
        return ConfigWithSources(values=merged)

    def to_display_dict(self) -> dict[str, dict[str, object]]:
        return {key: value.to_dict() for key, value in sorted(self.values.items())}

    def to_flat_dict(self) -> dict[str, JsonValue]:
        return {key: value.value for key, value in self.values.items()}


__all__ = ["ConfigLayer", "ConfigValue", "ConfigWithSources"]
