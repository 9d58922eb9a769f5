"""Normalize OpenTelemetry attributes for respack telemetry."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import PurePath
from typing import cast

from opentelemetry.util.types import AttributeValue

from respack.utils.env_utils import env_int

_MAX_ATTRIBUTE_LENGTH = env_int("OTEL_ATTRIBUTE_VALUE_LENGTH_LIMIT")


def _is_scalar(value: object) -> bool:
    return isinstance(value, (str, bool, int, float))


def _truncate_str(value: str) -> str:
    if _MAX_ATTRIBUTE_LENGTH is None:
        return value
    if _MAX_ATTRIBUTE_LENGTH <= 0:
        return ""
    return value[:_MAX_ATTRIBUTE_LENGTH]


def _normalize_sequence(values: Sequence[object]) -> AttributeValue:
    normalized = [item for item in values if item is not None]
    if not normalized:
        return []
    if all(isinstance(item, bool) for item in normalized):
        return [bool(item) for item in normalized]
    if all(isinstance(item, int) and not isinstance(item, bool) for item in normalized):
        return [cast("int", item) for item in normalized]
    return [_truncate_str(str(item)) for item in normalized]


def _normalize_value(value: object) -> AttributeValue:
    if _is_scalar(value):
        if isinstance(value, str):
            return _truncate_str(value)
        return cast("AttributeValue", value)
    if isinstance(value, PurePath):
        return _truncate_str(str(value))
    if isinstance(value, Mapping):
        return _truncate_str(json.dumps(value, sort_keys=True, default=str))
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _normalize_sequence(list(value))
    return _truncate_str(str(value))


def normalize_attributes(attrs: Mapping[str, object] | None) -> dict[str, AttributeValue]:
    """Normalize raw attribute values into OpenTelemetry-safe types.

    ``None`` values are dropped; paths and mappings become strings.

    Parameters
    ----------
    attrs
        Raw attribute mapping.

    Returns
    -------
    dict[str, AttributeValue]
        Normalized attributes.
    """
    if not attrs:
        return {}
    return {
        str(key): _normalize_value(value) for key, value in attrs.items() if value is not None
    }


__all__ = ["normalize_attributes"]
