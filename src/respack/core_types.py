"""Shared type aliases and small typing helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from pathlib import Path
from typing import Annotated

from msgspec import Meta

type PathLike = str | Path

type JsonPrimitive = str | int | float | bool | None
type JsonValue = JsonPrimitive | Mapping[str, JsonValue] | Sequence[JsonValue]

NonEmptyStr = Annotated[str, Meta(min_length=1)]
PositiveInt = Annotated[int, Meta(gt=0)]
NonNegativeInt = Annotated[int, Meta(ge=0)]

DIAGNOSTIC_CODE_PATTERN = "^[A-Z]{2,3}[0-9]{4}$"

DiagnosticCode = Annotated[
    str,
    Meta(
        pattern=DIAGNOSTIC_CODE_PATTERN,
        title="Diagnostic code",
        description="Stable build diagnostic code such as APT1147 or XA0003.",
    ),
]


class Severity(StrEnum):
    """Severity of a classified diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class OutputStream(StrEnum):
    """Origin stream of a captured packager line."""

    STDOUT = "stdout"
    STDERR = "stderr"


__all__ = [
    "DIAGNOSTIC_CODE_PATTERN",
    "DiagnosticCode",
    "JsonPrimitive",
    "JsonValue",
    "NonEmptyStr",
    "NonNegativeInt",
    "OutputStream",
    "PathLike",
    "PositiveInt",
    "Severity",
]
