"""msgspec struct policy and JSON helpers shared across respack."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import IO, Any

import msgspec


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base for immutable records that reject unknown fields."""


_VALIDATION_RE = re.compile(r"^(?P<summary>.*?)(?:\s+-\s+at\s+`(?P<path>[^`]+)`)?$")


def _enc_hook(obj: object) -> object:
    if isinstance(obj, Path):
        return str(obj)
    raise NotImplementedError


def _dec_hook(type_hint: Any, obj: object) -> object:
    if type_hint is Path and isinstance(obj, str):
        return Path(obj)
    raise NotImplementedError


JSON_ENCODER = msgspec.json.Encoder(enc_hook=_enc_hook, order="deterministic")


def split_validation_error(exc: msgspec.ValidationError) -> tuple[str, str | None]:
    """Split a msgspec validation message into its summary and field path.

    ``"Expected `int`, got `str` - at `$.package.api_level`"`` becomes
    ``("Expected `int`, got `str`", "$.package.api_level")``.

    Returns
    -------
    tuple[str, str | None]
        Summary text and the offending path, if msgspec reported one.
    """
    message = str(exc).strip()
    match = _VALIDATION_RE.match(message)
    if match is None or not match.group("summary"):
        return message, None
    return match.group("summary").strip(), match.group("path")


def dumps_json(obj: object, *, pretty: bool = False) -> bytes:
    raw = JSON_ENCODER.encode(obj)
    return msgspec.json.format(raw, indent=2) if pretty else raw


def write_json(obj: object, *, stream: IO[str] | None = None) -> None:
    """Write ``obj`` as indented JSON plus a newline to ``stream`` (stdout)."""
    out = stream or sys.stdout
    out.write(dumps_json(obj, pretty=True).decode("utf-8") + "\n")


def convert[T](obj: object, *, target_type: type[T], strict: bool = True) -> T:
    return msgspec.convert(obj, type=target_type, strict=strict, dec_hook=_dec_hook)


__all__ = [
    "JSON_ENCODER",
    "StructBaseStrict",
    "convert",
    "dumps_json",
    "split_validation_error",
    "write_json",
]
