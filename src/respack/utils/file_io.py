"""File I/O helpers with consistent encoding and atomic replacement."""

from __future__ import annotations

import hashlib
import os
import shutil
from collections.abc import Mapping
from pathlib import Path

import msgspec

_CHUNK_SIZE = 1024 * 1024


def read_toml(path: Path) -> Mapping[str, object]:
    """Read and parse a TOML file.

    Parameters
    ----------
    path
        Path to the TOML file.

    Returns
    -------
    Mapping[str, object]
        Parsed TOML content.

    Raises
    ------
    TypeError
        Raised when the TOML content is not a mapping.
    """
    payload = msgspec.toml.decode(path.read_text(encoding="utf-8"), type=object, strict=True)
    if not isinstance(payload, dict):
        msg = f"Expected TOML mapping in {path}, got {type(payload).__name__}."
        raise TypeError(msg)
    return payload


def read_lines(path: Path, *, encoding: str = "utf-8") -> list[str]:
    """Read a text file as a list of lines without line terminators.

    Returns
    -------
    list[str]
        File lines; empty when the file does not exist.
    """
    if not path.is_file():
        return []
    return path.read_text(encoding=encoding).splitlines()


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def files_identical(left: Path, right: Path) -> bool:
    """Return True when both files exist and have identical content.

    Returns
    -------
    bool
        ``True`` when sizes and digests match.
    """
    if not (left.is_file() and right.is_file()):
        return False
    if left.stat().st_size != right.stat().st_size:
        return False
    return sha256_file(left) == sha256_file(right)


def replace_if_changed(source: Path, dest: Path) -> bool:
    """Atomically replace ``dest`` with the content of ``source``.

    The content is first copied beside ``dest`` and then moved over it with
    ``os.replace`` so readers never observe a partially written file.

    Parameters
    ----------
    source
        File holding the new content.
    dest
        Final location.

    Returns
    -------
    bool
        ``True`` when ``dest`` was written, ``False`` when it already held
        identical content.
    """
    if files_identical(source, dest):
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_name(dest.name + ".tmp")
    if tmp.exists():
        tmp.unlink()
    try:
        shutil.copyfile(source, tmp)
        os.replace(tmp, dest)
    finally:
        tmp.unlink(missing_ok=True)
    return True


__all__ = ["files_identical", "read_lines", "read_toml", "replace_if_changed", "sha256_file"]
