"""Time-ordered identifiers for build runs."""

from __future__ import annotations

import threading
from typing import Final

import uuid6

_UUID_LOCK: Final[threading.Lock] = threading.Lock()


def uuid7_str() -> str:
    """Return a UUIDv7 string (thread-safe, monotone within the process).

    Returns
    -------
    str
        String form of a fresh UUIDv7.
    """
    with _UUID_LOCK:
        return str(uuid6.uuid7())


def run_id() -> str:
    """Return a sortable run identifier."""
    return uuid7_str()


__all__ = ["run_id", "uuid7_str"]
