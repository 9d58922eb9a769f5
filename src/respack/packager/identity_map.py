"""Assembly identity map: stable short directory names for library imports."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from respack.utils.file_io import read_lines

logger = logging.getLogger(__name__)


class AssemblyIdentityMap:
    """Ordered list of assembly names; an entry's index is its short name.

    Lookups append unknown names, so short names stay stable for the lifetime
    of one build.
    """

    def __init__(self, entries: list[str] | None = None) -> None:
        self._entries: list[str] = list(entries or [])
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: Path | str | None) -> AssemblyIdentityMap:
        """Read one assembly name per line; a missing file gives an empty map.

        Returns
        -------
        AssemblyIdentityMap
            Map seeded from ``path``.
        """
        if not path:
            return cls()
        entries = [line.strip() for line in read_lines(Path(path)) if line.strip()]
        logger.debug("Loaded %d assembly identities from %s", len(entries), path)
        return cls(entries)

    def resolve_short_directory_name(self, assembly_name: str) -> str:
        """Return the short directory name for ``assembly_name``.

        Returns
        -------
        str
            Decimal index of the entry.
        """
        with self._lock:
            try:
                index = self._entries.index(assembly_name)
            except ValueError:
                self._entries.append(assembly_name)
                index = len(self._entries) - 1
        return str(index)

    def entries(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["AssemblyIdentityMap"]
