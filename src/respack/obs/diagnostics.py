"""Diagnostic records and an in-memory, thread-safe collector."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field

from respack.core_types import DiagnosticCode, NonNegativeInt, Severity
from respack.serde_msgspec import StructBaseStrict


class DiagnosticRecord(StructBaseStrict, frozen=True):
    """One coded build diagnostic.

    ``line`` is 1-based; ``0`` means the location is unknown.
    """

    severity: Severity
    message: str
    code: DiagnosticCode | None = None
    file: str | None = None
    line: NonNegativeInt = 0

    @property
    def is_error(self) -> bool:
        """Return True for error-severity records."""
        return self.severity is Severity.ERROR

    def render(self) -> str:
        """Return the conventional ``file(line): severity CODE: message`` form.

        Returns
        -------
        str
            Human-readable diagnostic line.
        """
        location = ""
        if self.file:
            location = f"{self.file}({self.line}): " if self.line else f"{self.file}: "
        if self.code:
            return f"{location}{self.severity} {self.code}: {self.message}"
        return f"{location}{self.message}"


@dataclass
class DiagnosticsCollector:
    """Collect diagnostic records in-memory across worker threads."""

    records: list[DiagnosticRecord] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, record: DiagnosticRecord) -> None:
        """Append a diagnostic record."""
        with self._lock:
            self.records.append(record)

    def snapshot(self) -> list[DiagnosticRecord]:
        """Return a copy of the collected records.

        Returns
        -------
        list[DiagnosticRecord]
            Records in arrival order.
        """
        with self._lock:
            return list(self.records)

    @property
    def error_count(self) -> int:
        """Return the number of error records collected."""
        with self._lock:
            return sum(1 for record in self.records if record.is_error)

    def counts_by_code(self) -> dict[str, int]:
        """Return record counts keyed by diagnostic code.

        Returns
        -------
        dict[str, int]
            Counts for records carrying a code.
        """
        with self._lock:
            counts = Counter(record.code for record in self.records if record.code)
        return dict(counts)


__all__ = ["DiagnosticRecord", "DiagnosticsCollector"]
