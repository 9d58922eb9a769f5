"""Build host: diagnostics sink, cancellation token and work distribution.

The packager pipeline never logs or schedules work directly; it goes through a
``BuildHost`` so tests and embedding build systems can supply their own.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from respack.build.parallel import parallel_map
from respack.core_types import Severity
from respack.obs.diagnostics import DiagnosticRecord, DiagnosticsCollector
from respack.obs.otel.metrics import record_diagnostic

logger = logging.getLogger(__name__)


class Registration:
    """Handle returned by ``CancellationToken.register``."""

    def __init__(self, token: CancellationToken, callback: Callable[[], None]) -> None:
        self._token = token
        self._callback = callback

    def close(self) -> None:
        """Remove the callback from the token; safe to call repeatedly."""
        self._token._unregister(self)

    def __enter__(self) -> Registration:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class CancellationToken:
    """Thread-safe, one-shot cancellation signal with kill callbacks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._registrations: list[Registration] = []

    @property
    def cancelled(self) -> bool:
        """Return True once ``cancel`` has been called."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses.

        Returns
        -------
        bool
            True when the token is cancelled.
        """
        return self._event.wait(timeout)

    def register(self, callback: Callable[[], None]) -> Registration:
        """Register ``callback`` to run on cancellation.

        The callback runs immediately when the token is already cancelled.

        Returns
        -------
        Registration
            Handle used to remove the callback.
        """
        registration = Registration(self, callback)
        with self._lock:
            if not self._event.is_set():
                self._registrations.append(registration)
                return registration
        _invoke(callback)
        return registration

    def cancel(self) -> None:
        """Signal cancellation and run every registered callback once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            pending = list(self._registrations)
            self._registrations.clear()
        for registration in pending:
            _invoke(registration._callback)

    def _unregister(self, registration: Registration) -> None:
        with self._lock:
            if registration in self._registrations:
                self._registrations.remove(registration)


def _invoke(callback: Callable[[], None]) -> None:
    try:
        callback()
    except Exception:
        logger.exception("Cancellation callback failed")


class BuildHost(Protocol):
    """Services the packager pipeline consumes from its embedding build."""

    @property
    def working_directory(self) -> Path: ...

    @property
    def cancellation(self) -> CancellationToken: ...

    @property
    def has_logged_errors(self) -> bool: ...

    def log_message(self, message: str) -> None: ...

    def log_debug(self, message: str) -> None: ...

    def log_coded_error(
        self, code: str, message: str, file: str | None = None, line: int = 0
    ) -> None: ...

    def log_coded_warning(
        self, code: str, message: str, file: str | None = None, line: int = 0
    ) -> None: ...

    def run_bounded[T, U](self, items: Iterable[T], fn: Callable[[T], U]) -> list[U]: ...


@dataclass
class LoggingBuildHost:
    """``BuildHost`` backed by stdlib logging and a diagnostics collector.

    Parameters
    ----------
    working_directory
        Directory relative paths resolve against and the packager runs in.
    max_workers
        Upper bound on concurrently processed manifests.
    """

    working_directory: Path
    max_workers: int | None = None
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    diagnostics: DiagnosticsCollector = field(default_factory=DiagnosticsCollector)
    log: logging.Logger = field(default=logger, repr=False)

    @property
    def has_logged_errors(self) -> bool:
        """Return True once any coded error has been reported."""
        return self.diagnostics.error_count > 0

    def log_message(self, message: str) -> None:
        self.log.info("%s", message)
        self.diagnostics.record(DiagnosticRecord(severity=Severity.INFO, message=message))

    def log_debug(self, message: str) -> None:
        self.log.debug("%s", message)

    def log_coded_error(
        self, code: str, message: str, file: str | None = None, line: int = 0
    ) -> None:
        self.log_record(
            DiagnosticRecord(
                severity=Severity.ERROR, code=code, message=message, file=file, line=line
            )
        )

    def log_coded_warning(
        self, code: str, message: str, file: str | None = None, line: int = 0
    ) -> None:
        self.log_record(
            DiagnosticRecord(
                severity=Severity.WARNING, code=code, message=message, file=file, line=line
            )
        )

    def log_record(self, record: DiagnosticRecord) -> None:
        """Log and collect a classified record."""
        if record.severity is Severity.INFO:
            self.log_message(record.message)
            return
        level = logging.ERROR if record.is_error else logging.WARNING
        self.log.log(level, "%s", record.render())
        self.diagnostics.record(record)
        if record.code:
            record_diagnostic(record.code, severity=record.severity)

    def run_bounded[T, U](self, items: Iterable[T], fn: Callable[[T], U]) -> list[U]:
        return parallel_map(items, fn, max_workers=self.max_workers)


__all__ = ["BuildHost", "CancellationToken", "LoggingBuildHost", "Registration"]
