"""Run the packager as a cancellable subprocess and capture its output."""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Protocol

from respack.build.host import CancellationToken
from respack.core_types import OutputStream

logger = logging.getLogger(__name__)

DEFAULT_DRAIN_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class OutputLine:
    """One captured line and the stream it came from."""

    text: str
    stream: OutputStream

    @property
    def is_stderr(self) -> bool:
        return self.stream is OutputStream.STDERR


@dataclass(frozen=True)
class RunResult:
    """Outcome of one packager subprocess."""

    exit_code: int | None
    lines: tuple[OutputLine, ...]
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        """Return True when the process exited with code 0."""
        return self.exit_code == 0

    def stream_lines(self, stream: OutputStream) -> list[str]:
        return [line.text for line in self.lines if line.stream is stream]


class PackagerRunner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        token: CancellationToken,
        drain_timeout_s: float = DEFAULT_DRAIN_TIMEOUT_S,
    ) -> RunResult: ...


class _OutputLog:
    """Shared, order-preserving line log fed by both reader threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: list[OutputLine] = []

    def append(self, line: OutputLine) -> None:
        with self._lock:
            self._lines.append(line)

    def snapshot(self) -> tuple[OutputLine, ...]:
        with self._lock:
            return tuple(self._lines)


def _pump(
    pipe: IO[str],
    stream: OutputStream,
    log: _OutputLog,
    done: threading.Event,
) -> None:
    try:
        for raw in pipe:
            log.append(OutputLine(raw.rstrip("\r\n"), stream))
    finally:
        pipe.close()
        done.set()


def _kill(proc: subprocess.Popen[str]) -> None:
    try:
        proc.kill()
    except (ProcessLookupError, OSError):
        pass


def run_packager(
    argv: Sequence[str],
    *,
    cwd: Path,
    token: CancellationToken,
    drain_timeout_s: float = DEFAULT_DRAIN_TIMEOUT_S,
) -> RunResult:
    """Run the packager and capture both output streams.

    Parameters
    ----------
    argv
        Executable followed by its arguments.
    cwd
        Working directory of the process.
    token
        Cancelling the token kills the process; output captured up to that
        point is still returned.
    drain_timeout_s
        How long to wait for each stream to reach EOF after the process
        exits.

    Returns
    -------
    RunResult
        Exit code and captured lines. A process that cannot be started yields
        ``exit_code=None`` and one synthesized stderr line.
    """
    if token.cancelled:
        return RunResult(exit_code=None, lines=(), cancelled=True)
    logger.debug("Executing %s", subprocess.list2cmdline(list(argv)))
    try:
        proc = subprocess.Popen(
            list(argv),
            cwd=str(cwd),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
            errors="replace",
        )
    except OSError as exc:
        message = f"error: unable to launch '{argv[0]}': {exc.strerror or exc}"
        return RunResult(
            exit_code=None,
            lines=(OutputLine(message, OutputStream.STDERR),),
        )
    log = _OutputLog()
    readers: list[tuple[threading.Thread, threading.Event]] = []
    for pipe, stream in ((proc.stdout, OutputStream.STDOUT), (proc.stderr, OutputStream.STDERR)):
        if pipe is None:
            continue
        done = threading.Event()
        thread = threading.Thread(
            target=_pump,
            args=(pipe, stream, log, done),
            name=f"respack-{stream}",
            daemon=True,
        )
        thread.start()
        readers.append((thread, done))
    with token.register(lambda: _kill(proc)):
        exit_code = proc.wait()
    for _thread, done in readers:
        if not done.wait(drain_timeout_s):
            logger.warning("Timed out draining packager output after %.1fs", drain_timeout_s)
    return RunResult(exit_code=exit_code, lines=log.snapshot(), cancelled=token.cancelled)


__all__ = [
    "DEFAULT_DRAIN_TIMEOUT_S",
    "OutputLine",
    "PackagerRunner",
    "RunResult",
    "run_packager",
]
