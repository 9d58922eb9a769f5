"""Tests for the packager subprocess runner."""

from __future__ import annotations

import sys
import threading
import time
from pathlib import Path

from respack.build import CancellationToken
from respack.core_types import OutputStream
from respack.packager.runner import run_packager

_SCRIPT = """
import sys
print("stdout one")
print("stderr one", file=sys.stderr)
print("stdout two")
sys.exit(3)
"""


def test_captures_both_streams_and_exit_code(tmp_path: Path) -> None:
    result = run_packager(
        [sys.executable, "-c", _SCRIPT], cwd=tmp_path, token=CancellationToken()
    )
    assert result.exit_code == 3
    assert not result.succeeded
    assert not result.cancelled
    assert result.stream_lines(OutputStream.STDOUT) == ["stdout one", "stdout two"]
    assert result.stream_lines(OutputStream.STDERR) == ["stderr one"]


def test_zero_exit_succeeds(tmp_path: Path) -> None:
    result = run_packager([sys.executable, "-c", "pass"], cwd=tmp_path, token=CancellationToken())
    assert result.succeeded
    assert result.lines == ()


def test_runs_in_working_directory(tmp_path: Path) -> None:
    script = "import os; print(os.getcwd())"
    result = run_packager([sys.executable, "-c", script], cwd=tmp_path, token=CancellationToken())
    assert Path(result.stream_lines(OutputStream.STDOUT)[0]).resolve() == tmp_path.resolve()


def test_cancellation_kills_process_and_keeps_output(tmp_path: Path) -> None:
    script = "import sys, time; print('started', flush=True); time.sleep(60)"
    token = CancellationToken()
    timer = threading.Timer(0.5, token.cancel)
    timer.start()
    try:
        result = run_packager([sys.executable, "-c", script], cwd=tmp_path, token=token)
    finally:
        timer.cancel()
    assert result.cancelled
    assert not result.succeeded
    assert result.stream_lines(OutputStream.STDOUT) == ["started"]


def test_pre_cancelled_token_does_not_launch(tmp_path: Path) -> None:
    token = CancellationToken()
    token.cancel()
    marker = tmp_path / "ran"
    script = f"open({str(marker)!r}, 'w').close()"
    result = run_packager([sys.executable, "-c", script], cwd=tmp_path, token=token)
    assert result.cancelled
    assert result.exit_code is None
    assert not marker.exists()


def test_launch_failure_is_reported_as_stderr(tmp_path: Path) -> None:
    missing = tmp_path / "no-such-packager"
    result = run_packager([str(missing)], cwd=tmp_path, token=CancellationToken())
    assert result.exit_code is None
    assert len(result.lines) == 1
    assert result.lines[0].is_stderr
    assert result.lines[0].text.startswith(f"error: unable to launch '{missing}'")


def test_drain_wait_is_bounded_when_grandchild_holds_pipes(tmp_path: Path) -> None:
    script = (
        "import subprocess, sys\n"
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(5)'])\n"
        "print('parent done', flush=True)\n"
    )
    start = time.monotonic()
    result = run_packager(
        [sys.executable, "-c", script],
        cwd=tmp_path,
        token=CancellationToken(),
        drain_timeout_s=0.5,
    )
    elapsed = time.monotonic() - start
    assert result.succeeded
    assert result.stream_lines(OutputStream.STDOUT) == ["parent done"]
    assert elapsed < 4.0
