"""Tests for the build host, cancellation token and bounded map."""

from __future__ import annotations

import threading
from pathlib import Path

from respack.build import CancellationToken, LoggingBuildHost, parallel_map, resolve_max_workers
from respack.core_types import Severity


def test_cancel_runs_callbacks_once() -> None:
    token = CancellationToken()
    calls: list[str] = []
    token.register(lambda: calls.append("a"))
    token.cancel()
    token.cancel()
    assert token.cancelled
    assert calls == ["a"]


def test_register_after_cancel_runs_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    calls: list[str] = []
    token.register(lambda: calls.append("late"))
    assert calls == ["late"]


def test_closed_registration_is_not_invoked() -> None:
    token = CancellationToken()
    calls: list[str] = []
    with token.register(lambda: calls.append("scoped")):
        pass
    token.cancel()
    assert calls == []


def test_failing_callback_does_not_block_others() -> None:
    token = CancellationToken()
    calls: list[str] = []

    def _boom() -> None:
        msg = "boom"
        raise RuntimeError(msg)

    token.register(_boom)
    token.register(lambda: calls.append("after"))
    token.cancel()
    assert calls == ["after"]


def test_wait_returns_when_cancelled_from_another_thread() -> None:
    token = CancellationToken()
    timer = threading.Timer(0.05, token.cancel)
    timer.start()
    assert token.wait(5.0)


def test_host_tracks_errors(tmp_path: Path) -> None:
    host = LoggingBuildHost(working_directory=tmp_path)
    host.log_message("hello")
    host.log_coded_warning("APT0000", "just a warning")
    assert not host.has_logged_errors
    host.log_coded_error("APT1147", "thing not found", "AndroidManifest.xml", 3)
    assert host.has_logged_errors
    records = host.diagnostics.snapshot()
    assert [record.severity for record in records] == [
        Severity.INFO,
        Severity.WARNING,
        Severity.ERROR,
    ]
    assert records[-1].render() == "AndroidManifest.xml(3): error APT1147: thing not found"
    assert host.diagnostics.counts_by_code() == {"APT0000": 1, "APT1147": 1}


def test_run_bounded_preserves_order(tmp_path: Path) -> None:
    host = LoggingBuildHost(working_directory=tmp_path, max_workers=4)
    assert host.run_bounded(range(10), lambda value: value * value) == [
        value * value for value in range(10)
    ]


def test_parallel_map_and_worker_resolution() -> None:
    assert parallel_map(["a", "b"], str.upper, max_workers=1) == ["A", "B"]
    assert resolve_max_workers(3) == 3
    assert resolve_max_workers(0) == 1
    assert resolve_max_workers(None) >= 1
