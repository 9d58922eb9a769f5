"""Tests for exit code mapping and CLI results."""

from __future__ import annotations

from pathlib import Path

from respack.cli.config_models import ConfigError
from respack.cli.exit_codes import ExitCode
from respack.cli.result import CliResult
from respack.cli.result_action import render_result
from respack.core_types import Severity
from respack.obs.diagnostics import DiagnosticRecord
from respack.packager.orchestrator import (
    BuildResult,
    InvocationOutcome,
    ManifestOutcome,
    ManifestState,
)


def test_exception_mapping() -> None:
    assert ExitCode.from_exception(ConfigError("bad")) is ExitCode.CONFIG_ERROR
    assert ExitCode.from_exception(FileExistsError("x")) is ExitCode.CONFIG_ERROR
    assert ExitCode.from_exception(ValueError("x")) is ExitCode.VALIDATION_ERROR
    assert ExitCode.from_exception(OSError("x")) is ExitCode.EXECUTION_ERROR
    assert ExitCode.from_exception(RuntimeError("x")) is ExitCode.GENERAL_ERROR


def test_cli_result_from_exception() -> None:
    result = CliResult.from_exception(ConfigError("broken config"))
    assert not result.ok
    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert result.summary == "broken config"


def test_render_result_returns_exit_code() -> None:
    assert render_result(None) == 0
    assert render_result(13) == 13
    assert render_result(True) == 0
    assert render_result(CliResult.error(ExitCode.EXECUTION_ERROR, summary="failed")) == 13
    assert render_result(object()) == ExitCode.GENERAL_ERROR


def test_exit_code_for_diagnostics() -> None:
    warning = DiagnosticRecord(severity=Severity.WARNING, code="APT0000", message="w")
    error = DiagnosticRecord(severity=Severity.ERROR, code="APT1147", message="e")
    assert ExitCode.for_diagnostics([warning]) is ExitCode.SUCCESS
    assert ExitCode.for_diagnostics([warning, error]) is ExitCode.EXECUTION_ERROR


def _outcome(state: ManifestState, *, promoted: bool = False) -> ManifestOutcome:
    invocation = InvocationOutcome(
        abi=None, output_path="out/app.apk", exit_code=0, succeeded=True, promoted=promoted
    )
    return ManifestOutcome(manifest="/p/AndroidManifest.xml", state=state, invocations=(invocation,))


def test_cli_result_from_successful_build() -> None:
    build = BuildResult(
        ok=True,
        cancelled=False,
        manifests=(_outcome(ManifestState.COMPLETED, promoted=True),),
        duration_s=0.5,
    )
    result = CliResult.from_build(build)
    assert result.ok
    assert result.summary == "Build succeeded (1 completed)."
    assert result.artifacts == {"/p/AndroidManifest.xml (primary)": Path("out/app.apk")}
    assert result.metrics["duration_ms"] == 500.0


def test_cli_result_prefers_failure_over_cancellation() -> None:
    error = DiagnosticRecord(severity=Severity.ERROR, code="APT1147", message="e")
    failed = BuildResult(
        ok=False,
        cancelled=True,
        manifests=(_outcome(ManifestState.FAILED), _outcome(ManifestState.CANCELLED)),
        diagnostics=(error,),
    )
    summary = CliResult.from_build(failed).summary
    assert summary == "Build failed with 1 error(s) (1 failed, 1 cancelled)."

    interrupted = BuildResult(ok=False, cancelled=True, manifests=(_outcome(ManifestState.CANCELLED),))
    result = CliResult.from_build(interrupted)
    assert result.exit_code == ExitCode.EXECUTION_ERROR
    assert result.summary == "Build cancelled (1 cancelled)."
