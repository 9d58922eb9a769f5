"""Contract tests for OpenTelemetry tracing."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.trace import StatusCode

from respack.build import CancellationToken, LoggingBuildHost
from respack.obs.otel import SCOPE_BUILD, stage_span
from respack.packager.orchestrator import run_build
from respack.packager.runner import RunResult
from tests.obs._support.otel_harness import OtelHarness
from tests.test_helpers.manifests import make_request, write_manifest


def test_stage_span_contract(otel_harness: OtelHarness) -> None:
    """Validate stage span attributes."""
    with stage_span("respack.test", stage="test", scope_name=SCOPE_BUILD, attributes={"k": "v"}):
        pass
    spans = [span for span in otel_harness.span_exporter.get_finished_spans() if span.name == "respack.test"]
    assert spans
    attributes = spans[-1].attributes or {}
    assert attributes.get("respack.stage") == "test"
    assert attributes.get("k") == "v"
    assert attributes.get("status") == "ok"


def test_stage_span_records_errors(otel_harness: OtelHarness) -> None:
    """Validate that a failing stage marks its span as an error."""
    with pytest.raises(RuntimeError):
        with stage_span("respack.fail", stage="test", scope_name=SCOPE_BUILD):
            msg = "boom"
            raise RuntimeError(msg)
    spans = [span for span in otel_harness.span_exporter.get_finished_spans() if span.name == "respack.fail"]
    assert spans
    assert (spans[-1].attributes or {}).get("status") == "error"
    assert spans[-1].status.status_code is StatusCode.ERROR


def _runner(
    argv: Sequence[str],
    *,
    cwd: Path,
    token: CancellationToken,
    drain_timeout_s: float = 30.0,
) -> RunResult:
    _ = (cwd, token, drain_timeout_s)
    output = Path(argv[list(argv).index("-F") + 1])
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(b"apk")
    return RunResult(exit_code=0, lines=())


def test_build_span_hierarchy(otel_harness: OtelHarness, tmp_path: Path) -> None:
    """Validate that invocation spans nest under manifest and build spans."""
    write_manifest(tmp_path / "AndroidManifest.xml")
    request = make_request(tmp_path, supported_abis=("x86", "x86_64"), create_package_per_abi=True)
    result = run_build(request, host=LoggingBuildHost(working_directory=tmp_path), runner=_runner)
    assert result.ok
    spans = otel_harness.span_exporter.get_finished_spans()
    by_name: dict[str, list[ReadableSpan]] = {}
    for span in spans:
        by_name.setdefault(span.name, []).append(span)
    assert len(by_name["respack.build"]) == 1
    assert len(by_name["respack.manifest"]) == 1
    assert len(by_name["respack.invocation"]) == 3
    build_span = by_name["respack.build"][0]
    manifest_span = by_name["respack.manifest"][0]
    assert manifest_span.parent is not None
    assert manifest_span.parent.span_id == build_span.context.span_id
    for invocation in by_name["respack.invocation"]:
        assert invocation.parent is not None
        assert invocation.parent.span_id == manifest_span.context.span_id


def test_failed_invocation_marks_spans(otel_harness: OtelHarness, tmp_path: Path) -> None:
    """Validate that a packager failure marks invocation and manifest spans as errors."""

    def _failing(argv: Sequence[str], **_kwargs: object) -> RunResult:
        _ = argv
        return RunResult(exit_code=1, lines=())

    write_manifest(tmp_path / "AndroidManifest.xml")
    request = make_request(tmp_path)
    result = run_build(request, host=LoggingBuildHost(working_directory=tmp_path), runner=_failing)
    assert not result.ok
    spans = {span.name: span for span in otel_harness.span_exporter.get_finished_spans()}
    invocation = spans["respack.invocation"]
    assert invocation.status.status_code is StatusCode.ERROR
    assert (invocation.attributes or {}).get("status") == "error"
    assert spans["respack.manifest"].status.status_code is StatusCode.ERROR
    assert (spans["respack.build"].attributes or {}).get("status") == "ok"
