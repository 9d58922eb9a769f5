"""Contract tests for OpenTelemetry metrics."""

from __future__ import annotations

from pathlib import Path

from respack.build import LoggingBuildHost
from respack.obs.otel.metrics import (
    record_diagnostic,
    record_error,
    record_invocation_duration,
    record_stage_duration,
)
from respack.obs.otel.run_context import bound_run_id
from tests.obs._support.otel_harness import OtelHarness


def _metric_points(data: object, name: str) -> list[object]:
    if data is None:
        return []
    points: list[object] = []
    for resource_metric in getattr(data, "resource_metrics", ()):
        for scope_metric in getattr(resource_metric, "scope_metrics", ()):
            for metric in getattr(scope_metric, "metrics", ()):
                if getattr(metric, "name", None) != name:
                    continue
                payload = getattr(metric, "data", None)
                points.extend(getattr(payload, "data_points", ()))
    return points


def _metric_names(data: object) -> set[str]:
    names: set[str] = set()
    for resource_metric in getattr(data, "resource_metrics", ()):
        for scope_metric in getattr(resource_metric, "scope_metrics", ()):
            for metric in getattr(scope_metric, "metrics", ()):
                names.add(metric.name)
    return names


def test_metrics_catalog_emits(otel_harness: OtelHarness) -> None:
    """Ensure the metric catalog emits expected instrument names."""
    record_stage_duration("build", 0.5, status="ok")
    record_invocation_duration(0.2, abi=None, status="ok")
    record_diagnostic("APT1147", severity="error")
    record_error("invocation", "PackagerFailed")
    names = _metric_names(otel_harness.metric_reader.get_metrics_data())
    assert {
        "respack.stage.duration",
        "respack.invocation.duration",
        "respack.diagnostic.count",
        "respack.error.count",
    } <= names


def test_metrics_include_run_id(otel_harness: OtelHarness) -> None:
    """Ensure metrics carry the run_id when one is set."""
    with bound_run_id("run-1"):
        record_diagnostic("APT1064", severity="warning")
    points = _metric_points(otel_harness.metric_reader.get_metrics_data(), "respack.diagnostic.count")
    attributes = [dict(getattr(point, "attributes", {}) or {}) for point in points]
    assert any(
        attrs.get("respack.run_id") == "run-1" and attrs.get("code") == "APT1064"
        for attrs in attributes
    )


def test_host_counts_coded_diagnostics(otel_harness: OtelHarness, tmp_path: Path) -> None:
    """Ensure coded host diagnostics feed the diagnostic counter."""
    host = LoggingBuildHost(working_directory=tmp_path)
    host.log_coded_error("APT1147", "thing not found")
    host.log_coded_error("APT1147", "other not found")
    points = _metric_points(otel_harness.metric_reader.get_metrics_data(), "respack.diagnostic.count")
    totals = {
        dict(point.attributes or {}).get("code"): point.value  # type: ignore[attr-defined]
        for point in points
    }
    assert totals.get("APT1147") == 2
