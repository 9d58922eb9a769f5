"""Metrics catalog and helpers for respack telemetry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from opentelemetry import metrics
from opentelemetry.sdk.metrics.view import ExplicitBucketHistogramAggregation, View

from respack.obs.otel.attributes import normalize_attributes
from respack.obs.otel.constants import AttributeName, MetricName
from respack.obs.otel.run_context import get_run_id
from respack.obs.otel.scopes import SCOPE_OBS

_DEFAULT_BUCKETS_S = (
    0.01,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.0,
    5.0,
    10.0,
    30.0,
    60.0,
    120.0,
)


@dataclass
class MetricsRegistry:
    """Registry for respack metric instruments."""

    stage_duration: metrics.Histogram
    invocation_duration: metrics.Histogram
    diagnostic_count: metrics.Counter
    error_count: metrics.Counter


_REGISTRY_CACHE: dict[str, MetricsRegistry | None] = {"value": None}


def _meter() -> metrics.Meter:
    from respack import __version__

    return metrics.get_meter(SCOPE_OBS, __version__)


def _with_run_id(payload: dict[str, object]) -> dict[str, object]:
    run_id = get_run_id()
    if run_id:
        payload[AttributeName.RUN_ID] = run_id
    return payload


def metric_views() -> list[View]:
    """Return default metric Views for the OTel MeterProvider.

    Returns
    -------
    list[View]
        Configured metric views for respack instruments.
    """
    histogram = ExplicitBucketHistogramAggregation(list(_DEFAULT_BUCKETS_S))
    return [
        View(
            instrument_name=MetricName.STAGE_DURATION,
            aggregation=histogram,
            attribute_keys={AttributeName.RUN_ID, AttributeName.STAGE, AttributeName.STATUS},
        ),
        View(
            instrument_name=MetricName.INVOCATION_DURATION,
            aggregation=histogram,
            attribute_keys={AttributeName.RUN_ID, AttributeName.ABI, AttributeName.STATUS},
        ),
        View(
            instrument_name=MetricName.DIAGNOSTIC_COUNT,
            attribute_keys={AttributeName.RUN_ID, AttributeName.CODE, AttributeName.SEVERITY},
        ),
        View(
            instrument_name=MetricName.ERROR_COUNT,
            attribute_keys={AttributeName.RUN_ID, AttributeName.ERROR_TYPE, AttributeName.STAGE},
        ),
    ]


def reset_metrics_registry() -> None:
    """Reset cached metric instruments so they can be re-created."""
    _REGISTRY_CACHE["value"] = None


def _registry() -> MetricsRegistry:
    cached = _REGISTRY_CACHE["value"]
    if cached is not None:
        return cached
    meter = _meter()
    registry = MetricsRegistry(
        stage_duration=meter.create_histogram(
            MetricName.STAGE_DURATION,
            unit="s",
            description="Build stage duration (seconds).",
        ),
        invocation_duration=meter.create_histogram(
            MetricName.INVOCATION_DURATION,
            unit="s",
            description="Packager subprocess duration (seconds).",
        ),
        diagnostic_count=meter.create_counter(
            MetricName.DIAGNOSTIC_COUNT,
            unit="1",
            description="Coded diagnostics reported during a build.",
        ),
        error_count=meter.create_counter(
            MetricName.ERROR_COUNT,
            unit="1",
            description="Error counts emitted by the build.",
        ),
    )
    _REGISTRY_CACHE["value"] = registry
    return registry


def record_stage_duration(
    stage: str,
    duration_s: float,
    *,
    status: str,
    attributes: Mapping[str, object] | None = None,
) -> None:
    """Record a stage duration histogram value."""
    registry = _registry()
    payload: dict[str, object] = {AttributeName.STAGE: stage, AttributeName.STATUS: status}
    if attributes:
        payload.update(attributes)
    registry.stage_duration.record(duration_s, normalize_attributes(_with_run_id(payload)))


def record_invocation_duration(
    duration_s: float,
    *,
    abi: str | None,
    status: str,
) -> None:
    """Record one packager invocation's wall time."""
    registry = _registry()
    payload: dict[str, object] = {AttributeName.ABI: abi or "primary", AttributeName.STATUS: status}
    registry.invocation_duration.record(duration_s, normalize_attributes(_with_run_id(payload)))


def record_diagnostic(code: str, *, severity: str) -> None:
    """Increment the diagnostic count metric."""
    registry = _registry()
    payload: dict[str, object] = {AttributeName.CODE: code, AttributeName.SEVERITY: severity}
    registry.diagnostic_count.add(1, normalize_attributes(_with_run_id(payload)))


def record_error(
    stage: str,
    error_type: str,
    *,
    attributes: Mapping[str, object] | None = None,
) -> None:
    """Increment the error count metric."""
    registry = _registry()
    payload: dict[str, object] = {AttributeName.STAGE: stage, AttributeName.ERROR_TYPE: error_type}
    if attributes:
        payload.update(attributes)
    registry.error_count.add(1, normalize_attributes(_with_run_id(payload)))


__all__ = [
    "metric_views",
    "record_diagnostic",
    "record_error",
    "record_invocation_duration",
    "record_stage_duration",
    "reset_metrics_registry",
]
