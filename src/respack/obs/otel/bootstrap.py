"""OpenTelemetry bootstrap for respack processes."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    InMemoryMetricReader,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from respack.obs.otel.metrics import metric_views, reset_metrics_registry
from respack.utils.env_utils import env_bool, env_value

_LOGGER = logging.getLogger(__name__)

_DEFAULT_SERVICE_NAME = "respack"


@dataclass(frozen=True)
class OtelProviders:
    """Container for configured OpenTelemetry providers."""

    resource: Resource
    tracer_provider: TracerProvider | None
    meter_provider: MeterProvider | None
    span_exporter: InMemorySpanExporter | None = None
    metric_reader: InMemoryMetricReader | None = None

    def activate_global(self) -> None:
        """Activate providers as global defaults."""
        if self.tracer_provider is not None:
            trace.set_tracer_provider(self.tracer_provider)
        if self.meter_provider is not None:
            metrics.set_meter_provider(self.meter_provider)

    def shutdown(self) -> None:
        """Shutdown all configured providers."""
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()


@dataclass(frozen=True)
class OtelBootstrapOptions:
    """Optional overrides for bootstrap configuration."""

    enable_traces: bool | None = None
    enable_metrics: bool | None = None
    test_mode: bool | None = None


_STATE: dict[str, OtelProviders | None] = {"providers": None}


def _resolve_flag(value: bool | None, env_name: str) -> bool:
    if value is not None:
        return value
    return env_bool(env_name, default=False)


def _build_tracer_provider(
    resource: Resource,
    *,
    use_test_mode: bool,
) -> tuple[TracerProvider, InMemorySpanExporter | None]:
    tracer_provider = TracerProvider(resource=resource)
    if use_test_mode:
        exporter = InMemorySpanExporter()
        tracer_provider.add_span_processor(SimpleSpanProcessor(exporter))
        return tracer_provider, exporter
    tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    return tracer_provider, None


def _build_meter_provider(
    resource: Resource,
    *,
    use_test_mode: bool,
) -> tuple[MeterProvider, InMemoryMetricReader | None]:
    in_memory: InMemoryMetricReader | None = None
    reader: MetricReader
    if use_test_mode:
        in_memory = InMemoryMetricReader()
        reader = in_memory
    else:
        reader = PeriodicExportingMetricReader(ConsoleMetricExporter())
    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[reader],
        views=metric_views(),
    )
    reset_metrics_registry()
    return meter_provider, in_memory


def configure_otel(
    *,
    service_name: str | None = None,
    options: OtelBootstrapOptions | None = None,
) -> OtelProviders:
    """Configure OpenTelemetry providers for the current process.

    Traces and metrics stay on the no-op API providers unless enabled through
    ``options`` or ``RESPACK_ENABLE_TRACES`` / ``RESPACK_ENABLE_METRICS``. Test
    mode enables both with in-memory exporters.

    Returns
    -------
    OtelProviders
        Configured providers for traces and metrics.
    """
    resolved = options or OtelBootstrapOptions()
    if resolved.test_mode and _STATE["providers"] is not None:
        reset_providers_for_tests()
    if _STATE["providers"] is not None:
        return _STATE["providers"]
    use_test_mode = bool(resolved.test_mode)
    traces_enabled = use_test_mode or _resolve_flag(resolved.enable_traces, "RESPACK_ENABLE_TRACES")
    metrics_enabled = use_test_mode or _resolve_flag(
        resolved.enable_metrics, "RESPACK_ENABLE_METRICS"
    )
    name = service_name or env_value("OTEL_SERVICE_NAME") or _DEFAULT_SERVICE_NAME
    from respack import __version__

    resource = Resource.create({"service.name": name, "service.version": __version__})
    tracer_provider, span_exporter = (
        _build_tracer_provider(resource, use_test_mode=use_test_mode)
        if traces_enabled
        else (None, None)
    )
    meter_provider, metric_reader = (
        _build_meter_provider(resource, use_test_mode=use_test_mode)
        if metrics_enabled
        else (None, None)
    )
    providers = OtelProviders(
        resource=resource,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
        span_exporter=span_exporter,
        metric_reader=metric_reader,
    )
    providers.activate_global()
    _STATE["providers"] = providers
    _LOGGER.debug(
        "OpenTelemetry configured for service %s (traces=%s, metrics=%s)",
        name,
        traces_enabled,
        metrics_enabled,
    )
    return providers


def reset_providers_for_tests() -> None:
    """Reset global providers for test isolation."""
    providers = _STATE["providers"]
    if providers is not None:
        providers.shutdown()
    _STATE["providers"] = None
    from opentelemetry.metrics import _internal as metrics_internal

    def _reset_once(holder: object | None) -> None:
        if holder is None:
            return
        with contextlib.suppress(AttributeError):
            holder._done = False

    _reset_once(getattr(trace, "_TRACER_PROVIDER_SET_ONCE", None))
    _reset_once(getattr(metrics_internal, "_METER_PROVIDER_SET_ONCE", None))
    trace._TRACER_PROVIDER = None
    metrics_internal._METER_PROVIDER = None
    reset_metrics_registry()


__all__ = [
    "OtelBootstrapOptions",
    "OtelProviders",
    "configure_otel",
    "reset_providers_for_tests",
]
