"""OpenTelemetry helpers for respack."""

from __future__ import annotations

from respack.obs.otel.bootstrap import (
    OtelBootstrapOptions,
    OtelProviders,
    configure_otel,
    reset_providers_for_tests,
)
from respack.obs.otel.metrics import (
    record_diagnostic,
    record_error,
    record_invocation_duration,
    record_stage_duration,
)
from respack.obs.otel.run_context import bound_run_id, get_run_id
from respack.obs.otel.scopes import SCOPE_BUILD, SCOPE_CLI, SCOPE_MANIFEST, SCOPE_PACKAGER
from respack.obs.otel.tracing import Stage, record_exception, stage_span

__all__ = [
    "SCOPE_BUILD",
    "SCOPE_CLI",
    "SCOPE_MANIFEST",
    "SCOPE_PACKAGER",
    "OtelBootstrapOptions",
    "OtelProviders",
    "Stage",
    "bound_run_id",
    "configure_otel",
    "get_run_id",
    "record_diagnostic",
    "record_error",
    "record_exception",
    "record_invocation_duration",
    "record_stage_duration",
    "reset_providers_for_tests",
    "stage_span",
]
