"""Stage spans for the build, manifest, invocation and CLI stages."""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from respack.obs.otel.attributes import normalize_attributes
from respack.obs.otel.constants import AttributeName
from respack.obs.otel.metrics import record_stage_duration
from respack.obs.otel.run_context import get_run_id


def get_tracer(scope_name: str) -> trace.Tracer:
    from respack import __version__

    return trace.get_tracer(scope_name, instrumenting_library_version=__version__)


@dataclass
class Stage:
    """Handle on a running stage span.

    Stages that fail without raising (a packager exiting nonzero, a manifest
    that could not be prepared) call ``fail`` so the span and the stage
    duration metric both carry ``status=error``.
    """

    span: Span
    status: str = "ok"

    def fail(self, reason: str) -> None:
        self.status = "error"
        self.span.set_status(Status(StatusCode.ERROR, reason))

    def set_attributes(self, attrs: Mapping[str, object]) -> None:
        for key, value in normalize_attributes(attrs).items():
            self.span.set_attribute(key, value)


def record_exception(span: Span, exc: Exception) -> None:
    """Record ``exc`` on ``span`` and mark the span as failed."""
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))


@contextmanager
def stage_span(
    name: str,
    *,
    stage: str,
    scope_name: str,
    attributes: Mapping[str, object] | None = None,
) -> Iterator[Stage]:
    """Run a block inside a stage span and record its duration.

    Parameters
    ----------
    name
        Span name, e.g. ``respack.invocation``.
    stage
        Stage label used for the ``respack.stage`` attribute and the stage
        duration histogram.
    scope_name
        Instrumentation scope of the tracer.
    attributes
        Extra span attributes. The current run id is added automatically.

    Yields
    ------
    Stage
        Handle used to mark the stage failed or add attributes.
    """
    base_attrs: dict[str, object] = {AttributeName.STAGE_NAME: stage}
    run_id = get_run_id()
    if run_id:
        base_attrs[AttributeName.RUN_ID] = run_id
    if attributes:
        base_attrs.update(attributes)
    start = time.monotonic()
    with get_tracer(scope_name).start_as_current_span(
        name,
        attributes=normalize_attributes(base_attrs),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        handle = Stage(span=span)
        try:
            yield handle
        except Exception as exc:
            handle.status = "error"
            record_exception(span, exc)
            raise
        finally:
            duration_s = time.monotonic() - start
            record_stage_duration(stage, duration_s, status=handle.status)
            handle.set_attributes(
                {AttributeName.DURATION_S: duration_s, AttributeName.STATUS: handle.status}
            )


__all__ = ["Stage", "get_tracer", "record_exception", "stage_span"]
