"""Fixtures for OpenTelemetry contract tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from respack.obs.otel import reset_providers_for_tests
from tests.obs._support.otel_harness import OtelHarness, get_otel_harness


@pytest.fixture
def otel_harness() -> Iterator[OtelHarness]:
    """Yield an in-memory harness and restore no-op providers afterwards."""
    harness = get_otel_harness()
    yield harness
    reset_providers_for_tests()
