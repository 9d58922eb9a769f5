"""Canonical OpenTelemetry constants for respack."""

from __future__ import annotations

from enum import StrEnum


class MetricName(StrEnum):
    """Canonical metric names."""

    STAGE_DURATION = "respack.stage.duration"
    INVOCATION_DURATION = "respack.invocation.duration"
    DIAGNOSTIC_COUNT = "respack.diagnostic.count"
    ERROR_COUNT = "respack.error.count"


class AttributeName(StrEnum):
    """Canonical attribute names."""

    RUN_ID = "respack.run_id"
    STAGE = "stage"
    STATUS = "status"
    ABI = "abi"
    CODE = "code"
    SEVERITY = "severity"
    ERROR_TYPE = "error_type"
    STAGE_NAME = "respack.stage"
    MANIFEST = "respack.manifest"
    DURATION_S = "duration_s"
    COMMAND = "respack.command"


class ScopeName(StrEnum):
    """Canonical instrumentation scope names."""

    ROOT = "respack"
    BUILD = "respack.build"
    PACKAGER = "respack.packager"
    MANIFEST = "respack.manifest"
    CLI = "respack.cli"
    OBS = "respack.obs"


__all__ = [
    "AttributeName",
    "MetricName",
    "ScopeName",
]
