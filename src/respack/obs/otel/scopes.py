"""Canonical OpenTelemetry instrumentation scopes for respack."""

from __future__ import annotations

from respack.obs.otel.constants import ScopeName

SCOPE_ROOT = ScopeName.ROOT
SCOPE_BUILD = ScopeName.BUILD
SCOPE_PACKAGER = ScopeName.PACKAGER
SCOPE_MANIFEST = ScopeName.MANIFEST
SCOPE_CLI = ScopeName.CLI
SCOPE_OBS = ScopeName.OBS

__all__ = [
    "SCOPE_BUILD",
    "SCOPE_CLI",
    "SCOPE_MANIFEST",
    "SCOPE_OBS",
    "SCOPE_PACKAGER",
    "SCOPE_ROOT",
]
