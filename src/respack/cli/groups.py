"""Shared help-panel groups for the respack CLI."""

from __future__ import annotations

from cyclopts import Group

session_group = Group(
    "Session",
    help="Session and run context options.",
    sort_key=0,
)

inputs_group = Group(
    "Inputs",
    help="Manifests, resource directories and platform inputs.",
    sort_key=1,
)

output_group = Group(
    "Output",
    help="Packaged output, generated sources and symbols.",
    sort_key=2,
)

packaging_group = Group(
    "Packaging",
    help="Packager flags, ABIs and version codes.",
    sort_key=3,
)

execution_group = Group(
    "Execution",
    help="Packager location and parallelism.",
    sort_key=4,
)

observability_group = Group(
    "Observability",
    help="Configure OpenTelemetry tracing and metrics.",
    sort_key=8,
)

admin_group = Group(
    "Admin",
    help="Administrative commands and help.",
    sort_key=99,
)

__all__ = [
    "admin_group",
    "execution_group",
    "inputs_group",
    "observability_group",
    "output_group",
    "packaging_group",
    "session_group",
]
