"""Observability helpers: diagnostics collection and OpenTelemetry."""
