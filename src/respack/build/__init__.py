"""Build host services: logging, cancellation and bounded parallelism."""

from __future__ import annotations

from respack.build.host import BuildHost, CancellationToken, LoggingBuildHost, Registration
from respack.build.parallel import parallel_map, resolve_max_workers

__all__ = [
    "BuildHost",
    "CancellationToken",
    "LoggingBuildHost",
    "Registration",
    "parallel_map",
    "resolve_max_workers",
]
