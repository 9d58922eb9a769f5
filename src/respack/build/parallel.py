"""Bounded parallel execution for packager work items."""

from __future__ import annotations

import contextvars
import os
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor


def resolve_max_workers(max_workers: int | None) -> int:
    """Return ``max_workers`` clamped to at least 1, or the CPU count when unset."""
    if max_workers is not None:
        return max(1, max_workers)
    return max(1, os.cpu_count() or 1)


def parallel_map[T, U](
    items: Iterable[T],
    fn: Callable[[T], U],
    *,
    max_workers: int | None = None,
) -> list[U]:
    """Apply ``fn`` to every item on a bounded thread pool.

    Packaging work waits on subprocesses, so threads are used regardless of
    the GIL. Each item runs in a copy of the caller's ``contextvars`` context,
    which carries the active OpenTelemetry span and the run id into the
    worker. Blocks until every item has finished.

    Returns
    -------
    list[U]
        Results in input order.
    """
    work = list(items)
    if not work:
        return []
    parent = contextvars.copy_context()

    def _wrapped(item: T) -> U:
        return parent.copy().run(fn, item)

    workers = min(resolve_max_workers(max_workers), len(work))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="respack") as executor:
        return list(executor.map(_wrapped, work))


__all__ = ["parallel_map", "resolve_max_workers"]
