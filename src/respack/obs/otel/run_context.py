"""Run id propagated to spans and metric attributes."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_RUN_ID: ContextVar[str | None] = ContextVar("respack.run_id", default=None)


def get_run_id() -> str | None:
    return _RUN_ID.get()


@contextmanager
def bound_run_id(run_id: str) -> Iterator[str]:
    """Tag telemetry recorded inside the block with ``run_id``.

    Worker threads started by ``parallel_map`` see the value because each
    work item runs in a copy of the caller's context.

    Yields
    ------
    str
        The bound run id.
    """
    token = _RUN_ID.set(run_id)
    try:
        yield run_id
    finally:
        _RUN_ID.reset(token)


__all__ = ["bound_run_id", "get_run_id"]
