"""Result action handler for Cyclopts integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Console

from respack.cli.exit_codes import ExitCode
from respack.cli.result import CliResult

if TYPE_CHECKING:
    from cyclopts import App


def render_result(result: Any, *, console: Console | None = None) -> int:
    """Print a command result and convert it to an exit code.

    Returns
    -------
    int
        Exit code for the process.
    """
    out = console or Console()
    if result is None:
        return ExitCode.SUCCESS
    if isinstance(result, bool):
        return ExitCode.SUCCESS if result else ExitCode.GENERAL_ERROR
    if isinstance(result, int):
        return result
    if isinstance(result, CliResult):
        if result.summary:
            style = None if result.ok else "bold red"
            out.print(result.summary, style=style, highlight=False)
        if result.artifacts:
            out.print("Artifacts:")
            for name, path in sorted(result.artifacts.items()):
                out.print(f"  {name}: {path}", highlight=False)
        duration = result.metrics.get("duration_ms")
        if duration is not None:
            out.print(f"Duration: {duration:.1f}ms")
        return int(result.exit_code)
    out.print(f"Unexpected command return type: {type(result).__name__} (value: {result!r})")
    return ExitCode.GENERAL_ERROR


def cli_result_action(
    app: App,
    cmd: object,
    result: Any,
) -> int:
    """Handle command results and convert to exit codes.

    Registered as the ``result_action`` of the CLI app.

    Returns
    -------
    int
        Exit code for the process.
    """
    _ = app
    _ = cmd
    return render_result(result)


__all__ = ["cli_result_action", "render_result"]
