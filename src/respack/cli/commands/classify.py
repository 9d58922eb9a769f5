"""Classify a captured packager log offline."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter, validators
from rich.console import Console

from respack.cli.exit_codes import ExitCode
from respack.core_types import Severity
from respack.packager.classifier import DEFAULT_TOOL_NAME, ClassifierContext, classify_lines
from respack.packager.resource_paths import load_resource_case_map
from respack.serde_msgspec import write_json
from respack.utils.file_io import read_lines

_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


def classify_command(
    log: Annotated[
        Path,
        Parameter(help="Captured packager stderr, one diagnostic per line.", validator=validators.Path(exists=True)),
    ],
    /,
    *,
    tool_failed: Annotated[
        bool,
        Parameter(
            name="--tool-failed",
            help="Treat the log as coming from a failed run; unrecognized lines become errors.",
        ),
    ] = False,
    resource_dir: Annotated[
        Path | None,
        Parameter(
            name="--resource-dir",
            help="Intermediate resource directory used to map paths back to sources.",
        ),
    ] = None,
    case_map: Annotated[
        Path | None,
        Parameter(name="--case-map", help="Resource case map file."),
    ] = None,
    tool_name: Annotated[
        str,
        Parameter(name="--tool-name", help="Name unattributed errors are reported against."),
    ] = DEFAULT_TOOL_NAME,
    json_output: Annotated[
        bool,
        Parameter(name="--json", help="Write records as a JSON array."),
    ] = False,
) -> int:
    """Classify every line of a packager log into coded diagnostics.

    Returns
    -------
    int
        ``0`` when no error records were produced, else ``13``.
    """
    context = ClassifierContext(
        tool_name=tool_name,
        resource_directory=resource_dir,
        case_map=load_resource_case_map(case_map),
    )
    records = classify_lines(read_lines(log), tool_succeeded=not tool_failed, context=context)
    if json_output:
        write_json(records)
    else:
        console = Console()
        for record in records:
            console.print(
                record.render(),
                style=_SEVERITY_STYLES[record.severity],
                highlight=False,
                markup=False,
            )
    return ExitCode.for_diagnostics(records)


__all__ = ["classify_command"]
