"""Turn free-text packager output into coded diagnostics."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from respack.core_types import Severity
from respack.obs.diagnostics import DiagnosticRecord
from respack.packager.resource_paths import fix_up_resource_path
from respack.packager.signatures import lookup_error_code

DEFAULT_TOOL_NAME: Final[str] = "aapt"

# Sentinel the packager prints from its own log plumbing; never a real problem.
BENIGN_SENTINEL: Final[str] = "fakeLogOpen"

_ERROR_PREFIX: Final[str] = "error: "

DIAGNOSTIC_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"""
    ^
    (?:
        (?!\s*(?:warning|error)\b)
        (?P<file>(?:[A-Za-z]:)?[^:(]+?)
        (?:\((?P<paren_line>\d+)\)|:(?P<line>\d+))?
        \s*:
    )?
    (?:\s*(?P<level>(?:\w+\s+)?(?:warning|error)[^:]*)\s*:)?
    \s*(?P<message>.*)
    $
    """,
    re.VERBOSE | re.IGNORECASE,
)


@dataclass(frozen=True)
class ClassifierContext:
    """Read-only inputs shared by every line of one build.

    Parameters
    ----------
    tool_name
        Name errors are attributed to when no source file is known.
    resource_directory
        Intermediate resource directory used to map files back to sources.
    case_map
        Resource case map used during path remapping.
    """

    tool_name: str = DEFAULT_TOOL_NAME
    resource_directory: Path | None = None
    case_map: Mapping[str, str] = field(default_factory=dict)

    def remap(self, file: str) -> str:
        if self.resource_directory is None or not file:
            return file
        remapped = fix_up_resource_path(file, self.resource_directory, self.case_map)
        return remapped or file


def _trailing_segment(line: str) -> str:
    cut = max(line.rfind("/"), line.rfind("\\"))
    return line[cut + 1 :]


def _unmatched(line: str, *, tool_succeeded: bool, context: ClassifierContext) -> DiagnosticRecord:
    if tool_succeeded:
        return DiagnosticRecord(
            severity=Severity.WARNING, code=lookup_error_code(line), message=line
        )
    message = f'{line.strip()} "{_trailing_segment(line)}".'
    return DiagnosticRecord(
        severity=Severity.ERROR,
        code=lookup_error_code(message),
        message=message,
        file=context.tool_name,
    )


def classify_line(
    line: str,
    *,
    tool_succeeded: bool,
    context: ClassifierContext | None = None,
) -> DiagnosticRecord | None:
    """Classify one line of packager stderr.

    Parameters
    ----------
    line
        Raw output line.
    tool_succeeded
        Whether the invocation as a whole succeeded. Unrecognized lines from a
        successful run become warnings; from a failed run, errors.
    context
        Path remapping inputs and tool name.

    Returns
    -------
    DiagnosticRecord | None
        Record to report, or ``None`` for empty lines.
    """
    if not line:
        return None
    ctx = context or ClassifierContext()
    match = DIAGNOSTIC_PATTERN.match(line.strip())
    if match is not None:
        file = (match.group("file") or "").strip()
        raw_line = match.group("line") or match.group("paren_line")
        line_number = int(raw_line) + 1 if raw_line else 0
        level = (match.group("level") or "").lower()
        message = match.group("message")
        if BENIGN_SENTINEL in message:
            return DiagnosticRecord(severity=Severity.INFO, message=line)
        if "warning" in level:
            return DiagnosticRecord(
                severity=Severity.WARNING, code=lookup_error_code(line), message=line
            )
        file = ctx.remap(file)
        if message.lower().startswith(_ERROR_PREFIX):
            message = message[len(_ERROR_PREFIX) :]
        if "error" in level or (line_number != 0 and file):
            return DiagnosticRecord(
                severity=Severity.ERROR,
                code=lookup_error_code(message),
                message=message,
                file=file or None,
                line=line_number,
            )
    return _unmatched(line, tool_succeeded=tool_succeeded, context=ctx)


def classify_lines(
    lines: Iterable[str],
    *,
    tool_succeeded: bool,
    context: ClassifierContext | None = None,
) -> list[DiagnosticRecord]:
    """Classify many lines, dropping empty ones.

    Returns
    -------
    list[DiagnosticRecord]
        Records in input order.
    """
    records: list[DiagnosticRecord] = []
    for line in lines:
        record = classify_line(line, tool_succeeded=tool_succeeded, context=context)
        if record is not None:
            records.append(record)
    return records


__all__ = [
    "BENIGN_SENTINEL",
    "DEFAULT_TOOL_NAME",
    "DIAGNOSTIC_PATTERN",
    "ClassifierContext",
    "classify_line",
    "classify_lines",
]
