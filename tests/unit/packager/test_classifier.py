"""Tests for packager output line classification."""

from __future__ import annotations

from pathlib import Path

from respack.core_types import Severity
from respack.packager.classifier import ClassifierContext, classify_line, classify_lines
from respack.packager.signatures import FALLBACK_CODE


def test_error_with_file_and_line() -> None:
    record = classify_line(
        "AndroidManifest.xml:12: error: attribute android:foo not found",
        tool_succeeded=False,
    )
    assert record is not None
    assert record.severity is Severity.ERROR
    assert record.file == "AndroidManifest.xml"
    assert record.line == 13
    assert record.code == "APT1147"
    assert record.message == "attribute android:foo not found"


def test_error_prefix_is_stripped_from_message() -> None:
    record = classify_line("ERROR: error: Unknown option '--bogus'", tool_succeeded=False)
    assert record is not None
    assert record.severity is Severity.ERROR
    assert record.message == "Unknown option '--bogus'"
    assert record.code == "APT1127"
    assert record.file is None
    assert record.line == 0


def test_parenthesized_line_number() -> None:
    record = classify_line("res/layout/main.xml(4): error: is corrupt", tool_succeeded=False)
    assert record is not None
    assert record.file == "res/layout/main.xml"
    assert record.line == 5
    assert record.code == "APT1145"


def test_warning_keeps_full_line() -> None:
    line = "warning: string 'app_name' has no default translation."
    record = classify_line(line, tool_succeeded=True)
    assert record is not None
    assert record.severity is Severity.WARNING
    assert record.message == line
    assert record.line == 0


def test_unmatched_line_from_successful_run_is_a_warning() -> None:
    record = classify_line("some/odd/output line", tool_succeeded=True)
    assert record is not None
    assert record.severity is Severity.WARNING
    assert record.message == "some/odd/output line"


def test_unmatched_line_from_failed_run_is_an_error() -> None:
    context = ClassifierContext(tool_name="aapt")
    record = classify_line("some/odd/output line", tool_succeeded=False, context=context)
    assert record is not None
    assert record.severity is Severity.ERROR
    assert record.message == 'some/odd/output line "output line".'
    assert record.file == "aapt"
    assert record.code == FALLBACK_CODE


def test_benign_sentinel_is_informational() -> None:
    line = "fakeLogOpen(/dev/log_main) failed"
    record = classify_line(line, tool_succeeded=False)
    assert record is not None
    assert record.severity is Severity.INFO
    assert record.message == line


def test_empty_line_is_dropped() -> None:
    assert classify_line("", tool_succeeded=False) is None


def test_file_is_remapped_to_original_resource() -> None:
    context = ClassifierContext(
        resource_directory=Path("/build/obj/res"),
        case_map={"values/strings.xml": "Values/Strings.xml"},
    )
    record = classify_line(
        "/build/obj/res/values/strings.xml:3: error: Resource entry app_name is not a single item or a bag",
        tool_succeeded=False,
        context=context,
    )
    assert record is not None
    assert record.file == "Resources/Values/Strings.xml"
    assert record.line == 4
    assert record.code == "APT1140"


def test_classify_lines_preserves_order_and_drops_empty() -> None:
    records = classify_lines(
        ["", "warning: first", "AndroidManifest.xml:1: error: second not found"],
        tool_succeeded=False,
    )
    assert [record.severity for record in records] == [Severity.WARNING, Severity.ERROR]
