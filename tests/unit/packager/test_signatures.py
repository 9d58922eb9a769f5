"""Tests for the packager error signature table."""

from __future__ import annotations

from respack.packager.signatures import (
    ERROR_SIGNATURES,
    FALLBACK_CODE,
    lookup_error_code,
    search_signatures,
)


def test_table_keeps_source_order() -> None:
    assert ERROR_SIGNATURES[0].substring == "AndroidManifest.xml is corrupt"
    assert ERROR_SIGNATURES[0].code == "APT1100"
    assert ERROR_SIGNATURES[-1].code == "APT1077"
    assert len(ERROR_SIGNATURES) == 148


def test_lookup_matches_case_insensitively() -> None:
    assert lookup_error_code("attribute android:foo NOT FOUND") == "APT1147"


def test_first_matching_row_wins() -> None:
    # "Platform AndroidManifest.xml not found" precedes the generic "not found" row.
    assert lookup_error_code("Platform AndroidManifest.xml not found") == "APT1066"
    assert lookup_error_code("unable to process assets while packaging") == "APT1125"
    assert lookup_error_code("unable to process 'foo.png'") == "APT1133"


def test_duplicate_substrings_resolve_to_the_first_code() -> None:
    assert lookup_error_code("Error parsing XML: unbound prefix") == "APT1064"
    assert lookup_error_code("included asset path /tmp/x could not be loaded") == "APT1085"


def test_unknown_message_uses_fallback() -> None:
    assert lookup_error_code("something entirely different") == FALLBACK_CODE
    assert lookup_error_code("") == FALLBACK_CODE


def test_search_filters_by_substring_or_code() -> None:
    rows = search_signatures("apt1147")
    assert [row.code for row in rows] == ["APT1147"]
    assert all("crunch" in row.substring.lower() for row in search_signatures("crunch"))
    assert search_signatures(None) == ERROR_SIGNATURES
