"""Tests for the manifest document model."""

from __future__ import annotations

from pathlib import Path

import pytest

from respack.manifest import ManifestDocument, VersionCodeError
from respack.manifest.document import (
    ANDROID_NAMESPACE,
    INVALID_VERSION_CODE,
    VERSION_CODE_OUT_OF_RANGE,
)
from tests.test_helpers.manifests import MANIFEST_XML

_BARE = '<manifest xmlns:android="http://schemas.android.com/apk/res/android" package="x" />'


def _doc(version_code: str = "7") -> ManifestDocument:
    return ManifestDocument.from_string(
        MANIFEST_XML.format(version_code=version_code).split("\n", 1)[1]
    )


def _attr(name: str) -> str:
    return f"{{{ANDROID_NAMESPACE}}}{name}"


def test_version_code_defaults_to_one() -> None:
    assert ManifestDocument.from_string(_BARE).version_code == "1"


def test_set_sdk_version_creates_uses_sdk() -> None:
    document = ManifestDocument.from_string(_BARE)
    document.set_sdk_version("34")
    uses_sdk = document.root.find("uses-sdk")
    assert uses_sdk is not None
    assert uses_sdk.get(_attr("targetSdkVersion")) == "34"


def test_set_sdk_version_keeps_existing_target() -> None:
    document = ManifestDocument.from_string(
        '<manifest xmlns:android="http://schemas.android.com/apk/res/android">'
        '<uses-sdk android:targetSdkVersion="30" /></manifest>'
    )
    document.set_sdk_version("34")
    uses_sdk = document.root.find("uses-sdk")
    assert uses_sdk is not None
    assert uses_sdk.get(_attr("targetSdkVersion")) == "30"


def test_set_application_name_fills_missing_label() -> None:
    document = _doc()
    document.set_application_name("MyApp")
    application = document.root.find("application")
    assert application is not None
    assert application.get(_attr("label")) == "MyApp"


@pytest.mark.parametrize(
    ("abi", "pattern", "properties", "expected"),
    [
        ("arm64-v8a", "{abi}{versionCode:D5}", None, "300007"),
        ("x86", "{abi}{versionCode:000}", None, "2007"),
        (None, "{versionCode}", None, "7"),
        ("x86", "{minSDK}{abi}{versionCode:D3}", None, "212007"),
        ("x86", "{abi}{versionCode:D5}", "versionCode=12;abi=9", "900012"),
        ("x86", "{abi}{unknown}{versionCode}", None, "27"),
        ("x86", "{abi}{build}", "build=5:bad=x", "25"),
        ("x86", "{abi}{versionCode:d4}", None, "20007"),
    ],
)
def test_calculate_version_code(
    abi: str | None, pattern: str, properties: str | None, expected: str
) -> None:
    document = _doc()
    assert document.calculate_version_code(abi, pattern, properties) == expected
    assert document.version_code == expected


def test_calculate_version_code_out_of_range() -> None:
    document = _doc("99999")
    with pytest.raises(VersionCodeError) as excinfo:
        document.calculate_version_code("x86", "{abi}{versionCode:D10}")
    assert excinfo.value.code == VERSION_CODE_OUT_OF_RANGE


def test_calculate_version_code_rejects_non_integer() -> None:
    with pytest.raises(VersionCodeError) as excinfo:
        _doc("abc").calculate_version_code("x86", "{abi}{versionCode}")
    assert excinfo.value.code == INVALID_VERSION_CODE


def test_calculate_version_code_rejects_unknown_abi() -> None:
    with pytest.raises(VersionCodeError):
        _doc().calculate_version_code("mips", "{abi}{versionCode}")


@pytest.mark.parametrize(
    "pattern", ["{abi:DD}{versionCode}", "{abi}{versionCode:X2}", "{abi:}{versionCode:D-1}"]
)
def test_calculate_version_code_rejects_malformed_format(pattern: str) -> None:
    with pytest.raises(VersionCodeError) as excinfo:
        _doc().calculate_version_code("x86", pattern)
    assert excinfo.value.code == INVALID_VERSION_CODE


def test_set_abi_folds_code_into_upper_bits() -> None:
    document = _doc("42")
    document.set_abi("x86_64")
    assert document.version_code == str(42 | (4 << 16))


def test_set_abi_requires_small_base_code() -> None:
    with pytest.raises(VersionCodeError) as excinfo:
        _doc("70000").set_abi("x86")
    assert excinfo.value.code == VERSION_CODE_OUT_OF_RANGE


@pytest.mark.parametrize(
    ("version_code", "expected"),
    [
        ("7", (True, None, None)),
        ("2100000000", (True, None, None)),
        ("2100000001", (False, VERSION_CODE_OUT_OF_RANGE)),
        ("-1", (False, VERSION_CODE_OUT_OF_RANGE)),
        ("1.5", (False, INVALID_VERSION_CODE)),
    ],
)
def test_validate_version_code(version_code: str, expected: tuple[object, ...]) -> None:
    ok, error, code = _doc(version_code).validate_version_code()
    assert ok is expected[0]
    if ok:
        assert (error, code) == expected[1:]
    else:
        assert error
        assert code == expected[1]


def test_save_writes_declaration_and_namespace(tmp_path: Path) -> None:
    document = _doc()
    document.set_abi("x86")
    target = tmp_path / "x86" / "AndroidManifest.xml"
    document.save(target)
    text = target.read_text(encoding="utf-8")
    assert text.startswith("<?xml version='1.0' encoding='utf-8'?>")
    assert 'xmlns:android="http://schemas.android.com/apk/res/android"' in text
    assert ManifestDocument.load(target).version_code == str(7 | (2 << 16))
