"""Mutable view of an AndroidManifest.xml used to derive per-ABI manifests."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Final
from xml.etree import ElementTree

logger = logging.getLogger(__name__)

ANDROID_NAMESPACE: Final[str] = "http://schemas.android.com/apk/res/android"
TOOLS_NAMESPACE: Final[str] = "http://schemas.android.com/tools"

ElementTree.register_namespace("android", ANDROID_NAMESPACE)
ElementTree.register_namespace("tools", TOOLS_NAMESPACE)

MAX_VERSION_CODE: Final[int] = 2100000000
MAX_ABI_BASE_VERSION_CODE: Final[int] = 0xFFFF
DEFAULT_VERSION_CODE: Final[str] = "1"

INVALID_VERSION_CODE: Final[str] = "XA0003"
VERSION_CODE_OUT_OF_RANGE: Final[str] = "XA0004"

ABI_CODES: Final[dict[str, int]] = {
    "armeabi-v7a": 1,
    "x86": 2,
    "arm64-v8a": 3,
    "x86_64": 4,
}

_PATTERN_TOKEN = re.compile(r"\{(?P<key>[A-Za-z]+)(?::(?P<format>[^}]*))?\}")


def _android(name: str) -> str:
    return f"{{{ANDROID_NAMESPACE}}}{name}"


class VersionCodeError(ValueError):
    """Raised when a version code cannot be computed or is out of range."""

    def __init__(self, message: str, *, code: str = INVALID_VERSION_CODE) -> None:
        super().__init__(message)
        self.code = code


def abi_code(abi: str) -> int:
    """Return the version-code digit for an ABI name.

    Raises
    ------
    VersionCodeError
        Raised for an ABI without an assigned code.
    """
    try:
        return ABI_CODES[abi]
    except KeyError:
        msg = f"Unsupported ABI {abi!r} for version code calculation."
        raise VersionCodeError(msg) from None


def _parse_properties(properties: str | None) -> dict[str, int]:
    values: dict[str, int] = {}
    if not properties:
        return values
    for item in re.split(r"[;:]", properties):
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        try:
            values[key] = int(raw.strip())
        except ValueError:
            continue
    return values


def _format_token(value: int, fmt: str) -> str:
    if not fmt:
        return str(value)
    if fmt[0] in "Dd" and (len(fmt) == 1 or fmt[1:].isdigit()):
        width = int(fmt[1:]) if fmt[1:] else 0
        return f"{value:0{width}d}" if width else str(value)
    if fmt.isdigit():
        return f"{value:0{len(fmt)}d}"
    msg = f"Invalid version code format {fmt!r}; expected Dn or a run of zeros."
    raise VersionCodeError(msg)


def _check_range(text: str) -> int:
    try:
        code = int(text)
    except ValueError:
        msg = f"VersionCode {text} is invalid. It must be an integer value."
        raise VersionCodeError(msg, code=INVALID_VERSION_CODE) from None
    if code < 0 or code > MAX_VERSION_CODE:
        msg = f"VersionCode {code} is outside 0, {MAX_VERSION_CODE} range."
        raise VersionCodeError(msg, code=VERSION_CODE_OUT_OF_RANGE)
    return code


class ManifestDocument:
    """In-memory AndroidManifest.xml with the mutations packaging needs.

    Parameters
    ----------
    tree
        Parsed manifest document.
    source
        Path the document was loaded from, for messages.
    """

    def __init__(self, tree: ElementTree.ElementTree, *, source: Path | None = None) -> None:
        self._tree = tree
        self.source = source

    @classmethod
    def load(cls, path: Path) -> ManifestDocument:
        """Parse a manifest file.

        Returns
        -------
        ManifestDocument
            Loaded document.
        """
        return cls(ElementTree.parse(path), source=path)

    @classmethod
    def from_string(cls, text: str) -> ManifestDocument:
        return cls(ElementTree.ElementTree(ElementTree.fromstring(text)))

    @property
    def root(self) -> ElementTree.Element:
        return self._tree.getroot()

    @property
    def version_code(self) -> str:
        value = self.root.get(_android("versionCode"))
        return value if value else DEFAULT_VERSION_CODE

    @version_code.setter
    def version_code(self, value: str) -> None:
        self.root.set(_android("versionCode"), value)

    @property
    def min_sdk_version(self) -> str | None:
        uses_sdk = self.root.find("uses-sdk")
        if uses_sdk is None:
            return None
        return uses_sdk.get(_android("minSdkVersion"))

    def _child(self, tag: str) -> ElementTree.Element:
        element = self.root.find(tag)
        if element is None:
            element = ElementTree.SubElement(self.root, tag)
        return element

    def set_sdk_version(self, version: str | None) -> None:
        """Fill ``uses-sdk@targetSdkVersion`` when the manifest leaves it unset."""
        if not version:
            return
        uses_sdk = self._child("uses-sdk")
        if uses_sdk.get(_android("targetSdkVersion")) is None:
            uses_sdk.set(_android("targetSdkVersion"), version)

    def set_application_name(self, name: str | None) -> None:
        """Fill ``application@label`` when the manifest leaves it unset."""
        if not name:
            return
        application = self._child("application")
        if application.get(_android("label")) is None:
            application.set(_android("label"), name)

    def calculate_version_code(
        self,
        abi: str | None,
        pattern: str,
        properties: str | None = None,
    ) -> str:
        """Compute and store a version code from a pattern.

        Parameters
        ----------
        abi
            Current ABI, or ``None`` for the primary package.
        pattern
            Concatenation of ``{key}``, ``{key:Dn}`` or ``{key:00}`` tokens,
            for example ``{abi}{versionCode:D5}``.
        properties
            Extra ``name=value`` integers separated by ``;`` or ``:``.

        Returns
        -------
        str
            The stored version code.

        Raises
        ------
        VersionCodeError
            Raised when the result is not an integer or is out of range.
        """
        values = _parse_properties(properties)
        if "abi" not in values and abi:
            values["abi"] = abi_code(abi)
        if "versionCode" not in values:
            values["versionCode"] = _check_range(self.version_code)
        if "minSDK" not in values:
            min_sdk = self.min_sdk_version
            if min_sdk and min_sdk.isdigit():
                values["minSDK"] = int(min_sdk)
        digits = "".join(
            _format_token(values[match.group("key")], match.group("format") or "")
            for match in _PATTERN_TOKEN.finditer(pattern)
            if match.group("key") in values
        )
        code = _check_range(digits)
        self.version_code = str(code)
        logger.debug("Calculated version code %s for abi %s", code, abi or "<primary>")
        return self.version_code

    def set_abi(self, abi: str) -> None:
        """Fold the ABI code into the upper bits of the version code.

        Raises
        ------
        VersionCodeError
            Raised when the base version code is not in ``0..65535``.
        """
        code = _check_range(self.version_code)
        if code > MAX_ABI_BASE_VERSION_CODE:
            msg = f"VersionCode {code} is outside 0, {MAX_ABI_BASE_VERSION_CODE} range."
            raise VersionCodeError(msg, code=VERSION_CODE_OUT_OF_RANGE)
        self.version_code = str(code | (abi_code(abi) << 16))

    def validate_version_code(self) -> tuple[bool, str | None, str | None]:
        """Check the stored version code.

        Returns
        -------
        tuple[bool, str | None, str | None]
            ``(ok, error message, error code)``.
        """
        try:
            _check_range(self.version_code)
        except VersionCodeError as exc:
            return False, str(exc), exc.code
        return True, None, None

    def save(self, path: Path) -> None:
        """Write the document as UTF-8 with an XML declaration."""
        path.parent.mkdir(parents=True, exist_ok=True)
        self._tree.write(path, encoding="utf-8", xml_declaration=True)


__all__ = [
    "ABI_CODES",
    "ANDROID_NAMESPACE",
    "INVALID_VERSION_CODE",
    "MAX_VERSION_CODE",
    "VERSION_CODE_OUT_OF_RANGE",
    "ManifestDocument",
    "VersionCodeError",
    "abi_code",
]
