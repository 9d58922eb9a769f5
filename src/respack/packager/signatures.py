"""Ordered signature table mapping packager diagnostic text to stable codes.

The table is scanned top to bottom and the first substring found anywhere in
the message (case-insensitively) wins. Several entries are substrings of later
ones, so the order below is significant and must not be sorted.
"""

from __future__ import annotations

from typing import Final, NamedTuple

FALLBACK_CODE: Final[str] = "APT0000"


class ErrorSignature(NamedTuple):
    """One row of the signature table."""

    substring: str
    code: str


def _signature_rows(*rows: tuple[str, str]) -> tuple[ErrorSignature, ...]:
    return tuple(ErrorSignature(substring, code) for substring, code in rows)


ERROR_SIGNATURES: Final[tuple[ErrorSignature, ...]] = _signature_rows(
    ("AndroidManifest.xml is corrupt", "APT1100"),
    ("can't use '-u' with add", "APT1001"),
    ("dump failed because assets could not be loaded", "APT1002"),
    ("dump failed because no AndroidManifest.xml found", "APT1003"),
    ("dump failed because the resource table is invalid/corrupt", "APT1004"),
    ("during crunch - archive is toast", "APT1005"),
    ("failed to get platform version code", "APT1006"),
    ("failed to get platform version name", "APT1007"),
    ("failed to get XML element name (bad string pool)", "APT1008"),
    ("failed to write library table", "APT1009"),
    ("getting resolved resource attribute", "APT1010"),
    ("Key string data is corrupt", "APT1011"),
    ("list -a failed because assets could not be loaded", "APT1012"),
    ("manifest does not start with <manifest> tag", "APT1013"),
    ("missing 'android:name' for permission", "APT1014"),
    ("missing 'android:name' for uses-permission", "APT1015"),
    ("missing 'android:name' for uses-permission-sdk-23", "APT1016"),
    ("Missing entries, quit", "APT1017"),
    ("must specify zip file name", "APT1018"),
    ("No AndroidManifest.xml file found", "APT1019"),
    ("No argument supplied for '-A' option", "APT1020"),
    ("No argument supplied for '-c' option", "APT1021"),
    ("No argument supplied for '--custom-package' option", "APT1022"),
    ("No argument supplied for '-D' option", "APT1023"),
    ("No argument supplied for '-e' option", "APT1024"),
    ("No argument supplied for '--extra-packages' option", "APT1025"),
    ("No argument supplied for '--feature-after' option", "APT1026"),
    ("No argument supplied for '--feature-of' option", "APT1027"),
    ("No argument supplied for '-F' option", "APT1028"),
    ("No argument supplied for '-g' option", "APT1029"),
    ("No argument supplied for '--ignore-assets' option", "APT1030"),
    ("No argument supplied for '-I' option", "APT1031"),
    ("No argument supplied for '-j' option", "APT1032"),
    ("No argument supplied for '--max-res-version' option", "APT1033"),
    ("No argument supplied for '--max-sdk-version' option", "APT1034"),
    ("No argument supplied for '--min-sdk-version' option", "APT1035"),
    ("No argument supplied for '-M' option", "APT1036"),
    ("No argument supplied for '-o' option", "APT1037"),
    ("No argument supplied for '-output-text-symbols' option", "APT1038"),
    ("No argument supplied for '-P' option", "APT1039"),
    ("No argument supplied for '--preferred-density' option", "APT1040"),
    ("No argument supplied for '--private-symbols' option", "APT1041"),
    ("No argument supplied for '--product' option", "APT1042"),
    ("No argument supplied for '--rename-instrumentation-target-package' option", "APT1043"),
    ("No argument supplied for '--rename-manifest-package' option", "APT1044"),
    ("No argument supplied for '-S' option", "APT1045"),
    ("No argument supplied for '--split' option", "APT1046"),
    ("No argument supplied for '--target-sdk-version' option", "APT1047"),
    ("No argument supplied for '--version-code' option", "APT1048"),
    ("No argument supplied for '--version-name' option", "APT1049"),
    ("no dump file specified", "APT1050"),
    ("no dump option specified", "APT1051"),
    ("no dump xmltree resource file specified", "APT1052"),
    ("no input files", "APT1053"),
    ("no <manifest> tag found in platform AndroidManifest.xml", "APT1054"),
    ("out of memory creating package chunk for ResTable_header", "APT1055"),
    ("out of memory creating ResTable_entry", "APT1056"),
    ("out of memory creating ResTable_header", "APT1057"),
    ("out of memory creating ResTable_package", "APT1058"),
    ("out of memory creating ResTable_type", "APT1059"),
    ("out of memory creating ResTable_typeSpec", "APT1060"),
    ("out of memory creating Res_value", "APT1061"),
    ("Out of memory for string pool", "APT1062"),
    ("Out of memory padding string pool", "APT1063"),
    ("parsing XML", "APT1064"),
    ("Platform AndroidManifest.xml is corrupt", "APT1065"),
    ("Platform AndroidManifest.xml not found", "APT1066"),
    ("print resolved resource attribute", "APT1067"),
    ("retrieving parent for item:", "APT1068"),
    ("specify zip file name (only)", "APT1069"),
    ("Type string data is corrupt", "APT1070"),
    ("Unable to parse generated resources, aborting", "APT1071"),
    ("Invalid BCP 47 tag in directory name", "APT1072"),
    ("parsing preferred density", "APT1078"),
    ("Asset package include", "APT1079"),
    ("base feature package", "APT1080"),
    ("Split configuration", "APT1081"),
    ("failed opening/creating", "APT1082"),
    ("as Zip file for writing", "APT1083"),
    ("as Zip file", "APT1084"),
    ("included asset path", "APT1085"),
    ("getting 'android:name' attribute", "APT1086"),
    ("getting 'android:name'", "APT1087"),
    ("getting 'android:versionCode' attribute", "APT1088"),
    ("getting 'android:versionName' attribute", "APT1089"),
    ("getting 'android:compileSdkVersion' attribute", "APT1090"),
    ("getting 'android:installLocation' attribute", "APT1091"),
    ("getting 'android:icon' attribute", "APT1092"),
    ("getting 'android:testOnly' attribute", "APT1093"),
    ("getting 'android:banner' attribute", "APT1094"),
    ("getting 'android:isGame' attribute", "APT1095"),
    ("getting 'android:debuggable' attribute", "APT1096"),
    ("getting 'android:minSdkVersion' attribute", "APT1097"),
    ("getting 'android:targetSdkVersion' attribute", "APT1098"),
    ("getting 'android:label' attribute", "APT1099"),
    ("getting compatible screens", "APT1100"),
    ("getting 'android:name' attribute for uses-library", "APT1101"),
    ("getting 'android:name' attribute for receiver", "APT1102"),
    ("getting 'android:permission' attribute for receiver", "APT1103"),
    ("getting 'android:name' attribute for service", "APT1104"),
    ("getting 'android:name' attribute for meta-data tag in service", "APT1105"),
    ("getting 'android:name' attribute for meta-data", "APT1106"),
    ("getting 'android:permission' attribute for service", "APT1107"),
    ("getting 'android:permission' attribute for provider", "APT1108"),
    ("getting 'android:exported' attribute for provider", "APT1109"),
    ("getting 'android:grantUriPermissions' attribute for provider", "APT1110"),
    ("getting 'android:value' or 'android:resource' attribute for meta-data", "APT1111"),
    ("getting 'android:resource' attribute for meta-data tag in service", "APT1112"),
    ("getting AID category for service", "APT1113"),
    ("getting 'name' attribute", "APT1114"),
    ("unknown dump option", "APT1115"),
    ("failed opening Zip archive", "APT1116"),
    ("exists but is not regular file", "APT1117"),
    ("failed to parse split configuration", "APT1118"),
    ("packaging of", "APT1119"),
    ("9-patch image", "APT1120"),
    ("Failure processing PNG image", "APT1121"),
    ("Unknown command", "APT1122"),
    ("exists (use '-f' to force overwrite)", "APT1123"),
    ("exists and is not a regular file", "APT1124"),
    ("unable to process assets while packaging", "APT1125"),
    ("unable to process jar files while packaging", "APT1126"),
    ("Unknown option", "APT1127"),
    ("Unknown flag", "APT1128"),
    ("Zip flush failed, archive may be hosed", "APT1129"),
    ("exists twice (check for with", "APT1130"),
    ("unable to uncompress entry", "APT1131"),
    ("as a zip file", "APT1132"),
    ("unable to process", "APT1133"),
    ("malformed resource filename", "APT1134"),
    ("AndroidManifest.xml already defines", "APT1135"),
    ("In <declare-styleable>", "APT1136"),
    ("Feature package", "APT1137"),
    ("declaring public resource", "APT1138"),
    ("with value", "APT1139"),
    ("is not a single item or a bag", "APT1140"),
    ("adding span for style tag", "APT1141"),
    ("parsing XML", "APT1142"),
    ("access denied", "APT1143"),
    ("included asset path", "APT1144"),
    ("is corrupt", "APT1145"),
    ("dump failed because resource", "APT1146"),
    ("not found", "APT1147"),
    ("asset directory", "APT1073"),
    ("input directory", "APT1074"),
    ("resource directory", "APT1075"),
    ("is not a directory", "APT1076"),
    ("opening zip file", "APT1077"),
)

_FOLDED_SIGNATURES: Final[tuple[tuple[str, str], ...]] = tuple(
    (row.substring.casefold(), row.code) for row in ERROR_SIGNATURES
)


def lookup_error_code(message: str) -> str:
    """Return the code of the first signature contained in ``message``.

    Parameters
    ----------
    message
        Diagnostic text emitted by the packager.

    Returns
    -------
    str
        Matching ``APT####`` code, or ``FALLBACK_CODE`` when nothing matches.
    """
    folded = message.casefold()
    for substring, code in _FOLDED_SIGNATURES:
        if substring in folded:
            return code
    return FALLBACK_CODE


def search_signatures(text: str | None = None) -> tuple[ErrorSignature, ...]:
    """Return signatures whose substring or code contains ``text``.

    Returns
    -------
    tuple[ErrorSignature, ...]
        Matching rows in table order; every row when ``text`` is empty.
    """
    if not text:
        return ERROR_SIGNATURES
    needle = text.casefold()
    return tuple(
        row
        for row in ERROR_SIGNATURES
        if needle in row.substring.casefold() or needle in row.code.casefold()
    )


__all__ = [
    "ERROR_SIGNATURES",
    "FALLBACK_CODE",
    "ErrorSignature",
    "lookup_error_code",
    "search_signatures",
]
