"""Map packager-reported resource paths back to the user's source files.

The build copies resources into an intermediate directory and mangles file
names (lower-casing and the like) before the packager sees them. A case map
file written earlier in the build records ``mangled;original`` pairs.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from respack.utils.file_io import read_lines

logger = logging.getLogger(__name__)

RESOURCES_PREFIX = "Resources"


def load_resource_case_map(path: Path | str | None) -> dict[str, str]:
    """Load a resource case map file.

    Parameters
    ----------
    path
        File with one ``key;value`` pair per line; ``None`` or a missing file
        yields an empty map.

    Returns
    -------
    dict[str, str]
        Mangled relative path to original relative path.
    """
    if not path:
        return {}
    case_map: dict[str, str] = {}
    for raw in read_lines(Path(path)):
        key, sep, value = raw.partition(";")
        key = key.strip()
        value = value.strip()
        if not sep or not key or not value:
            continue
        case_map[key] = value
    logger.debug("Loaded %d resource case map entries from %s", len(case_map), path)
    return case_map


def _normalize_separators(value: str) -> str:
    return value.replace("\\", "/")


def fix_up_resource_path(
    file: str,
    resource_directory: Path | str,
    case_map: Mapping[str, str],
) -> str:
    """Return the user-facing path of ``file`` or ``""`` to keep it as-is.

    Parameters
    ----------
    file
        Path reported by the packager.
    resource_directory
        Intermediate resource directory the packager was pointed at.
    case_map
        Mapping loaded by ``load_resource_case_map``.

    Returns
    -------
    str
        ``Resources/<original relative path>`` when ``file`` lives under the
        resource directory, otherwise an empty string.
    """
    if not file:
        return ""
    root = _normalize_separators(os.path.normpath(os.fspath(resource_directory))).rstrip("/")
    candidate = _normalize_separators(os.path.normpath(file))
    prefix = root + "/"
    if not candidate.startswith(prefix):
        return ""
    relative = candidate[len(prefix) :]
    mapped = case_map.get(relative)
    if mapped is None:
        mapped = case_map.get(relative.replace("/", "\\"), relative)
    return "/".join([RESOURCES_PREFIX, _normalize_separators(mapped)])


__all__ = ["RESOURCES_PREFIX", "fix_up_resource_path", "load_resource_case_map"]
