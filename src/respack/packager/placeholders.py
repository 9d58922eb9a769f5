"""Expansion of ``${library.imports:<assembly>}`` tokens in extra arguments."""

from __future__ import annotations

import os
from typing import Final, Protocol

PLACEHOLDER_PREFIX: Final[str] = "${library.imports:"
PLACEHOLDER_SUFFIX: Final[str] = "}"
DEFAULT_IMPORTS_DIRECTORY: Final[str] = "library_project_imports"


class ShortNameResolver(Protocol):
    def resolve_short_directory_name(self, assembly_name: str) -> str: ...


def _import_directory(
    assembly_name: str,
    *,
    output_import_directory: str,
    imports_directory: str,
    identity_map: ShortNameResolver | None,
) -> str:
    name = assembly_name
    if identity_map is not None:
        name = identity_map.resolve_short_directory_name(assembly_name)
    return os.path.join(output_import_directory, name, imports_directory) + os.sep


def expand_library_imports(
    text: str | None,
    *,
    output_import_directory: str,
    imports_directory: str = DEFAULT_IMPORTS_DIRECTORY,
    identity_map: ShortNameResolver | None = None,
) -> str | None:
    """Replace every library-imports placeholder in ``text``.

    Parameters
    ----------
    text
        Raw argument text; ``None`` passes through.
    output_import_directory
        Root directory holding extracted library imports.
    imports_directory
        Leaf directory name inside each library's import directory.
    identity_map
        When given, assembly names are replaced by their short directory name.

    Returns
    -------
    str | None
        Expanded text. An unterminated placeholder is copied literally.
    """
    if text is None:
        return None
    if PLACEHOLDER_PREFIX not in text:
        return text
    parts: list[str] = []
    cursor = 0
    while True:
        start = text.find(PLACEHOLDER_PREFIX, cursor)
        if start < 0:
            parts.append(text[cursor:])
            break
        end = text.find(PLACEHOLDER_SUFFIX, start)
        if end < 0:
            # No closing brace anywhere after this point; nothing left can expand.
            parts.append(text[cursor:])
            break
        parts.append(text[cursor:start])
        assembly_name = text[start + len(PLACEHOLDER_PREFIX) : end]
        parts.append(
            _import_directory(
                assembly_name,
                output_import_directory=output_import_directory,
                imports_directory=imports_directory,
                identity_map=identity_map,
            )
        )
        cursor = end + 1
    return "".join(parts)


__all__ = [
    "DEFAULT_IMPORTS_DIRECTORY",
    "PLACEHOLDER_PREFIX",
    "expand_library_imports",
]
