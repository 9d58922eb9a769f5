"""Tests for library-imports placeholder expansion."""

from __future__ import annotations

import os

from respack.packager.identity_map import AssemblyIdentityMap
from respack.packager.placeholders import DEFAULT_IMPORTS_DIRECTORY, expand_library_imports


def _expected(root: str, name: str) -> str:
    return os.path.join(root, name, DEFAULT_IMPORTS_DIRECTORY) + os.sep


def test_expands_with_short_names() -> None:
    identity_map = AssemblyIdentityMap(["Bar", "Foo"])
    expanded = expand_library_imports(
        "${library.imports:Foo}",
        output_import_directory="root",
        identity_map=identity_map,
    )
    assert expanded == _expected("root", "1")
    assert "${" not in expanded


def test_expands_every_placeholder() -> None:
    expanded = expand_library_imports(
        "-S ${library.imports:A}res -S ${library.imports:B}res",
        output_import_directory="lp",
    )
    assert expanded == f"-S {_expected('lp', 'A')}res -S {_expected('lp', 'B')}res"


def test_text_without_placeholder_is_unchanged() -> None:
    text = "--min-sdk-version 21"
    assert expand_library_imports(text, output_import_directory="lp") == text
    assert expand_library_imports(None, output_import_directory="lp") is None


def test_unterminated_placeholder_is_copied_literally() -> None:
    text = "-S ${library.imports:A}res -S ${library.imports:Broken"
    expanded = expand_library_imports(text, output_import_directory="lp")
    assert expanded == f"-S {_expected('lp', 'A')}res -S ${{library.imports:Broken"


def test_custom_imports_directory() -> None:
    expanded = expand_library_imports(
        "${library.imports:Foo}",
        output_import_directory="lp",
        imports_directory="jl",
    )
    assert expanded == os.path.join("lp", "Foo", "jl") + os.sep
