"""Build request: the immutable configuration snapshot for one packaging run."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Final

from respack.core_types import NonEmptyStr, PositiveInt
from respack.packager.placeholders import DEFAULT_IMPORTS_DIRECTORY
from respack.serde_msgspec import StructBaseStrict

TOOL_NAME: Final[str] = "aapt.exe" if sys.platform == "win32" else "aapt"


class BuildRequest(StructBaseStrict, frozen=True):
    """Everything the packager driver needs to know about one build.

    Relative paths resolve against ``working_directory``. Sequence fields keep
    their configured order; the order of resource directories is significant
    to the packager's overlay resolution.
    """

    manifest_files: tuple[str, ...]
    resource_directory: NonEmptyStr
    java_designer_output_directory: NonEmptyStr
    java_platform_jar_path: NonEmptyStr
    application_name: NonEmptyStr
    working_directory: str = "."
    tool_path: str = ""
    tool_exe: str | None = None
    resource_output_file: str | None = None
    additional_android_resource_paths: tuple[str, ...] = ()
    additional_resource_directories: tuple[str, ...] = ()
    asset_directory: str | None = None
    library_project_jars: tuple[str, ...] = ()
    extra_args: str | None = None
    api_level: str | None = None
    use_latest_platform_sdk: bool = False
    supported_abis: tuple[str, ...] = ()
    create_package_per_abi: bool = False
    non_constant_id: bool = False
    uncompressed_file_extensions: str | None = None
    package_name: str | None = None
    extra_packages: str | None = None
    resource_name_case_map: str | None = None
    imports_directory: str = DEFAULT_IMPORTS_DIRECTORY
    output_import_directory: str = ""
    use_short_file_names: bool = False
    assembly_identity_map_file: str | None = None
    explicit_crunch: bool = False
    version_code_pattern: str | None = None
    version_code_properties: str | None = None
    android_sdk_platform: str | None = None
    resource_symbols_text_file_directory: str | None = None
    component_resgen_flag_file: str | None = None
    verbose: bool = False
    max_workers: PositiveInt | None = None

    @property
    def working_path(self) -> Path:
        return Path(self.working_directory)

    def resolve(self, value: str | os.PathLike[str]) -> Path:
        """Resolve ``value`` against the working directory.

        Returns
        -------
        Path
            ``value`` unchanged when absolute, else joined to the working
            directory.
        """
        path = Path(value)
        if path.is_absolute():
            return path
        return self.working_path / path

    @property
    def resolved_resource_directory(self) -> Path:
        return self.resolve(self.resource_directory.rstrip("\\"))

    def tool_executable(self) -> str:
        """Return the packager executable path.

        Returns
        -------
        str
            ``tool_path`` joined with ``tool_exe`` or the platform tool name.
        """
        name = self.tool_exe or TOOL_NAME
        if not self.tool_path:
            return name
        return os.path.join(self.tool_path, name)

    def abis(self) -> tuple[str | None, ...]:
        """Return the invocation ABIs, ``None`` meaning the primary package.

        Returns
        -------
        tuple[str | None, ...]
            ``(None,)`` unless per-ABI packaging is on with several ABIs.
        """
        if self.create_package_per_abi and len(self.supported_abis) > 1:
            return (None, *self.supported_abis)
        return (None,)

    def output_path_for(self, abi: str | None) -> Path | None:
        """Return the final output path of one invocation.

        Returns
        -------
        Path | None
            ``None`` when no output file is requested.
        """
        if not self.resource_output_file:
            return None
        output = self.resource_output_file
        if abi is not None:
            output = f"{output}-{abi}"
        return self.resolve(output)


__all__ = ["TOOL_NAME", "BuildRequest"]
