"""Configuration management commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from respack.cli.config_loader import CONFIG_FILENAME, load_effective_config_with_sources
from respack.cli.context import RunContext
from respack.cli.groups import admin_group
from respack.serde_msgspec import write_json

_TEMPLATE = """# respack.toml
# log_level = "INFO"

[package]
manifest_files = ["obj/android/AndroidManifest.xml"]
resource_directory = "obj/res"
java_designer_output_directory = "obj/src"
java_platform_jar_path = "/opt/android-sdk/platforms/android-34/android.jar"
application_name = "android.app.Application"
resource_output_file = "obj/resources.apk"
# working_directory = "."
# tool_path = "/opt/android-sdk/build-tools/34.0.0"
# additional_resource_directories = []
# additional_android_resource_paths = []
# asset_directory = "obj/assets"
# library_project_jars = []
# api_level = "34"
# android_sdk_platform = "34"
# use_latest_platform_sdk = false
# supported_abis = ["armeabi-v7a", "arm64-v8a"]
# create_package_per_abi = false
# version_code_pattern = "{abi}{versionCode:D5}"
# version_code_properties = ""
# uncompressed_file_extensions = ".dat;.bin"
# package_name = ""
# extra_packages = ""
# extra_args = ""
# resource_name_case_map = "obj/case_map.txt"
# assembly_identity_map_file = "obj/map.cache"
# use_short_file_names = false
# output_import_directory = "obj/lp"
# resource_symbols_text_file_directory = "obj"
# component_resgen_flag_file = "obj/R.cs.flag"
# non_constant_id = false
# explicit_crunch = false
# verbose = false
# max_workers = 4
"""


def show_config(
    *,
    with_sources: Annotated[
        bool,
        Parameter(
            name="--with-sources",
            help="Show the source of each configuration value.",
        ),
    ] = False,
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> int:
    """Show the effective ``[package]`` settings.

    Returns
    -------
    int
        Exit status code.
    """
    config = (
        run_context.config if run_context is not None else load_effective_config_with_sources(None)
    )
    payload: object = config.to_display_dict() if with_sources else config.to_flat_dict()
    write_json(payload)
    return 0


def init_config(
    *,
    path: Annotated[
        Path | None,
        Parameter(
            name="--path",
            help=f"Path to write the configuration template (default: {CONFIG_FILENAME}).",
        ),
    ] = None,
    force: Annotated[
        bool,
        Parameter(
            name="--force",
            help="Overwrite existing config file.",
            group=admin_group,
        ),
    ] = False,
) -> int:
    """Write a configuration template to disk.

    Returns
    -------
    int
        Exit status code.

    Raises
    ------
    FileExistsError
        Raised when the target path exists and ``force`` is false.
    """
    target_path = path if path is not None else Path(CONFIG_FILENAME)
    if target_path.exists() and not force:
        msg = f"Config file already exists: {target_path}."
        raise FileExistsError(msg)
    target_path.write_text(_TEMPLATE, encoding="utf-8")
    return 0


__all__ = ["init_config", "show_config"]
