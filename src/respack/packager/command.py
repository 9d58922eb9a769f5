"""Build the packager argument list for one (manifest, ABI) invocation."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from xml.etree import ElementTree

from respack.build.host import BuildHost
from respack.config import BuildRequest
from respack.manifest.document import INVALID_VERSION_CODE, ManifestDocument, VersionCodeError
from respack.packager.identity_map import AssemblyIdentityMap
from respack.packager.placeholders import expand_library_imports
from respack.packager.signatures import lookup_error_code

type CommandLine = tuple[str, ...]

BACKING_SUFFIX = ".bk"
PRIMARY_MANIFEST_DIRECTORY = "manifest"


def backing_path(output_path: Path) -> Path:
    """Return the temporary artifact path the packager writes to."""
    return output_path.with_name(output_path.name + BACKING_SUFFIX)


def _split_extensions(value: str | None) -> list[str]:
    if not value or not value.strip():
        return []
    return [item for item in value.replace(",", ";").split(";") if item]


def _split_extra_args(value: str) -> list[str]:
    return shlex.split(value, posix=os.name != "nt")


def prepare_manifest(
    manifest_path: Path,
    abi: str | None,
    request: BuildRequest,
    *,
    host: BuildHost,
) -> Path | None:
    """Write the mutated manifest for ``abi`` and return its path.

    Problems are reported through ``host`` as coded errors against the
    source manifest.

    Returns
    -------
    Path | None
        Path of the written manifest, or ``None`` when the invocation must
        abort.
    """
    manifest_dir = manifest_path.parent / (abi or PRIMARY_MANIFEST_DIRECTORY)
    manifest_dir.mkdir(parents=True, exist_ok=True)
    target = manifest_dir / manifest_path.name
    try:
        document = ManifestDocument.load(manifest_path)
    except ElementTree.ParseError as exc:
        message = f"Error parsing XML in {manifest_path}: {exc}"
        host.log_coded_error(lookup_error_code(message), message, str(manifest_path), 0)
        return None
    except OSError as exc:
        message = f"unable to process '{manifest_path}': {exc.strerror or exc}"
        host.log_coded_error(lookup_error_code(message), message, str(manifest_path), 0)
        return None
    document.set_sdk_version(request.android_sdk_platform)
    try:
        if request.version_code_pattern:
            document.calculate_version_code(
                abi, request.version_code_pattern, request.version_code_properties
            )
        elif abi is not None:
            document.set_abi(abi)
    except VersionCodeError as exc:
        host.log_coded_error(INVALID_VERSION_CODE, str(exc), str(manifest_path), 0)
        return None
    ok, error, error_code = document.validate_version_code()
    if not ok:
        host.log_coded_error(
            error_code or INVALID_VERSION_CODE, error or "", str(manifest_path), 0
        )
        return None
    document.set_application_name(request.application_name)
    document.save(target)
    return target


def _resource_directory_args(request: BuildRequest) -> list[str]:
    # Primary resource directory must lead; overlays resolve first-match-wins.
    args = ["-S", str(request.resolved_resource_directory)]
    for raw in request.additional_resource_directories:
        resdir = request.resolve(raw.rstrip("\\"))
        if resdir.is_dir():
            args.extend(["-S", str(resdir)])
    for raw in request.additional_android_resource_paths:
        resdir = request.resolve(raw) / "res"
        if resdir.is_dir():
            args.extend(["-S", str(resdir)])
    return args


def _expanded_extra_args(
    request: BuildRequest,
    *,
    host: BuildHost,
    identity_map: AssemblyIdentityMap | None,
) -> list[str]:
    expanded = expand_library_imports(
        request.extra_args,
        output_import_directory=request.output_import_directory,
        imports_directory=request.imports_directory,
        identity_map=identity_map if request.use_short_file_names else None,
    )
    if expanded != request.extra_args:
        host.log_debug(f"  ExtraArgs expanded: {expanded}")
    if not expanded or not expanded.strip():
        return []
    return _split_extra_args(expanded)


def build_command(
    manifest_path: Path,
    abi: str | None,
    output_path: Path | None,
    request: BuildRequest,
    *,
    host: BuildHost,
    identity_map: AssemblyIdentityMap | None = None,
) -> CommandLine | None:
    """Return the packager arguments for one invocation.

    Parameters
    ----------
    manifest_path
        Absolute path of the source manifest.
    abi
        Target ABI, or ``None`` for the primary package.
    output_path
        Final output artifact; the packager writes ``<output>.bk``.
    request
        Build configuration.
    host
        Receives coded errors and debug messages.
    identity_map
        Short-name map used when ``use_short_file_names`` is set.

    Returns
    -------
    CommandLine | None
        Arguments excluding the executable, or ``None`` when the invocation
        must abort.
    """
    mutated_manifest = prepare_manifest(manifest_path, abi, request, host=host)
    if mutated_manifest is None:
        return None
    args: list[str] = ["package"]
    if request.verbose:
        args.append("-v")
    if request.non_constant_id:
        args.append("--non-constant-id")
    args.extend(["-f", "-m", "-M", str(mutated_manifest)])
    designer_directory = request.resolve(request.java_designer_output_directory)
    designer_directory.mkdir(parents=True, exist_ok=True)
    args.extend(["-J", str(designer_directory)])
    if request.package_name is not None:
        args.extend(["--custom-package", request.package_name.lower()])
    if output_path is not None:
        args.extend(["-F", str(backing_path(output_path))])
    args.extend(_resource_directory_args(request))
    for jar in request.library_project_jars:
        args.extend(["-j", jar])
    args.extend(["-I", request.java_platform_jar_path])
    if request.asset_directory and request.asset_directory.strip():
        asset_dir = request.resolve(request.asset_directory.rstrip("\\"))
        if asset_dir.is_dir():
            args.extend(["-A", str(asset_dir)])
    for extension in _split_extensions(request.uncompressed_file_extensions):
        args.extend(["-0", extension])
    if request.extra_packages:
        args.extend(["--extra-packages", request.extra_packages])
    if request.explicit_crunch:
        args.append("--no-crunch")
    args.append("--auto-add-overlay")
    if request.resource_symbols_text_file_directory:
        args.extend(["--output-text-symbols", request.resource_symbols_text_file_directory])
    args.extend(_expanded_extra_args(request, host=host, identity_map=identity_map))
    if not request.use_latest_platform_sdk and request.api_level:
        args.extend(["--max-res-version", request.api_level])
    return tuple(args)


__all__ = ["BACKING_SUFFIX", "CommandLine", "backing_path", "build_command", "prepare_manifest"]
