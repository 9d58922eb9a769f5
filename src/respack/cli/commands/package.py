"""Package command: run the resource packager over a set of manifests."""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Annotated

from cyclopts import Parameter, validators
from rich.console import Console
from rich.table import Table

from respack.build import CancellationToken, LoggingBuildHost
from respack.cli.config_loader import build_request, load_effective_config
from respack.cli.context import RunContext
from respack.cli.groups import (
    execution_group,
    inputs_group,
    output_group,
    packaging_group,
)
from respack.cli.result import CliResult
from respack.core_types import Severity
from respack.packager.orchestrator import BuildResult, ManifestState, run_build
from respack.serde_msgspec import write_json

logger = logging.getLogger(__name__)

_STATE_STYLES = {
    ManifestState.COMPLETED: "green",
    ManifestState.SKIPPED: "dim",
    ManifestState.FAILED: "bold red",
    ManifestState.CANCELLED: "yellow",
}


@dataclass(frozen=True)
class PackageOptions:
    """CLI options that map one-to-one onto ``BuildRequest`` fields.

    Unset options (``None``) fall back to the config files.
    """

    manifest_files: Annotated[
        tuple[str, ...] | None,
        Parameter(
            name=["--manifest", "-m"],
            help="Android manifest to package. Repeat for several manifests.",
            group=inputs_group,
        ),
    ] = None
    resource_directory: Annotated[
        str | None,
        Parameter(name="--resource-dir", help="Primary resource directory.", group=inputs_group),
    ] = None
    additional_resource_directories: Annotated[
        tuple[str, ...] | None,
        Parameter(
            name="--additional-resource-dir",
            help="Extra resource directory, overlaid after the primary one. Repeatable.",
            group=inputs_group,
        ),
    ] = None
    additional_android_resource_paths: Annotated[
        tuple[str, ...] | None,
        Parameter(
            name="--additional-android-resource-path",
            help="Library resource root holding res/ and manifest/. Repeatable.",
            group=inputs_group,
        ),
    ] = None
    asset_directory: Annotated[
        str | None,
        Parameter(name="--asset-dir", help="Assets directory.", group=inputs_group),
    ] = None
    java_platform_jar_path: Annotated[
        str | None,
        Parameter(
            name="--platform-jar",
            help="Path to the platform android.jar.",
            group=inputs_group,
        ),
    ] = None
    library_project_jars: Annotated[
        tuple[str, ...] | None,
        Parameter(name="--library-jar", help="Library jar to include. Repeatable.", group=inputs_group),
    ] = None
    resource_name_case_map: Annotated[
        str | None,
        Parameter(
            name="--case-map",
            help="File of 'lowercase;Original' resource path pairs used to remap diagnostics.",
            group=inputs_group,
        ),
    ] = None
    assembly_identity_map_file: Annotated[
        str | None,
        Parameter(
            name="--identity-map",
            help="Assembly identity map used for short import directory names.",
            group=inputs_group,
        ),
    ] = None
    working_directory: Annotated[
        str | None,
        Parameter(
            name="--working-dir",
            help="Directory that relative paths resolve against.",
            group=inputs_group,
        ),
    ] = None
    resource_output_file: Annotated[
        str | None,
        Parameter(
            name=["--output", "-o"],
            help="Packaged resource output file (per-ABI outputs get '-<abi>' appended).",
            group=output_group,
        ),
    ] = None
    java_designer_output_directory: Annotated[
        str | None,
        Parameter(
            name="--designer-dir",
            help="Directory for generated R.java sources.",
            group=output_group,
        ),
    ] = None
    resource_symbols_text_file_directory: Annotated[
        str | None,
        Parameter(name="--symbols-dir", help="Directory for R.txt output.", group=output_group),
    ] = None
    component_resgen_flag_file: Annotated[
        str | None,
        Parameter(
            name="--flag-file",
            help="Flag file whose timestamp lets unchanged manifests be skipped.",
            group=output_group,
        ),
    ] = None
    output_import_directory: Annotated[
        str | None,
        Parameter(
            name="--output-import-dir",
            help="Root of extracted library imports for ${library.imports:...} expansion.",
            group=output_group,
        ),
    ] = None
    imports_directory: Annotated[
        str | None,
        Parameter(
            name="--imports-dir",
            help="Leaf directory name inside each library import directory.",
            group=output_group,
        ),
    ] = None
    application_name: Annotated[
        str | None,
        Parameter(name="--application-name", help="Application class name.", group=packaging_group),
    ] = None
    package_name: Annotated[
        str | None,
        Parameter(name="--package-name", help="Custom package name for R.java.", group=packaging_group),
    ] = None
    extra_packages: Annotated[
        str | None,
        Parameter(
            name="--extra-packages",
            help="Additional packages to generate R.java for.",
            group=packaging_group,
        ),
    ] = None
    api_level: Annotated[
        str | None,
        Parameter(name="--api-level", help="Target and minimum API level.", group=packaging_group),
    ] = None
    android_sdk_platform: Annotated[
        str | None,
        Parameter(
            name="--sdk-platform",
            help="SDK platform level passed as --max-res-version.",
            group=packaging_group,
        ),
    ] = None
    use_latest_platform_sdk: Annotated[
        bool | None,
        Parameter(
            name="--use-latest-platform-sdk",
            help="Take the minimum SDK version from the manifest.",
            group=packaging_group,
        ),
    ] = None
    supported_abis: Annotated[
        tuple[str, ...] | None,
        Parameter(name="--abi", help="Supported ABI. Repeatable.", group=packaging_group),
    ] = None
    create_package_per_abi: Annotated[
        bool | None,
        Parameter(
            name="--package-per-abi",
            help="Produce one additional package per supported ABI.",
            group=packaging_group,
        ),
    ] = None
    version_code_pattern: Annotated[
        str | None,
        Parameter(
            name="--version-code-pattern",
            help="Pattern such as '{abi}{versionCode:D5}' for per-ABI version codes.",
            group=packaging_group,
        ),
    ] = None
    version_code_properties: Annotated[
        str | None,
        Parameter(
            name="--version-code-properties",
            help="Extra 'key=value;...' properties for the version code pattern.",
            group=packaging_group,
        ),
    ] = None
    non_constant_id: Annotated[
        bool | None,
        Parameter(name="--non-constant-id", help="Generate non-final resource ids.", group=packaging_group),
    ] = None
    uncompressed_file_extensions: Annotated[
        str | None,
        Parameter(
            name="--uncompressed-extensions",
            help="Extensions stored uncompressed, separated by commas or semicolons.",
            group=packaging_group,
        ),
    ] = None
    explicit_crunch: Annotated[
        bool | None,
        Parameter(name="--explicit-crunch", help="Skip PNG crunching.", group=packaging_group),
    ] = None
    use_short_file_names: Annotated[
        bool | None,
        Parameter(
            name="--short-file-names",
            help="Use short import directory names from the identity map.",
            group=packaging_group,
        ),
    ] = None
    extra_args: Annotated[
        str | None,
        Parameter(
            name="--extra-args",
            help="Extra packager arguments, appended verbatim after expansion.",
            group=packaging_group,
        ),
    ] = None
    verbose: Annotated[
        bool | None,
        Parameter(name="--verbose", help="Pass -v to the packager.", group=packaging_group),
    ] = None
    tool_path: Annotated[
        str | None,
        Parameter(
            name="--tool-path",
            help="Directory holding the packager executable.",
            env_var="RESPACK_TOOL_PATH",
            group=execution_group,
        ),
    ] = None
    tool_exe: Annotated[
        str | None,
        Parameter(name="--tool-exe", help="Packager executable name.", group=execution_group),
    ] = None
    max_workers: Annotated[
        int | None,
        Parameter(
            name="--max-workers",
            help="Maximum manifests packaged concurrently.",
            env_var="RESPACK_MAX_WORKERS",
            validator=validators.Number(gte=1),
            group=execution_group,
        ),
    ] = None

    def overrides(self) -> dict[str, object]:
        """Return the options that were set, keyed by build request field.

        Returns
        -------
        dict[str, object]
            Non-``None`` option values.
        """
        return {key: value for key, value in asdict(self).items() if value is not None}


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Translate SIGINT into cancellation while the build runs."""
    try:
        previous = signal.signal(signal.SIGINT, lambda _signum, _frame: token.cancel())
    except ValueError:
        # Not in the main thread.
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _render_summary(result: BuildResult, console: Console) -> None:
    table = Table(title="Packaged manifests", show_lines=False)
    table.add_column("Manifest", overflow="fold")
    table.add_column("State")
    table.add_column("Invocations", justify="right")
    table.add_column("Message", overflow="fold")
    for outcome in result.manifests:
        style = _STATE_STYLES.get(outcome.state)
        table.add_row(
            outcome.manifest,
            f"[{style}]{outcome.state.value}[/]" if style else outcome.state.value,
            str(len(outcome.invocations)),
            outcome.message or "",
        )
    console.print(table)
    for record in result.diagnostics:
        if record.severity is not Severity.INFO:
            console.print(record.render(), highlight=False, markup=False)


def package_command(
    options: Annotated[PackageOptions, Parameter(name="*")] = PackageOptions(),
    *,
    json_output: Annotated[
        bool,
        Parameter(name="--json", help="Write the build result as JSON to stdout.", group=output_group),
    ] = False,
    run_context: Annotated[RunContext | None, Parameter(parse=False)] = None,
) -> CliResult:
    """Package Android resources for every configured manifest.

    Settings come from ``[tool.respack.package]`` in ``pyproject.toml``,
    ``respack.toml``, an explicit ``--config`` file and finally the options
    below, each layer overriding the previous one.

    Returns
    -------
    CliResult
        Success when every manifest completed or was skipped.
    """
    config = (
        run_context.package_settings
        if run_context is not None
        else load_effective_config(None)
    )
    request = build_request(config, options.overrides())
    host = LoggingBuildHost(
        working_directory=request.working_path,
        max_workers=request.max_workers,
    )
    with _cancel_on_interrupt(host.cancellation):
        result = run_build(request, host=host)

    if json_output:
        write_json(result)
    else:
        _render_summary(result, Console(stderr=True))

    logger.debug("Build finished in %.3fs", result.duration_s)
    return CliResult.from_build(result)


__all__ = ["PackageOptions", "package_command"]
