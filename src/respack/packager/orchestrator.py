"""Drive the packager across every manifest and ABI of a build.

Manifests run concurrently on the host's bounded pool; the ABIs of one
manifest run in sequence. The first failed invocation cancels the shared
token, which kills in-flight packager processes of other manifests.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import msgspec

from respack.build.host import BuildHost, LoggingBuildHost
from respack.config import BuildRequest
from respack.core_types import Severity
from respack.obs.diagnostics import DiagnosticRecord
from respack.obs.otel import (
    SCOPE_BUILD,
    SCOPE_MANIFEST,
    SCOPE_PACKAGER,
    record_error,
    record_invocation_duration,
    stage_span,
)
from respack.obs.otel.constants import AttributeName
from respack.packager.classifier import ClassifierContext, classify_line
from respack.packager.command import backing_path, build_command
from respack.packager.identity_map import AssemblyIdentityMap
from respack.packager.resource_paths import load_resource_case_map
from respack.packager.runner import PackagerRunner, RunResult, run_packager
from respack.packager.signatures import lookup_error_code
from respack.utils.file_io import replace_if_changed

logger = logging.getLogger(__name__)

ADDITIONAL_MANIFEST = Path("manifest") / "AndroidManifest.xml"


class ManifestState(StrEnum):
    """Terminal state of one manifest."""

    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class InvocationOutcome(msgspec.Struct, frozen=True):
    """Result of one (manifest, ABI) packager invocation."""

    abi: str | None
    output_path: str | None
    exit_code: int | None
    succeeded: bool
    aborted: bool = False
    cancelled: bool = False
    promoted: bool = False


class ManifestOutcome(msgspec.Struct, frozen=True):
    """Terminal state and invocations of one manifest."""

    manifest: str
    state: ManifestState
    invocations: tuple[InvocationOutcome, ...] = ()
    message: str | None = None


class BuildResult(msgspec.Struct, frozen=True):
    """Aggregate result of ``run_build``."""

    ok: bool
    cancelled: bool
    manifests: tuple[ManifestOutcome, ...]
    diagnostics: tuple[DiagnosticRecord, ...] = ()
    duration_s: float = 0.0

    def outcomes_by_state(self) -> dict[ManifestState, list[ManifestOutcome]]:
        grouped: dict[ManifestState, list[ManifestOutcome]] = {state: [] for state in ManifestState}
        for outcome in self.manifests:
            grouped[outcome.state].append(outcome)
        return grouped


@dataclass(frozen=True)
class _BuildContext:
    request: BuildRequest
    host: BuildHost
    runner: PackagerRunner
    classifier: ClassifierContext
    identity_map: AssemblyIdentityMap
    tool: str


def _is_newer(flag_file: Path, manifest: Path) -> bool:
    return (
        flag_file.is_file()
        and manifest.is_file()
        and flag_file.stat().st_mtime > manifest.stat().st_mtime
    )


def manifest_is_up_to_date(manifest: Path, request: BuildRequest) -> bool:
    """Return True when the resgen flag file is newer than every input manifest.

    Parameters
    ----------
    manifest
        Resolved path of the manifest being processed.
    request
        Build configuration providing the flag file and library paths.

    Returns
    -------
    bool
        True when packaging this manifest can be skipped.
    """
    if not request.component_resgen_flag_file:
        return False
    flag_file = request.resolve(request.component_resgen_flag_file)
    if not _is_newer(flag_file, manifest):
        return False
    for raw in request.additional_android_resource_paths:
        if not raw:
            continue
        if not _is_newer(flag_file, request.resolve(raw) / ADDITIONAL_MANIFEST):
            return False
    return True


def _report_record(host: BuildHost, record: DiagnosticRecord) -> None:
    if record.severity is Severity.INFO:
        host.log_message(record.message)
    elif record.severity is Severity.WARNING:
        host.log_coded_warning(record.code or "", record.message, record.file, record.line)
    else:
        host.log_coded_error(record.code or "", record.message, record.file, record.line)


def _report_output(result: RunResult, *, succeeded: bool, ctx: _BuildContext) -> bool:
    reported_error = False
    for line in result.lines:
        if not line.is_stderr:
            if line.text:
                ctx.host.log_message(line.text)
            continue
        record = classify_line(line.text, tool_succeeded=succeeded, context=ctx.classifier)
        if record is None:
            continue
        reported_error = reported_error or record.is_error
        _report_record(ctx.host, record)
    return reported_error


def _report_silent_failure(
    result: RunResult, output_path: Path | None, ctx: _BuildContext
) -> None:
    if output_path is not None:
        message = (
            f"{ctx.classifier.tool_name} exited with code {result.exit_code}; "
            f"expected output '{backing_path(output_path)}' not found"
        )
    else:
        message = f"{ctx.classifier.tool_name} exited with code {result.exit_code}"
    ctx.host.log_coded_error(lookup_error_code(message), message, ctx.classifier.tool_name, 0)


def _run_invocation(manifest: Path, abi: str | None, ctx: _BuildContext) -> InvocationOutcome:
    output_path = ctx.request.output_path_for(abi)
    output_text = str(output_path) if output_path is not None else None
    with stage_span(
        "respack.invocation",
        stage="invocation",
        scope_name=SCOPE_PACKAGER,
        attributes={AttributeName.ABI: abi or "primary", AttributeName.MANIFEST: str(manifest)},
    ) as stage:
        args = build_command(
            manifest,
            abi,
            output_path,
            ctx.request,
            host=ctx.host,
            identity_map=ctx.identity_map,
        )
        if args is None:
            record_error("invocation", "CommandAborted")
            stage.fail("command aborted")
            return InvocationOutcome(
                abi=abi, output_path=output_text, exit_code=None, succeeded=False, aborted=True
            )
        backing = backing_path(output_path) if output_path is not None else None
        if backing is not None:
            backing.unlink(missing_ok=True)
        start = time.monotonic()
        result = ctx.runner(
            [ctx.tool, *args],
            cwd=ctx.host.working_directory,
            token=ctx.host.cancellation,
        )
        # Some packager builds exit nonzero yet still write a usable backing file.
        produced = backing is not None and backing.is_file()
        succeeded = result.succeeded or produced
        record_invocation_duration(
            time.monotonic() - start, abi=abi, status="ok" if succeeded else "error"
        )
        reported_error = _report_output(result, succeeded=succeeded, ctx=ctx)
        promoted = False
        if produced and backing is not None and output_path is not None:
            try:
                promoted = replace_if_changed(backing, output_path)
            finally:
                backing.unlink(missing_ok=True)
        if not succeeded:
            record_error("invocation", "PackagerFailed")
            stage.fail(f"packager exited with code {result.exit_code}")
            if result.cancelled:
                ctx.host.log_debug(f"Packager for {manifest} ({abi or 'primary'}) was cancelled.")
            elif not reported_error:
                _report_silent_failure(result, output_path, ctx)
        return InvocationOutcome(
            abi=abi,
            output_path=output_text,
            exit_code=result.exit_code,
            succeeded=succeeded,
            cancelled=result.cancelled and not succeeded,
            promoted=promoted,
        )


def _process_abis(manifest: Path, ctx: _BuildContext) -> ManifestOutcome:
    invocations: list[InvocationOutcome] = []
    token = ctx.host.cancellation
    for abi in ctx.request.abis():
        if token.cancelled:
            return ManifestOutcome(
                manifest=str(manifest),
                state=ManifestState.CANCELLED,
                invocations=tuple(invocations),
                message="Build cancelled.",
            )
        outcome = _run_invocation(manifest, abi, ctx)
        invocations.append(outcome)
        if outcome.cancelled:
            return ManifestOutcome(
                manifest=str(manifest),
                state=ManifestState.CANCELLED,
                invocations=tuple(invocations),
                message=f"Packager for abi {abi or 'primary'} was killed by cancellation.",
            )
        if not outcome.succeeded:
            token.cancel()
            return ManifestOutcome(
                manifest=str(manifest),
                state=ManifestState.FAILED,
                invocations=tuple(invocations),
                message=(
                    f"Command could not be built for abi {abi or 'primary'}."
                    if outcome.aborted
                    else f"Packager failed for abi {abi or 'primary'}."
                ),
            )
    return ManifestOutcome(
        manifest=str(manifest),
        state=ManifestState.COMPLETED,
        invocations=tuple(invocations),
    )


def process_manifest(raw_manifest: str, ctx: _BuildContext) -> ManifestOutcome:
    """Run the skip check and every ABI invocation for one manifest.

    Returns
    -------
    ManifestOutcome
        Terminal state of the manifest.
    """
    manifest = ctx.request.resolve(raw_manifest)
    if not manifest.is_file():
        ctx.host.log_debug(f"{manifest} does not exist. Skipping")
        return ManifestOutcome(
            manifest=str(manifest), state=ManifestState.SKIPPED, message="Manifest not found."
        )
    if manifest_is_up_to_date(manifest, ctx.request):
        ctx.host.log_message(
            f"  {manifest} and additional resource manifests are unchanged. Skipping."
        )
        return ManifestOutcome(
            manifest=str(manifest), state=ManifestState.SKIPPED, message="Up to date."
        )
    if ctx.host.cancellation.cancelled:
        return ManifestOutcome(
            manifest=str(manifest), state=ManifestState.CANCELLED, message="Build cancelled."
        )
    try:
        with stage_span(
            "respack.manifest",
            stage="manifest",
            scope_name=SCOPE_MANIFEST,
            attributes={AttributeName.MANIFEST: str(manifest)},
        ) as stage:
            outcome = _process_abis(manifest, ctx)
            if outcome.state is not ManifestState.COMPLETED:
                stage.fail(outcome.message or outcome.state.value)
            return outcome
    except OSError as exc:
        message = f"unable to process '{manifest}': {exc}"
        ctx.host.log_coded_error(lookup_error_code(message), message, str(manifest), 0)
        record_error("manifest", type(exc).__name__)
        ctx.host.cancellation.cancel()
        return ManifestOutcome(manifest=str(manifest), state=ManifestState.FAILED, message=message)


def _diagnostics_of(host: BuildHost) -> tuple[DiagnosticRecord, ...]:
    if isinstance(host, LoggingBuildHost):
        return tuple(
            record for record in host.diagnostics.snapshot() if record.severity is not Severity.INFO
        )
    return ()


def run_build(
    request: BuildRequest,
    *,
    host: BuildHost | None = None,
    runner: PackagerRunner = run_packager,
) -> BuildResult:
    """Package every manifest of ``request``.

    Parameters
    ----------
    request
        Build configuration.
    host
        Logging, cancellation and scheduling services; a ``LoggingBuildHost``
        rooted at the request's working directory by default.
    runner
        Subprocess runner, replaceable in tests.

    Returns
    -------
    BuildResult
        Per-manifest outcomes. Failures are reported here and through the
        host, never raised.
    """
    resolved_host = host or LoggingBuildHost(
        working_directory=request.working_path,
        max_workers=request.max_workers,
    )
    start = time.monotonic()
    with stage_span(
        "respack.build",
        stage="build",
        scope_name=SCOPE_BUILD,
        attributes={"manifest_count": len(request.manifest_files)},
    ):
        case_map = load_resource_case_map(
            request.resolve(request.resource_name_case_map)
            if request.resource_name_case_map
            else None
        )
        identity_map = AssemblyIdentityMap.load(
            request.resolve(request.assembly_identity_map_file)
            if request.assembly_identity_map_file
            else None
        )
        tool = request.tool_executable()
        ctx = _BuildContext(
            request=request,
            host=resolved_host,
            runner=runner,
            classifier=ClassifierContext(
                tool_name=Path(tool).name,
                resource_directory=request.resolved_resource_directory,
                case_map=case_map,
            ),
            identity_map=identity_map,
            tool=tool,
        )
        outcomes: Sequence[ManifestOutcome] = resolved_host.run_bounded(
            request.manifest_files, lambda raw: process_manifest(raw, ctx)
        )
    cancelled = resolved_host.cancellation.cancelled
    result = BuildResult(
        ok=not resolved_host.has_logged_errors and not cancelled,
        cancelled=cancelled,
        manifests=tuple(outcomes),
        diagnostics=_diagnostics_of(resolved_host),
        duration_s=time.monotonic() - start,
    )
    logger.info(
        "Packaged %d manifest(s): ok=%s cancelled=%s",
        len(result.manifests),
        result.ok,
        result.cancelled,
    )
    return result


__all__ = [
    "BuildResult",
    "InvocationOutcome",
    "ManifestOutcome",
    "ManifestState",
    "manifest_is_up_to_date",
    "process_manifest",
    "run_build",
]
