"""Structured command results rendered by the CLI result action."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from respack.cli.exit_codes import ExitCode

if TYPE_CHECKING:
    from respack.packager.orchestrator import BuildResult


@dataclass(frozen=True)
class CliResult:
    """Exit code plus what a command wants shown to the user.

    Parameters
    ----------
    exit_code
        Process exit status.
    summary
        One-line outcome; printed in red when the command failed.
    artifacts
        Output files written by the command, keyed by a display label.
    metrics
        Numeric measurements such as ``duration_ms``.
    """

    exit_code: int
    summary: str | None = None
    artifacts: Mapping[str, Path] = field(default_factory=dict)
    metrics: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        *,
        summary: str | None = None,
        artifacts: Mapping[str, Path] | None = None,
        metrics: Mapping[str, float] | None = None,
    ) -> CliResult:
        return cls(
            exit_code=ExitCode.SUCCESS,
            summary=summary,
            artifacts=artifacts or {},
            metrics=metrics or {},
        )

    @classmethod
    def error(
        cls,
        exit_code: ExitCode | int,
        *,
        summary: str | None = None,
        metrics: Mapping[str, float] | None = None,
    ) -> CliResult:
        return cls(exit_code=int(exit_code), summary=summary, metrics=metrics or {})

    @classmethod
    def from_exception(cls, exc: BaseException) -> CliResult:
        """Wrap an exception that escaped a command."""
        return cls.error(ExitCode.from_exception(exc), summary=str(exc))

    @classmethod
    def from_build(cls, result: BuildResult) -> CliResult:
        """Summarize a packaging run.

        Failed and cancelled builds map to ``EXECUTION_ERROR``; a build is
        reported as cancelled only when no error was logged. Outputs
        replaced during the run are listed as artifacts.

        Returns
        -------
        CliResult
            Result carrying per-state manifest counts and the build duration.
        """
        counts = ", ".join(
            f"{len(outcomes)} {state}"
            for state, outcomes in result.outcomes_by_state().items()
            if outcomes
        )
        metrics = {"duration_ms": result.duration_s * 1000.0}
        errors = sum(1 for record in result.diagnostics if record.is_error)
        if errors:
            return cls.error(
                ExitCode.EXECUTION_ERROR,
                summary=f"Build failed with {errors} error(s) ({counts}).",
                metrics=metrics,
            )
        if not result.ok:
            return cls.error(
                ExitCode.EXECUTION_ERROR, summary=f"Build cancelled ({counts}).", metrics=metrics
            )
        artifacts = {
            f"{outcome.manifest} ({invocation.abi or 'primary'})": Path(invocation.output_path)
            for outcome in result.manifests
            for invocation in outcome.invocations
            if invocation.promoted and invocation.output_path is not None
        }
        return cls.success(
            summary=f"Build succeeded ({counts or 'nothing to do'}).",
            artifacts=artifacts,
            metrics=metrics,
        )

    @property
    def ok(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS


__all__ = ["CliResult"]
