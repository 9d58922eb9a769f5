"""Main application setup for the respack CLI."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Annotated, Literal

from cyclopts import App, CycloptsError, Parameter

from respack.cli.commands.version import get_version
from respack.cli.config_loader import load_config_log_level, load_effective_config_with_sources
from respack.cli.context import RunContext
from respack.cli.exit_codes import ExitCode
from respack.cli.groups import admin_group, observability_group, session_group
from respack.cli.result import CliResult
from respack.cli.result_action import cli_result_action, render_result
from respack.obs.otel.constants import AttributeName
from respack.utils.uuid_factory import uuid7_str

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_HELP_EPILOGUE = """
Examples:
  respack package -m obj/AndroidManifest.xml --resource-dir obj/res ...
  respack package --abi armeabi-v7a --abi arm64-v8a --package-per-abi
  respack classify build.log --tool-failed
  respack codes --search "not found"
  respack config show --with-sources

Environment Variables:
  RESPACK_LOG_LEVEL        Default log level (DEBUG, INFO, WARNING, ERROR)
  RESPACK_TOOL_PATH        Directory holding the packager executable
  RESPACK_MAX_WORKERS      Maximum manifests packaged concurrently
  RESPACK_ENABLE_TRACES    Enable OpenTelemetry traces
  RESPACK_ENABLE_METRICS   Enable OpenTelemetry metrics

Tips:
  Use `respack config show --with-sources` to see config precedence.
"""

app = App(
    name="respack",
    help="respack - Android resource packaging driver.",
    help_format="rich",
    help_epilogue=_HELP_EPILOGUE,
    version=get_version(),
    version_flags=["--version", "-V"],
    default_parameter=Parameter(
        show_default=True,
        show_env_var=True,
    ),
    result_action=cli_result_action,
    exit_on_error=True,
    print_error=True,
    help_on_error=False,
)

app.meta.group_parameters = session_group


@dataclass(frozen=True)
class SessionOptions:
    """Session-level configuration parameters."""

    config_file: Annotated[
        str | None,
        Parameter(
            name="--config",
            help="Explicit configuration file, layered over respack.toml and pyproject.toml.",
            group=session_group,
        ),
    ] = None
    run_id: Annotated[
        str | None,
        Parameter(
            name="--run-id",
            help="Explicit run identifier (UUID7 generated if not provided).",
            group=session_group,
        ),
    ] = None
    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None,
        Parameter(
            name="--log-level",
            help="Logging verbosity level (default: config file, else INFO).",
            env_var="RESPACK_LOG_LEVEL",
            group=session_group,
        ),
    ] = None


@dataclass(frozen=True)
class ObservabilityOptions:
    """OpenTelemetry configuration parameters."""

    enable_traces: Annotated[
        bool | None,
        Parameter(
            name="--enable-traces",
            help="Enable OpenTelemetry traces.",
            env_var="RESPACK_ENABLE_TRACES",
            group=observability_group,
        ),
    ] = None
    enable_metrics: Annotated[
        bool | None,
        Parameter(
            name="--enable-metrics",
            help="Enable OpenTelemetry metrics.",
            env_var="RESPACK_ENABLE_METRICS",
            group=observability_group,
        ),
    ] = None
    otel_test_mode: Annotated[
        bool | None,
        Parameter(
            name="--otel-test-mode",
            help="Use in-memory exporters for OpenTelemetry (for testing).",
            env_var="RESPACK_OTEL_TEST_MODE",
            group=observability_group,
        ),
    ] = None


_DEFAULT_SESSION_OPTIONS = SessionOptions()
_DEFAULT_OBSERVABILITY_OPTIONS = ObservabilityOptions()


def _resolve_log_level(session: SessionOptions) -> str:
    level = session.log_level or load_config_log_level(session.config_file) or "INFO"
    level = level.upper()
    if level not in LOG_LEVELS:
        msg = f"Unsupported log level {level!r}."
        raise ValueError(msg)
    return level


def invoke_command(cli_app: App, tokens: list[str], *, run_context: RunContext) -> int:
    """Parse ``tokens``, inject ``run_context`` and run the selected command.

    Returns
    -------
    int
        Exit status code.
    """
    from respack.obs.otel import SCOPE_CLI, stage_span

    try:
        command, bound, ignored = cli_app.parse_args(tokens, exit_on_error=False, print_error=True)
    except CycloptsError as exc:
        return ExitCode.from_exception(exc)
    injected = {"run_context": run_context} if "run_context" in ignored else {}
    command_name = getattr(command, "__name__", "command")
    try:
        with stage_span(
            f"respack.cli.{command_name}",
            stage="cli",
            scope_name=SCOPE_CLI,
            attributes={AttributeName.COMMAND: command_name},
        ) as stage:
            result = command(*bound.args, **bound.kwargs, **injected)
            if isinstance(result, CliResult) and not result.ok:
                stage.fail(result.summary or f"exit code {result.exit_code}")
    except (ValueError, TypeError, OSError) as exc:
        logger.debug("Command %s failed", command_name, exc_info=True)
        result = CliResult.from_exception(exc)
    return cli_result_action(cli_app, command, result)


@app.meta.default
def meta_launcher(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    session: Annotated[SessionOptions, Parameter(name="*")] = _DEFAULT_SESSION_OPTIONS,
    observability: Annotated[ObservabilityOptions, Parameter(name="*")] = (
        _DEFAULT_OBSERVABILITY_OPTIONS
    ),
) -> int:
    """Meta launcher for config selection and context injection.

    Returns
    -------
    int
        Exit status code from command execution.
    """
    from respack.obs.otel import OtelBootstrapOptions, bound_run_id, configure_otel

    try:
        log_level = _resolve_log_level(session)
        config_sources = load_effective_config_with_sources(session.config_file)
    except (ValueError, TypeError, OSError) as exc:
        logging.basicConfig(level="INFO")
        return render_result(CliResult.from_exception(exc))
    logging.basicConfig(level=log_level)

    otel_options: OtelBootstrapOptions | None = None
    if any(
        opt is not None
        for opt in (
            observability.enable_traces,
            observability.enable_metrics,
            observability.otel_test_mode,
        )
    ):
        otel_options = OtelBootstrapOptions(
            enable_traces=observability.enable_traces,
            enable_metrics=observability.enable_metrics,
            test_mode=observability.otel_test_mode,
        )

    run_context = RunContext(
        run_id=session.run_id or uuid7_str(),
        log_level=log_level,
        config=config_sources,
        otel_options=otel_options,
    )
    providers = configure_otel(options=otel_options)
    try:
        with bound_run_id(run_context.run_id):
            return invoke_command(app, list(tokens), run_context=run_context)
    finally:
        if not (otel_options and otel_options.test_mode):
            providers.shutdown()


app.command("respack.cli.commands.package:package_command", name="package", alias="p")
app.command("respack.cli.commands.classify:classify_command", name="classify")
app.command("respack.cli.commands.codes:codes_command", name="codes")

_config_app = App(name="config", help="Configuration management.")
_config_app.command("respack.cli.commands.config:show_config", name="show")
_config_app.command("respack.cli.commands.config:init_config", name="init")
app.command(_config_app, alias="cfg")
app.command("respack.cli.commands.version:version_command", name="version", alias="v", group=admin_group)


def main() -> None:
    """Run the respack CLI."""
    sys.exit(app.meta())


__all__ = ["app", "invoke_command", "main"]
