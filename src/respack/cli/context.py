"""Per-invocation state handed from the meta launcher to commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from respack.cli.config_source import ConfigWithSources

if TYPE_CHECKING:
    from respack.core_types import JsonValue
    from respack.obs.otel import OtelBootstrapOptions


@dataclass(frozen=True)
class RunContext:
    """State injected into commands that declare a ``run_context`` parameter.

    Parameters
    ----------
    run_id
        Identifier tagging logs, spans and metrics of this invocation.
    log_level
        Level the root logger was configured with.
    config
        ``[package]`` settings merged across config layers.
    otel_options
        Telemetry options given on the command line, if any.
    """

    run_id: str
    log_level: str
    config: ConfigWithSources = field(default_factory=ConfigWithSources)
    otel_options: OtelBootstrapOptions | None = None

    @property
    def package_settings(self) -> dict[str, JsonValue]:
        """Return the merged settings as plain ``BuildRequest`` field values."""
        return self.config.to_flat_dict()


__all__ = ["RunContext"]
