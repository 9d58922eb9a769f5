"""CLI entrypoints for respack."""

from respack.cli.app import main
from respack.cli.exit_codes import ExitCode
from respack.cli.result import CliResult

__all__ = ["CliResult", "ExitCode", "main"]
