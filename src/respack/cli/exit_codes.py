"""Process exit codes of the respack CLI."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

import msgspec
from cyclopts import CycloptsError
from cyclopts import ValidationError as CycloptsValidationError

from respack.cli.config_models import ConfigError
from respack.obs.diagnostics import DiagnosticRecord


class ExitCode(IntEnum):
    """Exit codes returned by ``respack`` commands.

    ``1`` to ``9`` cover problems with how respack was invoked or configured;
    ``13`` means the packager ran and the build did not succeed.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    PARSE_ERROR = 2
    VALIDATION_ERROR = 3
    CONFIG_ERROR = 4

    EXECUTION_ERROR = 13

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExitCode:
        """Map an exception escaping a command to an exit code.

        Parameters
        ----------
        exc
            Exception to classify.

        Returns
        -------
        ExitCode
            ``CONFIG_ERROR`` for unreadable or invalid settings and missing
            files, ``PARSE_ERROR`` or ``VALIDATION_ERROR`` for bad command
            lines, ``EXECUTION_ERROR`` for other I/O failures.
        """
        if isinstance(exc, CycloptsValidationError):
            return cls.VALIDATION_ERROR
        if isinstance(exc, CycloptsError):
            return cls.PARSE_ERROR
        if isinstance(exc, (ConfigError, msgspec.DecodeError)):
            return cls.CONFIG_ERROR
        if isinstance(exc, (ValueError, TypeError)):
            return cls.VALIDATION_ERROR
        if isinstance(exc, (FileNotFoundError, FileExistsError, PermissionError)):
            return cls.CONFIG_ERROR
        if isinstance(exc, OSError):
            return cls.EXECUTION_ERROR
        return cls.GENERAL_ERROR

    @classmethod
    def for_diagnostics(cls, records: Iterable[DiagnosticRecord]) -> ExitCode:
        """Return ``EXECUTION_ERROR`` when any record is an error."""
        if any(record.is_error for record in records):
            return cls.EXECUTION_ERROR
        return cls.SUCCESS


__all__ = ["ExitCode"]
