"""Version reporting for the respack CLI."""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from respack.serde_msgspec import write_json


def get_version() -> str:
    """Get the respack package version string.

    Returns
    -------
    str
        Installed distribution version, else the in-tree ``__version__``.
    """
    from respack import __version__

    return _package_version("respack") or __version__


def get_version_info() -> dict[str, object]:
    """Get detailed version information.

    Returns
    -------
    dict[str, object]
        Structured version payload.
    """
    return {
        "respack": get_version(),
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "dependencies": {
            "cyclopts": _package_version("cyclopts"),
            "msgspec": _package_version("msgspec"),
            "opentelemetry-sdk": _package_version("opentelemetry-sdk"),
        },
    }


def version_command() -> int:
    """Show version information.

    Returns
    -------
    int
        Exit status code.
    """
    write_json(get_version_info())
    return 0


def _package_version(name: str) -> str | None:
    try:
        return pkg_version(name)
    except PackageNotFoundError:
        return None


__all__ = ["get_version", "get_version_info", "version_command"]
