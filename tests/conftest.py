"""Shared fixtures for respack tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from respack.build import LoggingBuildHost
from tests.test_helpers.manifests import write_manifest


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return a directory holding one manifest and a resource directory."""
    write_manifest(tmp_path / "AndroidManifest.xml")
    (tmp_path / "res").mkdir()
    return tmp_path


@pytest.fixture
def host(tmp_path: Path) -> LoggingBuildHost:
    """Return a logging build host rooted at ``tmp_path``."""
    return LoggingBuildHost(working_directory=tmp_path, max_workers=1)
