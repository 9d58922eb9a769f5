"""respack: drive the Android resource packager across manifests and ABIs."""

from __future__ import annotations

__version__ = "0.1.0"

from respack.config import BuildRequest  # noqa: E402
from respack.packager.orchestrator import BuildResult, ManifestState, run_build  # noqa: E402

__all__ = ["BuildRequest", "BuildResult", "ManifestState", "__version__", "run_build"]
