"""Android manifest handling for per-ABI packaging."""

from __future__ import annotations

from respack.manifest.document import (
    ABI_CODES,
    MAX_VERSION_CODE,
    ManifestDocument,
    VersionCodeError,
)

__all__ = ["ABI_CODES", "MAX_VERSION_CODE", "ManifestDocument", "VersionCodeError"]
