"""
ScannerKit engine bootstrap.

This package fetches the bootstrap index from the server and resolves the
artifacts it lists through the local artifact cache.
"""

from .index import (
    ArtifactManifest,
    ArtifactRef,
    BootstrapIndex,
    parse_manifest,
)
from .artifacts import (
    ArtifactSet,
    BootstrapResult,
    ScannerFileDownloader,
    bootstrap,
)

__all__ = [
    "ArtifactManifest",
    "ArtifactRef",
    "BootstrapIndex",
    "parse_manifest",
    "ArtifactSet",
    "BootstrapResult",
    "ScannerFileDownloader",
    "bootstrap",
]
