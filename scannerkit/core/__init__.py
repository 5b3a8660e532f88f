"""
Core functionality for ScannerKit.

This package contains the artifact cache and the modules it depends on.
"""

from .directory import (
    get_user_home,
    get_cache_dir,
    ensure_directory,
    verify_directory_writable,
)

from .verification import (
    FileHashes,
    compute_file_hash,
    fingerprints_match,
)

from .cache import (
    ArtifactCache,
    CacheEntry,
    Downloader,
)

from .download import (
    ServerConnection,
    DownloadProgress,
    format_progress,
)

from .exceptions import (
    ScannerKitError,
    TransportError,
    IntegrityError,
    FilesystemError,
    BootstrapError,
    ManifestFormatError,
    ConfigError,
)

__all__ = [
    "get_user_home",
    "get_cache_dir",
    "ensure_directory",
    "verify_directory_writable",
    "FileHashes",
    "compute_file_hash",
    "fingerprints_match",
    "ArtifactCache",
    "CacheEntry",
    "Downloader",
    "ServerConnection",
    "DownloadProgress",
    "format_progress",
    "ScannerKitError",
    "TransportError",
    "IntegrityError",
    "FilesystemError",
    "BootstrapError",
    "ManifestFormatError",
    "ConfigError",
]
