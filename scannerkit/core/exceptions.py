"""
Centralized exception hierarchy for ScannerKit.

This module defines all custom exceptions raised while bootstrapping the
scanner engine so callers can catch a single base class.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class ScannerKitError(Exception):
    """Base exception for all ScannerKit errors."""

    pass


# ============================================================================
# Transport Exceptions
# ============================================================================


class TransportError(ScannerKitError):
    """Raised when the server cannot be reached or answers with an error."""

    def __init__(
        self, message: str, url: str = "", status_code: Optional[int] = None
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


# ============================================================================
# Cache Exceptions
# ============================================================================


class IntegrityError(ScannerKitError):
    """Raised when a downloaded file does not match its expected fingerprint."""

    def __init__(self, filename: str, expected: str, actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            "INVALID HASH: file was downloaded but hash does not match for "
            f"{filename} (expected {expected}, got {actual})"
        )


class FilesystemError(ScannerKitError):
    """Raised when cache directories or temporary files cannot be created."""

    pass


# ============================================================================
# Bootstrap Exceptions
# ============================================================================


class BootstrapError(ScannerKitError):
    """Base exception for bootstrap index errors."""

    pass


class ManifestFormatError(BootstrapError):
    """Raised when the bootstrap index cannot be parsed."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Fail to bootstrap from server. Bootstrap index was:\n{raw}")


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(ScannerKitError):
    """Configuration parsing or validation error."""

    pass
