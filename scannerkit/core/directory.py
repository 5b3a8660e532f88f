"""
Directory structure management for ScannerKit.

This module resolves the user home directory and the artifact cache root
below it.

Directory Structure:
    User Home (~/.scannerkit/ or %USERPROFILE%\\.scannerkit\\):
        - cache/                         : Artifact cache root
          - <fingerprint>/<filename>     : One verified artifact per slot
          - _tmp/                        : In-flight downloads

The cache layout is read by external tooling and must not change.
"""

import os
from pathlib import Path
from typing import Optional, Union

from .exceptions import FilesystemError

IS_WINDOWS = os.name == "nt"

USER_HOME_ENV = "SCANNERKIT_USER_HOME"
CACHE_DIR_NAME = "cache"


def get_user_home(user_home: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve the ScannerKit user home directory.

    Resolution order: explicit argument, ``SCANNERKIT_USER_HOME`` environment
    variable, then the platform default.

    Args:
        user_home: Explicit user home, usually from configuration

    Returns:
        Path: The user home directory.
            - Windows: %USERPROFILE%\\.scannerkit
            - Linux/macOS: ~/.scannerkit/

    Raises:
        FilesystemError: If no home directory can be determined on Windows

    Example:
        >>> get_user_home()
        PosixPath('/home/user/.scannerkit')
    """
    if user_home:
        return Path(user_home)

    from_env = os.environ.get(USER_HOME_ENV)
    if from_env:
        return Path(from_env)

    if IS_WINDOWS:
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise FilesystemError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine ScannerKit user home."
            )
        return Path(user_profile) / ".scannerkit"
    return Path.home() / ".scannerkit"


def get_cache_dir(user_home: Optional[Union[str, Path]] = None) -> Path:
    """Return the artifact cache root below the user home."""
    return get_user_home(user_home) / CACHE_DIR_NAME


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Create a directory (and parents) if it doesn't exist.

    Safe to call concurrently from several processes.

    Args:
        path: Directory to create

    Returns:
        The directory path

    Raises:
        FilesystemError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory {path}: {e}") from e
    return path


def verify_directory_writable(path: Path) -> bool:
    """
    Verify that a directory exists and is writable.

    Args:
        path: Directory path to verify.

    Returns:
        bool: True if directory exists and is writable, False otherwise.
    """
    if not path.is_dir():
        return False
    return os.access(path, os.W_OK | os.X_OK)
