"""
File system primitives for the artifact cache.

The cache is shared by processes that never coordinate through locks, so
every mutation here is either private to its caller (temporary files) or a
single atomic step (exclusive placement). Provides:
- Unique temporary file allocation
- Create-exclusive placement of a finished file at its final path
- Quiet removal of temporary files
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from .exceptions import FilesystemError

logger = logging.getLogger(__name__)


def create_temp_file(
    directory: Union[str, Path], prefix: str = "scannerkit_", suffix: str = ".tmp"
) -> Path:
    """
    Allocate an empty, uniquely named file in ``directory``.

    The directory is created if needed. The name never collides with another
    concurrent allocation, in this process or any other.

    Args:
        directory: Parent directory, should sit on the cache's filesystem
        prefix: File name prefix
        suffix: File name suffix

    Returns:
        Path to the new empty file

    Raises:
        FilesystemError: If the file cannot be created
    """
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=prefix, suffix=suffix)
    except OSError as e:
        raise FilesystemError(
            f"Failed to create temporary file in {directory}: {e}"
        ) from e
    os.close(fd)
    return Path(temp_path)


def place_exclusive(source: Union[str, Path], destination: Union[str, Path]) -> bool:
    """
    Atomically make ``source`` visible at ``destination`` unless it exists.

    A hard link is created-exclusive: it either fails because the destination
    already exists or publishes the complete file in one step. Filesystems
    without hard links fall back to a rename, which consumes ``source``.
    The caller removes whatever is left of ``source`` afterwards.

    Args:
        source: Fully written file
        destination: Final path

    Returns:
        True if ``source`` was placed, False if ``destination`` already existed

    Raises:
        FilesystemError: If placement fails for any other reason
    """
    source = Path(source)
    destination = Path(destination)

    try:
        os.link(source, destination)
        return True
    except FileExistsError:
        return False
    except OSError as e:
        logger.debug(f"Hard link unavailable for {destination} ({e}), renaming")

    if destination.exists():
        return False

    # rename is atomic; on Windows it also refuses an existing destination
    try:
        os.rename(source, destination)
    except FileExistsError:
        return False
    except OSError as e:
        raise FilesystemError(
            f"Unable to move {source} to {destination}: {e}"
        ) from e
    return True


def remove_quietly(path: Union[str, Path]) -> None:
    """Remove a file if present, logging rather than raising on failure."""
    path = Path(path)
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to delete temporary file {path}: {e}")
