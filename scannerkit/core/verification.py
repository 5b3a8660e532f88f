"""
File fingerprinting for cache verification.

The bootstrap index publishes one fingerprint per artifact. This module
computes the same fingerprint for a local file so the cache can compare the
two strings. Supported algorithms: md5 (server default), sha1, sha256, sha512.
"""

import hashlib
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")
DEFAULT_ALGORITHM = "md5"

_CHUNK_SIZE = 8192


def _new_hasher(algorithm: str):
    algorithm = algorithm.lower()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")
    return hashlib.new(algorithm)


def compute_file_hash(
    file_path: Union[str, Path], algorithm: str = DEFAULT_ALGORITHM
) -> str:
    """
    Compute hex digest of a file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('md5', 'sha1', 'sha256', 'sha512')

    Returns:
        Lowercase hex string of the digest

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported

    Example:
        >>> compute_file_hash(Path('cpd.jar'))
        'd41d8cd98f00b204e9800998ecf8427e'
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = _new_hasher(algorithm)

    with open(file_path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            hasher.update(chunk)

    return hasher.hexdigest()


def fingerprints_match(actual: str, expected: str) -> bool:
    """Compare two hex fingerprints, ignoring case and surrounding blanks."""
    return actual.strip().lower() == expected.strip().lower()


class FileHashes:
    """
    Stateless fingerprint provider used by the artifact cache.

    Attributes:
        algorithm: Name of the digest algorithm
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM):
        """
        Initialize hasher.

        Args:
            algorithm: Hash algorithm, must match what the server index uses

        Raises:
            ValueError: If algorithm is not supported
        """
        _new_hasher(algorithm)
        self.algorithm = algorithm.lower()

    def of(self, file_path: Union[str, Path]) -> str:
        """Return the fingerprint of a local file."""
        digest = compute_file_hash(file_path, self.algorithm)
        logger.debug(f"{self.algorithm}({file_path}) = {digest}")
        return digest

    def __repr__(self) -> str:
        return f"FileHashes(algorithm={self.algorithm!r})"
