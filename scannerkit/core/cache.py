"""
Content-addressed artifact cache.

Each artifact is stored once per (filename, fingerprint) pair at::

    <cache root>/<fingerprint>/<filename>

Several processes may populate the same cache root at the same time without
any lock. Correctness rests on two rules:

- downloads land in a private temporary file under ``<cache root>/_tmp``
  and are verified there;
- a verified file becomes visible at its final path in one atomic step, and
  a writer that finds the path already taken treats that as success.

A path that exists is therefore always complete and was verified when it
was written. Its content is trusted without re-hashing on lookup.

Usage:
    from scannerkit.core.cache import ArtifactCache

    cache = ArtifactCache.create(Path("~/.scannerkit/cache").expanduser())
    jar = cache.get("cpd.jar", "ca124vadfsds", downloader)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from .directory import ensure_directory, verify_directory_writable
from .exceptions import FilesystemError, IntegrityError
from .filesystem import create_temp_file, place_exclusive, remove_quietly
from .verification import FileHashes, fingerprints_match

logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "_tmp"


def is_valid_key_component(part: str) -> bool:
    """Return True if ``part`` names a single entry inside a cache slot."""
    if not part or part in (".", "..", TEMP_DIR_NAME):
        return False
    return "/" not in part and "\\" not in part


class Downloader(ABC):
    """Fetches one named artifact into a local file."""

    @abstractmethod
    def download(self, filename: str, destination: Path) -> None:
        """
        Write the full content of ``filename`` to ``destination``.

        Args:
            filename: Artifact name as listed in the bootstrap index
            destination: Existing, empty file to overwrite

        Raises:
            OSError: On local I/O failure
            TransportError: On network failure
        """
        pass


DownloaderLike = Union[Downloader, Callable[[str, Path], None]]


@dataclass(frozen=True)
class CacheEntry:
    """A stored artifact."""

    filename: str
    fingerprint: str
    path: Path


class ArtifactCache:
    """
    Lock-free, content-addressed store of downloaded artifacts.

    Attributes:
        dir: Cache root directory
        hashes: Fingerprint provider used to verify downloads
    """

    def __init__(self, cache_dir: Path, hashes: Optional[FileHashes] = None):
        """
        Initialize cache.

        The root directory is created lazily on first population.

        Args:
            cache_dir: Cache root directory
            hashes: Fingerprint provider (default: md5 ``FileHashes``)
        """
        self.dir = Path(cache_dir)
        self.hashes = hashes or FileHashes()

    @classmethod
    def create(cls, cache_dir: Path, algorithm: Optional[str] = None) -> "ArtifactCache":
        """Create a cache rooted at ``cache_dir``, making the directory now."""
        ensure_directory(cache_dir)
        if not verify_directory_writable(Path(cache_dir)):
            raise FilesystemError(f"Cache directory is not writable: {cache_dir}")
        logger.debug(f"Artifact cache: {cache_dir}")
        hashes = FileHashes(algorithm) if algorithm else FileHashes()
        return cls(cache_dir, hashes)

    @property
    def tmp_dir(self) -> Path:
        return self.dir / TEMP_DIR_NAME

    def entry_path(self, filename: str, fingerprint: str) -> Path:
        """
        Return the final path of a cache slot, whether or not it exists.

        Raises:
            ValueError: If either part could escape its slot directory
        """
        for part in (filename, fingerprint):
            if not is_valid_key_component(part):
                raise ValueError(f"Invalid cache key component: {part!r}")
        return self.dir / fingerprint / filename

    def get(
        self,
        filename: str,
        fingerprint: str,
        downloader: Optional[DownloaderLike] = None,
    ) -> Optional[Path]:
        """
        Look up an artifact, downloading it on a miss when possible.

        Without a downloader this is a pure existence check. With one, a
        missing artifact is downloaded, verified and stored; the downloader
        is never called when the artifact is already cached.

        Args:
            filename: Artifact file name
            fingerprint: Expected fingerprint, also the storage key
            downloader: ``Downloader`` or callable ``(filename, destination)``

        Returns:
            Path to the cached file, or None on a miss without a downloader

        Raises:
            IntegrityError: If the downloaded content has another fingerprint
            FilesystemError: If the cache directories cannot be written
            TransportError: If the downloader fails to reach the server
            OSError: If the downloader fails locally
        """
        cached = self.entry_path(filename, fingerprint)
        if cached.exists():
            logger.debug(f"Cache hit: {fingerprint}/{filename}")
            return cached

        if downloader is None:
            return None

        return self._download(filename, fingerprint, downloader)

    def _download(
        self, filename: str, fingerprint: str, downloader: DownloaderLike
    ) -> Path:
        target_dir = ensure_directory(self.dir / fingerprint)
        target = target_dir / filename
        temp_file = create_temp_file(self.tmp_dir, prefix=f"{filename}.")

        logger.info(f"Downloading {filename}")
        try:
            if isinstance(downloader, Downloader):
                downloader.download(filename, temp_file)
            else:
                downloader(filename, temp_file)

            actual = self.hashes.of(temp_file)
            if not fingerprints_match(actual, fingerprint):
                raise IntegrityError(filename, fingerprint, actual)

            if not place_exclusive(temp_file, target):
                # Another writer stored the same slot first; keep theirs
                logger.debug(f"{fingerprint}/{filename} was cached concurrently")
        finally:
            remove_quietly(temp_file)

        return target

    def entries(self) -> Iterator[CacheEntry]:
        """
        Iterate over stored artifacts, ordered by fingerprint then filename.

        Yields:
            One ``CacheEntry`` per file found under the cache root
        """
        if not self.dir.is_dir():
            return
        for slot in sorted(self.dir.iterdir()):
            if not slot.is_dir() or slot.name == TEMP_DIR_NAME:
                continue
            for artifact in sorted(slot.iterdir()):
                if artifact.is_file():
                    yield CacheEntry(artifact.name, slot.name, artifact)

    def __repr__(self) -> str:
        return f"ArtifactCache(dir={str(self.dir)!r}, hashes={self.hashes!r})"
