"""
Resolution of the scanner engine artifacts.

Fetches the bootstrap index, then makes every listed artifact available in
the local cache, downloading only what is missing.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import quote

from scannerkit.core.cache import ArtifactCache, Downloader
from scannerkit.core.download import DownloadProgress, ServerConnection

from .index import ArtifactManifest, ArtifactRef, BootstrapIndex

logger = logging.getLogger(__name__)

FILE_PATH = "/batch/file?name={name}"


class ScannerFileDownloader(Downloader):
    """Downloads one artifact from the server's file endpoint."""

    def __init__(self, connection: ServerConnection):
        self.connection = connection
        self.called = False

    def download(self, filename: str, destination: Path) -> None:
        self.called = True
        self.connection.download_file(
            FILE_PATH.format(name=quote(filename)),
            destination,
            progress_callback=self._log_progress,
        )

    @staticmethod
    def _log_progress(progress: DownloadProgress) -> None:
        logger.debug(f"  {progress}")


@dataclass
class BootstrapResult:
    """Result of a full bootstrap."""

    paths: List[Path]
    """Cached artifact paths, in index order"""

    downloaded: List[str] = field(default_factory=list)
    """Names of the artifacts that had to be downloaded"""

    duration: float = 0.0
    """Time spent resolving, in seconds"""

    @property
    def was_cache_hit(self) -> bool:
        """True when every artifact was already cached."""
        return not self.downloaded


class ArtifactSet:
    """
    Resolves the artifacts listed in the bootstrap index through the cache.

    Attributes:
        cache: Artifact cache
        connection: Server connection
        parallel: Number of artifacts resolved concurrently

    Example:
        >>> artifacts = ArtifactSet(cache, ServerConnection(url))
        >>> result = artifacts.download()
        >>> classpath = os.pathsep.join(str(p) for p in result.paths)
    """

    def __init__(
        self,
        cache: ArtifactCache,
        connection: ServerConnection,
        parallel: int = 1,
    ):
        if parallel < 1:
            raise ValueError(f"parallel must be at least 1, got {parallel}")
        self.cache = cache
        self.connection = connection
        self.parallel = parallel
        self.index = BootstrapIndex(connection)

    def fetch_manifest(self) -> ArtifactManifest:
        return self.index.fetch_manifest()

    def resolve_all(self, manifest: ArtifactManifest) -> List[Path]:
        """
        Make every artifact of the manifest available in the cache.

        Args:
            manifest: Parsed bootstrap index

        Returns:
            Cached paths, in manifest order

        Raises:
            TransportError: If an artifact download fails
            IntegrityError: If a downloaded artifact is corrupted
        """
        return self._resolve(manifest).paths

    def download(self) -> BootstrapResult:
        """
        Fetch the bootstrap index and resolve all its artifacts.

        Returns:
            Bootstrap result with paths and cache statistics

        Raises:
            TransportError: If the index or an artifact cannot be downloaded
            ManifestFormatError: If the index is malformed
            IntegrityError: If a downloaded artifact is corrupted
        """
        manifest = self.fetch_manifest()
        return self._resolve(manifest)

    def _resolve(self, manifest: ArtifactManifest) -> BootstrapResult:
        start_time = time.time()

        if self.parallel > 1 and len(manifest) > 1:
            with ThreadPoolExecutor(max_workers=self.parallel) as executor:
                outcomes = list(executor.map(self._resolve_one, manifest))
        else:
            outcomes = [self._resolve_one(ref) for ref in manifest]

        result = BootstrapResult(
            paths=[path for path, _ in outcomes],
            downloaded=[
                ref.filename
                for ref, (_, downloaded) in zip(manifest, outcomes)
                if downloaded
            ],
            duration=time.time() - start_time,
        )
        logger.info(
            f"Resolved {len(result.paths)} artifact(s), "
            f"{len(result.downloaded)} downloaded in {result.duration:.1f}s"
        )
        return result

    def _resolve_one(self, ref: ArtifactRef) -> Tuple[Path, bool]:
        downloader = ScannerFileDownloader(self.connection)
        path = self.cache.get(ref.filename, ref.fingerprint, downloader)
        return path, downloader.called


def bootstrap(
    cache: ArtifactCache,
    connection: ServerConnection,
    parallel: Optional[int] = None,
) -> BootstrapResult:
    """
    Convenience function to resolve the scanner engine artifacts.

    Args:
        cache: Artifact cache
        connection: Server connection
        parallel: Number of concurrent downloads (default: 1)

    Returns:
        Bootstrap result
    """
    return ArtifactSet(cache, connection, parallel=parallel or 1).download()
