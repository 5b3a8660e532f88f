"""
HTTP transport to the analysis server.

This module provides the two requests the bootstrap needs:
- text download (the bootstrap index)
- streaming file download with progress reporting (the artifacts)

Failures are wrapped in ``TransportError`` and never retried here; the
caller decides whether a failed bootstrap is worth running again.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from .exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


class ServerConnection:
    """
    Connection to the server publishing the bootstrap index and artifacts.

    Attributes:
        base_url: Server URL without trailing slash
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize connection.

        Args:
            base_url: Server URL, e.g. ``https://sonar.example.com``
            timeout: Request timeout in seconds
            session: Optional preconfigured session (proxies, auth, TLS)

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("Server URL cannot be empty")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, path: str) -> str:
        """Join a server-relative path to the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get(self, path: str, stream: bool = False) -> requests.Response:
        url = self.url_for(path)
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(
                url, stream=stream, timeout=self.timeout, allow_redirects=True
            )
        except RequestException as e:
            raise TransportError(f"Unable to reach {url}: {e}", url=url) from e

        if not response.ok:
            response.close()
            raise TransportError(
                f"Status returned by url [{url}] is not valid: [{response.status_code}]",
                url=url,
                status_code=response.status_code,
            )
        return response

    def download_string(self, path: str) -> str:
        """
        Download a text resource.

        Args:
            path: Server-relative path, e.g. ``/batch/index``

        Returns:
            Response body decoded as text; UTF-8 unless the server names a
            charset

        Raises:
            TransportError: On network failure or non-success status
        """
        response = self._get(path)
        # requests assumes ISO-8859-1 for text/* without a charset
        if "charset" not in response.headers.get("content-type", "").lower():
            response.encoding = "utf-8"
        return response.text

    def download_file(
        self,
        path: str,
        destination: Path,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> Path:
        """
        Stream a binary resource into ``destination``.

        The destination is overwritten. It is left partially written when the
        transfer breaks, so callers should only pass private temporary files.

        Args:
            path: Server-relative path, e.g. ``/batch/file?name=cpd.jar``
            destination: Local file to write
            progress_callback: Optional callback for progress updates

        Returns:
            The destination path

        Raises:
            TransportError: On network failure or non-success status
            OSError: If the destination cannot be written

        Example:
            >>> connection = ServerConnection("https://sonar.example.com")
            >>> connection.download_file("/batch/file?name=cpd.jar", Path("cpd.jar"))
        """
        destination = Path(destination)
        url = self.url_for(path)
        response = self._get(path, stream=True)

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    downloaded += len(chunk)

                    # Report progress (max once per 0.5 seconds)
                    current_time = time.time()
                    if progress_callback and (
                        current_time - last_progress_time >= 0.5
                        or downloaded == total_size
                    ):
                        progress_callback(
                            _progress(downloaded, total_size, current_time - start_time)
                        )
                        last_progress_time = current_time
        except RequestException as e:
            raise TransportError(f"Download of {url} interrupted: {e}", url=url) from e
        finally:
            response.close()

        logger.debug(f"Downloaded {downloaded} bytes from {url}")
        return destination

    def __repr__(self) -> str:
        return f"ServerConnection({self.base_url!r})"


def _progress(downloaded: int, total_size: int, elapsed: float) -> DownloadProgress:
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    eta = remaining / speed if speed > 0 else 0
    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=eta,
    )


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Args:
        progress: Download progress information

    Returns:
        Formatted progress string

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
