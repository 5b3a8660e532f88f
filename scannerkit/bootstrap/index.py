"""
Bootstrap index retrieval and parsing.

The server lists the artifacts a scanner session needs at ``/batch/index``,
one per line::

    cpd.jar|CA124VADFSDS
    squid.jar|34535FSFSDF

A single malformed line invalidates the whole index.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Tuple

from scannerkit.core.cache import is_valid_key_component
from scannerkit.core.download import ServerConnection
from scannerkit.core.exceptions import ManifestFormatError, TransportError

logger = logging.getLogger(__name__)

INDEX_PATH = "/batch/index"
FIELD_SEPARATOR = "|"


@dataclass(frozen=True)
class ArtifactRef:
    """One artifact listed in the bootstrap index."""

    filename: str
    fingerprint: str


@dataclass(frozen=True)
class ArtifactManifest:
    """Ordered, immutable list of artifacts parsed from one index response."""

    artifacts: Tuple[ArtifactRef, ...]
    raw: str = ""

    def __iter__(self) -> Iterator[ArtifactRef]:
        return iter(self.artifacts)

    def __len__(self) -> int:
        return len(self.artifacts)


def parse_manifest(raw: str) -> ArtifactManifest:
    """
    Parse bootstrap index text.

    Empty lines are skipped. Every other line must split on ``|`` into
    exactly two fields, each usable as a cache path component.

    Args:
        raw: Index response body

    Returns:
        Parsed manifest, in index order

    Raises:
        ManifestFormatError: If any line is malformed; the message carries
            the complete raw text
    """
    artifacts = []
    for line in raw.split("\n"):
        line = line.strip()
        if not line:
            continue
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) != 2 or not all(map(is_valid_key_component, fields)):
            raise ManifestFormatError(raw)
        artifacts.append(ArtifactRef(filename=fields[0], fingerprint=fields[1]))
    return ArtifactManifest(artifacts=tuple(artifacts), raw=raw)


class BootstrapIndex:
    """Fetches the artifact manifest from the server."""

    def __init__(self, connection: ServerConnection):
        self.connection = connection

    def fetch_manifest(self) -> ArtifactManifest:
        """
        Download and parse the bootstrap index.

        Exactly one request is made; failures are not retried.

        Returns:
            Parsed manifest

        Raises:
            TransportError: If the index cannot be retrieved
            ManifestFormatError: If the index is malformed
        """
        try:
            raw = self.connection.download_string(INDEX_PATH)
        except (TransportError, OSError) as e:
            raise TransportError(
                f"Fail to get bootstrap index from server: {e}",
                url=getattr(e, "url", "") or self.connection.url_for(INDEX_PATH),
                status_code=getattr(e, "status_code", None),
            ) from e

        logger.debug(f"Get bootstrap index from server:\n{raw}")
        manifest = parse_manifest(raw)
        logger.debug(f"Bootstrap index lists {len(manifest)} artifact(s)")
        return manifest
