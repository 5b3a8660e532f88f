"""
Unit tests for artifact resolution.
"""

import hashlib
from pathlib import Path
from unittest.mock import ANY, Mock, call

import pytest
import responses

from scannerkit.bootstrap.artifacts import (
    ArtifactSet,
    BootstrapResult,
    ScannerFileDownloader,
    bootstrap,
)
from scannerkit.bootstrap.index import parse_manifest
from scannerkit.core.cache import ArtifactCache
from scannerkit.core.exceptions import (
    IntegrityError,
    ManifestFormatError,
    ScannerKitError,
    TransportError,
)

SERVER_URL = "https://sonar.example.com"
INDEX = "cpd.jar|CA124VADFSDS\nsquid.jar|34535FSFSDF\n"


@pytest.fixture
def mock_cache(tmp_path):
    cache = Mock(spec=ArtifactCache)
    cache.get.side_effect = lambda name, fingerprint, downloader: tmp_path / name
    return cache


def _serve(files):
    """Register index and file endpoints for ``{name: content}``."""
    index = "".join(
        f"{name}|{hashlib.md5(content).hexdigest()}\n" for name, content in files.items()
    )
    responses.add(responses.GET, f"{SERVER_URL}/batch/index", body=index)
    for name, content in files.items():
        responses.add(
            responses.GET, f"{SERVER_URL}/batch/file?name={name}", body=content
        )


def _file_requests():
    return [c.request.url for c in responses.calls if "/batch/file" in c.request.url]


class TestArtifactSet:
    """Tests for ArtifactSet with mocked collaborators."""

    def test_should_download_jar_files(self, mock_cache, mock_connection):
        """Test one index request and one cache resolution per artifact."""
        mock_connection.download_string.return_value = INDEX

        result = ArtifactSet(mock_cache, mock_connection).download()

        assert [p.name for p in result.paths] == ["cpd.jar", "squid.jar"]
        assert mock_connection.method_calls == [call.download_string("/batch/index")]
        assert mock_cache.method_calls == [
            call.get("cpd.jar", "CA124VADFSDS", ANY),
            call.get("squid.jar", "34535FSFSDF", ANY),
        ]
        downloader = mock_cache.get.call_args_list[0][0][2]
        assert isinstance(downloader, ScannerFileDownloader)

    def test_should_fail_to_download_files(self, mock_cache, mock_connection):
        """Test an index failure aborts before any artifact is resolved."""
        mock_connection.download_string.side_effect = TransportError("boom")

        with pytest.raises(TransportError, match="Fail to get bootstrap index"):
            ArtifactSet(mock_cache, mock_connection).download()

        mock_cache.get.assert_not_called()
        mock_connection.download_file.assert_not_called()

    def test_invalid_index(self, mock_cache, mock_connection):
        mock_connection.download_string.return_value = "cpd.jar\n"

        with pytest.raises(
            ManifestFormatError,
            match="Fail to bootstrap from server. Bootstrap index was:\ncpd.jar\n",
        ):
            ArtifactSet(mock_cache, mock_connection).download()

        mock_cache.get.assert_not_called()

    def test_index_path_outside_cache(self, mock_cache, mock_connection):
        """Test an index naming a nested path fails as a malformed index."""
        mock_connection.download_string.return_value = "../cpd.jar|CA124VADFSDS\n"

        with pytest.raises(ScannerKitError, match="Bootstrap index was"):
            ArtifactSet(mock_cache, mock_connection).download()

        mock_cache.get.assert_not_called()
        mock_connection.download_file.assert_not_called()

    def test_resolve_all_keeps_manifest_order(self, mock_cache, mock_connection):
        manifest = parse_manifest("b.jar|2\na.jar|1\nc.jar|3\n")

        paths = ArtifactSet(mock_cache, mock_connection).resolve_all(manifest)

        assert [p.name for p in paths] == ["b.jar", "a.jar", "c.jar"]
        mock_connection.download_string.assert_not_called()

    def test_parallel_resolution_keeps_order(self, mock_cache, mock_connection):
        manifest = parse_manifest("".join(f"a{i}.jar|{i}\n" for i in range(10)))

        paths = ArtifactSet(mock_cache, mock_connection, parallel=4).resolve_all(
            manifest
        )

        assert [p.name for p in paths] == [f"a{i}.jar" for i in range(10)]
        assert mock_cache.get.call_count == 10

    def test_invalid_parallelism(self, mock_cache, mock_connection):
        with pytest.raises(ValueError, match="parallel"):
            ArtifactSet(mock_cache, mock_connection, parallel=0)


class TestScannerFileDownloader:
    """Tests for the per-artifact downloader."""

    def test_jar_downloader(self, mock_connection, tmp_path):
        to_file = tmp_path / "tmp.jar"
        downloader = ScannerFileDownloader(mock_connection)

        downloader.download("squid.jar", to_file)

        mock_connection.download_file.assert_called_once_with(
            "/batch/file?name=squid.jar", to_file, progress_callback=ANY
        )
        assert downloader.called is True

    def test_filename_is_url_encoded(self, mock_connection, tmp_path):
        ScannerFileDownloader(mock_connection).download("my plugin.jar", tmp_path / "x")

        path = mock_connection.download_file.call_args[0][0]
        assert path == "/batch/file?name=my%20plugin.jar"


class TestBootstrapOverHttp:
    """End-to-end resolution against a mocked server and a real cache."""

    @responses.activate
    def test_cold_then_warm_cache(self, cache, connection):
        """Test only missing artifacts are downloaded."""
        files = {"cpd.jar": b"cpd content", "squid.jar": b"squid content"}
        _serve(files)

        first = ArtifactSet(cache, connection).download()

        assert first.downloaded == ["cpd.jar", "squid.jar"]
        assert first.was_cache_hit is False
        assert [p.read_bytes() for p in first.paths] == list(files.values())
        assert len(_file_requests()) == 2

        second = ArtifactSet(cache, connection).download()

        assert second.was_cache_hit is True
        assert second.paths == first.paths
        assert len(_file_requests()) == 2

    @responses.activate
    def test_partial_cache(self, cache, connection):
        files = {"cpd.jar": b"cpd content", "squid.jar": b"squid content"}
        _serve(files)
        cached = cache.entry_path("cpd.jar", hashlib.md5(b"cpd content").hexdigest())
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"cpd content")

        result = bootstrap(cache, connection)

        assert result.downloaded == ["squid.jar"]
        assert _file_requests() == [f"{SERVER_URL}/batch/file?name=squid.jar"]

    @responses.activate
    def test_corrupted_artifact_aborts(self, cache, connection):
        """Test a bad artifact fails the whole bootstrap and is not cached."""
        responses.add(
            responses.GET,
            f"{SERVER_URL}/batch/index",
            body="cpd.jar|00000000000000000000000000000000\n",
        )
        responses.add(
            responses.GET, f"{SERVER_URL}/batch/file?name=cpd.jar", body=b"tampered"
        )

        with pytest.raises(IntegrityError, match="cpd.jar"):
            ArtifactSet(cache, connection).download()

        assert cache.get("cpd.jar", "00000000000000000000000000000000") is None

    @responses.activate
    def test_file_endpoint_failure(self, cache, connection):
        responses.add(
            responses.GET, f"{SERVER_URL}/batch/index", body="cpd.jar|abc\n"
        )
        responses.add(
            responses.GET, f"{SERVER_URL}/batch/file?name=cpd.jar", status=404
        )

        with pytest.raises(TransportError) as exc_info:
            ArtifactSet(cache, connection).download()

        assert exc_info.value.status_code == 404
        assert list(cache.entries()) == []


class TestBootstrapResult:
    def test_cache_hit_when_nothing_downloaded(self):
        assert BootstrapResult(paths=[Path("a.jar")]).was_cache_hit is True

    def test_cache_miss(self):
        result = BootstrapResult(paths=[Path("a.jar")], downloaded=["a.jar"])

        assert result.was_cache_hit is False
