"""
Pytest configuration and shared fixtures for ScannerKit tests.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from scannerkit.core.cache import ArtifactCache
from scannerkit.core.download import ServerConnection

SERVER_URL = "https://sonar.example.com"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    """Empty cache root (not created yet)."""
    return tmp_path / "cache"


@pytest.fixture
def cache(cache_dir) -> ArtifactCache:
    """Artifact cache using the default md5 fingerprints."""
    return ArtifactCache(cache_dir)


@pytest.fixture
def connection() -> ServerConnection:
    """Real connection to a fake server, use with ``responses``."""
    return ServerConnection(SERVER_URL, timeout=5)


@pytest.fixture
def mock_connection() -> Mock:
    """Connection double recording every interaction."""
    return Mock(spec=ServerConnection)


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory and clear ScannerKit environment."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.delenv("SCANNERKIT_USER_HOME", raising=False)
    monkeypatch.delenv("SCANNERKIT_HOST_URL", raising=False)
    monkeypatch.chdir(tmp_path)

    return fake_home
