import io
import tarfile
import time
from pathlib import Path

import pytest
import requests

from asdf_vals.config import PluginConfig

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the suite."""
    config.addinivalue_line("markers", "unit: fast, isolated unit test")
    config.addinivalue_line(
        "markers", "integration: exercises several components together"
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network


@pytest.fixture(autouse=True)
def _mock_time_sleep(monkeypatch):
    """
    Make time.sleep instant for all tests to prevent delays.

    Retry paths sleep between attempts; tests that assert on the delay patch
    `asdf_vals.retry.time.sleep` with a mock of their own.
    """
    monkeypatch.setattr(time, "sleep", lambda *_args, **_kwargs: None)


@pytest.fixture
def config():
    """Plugin configuration with the documented defaults and no token."""
    return PluginConfig()


def make_tarball(path: Path, files: dict, mode: int = 0o755) -> Path:
    """
    Write a .tar.gz at `path` containing `files` (member name -> bytes).
    """
    with tarfile.open(path, "w:gz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def tarball_factory():
    """Return the `make_tarball` helper for building release archives."""
    return make_tarball
