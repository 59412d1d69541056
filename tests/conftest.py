"""
Pytest configuration and shared fixtures for smtsetup tests.
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Dict, List

import pytest

from smtsetup.core.cache import ToolCache
from smtsetup.core.environment import SearchPath
from smtsetup.core.exceptions import DownloadError


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Environment Isolation
# ============================================================================


RUNNER_ENV_VARS = (
    "RUNNER_OS",
    "RUNNER_TOOL_CACHE",
    "GITHUB_PATH",
    "GITHUB_ACTIONS",
    "INPUT_Z3VERSION",
    "INPUT_CVC5VERSION",
    "INPUT_CVC4VERSION",
    "INPUT_PRINCESSVERSION",
    "INPUT_OPTIONALTOOLS",
    "INPUT_CACHEDIR",
)


@pytest.fixture(autouse=True)
def isolated_runner_env(tmp_path_factory, monkeypatch) -> Path:
    """Hide the real runner environment and send temp files into a private temp dir."""
    for name in RUNNER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    runner_temp = tmp_path_factory.mktemp("runner-temp")
    monkeypatch.setenv("RUNNER_TEMP", str(runner_temp))
    return runner_temp


# ============================================================================
# Shared Test Fixtures
# ============================================================================


def make_zip(members: Dict[str, bytes], mode: int = 0o755) -> bytes:
    """Build a zip archive in memory; every member gets ``mode``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in members.items():
            info = zipfile.ZipInfo(name)
            info.external_attr = mode << 16
            zf.writestr(info, content)
    return buffer.getvalue()


class FakeDownloader:
    """
    Stand-in transport serving canned artifacts.

    Unknown URLs fail the way a 404 would.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)
        self.artifacts: Dict[str, bytes] = {}
        self.urls: List[str] = []

    def serve(self, descriptor, binary: str = "solver") -> None:
        """Serve a plausible artifact for a descriptor."""
        if descriptor.format == "file":
            self.artifacts[descriptor.url] = b"\x7fELF fake solver"
        else:
            self.artifacts[descriptor.url] = make_zip(
                {f"{descriptor.bin_subpath}{binary}": b"#!/bin/sh\necho sat\n"}
            )

    def __call__(self, url: str) -> Path:
        self.urls.append(url)
        if url not in self.artifacts:
            raise DownloadError(f"Download of {url} failed: 404 Not Found")
        destination = self.directory / f"download-{len(self.urls)}"
        destination.write_bytes(self.artifacts[url])
        return destination


@pytest.fixture
def fake_downloader(tmp_path: Path) -> FakeDownloader:
    """Transport double recording every requested URL."""
    return FakeDownloader(tmp_path / "downloads")


@pytest.fixture
def tool_cache(tmp_path: Path) -> ToolCache:
    """Empty tool cache in a temporary directory."""
    return ToolCache(tmp_path / "toolcache")


@pytest.fixture
def search_path() -> SearchPath:
    """Search path backed by a private environment mapping."""
    return SearchPath({"PATH": "/usr/bin"})


@pytest.fixture
def zip_bytes():
    """Factory building in-memory zip archives, see :func:`make_zip`."""
    return make_zip


@pytest.fixture
def restore_root_logger():
    """Undo logging configuration done by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
