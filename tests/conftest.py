"""
Pytest configuration and shared fixtures for binfetch tests.
"""

import gzip
import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict

import pytest


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


# ============================================================================
# Archive Builders
# ============================================================================


@pytest.fixture
def make_tar() -> Callable[[Dict[str, bytes]], bytes]:
    """Build an uncompressed tar archive from {member name: content}."""

    def _make(members: Dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            for name, content in members.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                info.mode = 0o755
                tar.addfile(info, io.BytesIO(content))
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_tar_gz(make_tar) -> Callable[[Dict[str, bytes]], bytes]:
    """Build a gzipped tar archive from {member name: content}."""

    def _make(members: Dict[str, bytes]) -> bytes:
        return gzip.compress(make_tar(members))

    return _make


@pytest.fixture
def make_zip() -> Callable[[Dict[str, bytes]], bytes]:
    """Build a zip archive from {member name: content}."""

    def _make(members: Dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for name, content in members.items():
                zf.writestr(name, content)
        return buffer.getvalue()

    return _make


@pytest.fixture
def examples_dir() -> Path:
    """Directory holding the example YAML configurations."""
    return Path(__file__).resolve().parent.parent / "examples"


# ============================================================================
# Environment Guards
# ============================================================================


@pytest.fixture
def no_network(monkeypatch):
    """Disable network access for tests."""
    import socket

    def guard(*args, **kwargs):
        raise RuntimeError("Network access not allowed in this test")

    monkeypatch.setattr(socket, "socket", guard)


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset the platform detection cache between tests."""
    from binfetch.core.platform import clear_platform_cache

    clear_platform_cache()
    yield
    clear_platform_cache()
