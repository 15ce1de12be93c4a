"""
End-to-end tests for fetch.

Network access is mocked with responses; every test writes into tmp_path.
"""

import hashlib
import os
import stat

import pytest
import responses

from binfetch.config.parser import Options, Target
from binfetch.core.exceptions import (
    ChecksumMismatch,
    ConfigError,
    DecodeFailed,
    DownloadFailed,
    FileExists,
    NoTargetFound,
    PatternTargetMismatch,
    PatternVersionMismatch,
)
from binfetch.core.filesystem import IS_WINDOWS
from binfetch.fetcher import fetch

LIN64 = Target("lin64", "linux")


def archive_options(tmp_path, **overrides) -> Options:
    values = dict(
        pattern="https://x.test/v{version}/a-{target}.tar.gz",
        version="1.0",
        targets=[LIN64],
        dir=tmp_path / "bin",
        name="a.tar.gz",
        os="linux",
        arch="x86_64",
    )
    values.update(overrides)
    return Options(**values)


def stray_files(directory):
    return [p.name for p in directory.iterdir() if p.name.endswith(".tmp")]


class TestFetchArchive:
    """Tests for fetching compressed artifacts."""

    @responses.activate
    def test_tar_gz_scenario(self, tmp_path, make_tar_gz):
        """Test URL resolution and gz-then-tar extraction."""
        body = make_tar_gz({"a-lin64/README": b"docs", "a-lin64/a": b"#!binary"})
        responses.add(
            responses.GET, "https://x.test/v1.0/a-lin64.tar.gz", body=body, status=200
        )

        path = fetch(archive_options(tmp_path))

        assert path == tmp_path / "bin" / "a.tar.gz"
        assert path.read_bytes() == b"#!binary"
        assert responses.calls[0].request.url == "https://x.test/v1.0/a-lin64.tar.gz"

    @responses.activate
    def test_zip_artifact(self, tmp_path, make_zip):
        """Test zip artifacts are unpacked."""
        responses.add(
            responses.GET,
            "https://x.test/tool.zip",
            body=make_zip({"tool.exe": b"MZ"}),
            status=200,
        )
        options = Options(
            pattern="https://x.test/tool.zip",
            dir=tmp_path,
            name="tool.zip",
            os="windows",
            arch="x86_64",
        )

        path = fetch(options)

        assert path == tmp_path / "tool.zip.exe"
        assert path.read_bytes() == b"MZ"

    @responses.activate
    def test_corrupt_archive(self, tmp_path):
        """Test decode errors leave no file behind."""
        responses.add(
            responses.GET,
            "https://x.test/v1.0/a-lin64.tar.gz",
            body=b"not gzip at all",
            status=200,
        )

        with pytest.raises(DecodeFailed):
            fetch(archive_options(tmp_path))

        assert not (tmp_path / "bin" / "a.tar.gz").exists()
        assert stray_files(tmp_path / "bin") == []


class TestFetchPlain:
    """Tests for fetching bare executables."""

    @responses.activate
    def test_identity_copy(self, tmp_path):
        """Test bytes are copied unchanged without known extensions."""
        content = os.urandom(50000)
        responses.add(responses.GET, "https://x.test/tool", body=content, status=200)
        options = Options(
            pattern="https://x.test/tool", dir=tmp_path / "deep" / "bin", name="tool",
            os="linux", arch="x86_64",
        )

        path = fetch(options)

        assert path.read_bytes() == content

    @responses.activate
    def test_tailwind_style_name(self, tmp_path):
        """Test OS and version suffixes on the saved name."""
        targets = [
            Target("linux-x64", "linux", "x86_64"),
            Target("linux-arm64", "linux", "aarch64"),
        ]
        responses.add(
            responses.GET,
            "https://x.test/v3.1.8/tailwindcss-linux-arm64",
            body=b"elf",
            status=200,
        )
        options = Options(
            pattern="https://x.test/v{version}/tailwindcss-{target}",
            version="3.1.8",
            targets=targets,
            dir=tmp_path,
            name="tailwind",
            add_name_os=True,
            add_name_vers=True,
            os="linux",
            arch="aarch64",
        )

        path = fetch(options)

        assert path.name == "tailwind-linux-3.1.8"
        assert path.read_bytes() == b"elf"

    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX modes only")
    @responses.activate
    def test_default_permissions(self, tmp_path):
        """Test the saved file gets mode 0o764."""
        responses.add(responses.GET, "https://x.test/tool", body=b"x", status=200)
        options = Options(
            pattern="https://x.test/tool", dir=tmp_path, name="tool",
            os="linux", arch="x86_64",
        )

        path = fetch(options)

        assert stat.S_IMODE(os.stat(path).st_mode) == 0o764

    @responses.activate
    def test_overwrite_is_idempotent(self, tmp_path):
        """Test two overwriting fetches give identical files."""
        content = b"stable artifact" * 100
        responses.add(responses.GET, "https://x.test/tool", body=content, status=200)
        responses.add(responses.GET, "https://x.test/tool", body=content, status=200)
        options = Options(
            pattern="https://x.test/tool", dir=tmp_path, name="tool", overwrite=True,
            os="linux", arch="x86_64",
        )

        first = fetch(options).read_bytes()
        second = fetch(options).read_bytes()

        assert first == second == content


class TestFetchFailures:
    """Tests for failures before and during download."""

    @responses.activate
    def test_targets_without_token_makes_no_request(self, tmp_path):
        """Test placeholder checks run before any network call."""
        options = archive_options(tmp_path, pattern="https://x.test/v{version}/a.tar.gz")

        with pytest.raises(PatternTargetMismatch):
            fetch(options)

        assert len(responses.calls) == 0

    @responses.activate
    def test_version_without_token(self, tmp_path):
        """Test version without {version} fails."""
        options = archive_options(tmp_path, pattern="https://x.test/a-{target}.tar.gz")

        with pytest.raises(PatternVersionMismatch):
            fetch(options)

        assert len(responses.calls) == 0

    @responses.activate
    def test_no_target_for_platform(self, tmp_path):
        """Test unmatched platform fails."""
        with pytest.raises(NoTargetFound):
            fetch(archive_options(tmp_path, os="darwin"))

        assert len(responses.calls) == 0

    @responses.activate
    def test_existing_file_without_overwrite(self, tmp_path):
        """Test an existing destination is left untouched."""
        destination = tmp_path / "bin" / "a.tar.gz"
        destination.parent.mkdir()
        destination.write_bytes(b"old")

        with pytest.raises(FileExists):
            fetch(archive_options(tmp_path, overwrite=False))

        assert destination.read_bytes() == b"old"
        assert len(responses.calls) == 0

    @responses.activate
    def test_http_error(self, tmp_path):
        """Test HTTP errors become DownloadFailed."""
        responses.add(responses.GET, "https://x.test/v1.0/a-lin64.tar.gz", status=404)

        with pytest.raises(DownloadFailed):
            fetch(archive_options(tmp_path))

    @responses.activate
    def test_empty_body(self, tmp_path):
        """Test an empty body fails instead of silently succeeding."""
        responses.add(responses.GET, "https://x.test/tool", body=b"", status=200)
        options = Options(
            pattern="https://x.test/tool", dir=tmp_path, name="tool",
            os="linux", arch="x86_64",
        )

        with pytest.raises(DownloadFailed, match="Empty"):
            fetch(options)

        assert not (tmp_path / "tool").exists()
        assert stray_files(tmp_path) == []


class TestFetchChecksum:
    """Tests for checksum verification."""

    @responses.activate
    def test_checksum_covers_raw_archive(self, tmp_path, make_tar_gz):
        """Test the digest is computed over the compressed download."""
        body = make_tar_gz({"a": b"binary", "trailing-file": b"z" * 40000})
        digest = hashlib.sha256(body).hexdigest()
        responses.add(
            responses.GET,
            "https://x.test/v1.0/a-lin64.tar.gz.sha256",
            body=f"{digest}  a-lin64.tar.gz\n",
            status=200,
        )
        responses.add(
            responses.GET, "https://x.test/v1.0/a-lin64.tar.gz", body=body, status=200
        )
        options = archive_options(
            tmp_path, checksum_pattern="https://x.test/v{version}/a-{target}.tar.gz.sha256"
        )

        path = fetch(options)

        assert path.read_bytes() == b"binary"

    @responses.activate
    def test_checksum_mismatch(self, tmp_path, make_tar_gz):
        """Test a wrong digest leaves no file behind."""
        responses.add(
            responses.GET,
            "https://x.test/v1.0/a-lin64.tar.gz.sha256",
            body="a" * 64,
            status=200,
        )
        responses.add(
            responses.GET,
            "https://x.test/v1.0/a-lin64.tar.gz",
            body=make_tar_gz({"a": b"binary"}),
            status=200,
        )
        options = archive_options(
            tmp_path, checksum_pattern="https://x.test/v{version}/a-{target}.tar.gz.sha256"
        )

        with pytest.raises(ChecksumMismatch, match="Checksum mismatch"):
            fetch(options)

        assert not (tmp_path / "bin" / "a.tar.gz").exists()
        assert stray_files(tmp_path / "bin") == []

    @responses.activate
    def test_checksum_pattern_mismatch_makes_no_request(self, tmp_path):
        """Test the checksum pattern is validated on its own."""
        options = archive_options(
            tmp_path, checksum_pattern="https://x.test/v{version}/SHA256SUMS"
        )

        with pytest.raises(PatternTargetMismatch, match="checksum"):
            fetch(options)

        assert len(responses.calls) == 0

    @responses.activate
    def test_sums_file_selects_artifact_line(self, tmp_path, make_tar_gz):
        """Test a shared SHA256SUMS file is matched by the download's file name."""
        body = make_tar_gz({"a": b"binary"})
        responses.add(
            responses.GET,
            "https://x.test/v1.0/SHA256SUMS",
            body=(
                f"{'0' * 64}  a-other.tar.gz\n"
                f"{hashlib.sha256(body).hexdigest()}  a.tar.gz\n"
            ),
            status=200,
        )
        responses.add(
            responses.GET, "https://x.test/v1.0/a.tar.gz", body=body, status=200
        )
        options = archive_options(
            tmp_path,
            pattern="https://x.test/v{version}/a.tar.gz",
            checksum_pattern="https://x.test/v{version}/SHA256SUMS",
            targets=[],
        )

        path = fetch(options)

        assert path.read_bytes() == b"binary"

    @responses.activate
    def test_unsupported_algorithm_makes_no_request(self, tmp_path):
        """Test an unknown hash algorithm is a ConfigError raised before any download."""
        options = archive_options(
            tmp_path,
            checksum_pattern="https://x.test/v{version}/a-{target}.tar.gz.sha256",
            checksum_algorithm="sha1",
        )

        with pytest.raises(ConfigError, match="sha1"):
            fetch(options)

        assert len(responses.calls) == 0
