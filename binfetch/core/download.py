"""
HTTP download helpers with streaming checksum support.

This module provides:
- Streaming GET requests that never load the whole body in memory
- Incremental hashing of the raw bytes as they arrive
- Fetching and parsing published checksum files
"""

import hashlib
import logging
import re
from typing import Iterable, Iterator, Optional

import requests
from requests.exceptions import RequestException

from binfetch.core.exceptions import ChecksumMismatch, DownloadFailed

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
DEFAULT_TIMEOUT = 30

_HEX_DIGEST = re.compile(r"^[0-9a-fA-F]+$")


class StreamingHasher:
    """Compute hash incrementally for streaming downloads."""

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm ('sha256', 'sha512', 'md5')

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm == "sha256":
            self.hasher = hashlib.sha256()
        elif self.algorithm == "sha512":
            self.hasher = hashlib.sha512()
        elif self.algorithm == "md5":
            logger.warning("MD5 is cryptographically broken, use SHA256 instead")
            self.hasher = hashlib.md5()
        else:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def tap(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        """Hash chunks while passing them through unchanged."""
        for chunk in chunks:
            self.update(chunk)
            yield chunk

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """
        Check if computed hash matches expected value.

        Args:
            expected_hash: Expected hash value (hex string)

        Returns:
            True if hashes match, False otherwise
        """
        return self.finalize().lower() == expected_hash.lower()


def open_stream(url: str, timeout: int = DEFAULT_TIMEOUT) -> requests.Response:
    """
    Start a streaming GET request.

    The caller owns the returned response and must close it.

    Args:
        url: URL to download from
        timeout: Request timeout in seconds

    Returns:
        Response with an unread body

    Raises:
        DownloadFailed: If the request fails or the status is not 2xx
    """
    logger.info(f"Downloading from {url}")

    try:
        response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    except RequestException as e:
        raise DownloadFailed(f"Request to {url} failed: {e}") from e

    try:
        response.raise_for_status()
    except RequestException as e:
        response.close()
        raise DownloadFailed(f"Request to {url} failed: {e}") from e

    return response


def iter_body(response: requests.Response) -> Iterator[bytes]:
    """
    Iterate the response body in chunks.

    Raises:
        DownloadFailed: If the body is empty or the connection breaks
    """
    received = 0

    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                received += len(chunk)
                yield chunk
    except RequestException as e:
        raise DownloadFailed(f"Download interrupted after {received} bytes: {e}") from e

    if received == 0:
        raise DownloadFailed(f"Empty response body from {response.url}")


def fetch_checksum(
    url: str, timeout: int = DEFAULT_TIMEOUT, file_name: Optional[str] = None
) -> str:
    """
    Download a checksum file and return the digest it publishes.

    Accepts a bare digest, the '<digest>  <file name>' layout written by
    sha256sum and friends, and multi-line SHA256SUMS style files.

    Args:
        url: Checksum file URL
        timeout: Request timeout in seconds
        file_name: Artifact file name to look up in multi-line files

    Returns:
        Lower-case hex digest

    Raises:
        DownloadFailed: If the checksum file cannot be fetched
        ChecksumMismatch: If the file holds no usable hex digest
    """
    logger.info(f"Fetching checksum from {url}")

    try:
        response = requests.get(url, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadFailed(f"Request to {url} failed: {e}") from e

    return parse_checksum(response.text, file_name)


def parse_checksum(content: str, file_name: Optional[str] = None) -> str:
    """
    Extract the digest from checksum file content.

    When file_name is given, the line naming that file wins (a leading
    '*' from binary mode is ignored). Otherwise, or without a matching
    line, the first token of the file is used.

    Example:
        >>> parse_checksum("ABC123  tool.tar.gz\\n")
        'abc123'
        >>> parse_checksum("aa  other.zip\\nbb *tool.zip\\n", "tool.zip")
        'bb'
    """
    digest = None
    if file_name:
        for line in content.splitlines():
            tokens = line.split()
            if len(tokens) >= 2 and tokens[1].lstrip("*") == file_name:
                digest = tokens[0]
                break

    if digest is None:
        tokens = content.split()
        digest = tokens[0] if tokens else ""

    if not _HEX_DIGEST.match(digest):
        raise ChecksumMismatch(f"Checksum file has no hex digest: {content[:64]!r}")
    return digest.lower()


__all__ = [
    "StreamingHasher",
    "open_stream",
    "iter_body",
    "fetch_checksum",
    "parse_checksum",
]
