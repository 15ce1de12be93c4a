"""
Fetch a platform-specific release binary.

The fetch runs as one linear sequence:

1. Resolve the host platform (overridable through the options)
2. Select the matching release target
3. Substitute the URL and checksum URL patterns
4. Build the save file name
5. Stream the body through the codecs picked by the save name into a temp
   file, verifying the checksum when one is published
6. Rename the temp file into place and apply permissions

Usage:
    from binfetch.config import Options, Target
    from binfetch.fetcher import fetch

    path = fetch(Options(
        pattern="https://example.com/v{version}/tool-{target}",
        version="1.0.0",
        targets=[Target("linux-x64", "linux", "x86_64")],
        dir="./_bin",
        name="tool",
        overwrite=True,
    ))
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from binfetch.config.parser import Options
from binfetch.core.codecs import decode_stream
from binfetch.core.download import (
    StreamingHasher,
    fetch_checksum,
    iter_body,
    open_stream,
)
from binfetch.core.exceptions import ChecksumMismatch, ConfigError, DownloadFailed
from binfetch.core.filesystem import (
    apply_permissions,
    atomic_output,
    check_writable,
    ensure_directory,
)
from binfetch.core.platform import resolve_host
from binfetch.fetcher.naming import build_save_name
from binfetch.fetcher.patterns import resolve_urls
from binfetch.fetcher.targets import resolve_target

logger = logging.getLogger(__name__)


def fetch(options: Options) -> Path:
    """
    Download the binary described by options and return its path.

    Every placeholder and name check runs before any network request.

    Args:
        options: Fetch options

    Returns:
        Path of the saved binary (options.dir joined with the save name)

    Raises:
        ResolutionError: If the target, URL or save name cannot be resolved
        FileExists: If the destination exists and overwrite is False
        DownloadFailed: On network or filesystem errors, or an empty body
        DecodeFailed: If decompression or unarchiving fails
        ChecksumMismatch: If the published checksum does not match
        ConfigError: If the checksum algorithm is not supported
    """
    host = resolve_host(options.os, options.arch)
    target = resolve_target(options.targets, host)
    urls = resolve_urls(options, target, host)

    save_name = build_save_name(
        options.name,
        host,
        target=target,
        targets=options.targets,
        version=options.version,
        add_name_os=options.add_name_os,
        add_name_vers=options.add_name_vers,
    )
    save_path = Path(options.dir) / save_name
    check_writable(save_path, options.overwrite)

    hasher = None
    expected_digest = None
    if urls.checksum_url:
        try:
            hasher = StreamingHasher(options.checksum_algorithm)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        expected_digest = fetch_checksum(
            urls.checksum_url, options.timeout, file_name=_url_basename(urls.url)
        )

    response = open_stream(urls.url, options.timeout)
    try:
        try:
            ensure_directory(save_path.parent)
        except OSError as e:
            raise DownloadFailed(f"Cannot create {save_path.parent}: {e}") from e

        _save(response, save_path, options, hasher, expected_digest)
    finally:
        response.close()

    apply_permissions(save_path, options.chmod)
    logger.info(f"Saved {save_path}")
    return save_path


def _save(
    response: requests.Response,
    save_path: Path,
    options: Options,
    hasher: Optional[StreamingHasher],
    expected_digest: Optional[str],
) -> None:
    raw = iter_body(response)
    if hasher is not None:
        raw = hasher.tap(raw)

    try:
        with atomic_output(save_path, options.overwrite) as f:
            for chunk in decode_stream(raw, save_path.name, options.name):
                f.write(chunk)

            if hasher is not None:
                # Archive codecs stop at their member; the digest covers the whole body
                for _ in raw:
                    pass
                if not hasher.verify(expected_digest):
                    raise ChecksumMismatch(
                        f"Checksum mismatch for {save_path.name}: "
                        f"expected {expected_digest}, got {hasher.finalize()}"
                    )
                logger.info("Checksum verified successfully")
    except OSError as e:
        raise DownloadFailed(f"Failed to write {save_path}: {e}") from e


def _url_basename(url: str) -> str:
    return urlparse(url).path.rsplit("/", 1)[-1]
