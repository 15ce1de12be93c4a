"""
URL pattern substitution.

Patterns may contain '{target}' and '{version}' placeholders. Each
placeholder must be used together with its option: a pattern with
'{target}' needs a non-empty targets list and a targets list needs a
pattern with '{target}'; the same pairing applies to '{version}' and the
version string. The download and checksum patterns are checked
independently.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence
from urllib.parse import urlparse

from binfetch.config.parser import Options, Target
from binfetch.core.exceptions import (
    InvalidUrl,
    PatternTargetMismatch,
    PatternVersionMismatch,
)
from binfetch.core.platform import HostPlatform
from binfetch.fetcher.targets import require_target

logger = logging.getLogger(__name__)

TARGET_TOKEN = "{target}"
VERSION_TOKEN = "{version}"


@dataclass(frozen=True)
class ResolvedUrls:
    """Download URL and optional checksum URL."""

    url: str
    checksum_url: Optional[str] = None


def substitute_pattern(
    pattern: str,
    targets: Optional[Sequence[Target]],
    target: Optional[Target],
    version: Optional[str],
    host: HostPlatform,
    kind: str = "URL pattern",
) -> str:
    """
    Replace placeholders in a pattern.

    Args:
        pattern: Pattern with optional placeholders
        targets: Configured targets
        target: Target resolved for the host, if any
        version: Release version, if any
        host: Platform used for error reporting
        kind: Pattern label used in error messages

    Returns:
        Pattern with every placeholder replaced

    Raises:
        PatternTargetMismatch: '{target}' and targets are not used together
        PatternVersionMismatch: '{version}' and version are not used together
        NoTargetFound: '{target}' is valid but nothing matches the host
    """
    has_target = TARGET_TOKEN in pattern
    has_targets = bool(targets)

    if has_target != has_targets:
        raise PatternTargetMismatch(kind)
    if has_target:
        pattern = pattern.replace(TARGET_TOKEN, require_target(target, host).name)

    has_version = VERSION_TOKEN in pattern
    if has_version != bool(version):
        raise PatternVersionMismatch(kind)
    if has_version:
        pattern = pattern.replace(VERSION_TOKEN, version)

    return pattern


def parse_url(url: str) -> str:
    """
    Check that a string is an absolute http(s) URL.

    Raises:
        InvalidUrl: If scheme or host is missing
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        raise InvalidUrl(url)

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrl(url)
    return url


def resolve_urls(
    options: Options, target: Optional[Target], host: HostPlatform
) -> ResolvedUrls:
    """Resolve the download URL and, when configured, the checksum URL."""
    url = parse_url(
        substitute_pattern(
            options.pattern, options.targets, target, options.version, host
        )
    )

    checksum_url = None
    if options.checksum_pattern:
        checksum_url = parse_url(
            substitute_pattern(
                options.checksum_pattern,
                options.targets,
                target,
                options.version,
                host,
                kind="checksum URL pattern",
            )
        )

    logger.info(f"Resolved download URL: {url}")
    return ResolvedUrls(url=url, checksum_url=checksum_url)
