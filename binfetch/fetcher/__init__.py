"""
Binary fetcher.

Resolves a release URL for the current platform, downloads it and saves
the (optionally decompressed) binary.
"""

from .fetcher import fetch
from .naming import build_save_name
from .patterns import ResolvedUrls, parse_url, resolve_urls, substitute_pattern
from .targets import require_target, resolve_target

__all__ = [
    "fetch",
    "build_save_name",
    "ResolvedUrls",
    "parse_url",
    "resolve_urls",
    "substitute_pattern",
    "require_target",
    "resolve_target",
]
