"""
Core functionality for binfetch.

This package contains the platform, network, codec and filesystem modules
the fetcher is built on.
"""

from .platform import (
    HostPlatform,
    detect_platform,
    resolve_host,
    clear_platform_cache,
)

from .exceptions import (
    BinFetchError,
    ConfigError,
    ResolutionError,
    UnsupportedPlatform,
    NoTargetFound,
    PatternTargetMismatch,
    PatternVersionMismatch,
    InvalidUrl,
    NameOsMismatch,
    NameVersMismatch,
    FetchError,
    FileExists,
    DownloadFailed,
    DecodeFailed,
    ChecksumMismatch,
)

__all__ = [
    "HostPlatform",
    "detect_platform",
    "resolve_host",
    "clear_platform_cache",
    "BinFetchError",
    "ConfigError",
    "ResolutionError",
    "UnsupportedPlatform",
    "NoTargetFound",
    "PatternTargetMismatch",
    "PatternVersionMismatch",
    "InvalidUrl",
    "NameOsMismatch",
    "NameVersMismatch",
    "FetchError",
    "FileExists",
    "DownloadFailed",
    "DecodeFailed",
    "ChecksumMismatch",
]
