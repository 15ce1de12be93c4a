"""
Centralized exception hierarchy for binfetch.

Every error raised while resolving, downloading or saving a binary derives
from BinFetchError so callers can catch the whole family with one clause.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class BinFetchError(Exception):
    """Base exception for all binfetch errors."""

    pass


class ConfigError(BinFetchError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class ResolutionError(BinFetchError):
    """Base exception for URL, target and file name resolution errors."""

    pass


class UnsupportedPlatform(ResolutionError):
    """Raised when the host OS or architecture cannot be mapped."""

    pass


class NoTargetFound(ResolutionError):
    """Raised when no configured target matches the current platform."""

    def __init__(self, os_name: str, arch: str):
        self.os = os_name
        self.arch = arch
        super().__init__(f"No target found for your platform ({os_name} {arch})")


class PatternTargetMismatch(ResolutionError):
    """{target} placeholder and targets list are not used together."""

    def __init__(self, kind: str = "pattern"):
        self.kind = kind
        super().__init__(
            f"When using {{target}} in the {kind} you must also specify a "
            "non empty targets list and vice versa."
        )


class PatternVersionMismatch(ResolutionError):
    """{version} placeholder and version string are not used together."""

    def __init__(self, kind: str = "pattern"):
        self.kind = kind
        super().__init__(
            f"When using {{version}} in the {kind} you must also specify a "
            "non empty version string and vice versa."
        )


class InvalidUrl(ResolutionError):
    """Raised when a substituted pattern is not an absolute URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL: {url!r}")


class NameOsMismatch(ResolutionError):
    """Raised when add_name_os is requested without a targets list."""

    def __init__(self):
        super().__init__(
            "When adding the target OS to the saved file name you must also "
            "specify a non empty targets list."
        )


class NameVersMismatch(ResolutionError):
    """Raised when add_name_vers is requested without a version."""

    def __init__(self):
        super().__init__(
            "When adding a version to the saved file name you must also "
            "specify a non empty version string."
        )


# ============================================================================
# Fetch Exceptions
# ============================================================================


class FetchError(BinFetchError):
    """Base exception for download and save errors."""

    pass


class FileExists(FetchError):
    """Raised when the destination exists and overwrite is disabled."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"File already exists: {path}")


class DownloadFailed(FetchError):
    """Network or filesystem error while fetching or writing."""

    pass


class DecodeFailed(FetchError):
    """Decompression or unarchiving failed mid-stream."""

    pass


class ChecksumMismatch(FetchError):
    """Downloaded bytes do not match the published checksum."""

    pass
