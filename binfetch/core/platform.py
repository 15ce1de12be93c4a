"""
Platform detection for binfetch.

This module maps the host operating system and CPU architecture onto the
small set of values release targets are described with:

- OS: 'linux', 'darwin', 'windows'
- Architecture: 'x86_64', 'aarch64'

Usage:
    from binfetch.core.platform import detect_platform, resolve_host

    host = detect_platform()
    print(f"OS: {host.os}, arch: {host.arch}")

    # Force a platform (detection is skipped when both are given)
    host = resolve_host(os="windows", arch="x86_64")
"""

import functools
import platform
from dataclasses import dataclass
from typing import Literal, Optional

from binfetch.core.exceptions import UnsupportedPlatform

OS = Literal["linux", "darwin", "windows"]
Arch = Literal["x86_64", "aarch64"]

SUPPORTED_OS = ("linux", "darwin", "windows")
SUPPORTED_ARCH = ("x86_64", "aarch64")


@dataclass(frozen=True)
class HostPlatform:
    """
    Operating system and architecture a binary is fetched for.

    Attributes:
        os: Operating system ('linux', 'darwin', 'windows')
        arch: CPU architecture ('x86_64', 'aarch64')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get platform string (e.g., 'linux-x86_64').

        Example:
            >>> HostPlatform("darwin", "aarch64").platform_string()
            'darwin-aarch64'
        """
        return f"{self.os}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> HostPlatform:
    """
    Detect the host platform.

    This function is cached - it only runs detection once per process.

    Returns:
        HostPlatform for the running interpreter

    Raises:
        UnsupportedPlatform: If the OS or architecture has no release mapping
    """
    return HostPlatform(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'linux', 'darwin', 'windows'
    """
    system = platform.system().lower()

    if system in SUPPORTED_OS:
        return system
    raise UnsupportedPlatform(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x86_64', 'aarch64'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    raise UnsupportedPlatform(f"Unsupported architecture: {machine}")


def resolve_host(os: Optional[str] = None, arch: Optional[str] = None) -> HostPlatform:
    """
    Resolve the platform to fetch for, honouring explicit overrides.

    Args:
        os: Force a specific OS instead of detecting it
        arch: Force a specific architecture instead of detecting it

    Returns:
        HostPlatform built from overrides, falling back to detection

    Raises:
        UnsupportedPlatform: If an override is not a known value, or
            detection is needed and fails
    """
    if os is not None and os not in SUPPORTED_OS:
        raise UnsupportedPlatform(f"Unsupported operating system: {os}")
    if arch is not None and arch not in SUPPORTED_ARCH:
        raise UnsupportedPlatform(f"Unsupported architecture: {arch}")

    if os is not None and arch is not None:
        return HostPlatform(os=os, arch=arch)

    detected = detect_platform()
    return HostPlatform(os=os or detected.os, arch=arch or detected.arch)


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "OS",
    "Arch",
    "SUPPORTED_OS",
    "SUPPORTED_ARCH",
    "HostPlatform",
    "detect_platform",
    "resolve_host",
    "clear_platform_cache",
]
