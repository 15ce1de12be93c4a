"""Release target selection for a host platform."""

from typing import Optional, Sequence

from binfetch.config.parser import Target
from binfetch.core.exceptions import NoTargetFound
from binfetch.core.platform import HostPlatform


def resolve_target(
    targets: Optional[Sequence[Target]], host: HostPlatform
) -> Optional[Target]:
    """
    Find the first target built for the host.

    A target matches when its OS equals the host OS and its arch is either
    unset or equal to the host arch. List order decides between matches.

    Args:
        targets: Candidate targets (may be None or empty)
        host: Platform to match against

    Returns:
        Matching target, or None

    Example:
        >>> targets = [Target("linux-x64", "linux", "x86_64"), Target("linux-any", "linux")]
        >>> resolve_target(targets, HostPlatform("linux", "aarch64")).name
        'linux-any'
    """
    for target in targets or ():
        if target.os == host.os and (not target.arch or target.arch == host.arch):
            return target
    return None


def require_target(target: Optional[Target], host: HostPlatform) -> Target:
    """Return target, raising NoTargetFound when it is missing."""
    if target is None:
        raise NoTargetFound(host.os, host.arch)
    return target
