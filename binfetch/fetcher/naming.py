"""Save file name construction."""

from typing import Optional, Sequence

from binfetch.config.parser import Target
from binfetch.core.exceptions import NameOsMismatch, NameVersMismatch
from binfetch.core.platform import HostPlatform
from binfetch.fetcher.targets import require_target

EXE_SUFFIX = ".exe"


def build_save_name(
    name: str,
    host: HostPlatform,
    target: Optional[Target] = None,
    targets: Optional[Sequence[Target]] = None,
    version: Optional[str] = None,
    add_name_os: bool = False,
    add_name_vers: bool = False,
) -> str:
    """
    Build the file name a binary is saved under.

    Segments are joined with '-' as name[-os][-version]. On Windows the
    result always ends with '.exe'.

    Args:
        name: Base file name
        host: Platform the binary is for
        target: Target resolved for the host, if any
        targets: Configured targets
        version: Release version, if any
        add_name_os: Append the target OS
        add_name_vers: Append the version

    Returns:
        File name (without directory)

    Raises:
        NameOsMismatch: add_name_os without a targets list
        NameVersMismatch: add_name_vers without a version
        NoTargetFound: add_name_os but no target matches the host

    Example:
        >>> build_save_name("tailwind", HostPlatform("windows", "x86_64"),
        ...                 version="3.1.8", add_name_vers=True)
        'tailwind-3.1.8.exe'
    """
    segments = [name]

    if add_name_os:
        if not targets:
            raise NameOsMismatch()
        segments.append(require_target(target, host).os)

    if add_name_vers:
        if not version:
            raise NameVersMismatch()
        segments.append(version)

    save_name = "-".join(segments)
    if host.is_windows and not save_name.endswith(EXE_SUFFIX):
        save_name += EXE_SUFFIX
    return save_name
