"""
File system utilities for binfetch.

This module provides the platform-aware file operations used when saving
a binary:
- Directory creation
- Atomic streamed writes (temp file + rename)
- Best-effort POSIX permission changes
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from binfetch.core.exceptions import FileExists

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = os.name == "nt"
IS_UNIX = not IS_WINDOWS

DEFAULT_MODE = 0o764


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        Path object

    Example:
        >>> ensure_directory('./_bin')
        PosixPath('_bin')
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def check_writable(file_path: Union[str, Path], overwrite: bool) -> None:
    """
    Fail early if a file would be clobbered without permission.

    Raises:
        FileExists: If the path exists and overwrite is False
    """
    if not overwrite and Path(file_path).exists():
        raise FileExists(file_path)


@contextmanager
def atomic_output(
    file_path: Union[str, Path], overwrite: bool = False
) -> Iterator[BinaryIO]:
    """
    Context manager writing to a temp file that replaces file_path on success.

    The temp file lives in the destination directory so the final rename
    stays on one filesystem. If the block raises, the temp file is removed
    and the destination is left untouched.

    Args:
        file_path: Final destination path
        overwrite: Replace an existing destination

    Yields:
        Binary file handle to write to

    Raises:
        FileExists: If the destination exists and overwrite is False

    Example:
        >>> with atomic_output('bin/tool', overwrite=True) as f:
        ...     f.write(b'...')
    """
    file_path = Path(file_path)
    check_writable(file_path, overwrite)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        with open(temp_fd, "wb") as f:
            yield f

        # Another writer may have created the file meanwhile
        check_writable(file_path, overwrite)
        temp_path.replace(file_path)

    except BaseException:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove temp file {temp_path}: {e}")
        raise


def apply_permissions(file_path: Union[str, Path], mode: int = DEFAULT_MODE) -> bool:
    """
    Set POSIX permission bits on a file.

    Windows has no POSIX modes, so nothing happens there. Errors from chmod
    are logged and ignored.

    Args:
        file_path: File to change
        mode: Permission bits (e.g. 0o755)

    Returns:
        True if the mode was applied
    """
    if IS_WINDOWS:
        logger.debug(f"Skipping chmod {oct(mode)} on Windows: {file_path}")
        return False

    try:
        os.chmod(file_path, mode)
    except OSError as e:
        logger.debug(f"Could not chmod {file_path} to {oct(mode)}: {e}")
        return False

    return True


__all__ = [
    "IS_WINDOWS",
    "IS_UNIX",
    "DEFAULT_MODE",
    "ensure_directory",
    "check_writable",
    "atomic_output",
    "apply_permissions",
]
