"""YAML configuration parser for binfetch.

This module defines the fetch options and parses them from YAML files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from binfetch.core.exceptions import ConfigError
from binfetch.core.filesystem import DEFAULT_MODE
from binfetch.core.platform import SUPPORTED_ARCH, SUPPORTED_OS

SUPPORTED_CHECKSUM_ALGORITHMS = ("sha256", "sha512", "md5")


@dataclass(frozen=True)
class Target:
    """One release artifact variant."""

    name: str
    os: str  # 'linux', 'darwin', 'windows'
    arch: Optional[str] = None  # 'x86_64', 'aarch64'; None matches any


@dataclass
class Options:
    """Everything needed to resolve, download and save one binary."""

    pattern: str
    dir: Union[str, Path]
    name: str
    checksum_pattern: Optional[str] = None
    checksum_algorithm: str = "sha256"
    version: Optional[str] = None
    targets: List[Target] = field(default_factory=list)
    add_name_os: bool = False
    add_name_vers: bool = False
    overwrite: bool = False
    chmod: int = DEFAULT_MODE
    os: Optional[str] = None  # Force an OS instead of detecting it
    arch: Optional[str] = None  # Force an arch instead of detecting it
    timeout: int = 30


def load_options(config_path: Path) -> Options:
    """
    Parse a binfetch YAML configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed and validated options

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    return options_from_dict(data)


def options_from_dict(data: Dict[str, Any]) -> Options:
    """Parse and validate options from a plain dictionary."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    for field_name in ("pattern", "dir", "name"):
        if not data.get(field_name):
            raise ConfigError(f"Missing required field: {field_name}")

    os_name = data.get("os")
    if os_name is not None:
        _check_choice("os", os_name, SUPPORTED_OS)

    arch = data.get("arch")
    if arch is not None:
        _check_choice("arch", arch, SUPPORTED_ARCH)

    version = data.get("version")
    if version is not None and not isinstance(version, str):
        raise ConfigError(
            f"version must be a string, got {version!r}; "
            "quote it in YAML (e.g. version: \"1.10\")"
        )

    checksum_algorithm = data.get("checksum_algorithm", "sha256")
    _check_choice(
        "checksum_algorithm", checksum_algorithm, SUPPORTED_CHECKSUM_ALGORITHMS
    )

    timeout = data.get("timeout", 30)
    try:
        timeout = int(timeout)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout: {timeout!r} (expected seconds)")

    return Options(
        pattern=str(data["pattern"]),
        dir=data["dir"],
        name=str(data["name"]),
        checksum_pattern=data.get("checksum_pattern"),
        checksum_algorithm=checksum_algorithm,
        version=version,
        targets=_parse_targets(data.get("targets") or []),
        add_name_os=bool(data.get("add_name_os", False)),
        add_name_vers=bool(data.get("add_name_vers", False)),
        overwrite=bool(data.get("overwrite", False)),
        chmod=_parse_mode(data.get("chmod", DEFAULT_MODE)),
        os=os_name,
        arch=arch,
        timeout=timeout,
    )


def _parse_targets(data: list) -> List[Target]:
    """Parse the release target list."""
    if not isinstance(data, list):
        raise ConfigError("targets must be a list")

    targets = []
    names = set()

    for target_data in data:
        if not isinstance(target_data, dict):
            raise ConfigError("Each target must be a mapping")
        if "name" not in target_data or "os" not in target_data:
            raise ConfigError("Target must specify 'name' and 'os'")

        _check_choice("target os", target_data["os"], SUPPORTED_OS)
        arch = target_data.get("arch")
        if arch is not None:
            _check_choice("target arch", arch, SUPPORTED_ARCH)

        name = str(target_data["name"])
        if name in names:
            raise ConfigError(f"Duplicate target name: {name}")
        names.add(name)

        targets.append(Target(name=name, os=target_data["os"], arch=arch))

    return targets


def _parse_mode(value: Union[int, str]) -> int:
    """Accept 0o755-style ints and '755' / '0o755' strings."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid chmod value: {value!r}")
    if isinstance(value, int):
        return value

    text = str(value).strip().lower()
    if text.startswith("0o"):
        text = text[2:]
    try:
        return int(text, 8)
    except ValueError:
        raise ConfigError(f"Invalid chmod value: {value!r}")


def _check_choice(label: str, value: str, valid: tuple) -> None:
    if value not in valid:
        raise ConfigError(f"Invalid {label}: {value} (expected one of {list(valid)})")
