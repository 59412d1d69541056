"""
Platform detection for smtsetup.

The runner's operating system decides which release artifact is fetched. It is
read once from the ``RUNNER_OS`` environment variable (``Linux``, ``Windows``
or ``macOS`` on hosted runners) and then passed around explicitly.

Usage:
    from smtsetup.core.platform import detect_platform

    platform = detect_platform()
    print(f"Provisioning for {platform}")
"""

import logging
import os
from typing import Literal, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

Platform = Literal["linux", "windows", "macos"]

LINUX: Platform = "linux"
WINDOWS: Platform = "windows"
MACOS: Platform = "macos"

SUPPORTED_PLATFORMS: Tuple[Platform, ...] = (LINUX, WINDOWS, MACOS)

DEFAULT_PLATFORM: Platform = LINUX

PLATFORM_ENV_VAR = "RUNNER_OS"


def normalize_platform(value: Optional[str]) -> Platform:
    """
    Map a raw OS indicator to a supported platform.

    Args:
        value: Raw value such as ``"Linux"``, ``"macOS"`` or ``None``

    Returns:
        Normalized platform, ``"linux"`` for absent or unrecognized values

    Example:
        >>> normalize_platform("macOS")
        'macos'
        >>> normalize_platform("FreeBSD")
        'linux'
    """
    if not value:
        return DEFAULT_PLATFORM

    name = value.strip().lower()
    for platform in SUPPORTED_PLATFORMS:
        if name == platform:
            return platform

    logger.debug(f"Unrecognized platform '{value}', defaulting to {DEFAULT_PLATFORM}")
    return DEFAULT_PLATFORM


def detect_platform(environ: Optional[Mapping[str, str]] = None) -> Platform:
    """
    Detect the runner platform from the environment.

    Args:
        environ: Environment mapping to read (default: ``os.environ``)

    Returns:
        Detected platform
    """
    if environ is None:
        environ = os.environ
    return normalize_platform(environ.get(PLATFORM_ENV_VAR))


def executable_name(name: str, platform: Platform) -> str:
    """
    Get the executable file name for a tool on the given platform.

    Example:
        >>> executable_name("cvc4", "windows")
        'cvc4.exe'
    """
    if platform == WINDOWS:
        return f"{name}.exe"
    return name


__all__ = [
    "Platform",
    "LINUX",
    "WINDOWS",
    "MACOS",
    "SUPPORTED_PLATFORMS",
    "DEFAULT_PLATFORM",
    "normalize_platform",
    "detect_platform",
    "executable_name",
]
