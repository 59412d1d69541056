"""
Release artifact resolution for SMT solvers.

Maps a (tool, version, platform) tuple to the release asset to download, the
codec needed to unpack it and the directory inside the unpacked tree that holds
the executables. Everything here is a pure function of its arguments.

Usage:
    from smtsetup.artifacts import resolve

    descriptor = resolve("z3", "4.14.0", "linux")
    print(descriptor.url)
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Literal, Optional

from smtsetup.core.exceptions import UnknownToolError
from smtsetup.core.platform import LINUX, MACOS, WINDOWS, SUPPORTED_PLATFORMS

logger = logging.getLogger(__name__)

ArtifactFormat = Literal["zip", "tar", "7z", "xar", "file"]


@dataclass(frozen=True)
class ArtifactDescriptor:
    """Where to get a tool for one platform and how to install it."""

    url: str
    """Download URL of the release asset"""

    format: ArtifactFormat
    """Archive codec, or ``file`` when the asset is the executable itself"""

    bin_subpath: str = ""
    """Directory holding the executables, relative to the unpacked root"""


DescriptorTable = Dict[str, Optional[ArtifactDescriptor]]


# ============================================================================
# Z3 build-host suffixes
# ============================================================================
#
# Z3 release assets embed the glibc (Linux) or macOS version of the build host,
# which changes between releases. Versions missing from a table use the
# table's default, i.e. the newest known build host. A new Z3 release built on
# a different host needs a new row here.

Z3_LINUX_GLIBC: Dict[str, str] = {
    "4.13.0": "2.35",
    "4.13.2": "2.35",
    "4.13.3": "2.35",
    "4.13.4": "2.35",
    "4.14.0": "2.35",
    "4.14.1": "2.35",
}
Z3_LINUX_GLIBC_DEFAULT = "2.39"

Z3_MACOS_SUFFIX: Dict[str, str] = {
    "4.13.0": "11.7.10",
    "4.13.2": "12.7.6",
    "4.13.3": "13.7",
    "4.13.4": "13.7.1",
    "4.14.0": "13.7.2",
    "4.14.1": "13.7.4",
    "4.15.0": "13.7.5",
    "4.15.1": "13.7.6",
    "4.15.3": "13.7.6",
    "4.15.4": "13.7.6",
}
Z3_MACOS_SUFFIX_DEFAULT = "13.7.6"


def z3_linux_glibc(version: str) -> str:
    """
    Get the glibc version embedded in the Linux Z3 asset name.

    Example:
        >>> z3_linux_glibc("4.14.0")
        '2.35'
        >>> z3_linux_glibc("5.0.0")
        '2.39'
    """
    return Z3_LINUX_GLIBC.get(version, Z3_LINUX_GLIBC_DEFAULT)


def z3_macos_suffix(version: str) -> str:
    """
    Get the macOS version embedded in the macOS Z3 asset name.

    Example:
        >>> z3_macos_suffix("4.13.3")
        '13.7'
    """
    return Z3_MACOS_SUFFIX.get(version, Z3_MACOS_SUFFIX_DEFAULT)


# ============================================================================
# Per-tool descriptor tables
# ============================================================================


def cvc5_descriptors(version: str) -> DescriptorTable:
    """Static cvc5 builds, one zip per platform."""
    base = f"https://github.com/cvc5/cvc5/releases/download/cvc5-{version}"
    names = {
        LINUX: "cvc5-Linux-x86_64-static",
        WINDOWS: "cvc5-Win64-x86_64-static",
        MACOS: "cvc5-macOS-x86_64-static",
    }
    return {
        platform: ArtifactDescriptor(
            url=f"{base}/{name}.zip", format="zip", bin_subpath=f"{name}/bin/"
        )
        for platform, name in names.items()
    }


def z3_descriptors(version: str) -> DescriptorTable:
    """x64 Z3 builds; asset names depend on the build host (see tables above)."""
    base = f"https://github.com/Z3Prover/z3/releases/download/z3-{version}"
    linux_name = f"z3-{version}-x64-glibc-{z3_linux_glibc(version)}"
    windows_name = f"z3-{version}-x64-win"
    macos_asset = f"z3-{version}-x64-osx-{z3_macos_suffix(version)}"

    return {
        LINUX: ArtifactDescriptor(
            url=f"{base}/{linux_name}.zip",
            format="zip",
            bin_subpath=f"{linux_name}/bin/",
        ),
        WINDOWS: ArtifactDescriptor(
            url=f"{base}/{windows_name}.zip",
            format="zip",
            bin_subpath=f"{windows_name}/bin/",
        ),
        MACOS: ArtifactDescriptor(
            url=f"{base}/{macos_asset}.zip",
            format="zip",
            bin_subpath=f"z3-{version}-x64-osx/bin/",
        ),
    }


def cvc4_descriptors(version: str) -> DescriptorTable:
    """Legacy CVC4 ships bare executables and no macOS build."""
    base = f"https://github.com/CVC4/CVC4/releases/download/{version}"
    return {
        LINUX: ArtifactDescriptor(
            url=f"{base}/cvc4-{version}-x86_64-linux-opt", format="file"
        ),
        WINDOWS: ArtifactDescriptor(
            url=f"{base}/cvc4-{version}-win64-opt.exe", format="file"
        ),
        MACOS: None,
    }


def princess_descriptors(version: str) -> DescriptorTable:
    """Princess runs on the JVM, so every platform gets the same snapshot zip."""
    descriptor = ArtifactDescriptor(
        url=(
            "https://github.com/uuverifiers/princess/releases/download/"
            f"snapshot-{version}/princess-bin-{version}.zip"
        ),
        format="zip",
        bin_subpath=f"princess-bin-{version}/bin/",
    )
    return {platform: descriptor for platform in SUPPORTED_PLATFORMS}


TOOL_DESCRIPTORS: Dict[str, Callable[[str], DescriptorTable]] = {
    "cvc5": cvc5_descriptors,
    "z3": z3_descriptors,
    "cvc4": cvc4_descriptors,
    "princess": princess_descriptors,
}


def known_tools() -> list[str]:
    """Get the names of all tools artifacts can be resolved for."""
    return list(TOOL_DESCRIPTORS)


def descriptors_for(tool: str, version: str) -> DescriptorTable:
    """
    Build the per-platform descriptor table for a tool version.

    Args:
        tool: Tool name (``cvc5``, ``z3``, ``cvc4``, ``princess``)
        version: Release version string

    Returns:
        Mapping of every supported platform to its descriptor, or None where
        the tool has no build for that platform

    Raises:
        UnknownToolError: If the tool is not known
    """
    try:
        build = TOOL_DESCRIPTORS[tool]
    except KeyError:
        raise UnknownToolError(tool) from None
    return build(version)


def resolve(tool: str, version: str, platform: str) -> Optional[ArtifactDescriptor]:
    """
    Resolve the release artifact for a tool version on a platform.

    Args:
        tool: Tool name
        version: Release version string
        platform: Target platform

    Returns:
        ArtifactDescriptor, or None if the tool is not built for the platform

    Raises:
        UnknownToolError: If the tool is not known

    Example:
        >>> resolve("z3", "4.14.0", "macos").bin_subpath
        'z3-4.14.0-x64-osx/bin/'
        >>> resolve("cvc4", "1.8", "macos") is None
        True
    """
    return descriptors_for(tool, version).get(platform)


__all__ = [
    "ArtifactDescriptor",
    "ArtifactFormat",
    "DescriptorTable",
    "Z3_LINUX_GLIBC",
    "Z3_LINUX_GLIBC_DEFAULT",
    "Z3_MACOS_SUFFIX",
    "Z3_MACOS_SUFFIX_DEFAULT",
    "z3_linux_glibc",
    "z3_macos_suffix",
    "known_tools",
    "descriptors_for",
    "resolve",
]
