"""
Tool provisioning: cache lookup, download, extraction and PATH registration.

For every enabled tool the provisioner:
1. Picks the artifact descriptor for the current platform
2. Looks the (tool, version, platform) key up in the tool cache
3. On a miss, downloads the artifact, unpacks it and stores it in the cache
4. Adds the binary directory of the cached copy to the search path

A tool whose version is empty or ``"false"`` is skipped before any of this, as
is a tool without a build for the current platform.
"""

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional

from smtsetup.artifacts import ArtifactDescriptor
from smtsetup.core.cache import ToolCache
from smtsetup.core.download import download_file, get_temp_dir
from smtsetup.core.environment import SearchPath
from smtsetup.core.filesystem import extract_archive, safe_rmtree
from smtsetup.core.platform import Platform, executable_name

logger = logging.getLogger(__name__)

DISABLED_VERSION = "false"


def is_enabled(version: Optional[str]) -> bool:
    """
    Check whether a requested version asks for an installation.

    Example:
        >>> is_enabled("4.14.0")
        True
        >>> is_enabled("false")
        False
    """
    return bool(version) and version != DISABLED_VERSION


class Provisioner:
    """
    Installs tools into the tool cache and exposes them on the search path.

    Example:
        >>> provisioner = Provisioner("linux", ToolCache(), SearchPath())
        >>> provisioner.install("z3", "4.14.0", descriptors_for("z3", "4.14.0"))
        PosixPath('/opt/hostedtoolcache/z3/4.14.0/linux/z3-4.14.0-x64-glibc-2.35/bin')
    """

    def __init__(
        self,
        platform: Platform,
        cache: ToolCache,
        search_path: SearchPath,
        downloader: Callable[..., Path] = download_file,
    ):
        """
        Initialize provisioner.

        Args:
            platform: Platform of the runner, detected once by the caller
            cache: Tool cache to look up and store installations in
            search_path: Search path to register binary directories with
            downloader: Transport, ``url -> local file`` (default: download_file)
        """
        self.platform = platform
        self.cache = cache
        self.search_path = search_path
        self.downloader = downloader

    def install(
        self,
        tool: str,
        version: str,
        descriptors: Mapping[str, Optional[ArtifactDescriptor]],
    ) -> Optional[Path]:
        """
        Make a tool version available on the search path.

        Args:
            tool: Tool name, used as the cache key
            version: Requested version; empty or ``"false"`` skips the tool
            descriptors: Artifact descriptor for each platform

        Returns:
            Directory added to the search path, or None if the tool was skipped

        Raises:
            DownloadError: If the artifact cannot be downloaded
            ArchiveExtractionError: If the artifact cannot be unpacked
            CacheStoreError: If the installation cannot be cached
        """
        if not is_enabled(version):
            return None

        descriptor = descriptors.get(self.platform)
        if descriptor is None:
            logger.debug(f"No {tool} build for {self.platform}, skipping")
            return None

        tool_path = self.cache.find(tool, version, self.platform)
        logger.debug(f"Tool path: {tool_path or 'not found in cache'}")

        if tool_path is None:
            tool_path = self._fetch(tool, version, descriptor)

        bin_dir = tool_path / descriptor.bin_subpath
        self.search_path.add_path(bin_dir)
        logger.info(f"{tool} {version}: {bin_dir}")
        return bin_dir

    def _fetch(self, tool: str, version: str, descriptor: ArtifactDescriptor) -> Path:
        """Download, unpack and cache one artifact."""
        logger.debug(f"Downloading {tool} version {version} from {descriptor.url}")
        download_path = Path(self.downloader(descriptor.url))

        if descriptor.format == "file":
            return self.cache.cache_file(
                download_path,
                executable_name(tool, self.platform),
                tool,
                version,
                self.platform,
                source_url=descriptor.url,
            )

        extract_dir = get_temp_dir() / f"{tool}-{version}-extract"
        safe_rmtree(extract_dir)
        try:
            extract_archive(download_path, descriptor.format, extract_dir)
            logger.debug(f"Extracted to {extract_dir}")

            return self.cache.cache_dir(
                extract_dir, tool, version, self.platform, source_url=descriptor.url
            )
        finally:
            safe_rmtree(extract_dir)


__all__ = ["Provisioner", "is_enabled", "DISABLED_VERSION"]
