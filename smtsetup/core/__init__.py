"""
Core functionality for smtsetup.

This package contains the runner-facing services the provisioner depends on:
platform detection, transport, archive codecs, the tool cache and the
search path.
"""

from .platform import (
    Platform,
    SUPPORTED_PLATFORMS,
    detect_platform,
    normalize_platform,
)

from .cache import (
    ToolCache,
    get_tool_cache_dir,
)

from .environment import (
    SearchPath,
    get_input,
    group,
)

from .exceptions import (
    SmtSetupError,
    ConfigurationError,
    UnknownToolError,
    DownloadError,
    FilesystemError,
    ArchiveExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    CacheError,
    CacheStoreError,
    CacheLockTimeout,
)

__all__ = [
    "Platform",
    "SUPPORTED_PLATFORMS",
    "detect_platform",
    "normalize_platform",
    "ToolCache",
    "get_tool_cache_dir",
    "SearchPath",
    "get_input",
    "group",
    "SmtSetupError",
    "ConfigurationError",
    "UnknownToolError",
    "DownloadError",
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "CacheError",
    "CacheStoreError",
    "CacheLockTimeout",
]
