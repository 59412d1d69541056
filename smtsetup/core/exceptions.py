"""
Centralized exception hierarchy for smtsetup.

Configuration skips (disabled tool, unsupported platform) are not errors and
never raise. Everything below aborts the run.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class SmtSetupError(Exception):
    """Base exception for all smtsetup errors."""

    pass


class ConfigurationError(SmtSetupError):
    """Invalid configuration file or input value."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class UnknownToolError(SmtSetupError):
    """Raised when asked to resolve artifacts for a tool we know nothing about."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Unknown tool: {tool}")


# ============================================================================
# Transport and Filesystem Exceptions
# ============================================================================


class DownloadError(SmtSetupError):
    """Download could not be completed."""

    pass


class FilesystemError(SmtSetupError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(SmtSetupError):
    """Base exception for tool cache errors."""

    pass


class CacheStoreError(CacheError):
    """An installed tree could not be stored in the cache."""

    pass


class CacheLockTimeout(CacheError):
    """Raised when the cache index lock cannot be acquired within timeout."""

    pass
