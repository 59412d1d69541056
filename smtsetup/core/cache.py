"""
Version-keyed tool cache.

Installed tools live under ``<root>/<tool>/<version>/<platform>/``. A JSON index
(``registry.json``) records every completed installation; a directory without
an index entry is a leftover from an interrupted run and is never returned by
:meth:`ToolCache.find`.

On hosted runners the root is ``$RUNNER_TOOL_CACHE`` so entries survive as long
as the runner image's tool cache does; elsewhere it is ``~/.smtsetup/tools``.
"""

import json
import logging
import os
import shutil
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from filelock import FileLock, Timeout

from smtsetup.core.exceptions import (
    CacheError,
    CacheLockTimeout,
    CacheStoreError,
    FilesystemError,
)
from smtsetup.core.filesystem import (
    atomic_write,
    copy_tree,
    directory_size,
    make_executable,
    safe_rmtree,
)

logger = logging.getLogger(__name__)

CACHE_ENV_VAR = "RUNNER_TOOL_CACHE"

REGISTRY_VERSION = 1


def get_tool_cache_dir() -> Path:
    """
    Get the default tool cache root.

    Returns:
        Path: ``$RUNNER_TOOL_CACHE`` when set, otherwise
            - Windows: %USERPROFILE%\\.smtsetup\\tools
            - Linux/macOS: ~/.smtsetup/tools
    """
    runner_cache = os.environ.get(CACHE_ENV_VAR)
    if runner_cache:
        return Path(runner_cache)

    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if user_profile:
            return Path(user_profile) / ".smtsetup" / "tools"
    return Path.home() / ".smtsetup" / "tools"


def _empty_registry() -> dict:
    return {"version": REGISTRY_VERSION, "tools": {}}


class ToolCache:
    """
    Cache of installed tools keyed by (tool, version, platform).

    Example:
        >>> cache = ToolCache(Path('/opt/hostedtoolcache'))
        >>> cache.find('z3', '4.14.0', 'linux') is None
        True
        >>> path = cache.cache_dir(Path('/tmp/extracted'), 'z3', '4.14.0', 'linux')
        >>> cache.find('z3', '4.14.0', 'linux') == path
        True
    """

    def __init__(self, root: Optional[Path] = None, lock_timeout: int = 30):
        """
        Initialize tool cache.

        Args:
            root: Cache root directory (default: :func:`get_tool_cache_dir`)
            lock_timeout: Timeout in seconds for acquiring the index lock
        """
        self.root = Path(root) if root is not None else get_tool_cache_dir()
        self.registry_path = self.root / "registry.json"
        self.lock_path = self.root / "lock" / "registry.lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.root}")

    @staticmethod
    def entry_id(tool: str, version: str, platform: str) -> str:
        """Index key for a cache entry, e.g. ``z3-4.14.0-linux``."""
        return f"{tool}-{version}-{platform}"

    def install_dir(self, tool: str, version: str, platform: str) -> Path:
        """Directory an entry is (or would be) stored in."""
        return self.root / tool / version / platform

    def _load_registry(self) -> dict:
        if not self.registry_path.exists():
            return _empty_registry()

        try:
            with open(self.registry_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load cache index: {e}")
            raise CacheError(f"Failed to load cache index: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("tools"), dict):
            logger.warning("Invalid cache index format, resetting")
            return _empty_registry()

        return data

    def _save_registry(self, data: dict):
        try:
            atomic_write(
                self.registry_path, json.dumps(data, indent=2, ensure_ascii=False)
            )
        except OSError as e:
            logger.error(f"Failed to save cache index: {e}")
            raise CacheStoreError(f"Failed to save cache index: {e}") from e

    @contextmanager
    def _lock(self):
        """
        Hold the cache index lock.

        Raises:
            CacheLockTimeout: If lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug("Acquired cache lock")
                yield
            logger.debug("Released cache lock")
        except Timeout as e:
            raise CacheLockTimeout(
                f"Could not acquire cache lock within {self.lock_timeout} seconds"
            ) from e

    def find(self, tool: str, version: str, platform: str) -> Optional[Path]:
        """
        Look up a completed installation.

        Args:
            tool: Tool name
            version: Exact version string
            platform: Platform the entry was installed for

        Returns:
            Installation directory, or None on a cache miss
        """
        if not version:
            return None

        entry_id = self.entry_id(tool, version, platform)
        entry = self._load_registry()["tools"].get(entry_id)
        if entry is None:
            return None

        if not isinstance(entry, dict) or not entry.get("path"):
            logger.warning(f"Cache entry {entry_id} has no path, ignoring")
            return None

        path = Path(entry["path"])
        if not path.is_dir():
            logger.warning(f"Cache entry {entry_id} points at missing {path}")
            return None

        return path

    def cache_dir(
        self,
        source_dir: Path,
        tool: str,
        version: str,
        platform: str,
        source_url: Optional[str] = None,
    ) -> Path:
        """
        Store an extracted tree in the cache.

        Any previous (possibly partial) content for the same key is replaced.

        Args:
            source_dir: Directory to copy into the cache
            tool: Tool name
            version: Exact version string
            platform: Platform the tree was built for
            source_url: URL the artifact came from, recorded in the index

        Returns:
            Canonical cached path

        Raises:
            CacheStoreError: If the tree cannot be copied or indexed
        """
        logger.debug(f"Caching {tool} {version} ({platform}) from {source_dir}")

        def populate(dest: Path):
            copy_tree(source_dir, dest)

        return self._store(populate, tool, version, platform, source_url)

    def cache_file(
        self,
        source_file: Path,
        target_name: str,
        tool: str,
        version: str,
        platform: str,
        source_url: Optional[str] = None,
    ) -> Path:
        """
        Store a single downloaded file in the cache as ``target_name``.

        The stored file is made executable.

        Returns:
            Canonical cached directory containing ``target_name``

        Raises:
            CacheStoreError: If the file cannot be copied or indexed
        """
        logger.debug(f"Caching {tool} {version} ({platform}) file {source_file}")

        def populate(dest: Path):
            dest.mkdir(parents=True, exist_ok=True)
            target = dest / target_name
            shutil.copyfile(source_file, target)
            make_executable(target)

        return self._store(populate, tool, version, platform, source_url)

    def _store(self, populate, tool, version, platform, source_url) -> Path:
        dest = self.install_dir(tool, version, platform)
        entry_id = self.entry_id(tool, version, platform)

        with self._lock():
            try:
                if dest.exists():
                    safe_rmtree(dest, require_prefix=self.root)
                populate(dest)
                size_bytes = directory_size(dest)
            except (OSError, FilesystemError) as e:
                raise CacheStoreError(f"Failed to cache {entry_id}: {e}") from e

            data = self._load_registry()
            data["tools"][entry_id] = {
                "tool": tool,
                "version": version,
                "platform": platform,
                "path": str(dest.resolve()),
                "size_mb": size_bytes / (1024 * 1024),
                "installed": datetime.now().isoformat(),
                "source_url": source_url,
            }
            self._save_registry(data)

        logger.info(f"Cached {entry_id} at {dest}")
        return dest.resolve()

    def list_versions(self, tool: str, platform: str) -> List[str]:
        """
        Get all cached versions of a tool for a platform.

        Example:
            >>> cache.list_versions('z3', 'linux')
            ['4.13.4', '4.14.0']
        """
        tools = self._load_registry()["tools"]
        return sorted(
            info["version"]
            for info in tools.values()
            if isinstance(info, dict)
            and info.get("version")
            and info.get("tool") == tool
            and info.get("platform") == platform
        )

    def list_entries(self) -> Dict[str, dict]:
        """Get all index entries keyed by entry id."""
        return dict(self._load_registry()["tools"])

    def remove(self, tool: str, version: str, platform: str) -> bool:
        """
        Remove one entry and its directory.

        Returns:
            True if an entry was removed
        """
        entry_id = self.entry_id(tool, version, platform)

        with self._lock():
            data = self._load_registry()
            if entry_id not in data["tools"]:
                logger.debug(f"Nothing to remove for {entry_id}")
                return False

            safe_rmtree(self.install_dir(tool, version, platform), self.root)
            del data["tools"][entry_id]
            self._save_registry(data)

        logger.info(f"Removed {entry_id} from cache")
        return True

    def clear(self) -> int:
        """
        Remove every indexed entry.

        Returns:
            Number of entries removed
        """
        with self._lock():
            data = self._load_registry()
            for info in data["tools"].values():
                if not isinstance(info, dict):
                    continue
                key = [info.get(k) for k in ("tool", "version", "platform")]
                if all(key):
                    safe_rmtree(self.install_dir(*key), require_prefix=self.root)
            count = len(data["tools"])
            self._save_registry(_empty_registry())

        logger.info(f"Cleared {count} cache entr{'y' if count == 1 else 'ies'}")
        return count


__all__ = ["ToolCache", "get_tool_cache_dir", "CACHE_ENV_VAR"]
