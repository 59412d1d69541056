"""
Cache command implementation.

Lists, removes or clears entries of the tool cache.
"""

import logging

from smtsetup.config import load_config
from smtsetup.core.cache import ToolCache
from smtsetup.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments with cache_command

    Returns:
        Exit code (0 for success, 1 if there was nothing to remove)
    """
    cache_dir = args.cache_dir or load_config(config_file=args.config).cache_dir
    cache = ToolCache(cache_dir)

    if args.cache_command == "clear":
        count = cache.clear()
        print(f"Removed {count} cached tool(s) from {cache.root}")
        return 0

    if args.cache_command == "remove":
        platform = args.platform or detect_platform()
        entry_id = cache.entry_id(args.tool, args.tool_version, platform)
        if not cache.remove(args.tool, args.tool_version, platform):
            logger.error(f"{entry_id} is not in the tool cache at {cache.root}")
            return 1
        print(f"Removed {entry_id} from {cache.root}")
        return 0

    if args.cache_command not in (None, "list"):
        logger.error(f"Unknown cache command: {args.cache_command}")
        return 1

    entries = cache.list_entries()
    if not entries:
        print(f"Tool cache at {cache.root} is empty")
        return 0

    for entry_id, info in sorted(entries.items()):
        if not isinstance(info, dict):
            continue
        size_mb = info.get("size_mb") or 0.0
        print(f"{entry_id:<32} {size_mb:>8.1f} MB  {info.get('path', '?')}")
    return 0
