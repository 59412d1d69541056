"""
Resolve command implementation.

Prints the release artifact a solver version maps to, without downloading.
"""

import logging

from smtsetup.artifacts import resolve
from smtsetup.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 if the tool has no build for the platform)
    """
    platform = args.platform or detect_platform()
    descriptor = resolve(args.tool, args.tool_version, platform)

    if descriptor is None:
        logger.error(f"No {args.tool} build for {platform}")
        return 1

    print(f"url:    {descriptor.url}")
    print(f"format: {descriptor.format}")
    print(f"bin:    {descriptor.bin_subpath or '.'}")
    return 0
