"""
Install command implementation.

Provisions the requested solvers and adds them to the search path.
"""

import logging

from smtsetup.config import VERSION_INPUTS, load_config
from smtsetup.runner import run as run_provisioning

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    overrides = {name: getattr(args, name, None) for name in VERSION_INPUTS}
    overrides["optionalTools"] = getattr(args, "optionalTools", None)
    overrides["cacheDir"] = args.cache_dir

    config = load_config(overrides, config_file=args.config)
    added = run_provisioning(config)

    if not added:
        logger.info("No solvers requested")
    for bin_dir in added:
        logger.debug(f"On PATH: {bin_dir}")

    return 0
