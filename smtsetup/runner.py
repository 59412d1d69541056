"""
Provisioning run: every requested solver, one after another.

Tools are provisioned in a fixed order, cvc5 then z3. CVC4 and Princess follow
only when optional tools are enabled. The first failure aborts the run; tools
provisioned before it stay on the search path.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from smtsetup.artifacts import descriptors_for
from smtsetup.config import SetupConfig
from smtsetup.core.cache import ToolCache
from smtsetup.core.environment import SearchPath, group
from smtsetup.core.platform import Platform, detect_platform
from smtsetup.provisioner import Provisioner, is_enabled

logger = logging.getLogger(__name__)

DEFAULT_TOOLS: Tuple[str, ...] = ("cvc5", "z3")
OPTIONAL_TOOLS: Tuple[str, ...] = ("cvc4", "princess")


def tools_to_provision(config: SetupConfig) -> Tuple[str, ...]:
    """Tool names in provisioning order."""
    if config.optional_tools:
        return DEFAULT_TOOLS + OPTIONAL_TOOLS
    return DEFAULT_TOOLS


def run(
    config: SetupConfig,
    platform: Optional[Platform] = None,
    provisioner: Optional[Provisioner] = None,
) -> List[Path]:
    """
    Provision every requested tool.

    Args:
        config: Requested versions and options
        platform: Runner platform (detected from the environment if None);
            ignored when a provisioner is given
        provisioner: Provisioner to use (built from config if None)

    Returns:
        Directories added to the search path, in order

    Raises:
        SmtSetupError: If an enabled tool fails to download, extract or cache
    """
    if provisioner is None:
        if platform is None:
            platform = detect_platform()
        provisioner = Provisioner(platform, ToolCache(config.cache_dir), SearchPath())
    logger.debug(f"Platform: {provisioner.platform}")

    added = []
    for tool in tools_to_provision(config):
        version = config.version_of(tool)
        with group(tool):
            logger.debug(f"{tool} version: {version or '(not requested)'}")
            descriptors = descriptors_for(tool, version) if is_enabled(version) else {}
            bin_dir = provisioner.install(tool, version, descriptors)
        if bin_dir is not None:
            added.append(bin_dir)

    return added


__all__ = ["run", "tools_to_provision", "DEFAULT_TOOLS", "OPTIONAL_TOOLS"]
