"""
Run configuration.

Settings are merged from, highest priority first:
1. Command-line flags
2. Action inputs (``INPUT_Z3VERSION``...)
3. A YAML file (``smtsetup.yaml`` in the working directory by default)
4. Defaults: every tool disabled, optional tools off

Example ``smtsetup.yaml``::

    z3Version: "4.14.0"
    cvc5Version: "1.2.1"
    optionalTools: false

Quote versions in the file: YAML reads an unquoted ``1.10`` as the float
``1.1``, and the version string cannot be recovered from it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from smtsetup.core.environment import get_input
from smtsetup.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "smtsetup.yaml"

# Input name -> SetupConfig field
VERSION_INPUTS = {
    "cvc5Version": "cvc5_version",
    "z3Version": "z3_version",
    "cvc4Version": "cvc4_version",
    "princessVersion": "princess_version",
}

TRUE_VALUES = ("true", "yes", "on", "1")
FALSE_VALUES = ("false", "no", "off", "0", "")


@dataclass
class SetupConfig:
    """Requested solver versions and run options."""

    cvc5_version: str = ""
    z3_version: str = ""
    cvc4_version: str = ""
    princess_version: str = ""
    optional_tools: bool = False
    """Also provision CVC4 and Princess"""
    cache_dir: Optional[Path] = None
    """Tool cache root (default: runner tool cache)"""

    def version_of(self, tool: str) -> str:
        """Requested version for a tool name, e.g. ``version_of("z3")``."""
        return getattr(self, f"{tool}_version")


def parse_bool(value: Any, name: str) -> bool:
    """
    Interpret a YAML or input value as a boolean.

    Raises:
        ConfigurationError: If the value is not a recognizable boolean
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required but missing, or invalid
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Expected a mapping in {config_file}")
    return config


def _version_value(value: Any, name: str) -> str:
    # YAML reads `false` as a bool and `4.14` as a float
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        logger.warning(
            f"{name} {value} was read from YAML as a number; "
            f"quote it if the release has trailing zeros"
        )
    return str(value).strip()


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SetupConfig:
    """
    Build the run configuration.

    Args:
        overrides: Values from the command line, keyed by input name
            (``z3Version``...); None values are ignored
        config_file: YAML file to read; required when given explicitly,
            ``./smtsetup.yaml`` is read if present otherwise
        environ: Environment to read action inputs from (default: ``os.environ``)

    Returns:
        Merged SetupConfig

    Raises:
        ConfigurationError: If the file or a value is invalid
    """
    if config_file is not None:
        file_values = load_yaml_config(Path(config_file), required=True)
    else:
        file_values = load_yaml_config(Path.cwd() / DEFAULT_CONFIG_FILE)

    overrides = overrides or {}

    def lookup(name: str) -> Any:
        if overrides.get(name) is not None:
            return overrides[name]
        from_input = get_input(name, environ)
        if from_input:
            return from_input
        return file_values.get(name)

    config = SetupConfig()
    for name, field_name in VERSION_INPUTS.items():
        setattr(config, field_name, _version_value(lookup(name), name))

    optional = lookup("optionalTools")
    if optional is not None:
        config.optional_tools = parse_bool(optional, "optionalTools")

    cache_dir = lookup("cacheDir")
    if cache_dir:
        config.cache_dir = Path(cache_dir).expanduser()

    logger.debug(f"Configuration: {config}")
    return config


__all__ = [
    "SetupConfig",
    "DEFAULT_CONFIG_FILE",
    "VERSION_INPUTS",
    "parse_bool",
    "load_yaml_config",
    "load_config",
]
