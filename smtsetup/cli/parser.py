"""
smtsetup CLI argument parser.

This module implements the command-line interface for smtsetup using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from smtsetup.artifacts import known_tools
from smtsetup.core.environment import configure_logging
from smtsetup.core.exceptions import SmtSetupError
from smtsetup.core.platform import SUPPORTED_PLATFORMS

try:
    from importlib.metadata import version

    __version__ = version("smtsetup")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """smtsetup command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="smtsetup",
            description="smtsetup - put SMT solvers on the CI search path",
            epilog='Use "smtsetup COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"smtsetup {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./smtsetup.yaml)",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="PATH",
            help="Tool cache root (default: $RUNNER_TOOL_CACHE or ~/.smtsetup/tools)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_cache_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' command parser."""
        parser = subparsers.add_parser(
            "install",
            help="Download solvers and add them to PATH",
            description=(
                "Provision the requested solver versions. A version of 'false' "
                "or an empty string skips that solver."
            ),
        )
        parser.add_argument("--z3", dest="z3Version", metavar="VERSION")
        parser.add_argument("--cvc5", dest="cvc5Version", metavar="VERSION")
        parser.add_argument("--cvc4", dest="cvc4Version", metavar="VERSION")
        parser.add_argument("--princess", dest="princessVersion", metavar="VERSION")
        parser.add_argument(
            "--optional-tools",
            dest="optionalTools",
            action="store_true",
            default=None,
            help="Also provision CVC4 and Princess",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' command parser."""
        parser = subparsers.add_parser(
            "resolve",
            help="Show the release artifact for a solver version",
        )
        parser.add_argument("tool", choices=known_tools())
        parser.add_argument("tool_version", metavar="VERSION")
        parser.add_argument(
            "--platform",
            choices=SUPPORTED_PLATFORMS,
            help="Target platform (default: detected from RUNNER_OS)",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' command parser."""
        parser = subparsers.add_parser("cache", help="Inspect or clear the tool cache")
        cache_subparsers = parser.add_subparsers(
            dest="cache_command", metavar="SUBCOMMAND"
        )
        cache_subparsers.add_parser("list", help="List cached tools")
        remove_parser = cache_subparsers.add_parser(
            "remove", help="Remove one cached tool version"
        )
        remove_parser.add_argument("tool", choices=known_tools())
        remove_parser.add_argument("tool_version", metavar="VERSION")
        remove_parser.add_argument(
            "--platform",
            choices=SUPPORTED_PLATFORMS,
            help="Platform of the cached copy (default: detected from RUNNER_OS)",
        )
        cache_subparsers.add_parser("clear", help="Remove all cached tools")

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        configure_logging(verbose=parsed_args.verbose, quiet=parsed_args.quiet)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except SmtSetupError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "smtsetup.cli.commands.install",
            "resolve": "smtsetup.cli.commands.resolve",
            "cache": "smtsetup.cli.commands.cache",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
