"""
ScannerKit CLI argument parser.

This module implements the command-line interface for ScannerKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from scannerkit.cli.utils import parse_define
from scannerkit.core.exceptions import ScannerKitError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("scannerkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """ScannerKit command-line interface."""

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
            prog="scannerkit",
            description="ScannerKit - Scanner engine bootstrapper",
            epilog='Use "scannerkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ScannerKit {__version__}"
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
            help="Path to configuration file (default: ./scannerkit.yaml)",
        )
        parser.add_argument(
            "-D",
            "--define",
            action="append",
            type=parse_define,
            metavar="KEY=VALUE",
            help="Set a property, e.g. -D scanner.host.url=https://... "
            "(can be used multiple times)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_bootstrap_command(subparsers)
        self._add_cache_command(subparsers)
        self._add_hash_command(subparsers)

        return parser

    def _add_bootstrap_command(self, subparsers):
        """Add 'bootstrap' subcommand."""
        parser = subparsers.add_parser(
            "bootstrap",
            help="Download the scanner engine",
            description="Fetch the bootstrap index and cache every listed artifact",
        )
        parser.add_argument(
            "--parallel",
            type=int,
            metavar="N",
            help="Number of artifacts downloaded concurrently (overrides config)",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand with sub-commands."""
        parser = subparsers.add_parser(
            "cache",
            help="Inspect the artifact cache",
            description="Inspect the local artifact cache",
        )
        cache_subparsers = parser.add_subparsers(
            dest="cache_command", help="Cache commands", metavar="SUBCOMMAND"
        )
        cache_subparsers.add_parser("list", help="List cached artifacts")
        cache_subparsers.add_parser("path", help="Print the cache directory")

    def _add_hash_command(self, subparsers):
        """Add 'hash' subcommand."""
        parser = subparsers.add_parser(
            "hash",
            help="Print the fingerprint of a file",
            description="Compute a file fingerprint as published in the bootstrap index",
        )
        parser.add_argument("file", type=Path, help="File to fingerprint")
        parser.add_argument(
            "--algorithm",
            metavar="NAME",
            help="Hash algorithm (md5|sha1|sha256|sha512) [default: from config]",
        )

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

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except ScannerKitError as e:
            logger.error(f"Error: {e}")
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "bootstrap": "scannerkit.cli.commands.bootstrap",
            "cache": "scannerkit.cli.commands.cache",
            "hash": "scannerkit.cli.commands.hash",
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
