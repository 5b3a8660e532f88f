"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import sys
from typing import Dict, List, Optional

from scannerkit.config.parser import BootstrapConfig, load_config

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def parse_define(value: str) -> List[str]:
    """
    Split a ``-D key=value`` option.

    Raises:
        ValueError: If the option has no '='
    """
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise ValueError(f"Expected key=value, got '{value}'")
    return [key.strip(), val.strip()]


def collect_properties(defines: Optional[List[List[str]]]) -> Dict[str, str]:
    """Turn repeated ``-D`` options into a dict; later options win."""
    return {key: value for key, value in (defines or [])}


def load_command_config(args, require_server: bool = True) -> BootstrapConfig:
    """
    Load the effective configuration for a command.

    Args:
        args: Parsed arguments with config and define fields
        require_server: If False, a missing server URL is tolerated

    Returns:
        Configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    properties = collect_properties(getattr(args, "define", None))
    return load_config(
        getattr(args, "config", None), properties, require_server=require_server
    )


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
