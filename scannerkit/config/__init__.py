"""Configuration module for ScannerKit.

This module merges scannerkit.yaml, environment variables and command-line
properties into the settings used to bootstrap the scanner engine.
"""

from scannerkit.config.parser import (
    BootstrapConfig,
    ConfigError,
    load_config,
    parse_config,
    parse_properties,
)

__all__ = [
    "BootstrapConfig",
    "ConfigError",
    "load_config",
    "parse_config",
    "parse_properties",
]
