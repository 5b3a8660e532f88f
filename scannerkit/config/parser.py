"""YAML configuration parser for ScannerKit.

This module reads scannerkit.yaml and merges it with environment variables
and command-line properties into a single ``BootstrapConfig``.

Example scannerkit.yaml::

    version: 1
    server:
      url: https://sonar.example.com
      timeout: 60
    cache:
      user_home: ~/.scannerkit
      hash_algorithm: md5
      parallel: 4

Precedence, lowest first: defaults, YAML file, environment, properties.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from scannerkit.core.directory import USER_HOME_ENV, get_cache_dir
from scannerkit.core.exceptions import ConfigError
from scannerkit.core.verification import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "scannerkit.yaml"
HOST_URL_ENV = "SCANNERKIT_HOST_URL"

# property key -> BootstrapConfig field
PROPERTY_KEYS = {
    "scanner.host.url": "server_url",
    "scanner.userHome": "user_home",
    "scanner.timeout": "timeout",
    "scanner.hashAlgorithm": "hash_algorithm",
    "scanner.parallel": "parallel",
}


@dataclass
class BootstrapConfig:
    """Settings needed to bootstrap the scanner engine."""

    server_url: Optional[str] = None
    user_home: Optional[str] = None
    timeout: int = 30  # seconds
    hash_algorithm: str = DEFAULT_ALGORITHM
    parallel: int = 1

    @property
    def cache_dir(self) -> Path:
        """Artifact cache root derived from the user home."""
        user_home = Path(self.user_home).expanduser() if self.user_home else None
        return get_cache_dir(user_home)

    def validate(self, require_server: bool = True) -> "BootstrapConfig":
        """
        Check values and normalize types.

        Args:
            require_server: If False, a missing server URL is accepted

        Returns:
            self, for chaining

        Raises:
            ConfigError: If a value is missing or invalid
        """
        if require_server and not self.server_url:
            raise ConfigError(
                "Server URL is not configured. Set server.url in "
                f"{DEFAULT_CONFIG_FILE}, {HOST_URL_ENV} or -D scanner.host.url=..."
            )
        self.timeout = _to_positive_int("timeout", self.timeout)
        self.parallel = _to_positive_int("parallel", self.parallel)

        self.hash_algorithm = str(self.hash_algorithm).lower()
        if self.hash_algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigError(
                f"Invalid hash algorithm: {self.hash_algorithm} "
                f"(expected one of {list(SUPPORTED_ALGORITHMS)})"
            )
        return self


def _to_positive_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if number < 1:
        raise ConfigError(f"{name} must be at least 1, got {number}")
    return number


def parse_config(config_path: Path) -> Dict[str, Any]:
    """
    Parse scannerkit.yaml into BootstrapConfig field values.

    Args:
        config_path: Path to scannerkit.yaml

    Returns:
        Dict of field name -> value for the keys present in the file

    Raises:
        ConfigError: If the file is missing or invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    server = _section(data, "server")
    cache = _section(data, "cache")

    values = {
        "server_url": server.get("url"),
        "timeout": server.get("timeout"),
        "user_home": cache.get("user_home"),
        "hash_algorithm": cache.get("hash_algorithm"),
        "parallel": cache.get("parallel"),
    }
    return {key: value for key, value in values.items() if value is not None}


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be a dictionary")
    return section


def parse_properties(properties: Mapping[str, str]) -> Dict[str, Any]:
    """
    Map ``scanner.*`` properties to BootstrapConfig field values.

    Unknown keys are ignored with a debug message.
    """
    values = {}
    for key, value in properties.items():
        field_name = PROPERTY_KEYS.get(key)
        if field_name is None:
            logger.debug(f"Ignoring unknown property: {key}")
            continue
        values[field_name] = value
    return values


def load_config(
    config_path: Optional[Path] = None,
    properties: Optional[Mapping[str, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    require_server: bool = True,
) -> BootstrapConfig:
    """
    Build the effective configuration from every source.

    Args:
        config_path: Explicit configuration file (must exist). When None,
            ./scannerkit.yaml is used if present.
        properties: ``scanner.*`` properties, usually from ``-D`` options
        environ: Environment mapping (default: os.environ)
        require_server: If False, a missing server URL is accepted

    Returns:
        Validated configuration

    Raises:
        ConfigError: If a source is invalid or the result is incomplete
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_path is not None:
        values.update(parse_config(Path(config_path)))
    else:
        default_config = Path.cwd() / DEFAULT_CONFIG_FILE
        if default_config.exists():
            logger.debug(f"Loading configuration from {default_config}")
            values.update(parse_config(default_config))

    if environ.get(HOST_URL_ENV):
        values["server_url"] = environ[HOST_URL_ENV]
    if environ.get(USER_HOME_ENV):
        values["user_home"] = environ[USER_HOME_ENV]

    values.update(parse_properties(properties or {}))

    return BootstrapConfig(**values).validate(require_server)
