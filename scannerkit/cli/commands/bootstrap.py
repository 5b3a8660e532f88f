"""
Bootstrap command implementation.

Downloads the scanner engine artifacts into the local cache and prints
their paths, one per line, in bootstrap index order.
"""

import logging

from scannerkit.bootstrap import ArtifactSet
from scannerkit.cli.utils import load_command_config
from scannerkit.core.cache import ArtifactCache
from scannerkit.core.download import ServerConnection

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the bootstrap command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)

    Raises:
        ScannerKitError: If the configuration, index or an artifact is invalid
    """
    logger.debug(f"Arguments: {args}")

    config = load_command_config(args)
    parallel = args.parallel if args.parallel else config.parallel

    logger.info(f"Bootstrapping scanner engine from {config.server_url}")
    cache = ArtifactCache.create(config.cache_dir, config.hash_algorithm)
    connection = ServerConnection(config.server_url, timeout=config.timeout)

    result = ArtifactSet(cache, connection, parallel=parallel).download()

    if result.was_cache_hit:
        logger.info("Scanner engine found in cache")
    for path in result.paths:
        print(path)

    return 0
