"""
Cache command implementation.

Lists the artifacts stored in the local cache.
"""

import logging

from scannerkit.cli.utils import load_command_config, print_error
from scannerkit.core.cache import ArtifactCache

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments with cache_command field

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = load_command_config(args, require_server=False)
    cache = ArtifactCache(config.cache_dir)

    if args.cache_command == "path":
        print(cache.dir)
        return 0

    if args.cache_command == "list":
        count = 0
        for entry in cache.entries():
            print(f"{entry.fingerprint}/{entry.filename}")
            count += 1
        logger.info(f"{count} artifact(s) in {cache.dir}")
        return 0

    print_error("No cache sub-command specified", "Use 'list' or 'path'")
    return 1
