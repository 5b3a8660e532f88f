"""
Hash command implementation.

Prints a file fingerprint in the format used by the bootstrap index.
"""

import logging

from scannerkit.cli.utils import load_command_config, print_error
from scannerkit.core.verification import FileHashes

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the hash command.

    Args:
        args: Parsed command-line arguments with file and algorithm fields

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if not args.file.is_file():
        print_error("File not found", str(args.file))
        return 1

    algorithm = args.algorithm
    if not algorithm:
        algorithm = load_command_config(args, require_server=False).hash_algorithm

    try:
        hashes = FileHashes(algorithm)
    except ValueError as e:
        print_error(str(e))
        return 1

    print(f"{args.file.name}|{hashes.of(args.file)}")
    return 0
