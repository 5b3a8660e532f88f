"""
Entry point for running ScannerKit CLI as a module.

Usage: python -m scannerkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
