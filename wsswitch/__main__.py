"""
Main entry point for running wsswitch as a module.

Usage:
    python -m wsswitch [--dry-run] [--socket PATH] WORKSPACE
"""

from .switcher import main

if __name__ == "__main__":
    import sys

    sys.exit(main())
