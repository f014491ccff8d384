"""
Entry point for running confsnap as a module.

Usage:
    python -m confsnap backup "Before change"
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
