"""
UI module - Rich console interface for snapshot operations.
"""

from .console import ConsoleUI

__all__ = [
    "ConsoleUI",
]
