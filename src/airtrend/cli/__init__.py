"""
Command-line interface for the airtrend package.
"""

from .main import build_parser, main, main_cli

__all__ = [
    "build_parser",
    "main",
    "main_cli",
]
