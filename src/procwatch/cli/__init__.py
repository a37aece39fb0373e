"""
Command-line interface for procwatch.
"""

from .main import main_cli

__all__ = ["main_cli"]
