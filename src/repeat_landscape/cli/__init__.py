"""
Command-line interface for the repeat landscape pipeline.
"""

from .main import cli, main

__all__ = ["cli", "main"]
