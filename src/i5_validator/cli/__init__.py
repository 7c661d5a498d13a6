"""Command-line interface module for the I5 validator.

This module provides the batch validation command with parallel processing,
per-file decompression and JSON report output.
"""

from .main import main

__all__ = ["main"]
