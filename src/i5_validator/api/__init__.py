"""Batch validation API."""

from .runner import BatchRunner, validate_files

__all__ = ["BatchRunner", "validate_files"]
