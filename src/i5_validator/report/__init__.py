"""Report output for batch validation."""

from .writer import ReportWriter

__all__ = ["ReportWriter"]
