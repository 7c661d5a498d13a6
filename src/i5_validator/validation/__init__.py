"""DTD validation of single documents.

This module provides the message normalizer, the collecting error handler that
turns parser findings into a per-document report, and the Validator that drives
libxml2 in DOM or SAX fashion.
"""

from .handler import CollectingErrorHandler, severity_of
from .normalizer import NOT_ANYWHERE, normalize_message
from .validator import Validator

__all__ = [
    "CollectingErrorHandler",
    "severity_of",
    "NOT_ANYWHERE",
    "normalize_message",
    "Validator",
]
