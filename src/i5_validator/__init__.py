"""I5 Validator.

Validates batches of XML documents, plain or compressed, against the DTD each
document declares, and aggregates the parser findings into a compact JSON
report.

Progressive API Disclosure:
- Level 1: Simple function - validate_files()
- Level 2: Batch runner - BatchRunner with a RunnerConfig
- Level 3: Single documents - Validator.validate_sax() / validate_dom()
"""

__version__ = "0.1.0"
__author__ = "I5 Validator Team"

# Level 1 and 2: batch validation
from .api import BatchRunner, validate_files

# Configuration classes for advanced usage
from .shared.config import CompressionKind, ParserConfig, RunnerConfig

# Report data model
from .shared.result import AggregateReport, BatchSummary, ErrorInfo, Occurrence

# Level 3: single documents
from .validation import CollectingErrorHandler, Validator, normalize_message

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple batch function
    "validate_files",

    # Level 2: Batch runner
    "BatchRunner",

    # Level 3: Single documents
    "Validator",
    "CollectingErrorHandler",
    "normalize_message",

    # Configuration classes
    "CompressionKind",
    "ParserConfig",
    "RunnerConfig",

    # Result objects
    "AggregateReport",
    "BatchSummary",
    "ErrorInfo",
    "Occurrence",
]
