"""Shared utilities for I5 validation.

This module provides shared data structures, configuration objects, result types,
exceptions and logging used across all layers.
"""

from .config import (
    CompressionKind,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    RunnerConfig,
)
from .errors import (
    DocumentIOError,
    I5ValidatorError,
    ParserConfigurationError,
    ReportWriteError,
    ValidatorIOError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    AggregateReport,
    BatchSummary,
    DocumentReport,
    ErrorInfo,
    FindingSeverity,
    Occurrence,
)

__all__ = [
    "CompressionKind",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "RunnerConfig",
    "DocumentIOError",
    "I5ValidatorError",
    "ParserConfigurationError",
    "ReportWriteError",
    "ValidatorIOError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "AggregateReport",
    "BatchSummary",
    "DocumentReport",
    "ErrorInfo",
    "FindingSeverity",
    "Occurrence",
]
