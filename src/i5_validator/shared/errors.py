"""Exceptions that abort a validation run.

Validation findings are not exceptions; they travel through the
CollectingErrorHandler into the log and the report.
"""

from pathlib import Path
from typing import Optional, Union


class I5ValidatorError(Exception):
    """Base exception for failures that terminate a run."""


class ParserConfigurationError(I5ValidatorError):
    """lxml could not build a parser with the requested features."""


class ValidatorIOError(I5ValidatorError):
    """Base exception for I/O failures."""


class DocumentIOError(ValidatorIOError):
    """An input document could not be opened, read or decompressed."""

    def __init__(self, name: str, cause: Optional[BaseException] = None) -> None:
        message = f"Cannot read {name}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.name = name
        self.cause = cause


class ReportWriteError(ValidatorIOError):
    """The JSON report could not be written."""

    def __init__(self, path: Union[str, Path], cause: Optional[BaseException] = None) -> None:
        message = f"Cannot write report {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = Path(path)
        self.cause = cause
