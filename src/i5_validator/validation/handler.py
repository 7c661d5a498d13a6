"""Per-document sink for parser findings.

The handler receives warning, error and fatal findings, normalizes their
messages, logs one line per finding and, in keep-record mode, collects the
positions of every finding under its normalized message.
"""

from typing import Any, Optional

from lxml import etree

from i5_validator.shared.logging import get_logger
from i5_validator.shared.result import NO_POSITION, DocumentReport, ErrorInfo, FindingSeverity
from i5_validator.validation.normalizer import normalize_message

_LEVELS = {
    etree.ErrorLevels.WARNING: FindingSeverity.WARNING,
    etree.ErrorLevels.ERROR: FindingSeverity.ERROR,
    etree.ErrorLevels.FATAL: FindingSeverity.FATAL,
}


def severity_of(entry: Any) -> Optional[FindingSeverity]:
    """Map a libxml2 log entry level to a finding severity.

    Returns:
        The severity, or None for entries below warning level
    """
    return _LEVELS.get(entry.level)


class CollectingErrorHandler:
    """Collect the findings of one document into a DocumentReport.

    All three severities are recorded and logged the same way; only the
    Validator looks at severities to decide the verdict. The handler never
    raises, so parsing can go on reporting further findings.

    Example:
        handler = CollectingErrorHandler("corpus.i5.xml", keep_record=True)
        handler.error("No declaration for element x", 12, 4)
        handler.report["No declaration for element x"].count  # 1
    """

    def __init__(self, name: str, keep_record: bool = False) -> None:
        """Initialize the handler.

        Args:
            name: Logical document name used in log lines
            keep_record: Whether findings are collected besides being logged
        """
        self.name = name
        self.keep_record = keep_record
        self.logger = get_logger(__name__, name, "collecting_handler")
        self.event_count = 0
        self._report: DocumentReport = {}

    def reset(self) -> None:
        """Forget all collected findings."""
        self._report = {}
        self.event_count = 0

    @property
    def report(self) -> DocumentReport:
        """Sealed copy of the findings collected so far."""
        return dict(self._report)

    def warning(self, message: Optional[str], line: Optional[int], column: Optional[int]) -> None:
        self._add_finding(message, line, column)

    def error(self, message: Optional[str], line: Optional[int], column: Optional[int]) -> None:
        self._add_finding(message, line, column)

    def fatal_error(self, message: Optional[str], line: Optional[int], column: Optional[int]) -> None:
        self._add_finding(message, line, column)

    def handle(self, entry: Any) -> Optional[FindingSeverity]:
        """Dispatch a libxml2 log entry to the method for its severity.

        Args:
            entry: lxml ``_LogEntry`` or any object with level, message, line
                and column attributes

        Returns:
            Severity of the entry, None if it was below warning level
        """
        severity = severity_of(entry)
        if severity is FindingSeverity.WARNING:
            self.warning(entry.message, entry.line, entry.column)
        elif severity is FindingSeverity.ERROR:
            self.error(entry.message, entry.line, entry.column)
        elif severity is FindingSeverity.FATAL:
            self.fatal_error(entry.message, entry.line, entry.column)
        return severity

    def _add_finding(self, message: Optional[str], line: Optional[int], column: Optional[int]) -> None:
        message = normalize_message(message or "")
        line = NO_POSITION if line is None else line
        column = NO_POSITION if column is None else column
        self.event_count += 1
        self.logger.error(f"{self.name} at {line}:{column} ERROR {message}")

        if self.keep_record and message:
            info = self._report.get(message)
            if info is None:
                info = self._report[message] = ErrorInfo()
            info.add_occurrence(line, column)
