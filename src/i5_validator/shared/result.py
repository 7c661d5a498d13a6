"""Result objects for DTD validation.

This module defines the two-level report data model (document name to
normalized message to ErrorInfo) and the summary of a batch run.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

NO_POSITION = -1


class FindingSeverity(Enum):
    """Severity levels of parser findings."""

    WARNING = auto()
    ERROR = auto()   # validity errors, the parser continues
    FATAL = auto()   # well-formedness errors, the parser aborts


class Occurrence(NamedTuple):
    """Position of one finding; ``-1`` where the parser supplies none."""

    line: int
    column: int

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass
class ErrorInfo:
    """All sightings of one normalized message within one document."""

    occurrences: List[Occurrence] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of sightings."""
        return len(self.occurrences)

    def add_occurrence(self, line: Optional[int], column: Optional[int]) -> None:
        """Record a sighting. Repeated positions are kept."""
        self.occurrences.append(Occurrence(
            NO_POSITION if line is None else line,
            NO_POSITION if column is None else column,
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "occurrences": [occurrence.to_dict() for occurrence in self.occurrences],
        }


# Normalized message -> ErrorInfo, for a single document
DocumentReport = Dict[str, ErrorInfo]


class AggregateReport:
    """Thread-safe mapping from document name to its DocumentReport.

    Workers only ever insert their own document; nothing reads another
    worker's entry while the batch is running.
    """

    def __init__(self) -> None:
        self._reports: Dict[str, DocumentReport] = {}
        self._lock = threading.Lock()

    def add(self, name: str, report: DocumentReport) -> None:
        """Attach the report of document ``name``, replacing an earlier one."""
        with self._lock:
            self._reports[name] = report

    def get(self, name: str) -> Optional[DocumentReport]:
        with self._lock:
            return self._reports.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._reports)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._reports

    def __getitem__(self, name: str) -> DocumentReport:
        with self._lock:
            return self._reports[name]

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Convert the aggregate into plain JSON-compatible structures."""
        with self._lock:
            snapshot = dict(self._reports)
        return {
            name: {message: info.to_dict() for message, info in report.items()}
            for name, report in snapshot.items()
        }


@dataclass
class BatchSummary:
    """Verdicts and timing of one batch run."""

    verdicts: Dict[str, bool] = field(default_factory=dict)
    processing_time_ms: float = 0.0

    @property
    def total(self) -> int:
        return len(self.verdicts)

    @property
    def valid_count(self) -> int:
        return sum(1 for verdict in self.verdicts.values() if verdict)

    @property
    def invalid_count(self) -> int:
        return self.total - self.valid_count

    @property
    def invalid_documents(self) -> List[str]:
        """Names of documents that did not validate, in input order."""
        return [name for name, verdict in self.verdicts.items() if not verdict]
