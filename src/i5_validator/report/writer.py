"""JSON serialization of the aggregate report."""

import json
from pathlib import Path
from typing import Union

from i5_validator.shared.errors import ReportWriteError
from i5_validator.shared.logging import get_logger
from i5_validator.shared.result import AggregateReport


class ReportWriter:
    """Write an AggregateReport as pretty-printed JSON.

    Keys are sorted so that two runs over the same batch produce identical
    files, whatever order parallel workers finished in.
    """

    def __init__(self, path: Union[str, Path], indent: int = 2) -> None:
        self.path = Path(path)
        self.indent = indent
        self.logger = get_logger(__name__, None, "report_writer")

    def render(self, aggregate: AggregateReport) -> str:
        return json.dumps(
            aggregate.to_dict(), indent=self.indent, sort_keys=True, ensure_ascii=False
        )

    def write(self, aggregate: AggregateReport) -> Path:
        """Write the report.

        Returns:
            Path of the written file

        Raises:
            ReportWriteError: If the file cannot be written
        """
        self.logger.info(f"number of checked files: {len(aggregate)}")
        content = self.render(aggregate)
        try:
            with self.path.open("w", encoding="utf-8") as f:
                f.write(content)
                f.write("\n")
        except OSError as e:
            raise ReportWriteError(self.path, e) from e
        return self.path
