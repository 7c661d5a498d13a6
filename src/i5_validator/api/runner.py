"""Batch validation of input files.

The BatchRunner validates every input file of a RunnerConfig, sequentially or
on a thread pool, and writes the aggregate report once all files are done.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from i5_validator.compression.stream import detect_compression, open_input
from i5_validator.report.writer import ReportWriter
from i5_validator.shared.config import RunnerConfig
from i5_validator.shared.errors import DocumentIOError
from i5_validator.shared.logging import get_logger
from i5_validator.shared.result import BatchSummary
from i5_validator.validation.validator import STREAM_ERRORS, Validator

MS_PER_SECOND = 1000


class BatchRunner:
    """Validate a batch of files and collect the findings of all of them.

    Example:
        config = RunnerConfig(input_files=[Path("a.i5.xml.gz")], keep_record=True)
        summary = BatchRunner(config).run()
    """

    def __init__(self, config: RunnerConfig, validator: Optional[Validator] = None) -> None:
        """Initialize the runner.

        Args:
            config: Files, flags and parser features of the run
            validator: Validator to use, a fresh one by default
        """
        self.config = config
        self.validator = validator or Validator(config.keep_record, config.parser)
        self.logger = get_logger(__name__, None, "batch_runner")

    def validate_file(self, path: Path) -> bool:
        """Validate a single input file.

        The compression kind is resolved for this file only; the configured
        default is never modified.

        Raises:
            DocumentIOError: If the file cannot be opened, read or decompressed
            ParserConfigurationError: If the parser cannot be created
        """
        name = str(path)
        self.logger.info(f"Validating {name}")
        compression = detect_compression(name, self.config.compression)

        try:
            with open_input(path, compression) as stream:
                verdict = self.validator.validate(stream, name, self.config.use_dom)
        except STREAM_ERRORS as e:
            raise DocumentIOError(name, e) from e

        if verdict:
            self.logger.info(f"Document {name} validated")
        else:
            self.logger.info(f"Document {name} did not validate")
        return verdict

    def run(self) -> BatchSummary:
        """Validate all input files and write the report if requested.

        Returns:
            BatchSummary with one verdict per input file

        Raises:
            DocumentIOError: If an input cannot be read
            ParserConfigurationError: If the parser cannot be created
            ReportWriteError: If the report cannot be written
        """
        start_time = time.time()
        files = list(self.config.input_files)
        # Input order, also when workers finish out of order
        verdicts: Dict[str, bool] = {str(path): False for path in files}

        if self.config.parallel and len(files) > 1:
            self._run_parallel(files, verdicts)
        else:
            for path in files:
                verdicts[str(path)] = self.validate_file(path)

        summary = BatchSummary(
            verdicts=verdicts,
            processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
        )
        self.logger.info(
            f"Validated {summary.total} documents: {summary.valid_count} valid, "
            f"{summary.invalid_count} did not validate",
            extra={"processing_time_ms": summary.processing_time_ms},
        )

        if self.config.keep_record:
            ReportWriter(self.config.report_path).write(self.validator.aggregate)
        return summary

    def _run_parallel(self, files: Iterable[Path], verdicts: Dict[str, bool]) -> None:
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            future_to_file = {
                executor.submit(self.validate_file, path): path for path in files
            }
            try:
                for future in as_completed(future_to_file):
                    verdicts[str(future_to_file[future])] = future.result()
            except BaseException:
                for future in future_to_file:
                    future.cancel()
                raise


def validate_files(
    paths: Iterable[Union[str, Path]],
    **options: Any,
) -> BatchSummary:
    """Validate files with a one-off BatchRunner.

    Args:
        paths: Input files
        **options: Further RunnerConfig fields, e.g. ``parallel=True``

    Returns:
        BatchSummary of the run
    """
    config = RunnerConfig(input_files=[Path(path) for path in paths], **options)
    return BatchRunner(config).run()
