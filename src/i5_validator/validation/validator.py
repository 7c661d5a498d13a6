"""DTD validation of single documents.

The Validator runs libxml2's validating push parser (through lxml) over a byte
stream, routes every finding through a CollectingErrorHandler and decides the
verdict of the document. In keep-record mode it also owns the aggregate report
of the whole batch.

Both modes parse with the same feature set: DTD validation against the DTD the
document declares, loading of internal and external DTD subsets, expansion of
internal and external entities and XInclude processing once the document has
been parsed.
"""

import lzma
import time
import zlib
from typing import Any, BinaryIO, List, Optional

from lxml import etree

from i5_validator.shared.config import ParserConfig
from i5_validator.shared.errors import DocumentIOError, ParserConfigurationError
from i5_validator.shared.logging import get_logger
from i5_validator.shared.result import AggregateReport, FindingSeverity
from i5_validator.validation.handler import CollectingErrorHandler

# Errors raised by file objects and the gzip/bz2/lzma decompressors
STREAM_ERRORS = (OSError, EOFError, zlib.error, lzma.LZMAError)

MS_PER_SECOND = 1000


class _ParseRun:
    """State of one parser run over one document."""

    def __init__(self, parser: Any, handler: CollectingErrorHandler) -> None:
        self.parser = parser
        self.handler = handler
        self.root: Optional[Any] = None
        self.dispatched = 0
        self.handled = 0
        self.replayed = 0
        self.fatal = False
        self.aborted = False
        self.no_dtd = False
        # Bytes fed up to and including the root start tag
        self._prefix: Optional[List[bytes]] = []

    @property
    def needs_restart(self) -> bool:
        """Whether libxml2 gave up validating before the root element."""
        return self.no_dtd and self._prefix is not None and not self.aborted

    def dispatch(self, error_log: Any) -> None:
        """Hand every log entry not seen yet to the handler."""
        total = len(error_log)
        for index in range(self.dispatched, total):
            entry = error_log[index]
            if entry.type == etree.ErrorTypes.DTD_NO_DTD:
                # Documents without a DOCTYPE have nothing to be validated against
                self.no_dtd = True
                continue
            if self.replayed:
                self.replayed -= 1
                continue
            self.handled += 1
            if self.handler.handle(entry) is FindingSeverity.FATAL:
                self.fatal = True
        self.dispatched = total

    def restart(self, parser: Any) -> None:
        """Continue the document with ``parser`` from its first byte.

        After "no DTD found" libxml2 stops reporting some well-formedness
        errors, e.g. content after the root element. The bytes fed so far are
        replayed into ``parser``; entries the handler has already seen for them
        are not dispatched a second time.
        """
        prefix = b"".join(self._prefix or [])
        self._prefix = None
        self.parser = parser
        self.root = None
        self.no_dtd = False
        self.dispatched = 0
        self.replayed, self.handled = self.handled, 0
        self.feed(prefix)

    def collect_events(self) -> None:
        for _, element in self.parser.read_events():
            if self.root is None:
                self.root = element

    def feed(self, data: bytes) -> None:
        if self._prefix is not None:
            self._prefix.append(data)
        try:
            self.parser.feed(data)
        except etree.XMLSyntaxError as e:
            self.collect_events()
            self.dispatch(self.parser.feed_error_log)
            self.abort(e)
        else:
            self.collect_events()
            self.dispatch(self.parser.feed_error_log)
        if self.root is not None and not self.no_dtd:
            self._prefix = None

    def close(self) -> None:
        try:
            self.parser.close()
        except etree.XMLSyntaxError as e:
            self.collect_events()
            self.dispatch(self.parser.feed_error_log)
            # Also raised for merely invalid documents; then the log decides
            if self.root is None:
                self.abort(e)
        else:
            self.collect_events()
            self.dispatch(self.parser.feed_error_log)

    def abort(self, error: etree.XMLSyntaxError) -> None:
        self.aborted = True
        if not self.fatal:
            # lxml raised without a fatal log entry, e.g. for an empty document
            line, column = getattr(error, "position", (None, None))
            self.handler.fatal_error(error.msg or str(error), line, column)
            self.fatal = True

    @property
    def verdict(self) -> bool:
        return not (self.aborted or self.fatal)


class Validator:
    """Validate XML documents against the DTD they declare.

    Example:
        validator = Validator(keep_record=True)
        with open("corpus.i5.xml", "rb") as stream:
            valid = validator.validate_sax(stream, "corpus.i5.xml")
        report = validator.aggregate["corpus.i5.xml"]
    """

    def __init__(self, keep_record: bool = False, config: Optional[ParserConfig] = None) -> None:
        """Initialize the validator.

        Args:
            keep_record: Collect findings and attach them to the aggregate
            config: Parser features, defaults to ParserConfig()
        """
        self.keep_record = keep_record
        self.config = config or ParserConfig()
        self.aggregate = AggregateReport()
        self.logger = get_logger(__name__, None, "validator")

    def validate_dom(self, stream: BinaryIO, name: str) -> bool:
        """Validate a document by materializing it as a whole.

        The complete stream is read before parsing starts, and the findings
        reach the handler once the tree has been built.

        Args:
            stream: Readable binary stream positioned at the document start
            name: Non-empty logical document name

        Returns:
            True unless a fatal parser error aborted the document

        Raises:
            ParserConfigurationError: If the parser cannot be created
            DocumentIOError: If reading the stream fails
        """
        return self._validate(stream, name, chunk_size=None)

    def validate_sax(self, stream: BinaryIO, name: str) -> bool:
        """Validate a document while streaming it through the parser.

        The stream is pushed into the parser in ``chunk_size`` pieces and the
        findings reach the handler as soon as the chunk that caused them has
        been parsed.

        Args:
            stream: Readable binary stream positioned at the document start
            name: Non-empty logical document name

        Returns:
            True unless a fatal parser error aborted the document

        Raises:
            ParserConfigurationError: If the parser cannot be created
            DocumentIOError: If reading the stream fails
        """
        return self._validate(stream, name, chunk_size=self.config.chunk_size)

    def validate(self, stream: BinaryIO, name: str, use_dom: bool = False) -> bool:
        """Validate with the DOM or the SAX flavour of the parser."""
        if use_dom:
            return self.validate_dom(stream, name)
        return self.validate_sax(stream, name)

    def _create_parser(self, name: str, validating: bool = True) -> Any:
        options = self.config.parser_options()
        if not validating:
            options["dtd_validation"] = False
        try:
            return etree.XMLPullParser(
                events=("start",),
                base_url=name,
                **options
            )
        except (TypeError, ValueError, etree.LxmlError) as e:
            raise ParserConfigurationError(f"Cannot create parser: {e}") from e

    def _validate(self, stream: BinaryIO, name: str, chunk_size: Optional[int]) -> bool:
        if not name:
            raise ValueError("document name must not be empty")

        start_time = time.time()
        handler = CollectingErrorHandler(name, self.keep_record)
        run = _ParseRun(self._create_parser(name), handler)

        while True:
            try:
                data = stream.read() if chunk_size is None else stream.read(chunk_size)
            except STREAM_ERRORS as e:
                raise DocumentIOError(name, e) from e
            if data:
                run.feed(data)
                if run.needs_restart:
                    run.restart(self._create_parser(name, validating=False))
            if run.aborted:
                break
            if not data or chunk_size is None:
                run.close()
                if run.needs_restart:
                    run.restart(self._create_parser(name, validating=False))
                    if not run.aborted:
                        run.close()
                break

        if run.verdict and self.config.xinclude and run.root is not None:
            self._process_xincludes(run)

        verdict = run.verdict
        if verdict and self.keep_record:
            self.aggregate.add(name, handler.report)

        self.logger.debug(
            f"{name}: {handler.event_count} finding(s), verdict {verdict}",
            extra={
                "document": name,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            },
        )
        return verdict

    def _process_xincludes(self, run: _ParseRun) -> None:
        tree = run.root.getroottree()
        try:
            tree.xinclude()
        except etree.XIncludeError as e:
            run.dispatched = 0
            run.replayed = 0
            run.dispatch(e.error_log)
            # A failed inclusion without fallback is fatal
            run.fatal = True
