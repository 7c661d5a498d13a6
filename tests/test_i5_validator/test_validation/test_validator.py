"""Tests for the Validator in DOM and SAX mode."""

import gzip
import io
import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from i5_validator.shared.config import ParserConfig
from i5_validator.shared.errors import DocumentIOError, ParserConfigurationError
from i5_validator.validation.validator import Validator

VALID = b"<!DOCTYPE r [<!ELEMENT r EMPTY>]><r/>"
DISALLOWED = b"<!DOCTYPE r [<!ELEMENT r EMPTY>]><r><x/></r>"
NOT_WELL_FORMED = b"<r><a></r>"
NO_DOCTYPE = b"<r/>"
REPEATED = b"""<?xml version="1.0"?>
<!DOCTYPE r [
<!ELEMENT r ANY>
]>
<r><b/>

<b/><b/>
</r>
"""

MODES = ["validate_sax", "validate_dom"]


def run(validator, mode, data, name="doc.xml"):
    """Validate in-memory bytes with the given entry point."""
    return getattr(validator, mode)(io.BytesIO(data), name)


class FailingStream(io.RawIOBase):
    """Stream whose device has gone away."""

    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError("device went away")


@pytest.mark.parametrize("mode", MODES)
class TestVerdicts:
    """Test suite for per-document verdicts."""

    def test_valid_document(self, mode):
        """Test a document matching its internal DTD."""
        validator = Validator(keep_record=True)

        assert run(validator, mode, VALID) is True
        assert validator.aggregate["doc.xml"] == {}

    def test_disallowed_element(self, mode):
        """Test that validity errors are reported without failing the document."""
        validator = Validator(keep_record=True)

        assert run(validator, mode, DISALLOWED) is True
        report = validator.aggregate["doc.xml"]
        assert "No declaration for element x" in report
        assert all(key for key in report)

    def test_not_well_formed(self, mode, caplog):
        """Test that a well-formedness error fails the document."""
        caplog.set_level(logging.ERROR, logger="i5_validator")
        validator = Validator(keep_record=True)

        assert run(validator, mode, NOT_WELL_FORMED) is False
        assert "doc.xml" not in validator.aggregate
        # The finding was still logged
        assert any(
            record.getMessage().startswith("doc.xml at ") for record in caplog.records
        )

    def test_no_doctype(self, mode):
        """Test that a document without DTD passes with an empty report."""
        validator = Validator(keep_record=True)

        assert run(validator, mode, NO_DOCTYPE) is True
        assert validator.aggregate["doc.xml"] == {}

    @pytest.mark.parametrize("data", [b"<r/><s/>", b"<r/>junk", b"<r><a/></r>\n<s/>"])
    def test_content_after_root_without_doctype(self, mode, data):
        """Test that trailing content fails a document that declares no DTD."""
        validator = Validator(keep_record=True)

        assert run(validator, mode, data) is False
        assert "doc.xml" not in validator.aggregate

    def test_empty_document(self, mode):
        """Test that an empty stream fails the document."""
        validator = Validator(keep_record=True)

        assert run(validator, mode, b"") is False
        assert len(validator.aggregate) == 0

    def test_repeated_error(self, mode):
        """Test one key for a repeated finding with positions in order."""
        validator = Validator(keep_record=True)

        assert run(validator, mode, REPEATED) is True
        info = validator.aggregate["doc.xml"]["No declaration for element b"]
        lines = [occurrence.line for occurrence in info.occurrences]
        assert lines == [5, 7, 7]
        assert info.count == 3

    def test_without_keep_record(self, mode):
        """Test that nothing is aggregated when no record is kept."""
        validator = Validator(keep_record=False)

        assert run(validator, mode, DISALLOWED) is True
        assert len(validator.aggregate) == 0


class TestStreaming:
    """Test suite for chunked SAX validation."""

    def test_small_chunks_give_the_same_report(self):
        """Test that the chunk size does not change the findings."""
        whole = Validator(keep_record=True)
        chunked = Validator(keep_record=True, config=ParserConfig(chunk_size=7))

        assert run(whole, "validate_sax", REPEATED) is True
        assert run(chunked, "validate_sax", REPEATED) is True
        whole_report = whole.aggregate["doc.xml"]
        chunked_report = chunked.aggregate["doc.xml"]
        assert set(chunked_report) == set(whole_report)
        for message, info in whole_report.items():
            assert chunked_report[message].count == info.count

    def test_small_chunks_without_doctype(self):
        """Test trailing content split over chunks of a document without DTD."""
        validator = Validator(keep_record=True, config=ParserConfig(chunk_size=3))

        assert run(validator, "validate_sax", b"<r><a/><a/></r><s/>", "bad.xml") is False
        assert run(validator, "validate_sax", b"<r><a/><a/></r>\n", "good.xml") is True
        assert validator.aggregate["good.xml"] == {}
        assert "bad.xml" not in validator.aggregate

    def test_findings_not_repeated_after_dtd_check(self, caplog):
        """Test that findings before the root are logged once without a DTD."""
        caplog.set_level(logging.ERROR, logger="i5_validator")
        validator = Validator(keep_record=True)
        data = b'<?xml version="1.0"?><r xmlns:a="relative/uri"/>'

        assert run(validator, "validate_sax", data) is True
        report = validator.aggregate["doc.xml"]
        assert all(info.count == 1 for info in report.values())
        assert len(caplog.records) == len(report)

    def test_dom_and_sax_agree(self):
        """Test that both modes find the same messages."""
        dom = Validator(keep_record=True)
        sax = Validator(keep_record=True)

        run(dom, "validate_dom", DISALLOWED)
        run(sax, "validate_sax", DISALLOWED)
        assert set(dom.aggregate["doc.xml"]) == set(sax.aggregate["doc.xml"])

    def test_validate_dispatch(self):
        """Test the use_dom switch of validate()."""
        validator = Validator()
        with patch.object(validator, "validate_dom", return_value=True) as dom, \
                patch.object(validator, "validate_sax", return_value=False) as sax:
            assert validator.validate(io.BytesIO(VALID), "a.xml", use_dom=True) is True
            assert validator.validate(io.BytesIO(VALID), "b.xml") is False

        dom.assert_called_once()
        sax.assert_called_once()


class TestExternalResources:
    """Test suite for DTDs and inclusions next to the document."""

    def test_external_dtd_relative_to_document(self):
        """Test that a SYSTEM DTD is resolved next to the input file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir)
            (temp_path / "r.dtd").write_text("<!ELEMENT r (a)*>\n<!ELEMENT a EMPTY>\n")
            valid = temp_path / "valid.xml"
            valid.write_bytes(b'<!DOCTYPE r SYSTEM "r.dtd"><r><a/><a/></r>')
            invalid = temp_path / "invalid.xml"
            invalid.write_bytes(b'<!DOCTYPE r SYSTEM "r.dtd"><r><x/></r>')

            validator = Validator(keep_record=True)
            for path in (valid, invalid):
                with path.open("rb") as stream:
                    assert validator.validate_sax(stream, str(path)) is True

            assert validator.aggregate[str(valid)] == {}
            assert "No declaration for element x" in validator.aggregate[str(invalid)]

    @pytest.mark.parametrize("mode", MODES)
    def test_xinclude(self, mode):
        """Test that inclusions are applied and missing ones fail the document."""
        with tempfile.TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir)
            (temp_path / "part.xml").write_bytes(b"<part/>")
            good = temp_path / "good.xml"
            good.write_bytes(
                b'<r xmlns:xi="http://www.w3.org/2001/XInclude">'
                b'<xi:include href="part.xml"/></r>'
            )
            bad = temp_path / "bad.xml"
            bad.write_bytes(
                b'<r xmlns:xi="http://www.w3.org/2001/XInclude">'
                b'<xi:include href="missing.xml"/></r>'
            )

            validator = Validator(keep_record=True)
            with good.open("rb") as stream:
                assert getattr(validator, mode)(stream, str(good)) is True
            with bad.open("rb") as stream:
                assert getattr(validator, mode)(stream, str(bad)) is False

            assert str(good) in validator.aggregate
            assert str(bad) not in validator.aggregate


class TestFailures:
    """Test suite for failures propagated to the caller."""

    @pytest.mark.parametrize("mode", MODES)
    def test_read_error(self, mode):
        """Test that stream errors surface as DocumentIOError."""
        validator = Validator(keep_record=True, config=ParserConfig(chunk_size=4))
        stream = FailingStream()

        with pytest.raises(DocumentIOError) as exc_info:
            getattr(validator, mode)(stream, "broken.xml")

        assert exc_info.value.name == "broken.xml"
        assert "broken.xml" not in validator.aggregate

    @pytest.mark.parametrize("mode", MODES)
    def test_wrong_compression(self, mode):
        """Test that undecompressable content surfaces as DocumentIOError."""
        validator = Validator()
        stream = gzip.GzipFile(fileobj=io.BytesIO(VALID), mode="rb")

        with pytest.raises(DocumentIOError):
            getattr(validator, mode)(stream, "plain.xml")

    def test_parser_configuration_error(self):
        """Test that parser construction failures are reported as such."""
        validator = Validator()
        with patch(
            "i5_validator.validation.validator.etree.XMLPullParser",
            side_effect=TypeError("unsupported option"),
        ):
            with pytest.raises(ParserConfigurationError, match="unsupported option"):
                validator.validate_sax(io.BytesIO(VALID), "doc.xml")

    def test_empty_name(self):
        """Test that a document name is required."""
        with pytest.raises(ValueError):
            Validator().validate_sax(io.BytesIO(VALID), "")
