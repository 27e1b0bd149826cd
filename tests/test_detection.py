"""Tests for statement format detection and parser dispatch."""

import pytest

from bankimport.domain.errors import UnsupportedFormatError, ValidationError
from bankimport.parsers import FORMAT_PARSERS, StatementFormat, detect_format
from bankimport.parsers import mt940, ofx, spreadsheet


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("statement.csv", StatementFormat.CSV),
        ("STATEMENT.OFX", StatementFormat.OFX),
        ("export.qfx", StatementFormat.QFX),
        ("data.json", StatementFormat.JSON),
        ("data.xml", StatementFormat.XML),
        ("swift.txt", StatementFormat.TXT),
        ("swift.mt940", StatementFormat.MT940),
        ("legacy.xls", StatementFormat.XLS),
        ("modern.xlsx", StatementFormat.XLSX),
        ("bank.statement.pdf", StatementFormat.PDF),
    ],
)
def test_detect_format_by_extension(filename, expected):
    """Each supported extension maps to its format regardless of case."""
    assert detect_format(filename) == expected


@pytest.mark.parametrize("filename", ["notes.docx", "archive.zip", "README", ""])
def test_detect_format_rejects_unknown(filename):
    """Unknown or missing extensions raise UnsupportedFormatError."""
    with pytest.raises(UnsupportedFormatError) as excinfo:
        detect_format(filename)

    assert excinfo.value.code == "UNSUPPORTED_FORMAT"
    assert ".csv" in str(excinfo.value)


def test_unsupported_format_is_validation_error():
    """UnsupportedFormatError is reported as a 400 like other validation errors."""
    with pytest.raises(ValidationError) as excinfo:
        detect_format("image.png")
    assert excinfo.value.http_status == 400


def test_every_format_has_a_parser():
    """The dispatch table covers the whole enum."""
    assert set(FORMAT_PARSERS) == set(StatementFormat)


def test_shared_parsers():
    """Formats that share a grammar share a parser."""
    assert FORMAT_PARSERS[StatementFormat.TXT] is mt940.parse
    assert FORMAT_PARSERS[StatementFormat.MT940] is mt940.parse
    assert FORMAT_PARSERS[StatementFormat.OFX] is ofx.parse
    assert FORMAT_PARSERS[StatementFormat.QFX] is ofx.parse
    assert FORMAT_PARSERS[StatementFormat.XLSX] is spreadsheet.parse_xlsx
