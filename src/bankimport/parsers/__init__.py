"""Statement parsers, one per supported format."""

from typing import Callable

from bankimport.domain.entities import ParsedTransaction
from bankimport.parsers import csv_parser, json_parser, mt940, ofx, pdf, spreadsheet, xml_parser
from bankimport.parsers.base import ParseOptions
from bankimport.parsers.detection import SUPPORTED_EXTENSIONS, StatementFormat, detect_format

Parser = Callable[[bytes, ParseOptions], list[ParsedTransaction]]

FORMAT_PARSERS: dict[StatementFormat, Parser] = {
    StatementFormat.CSV: csv_parser.parse,
    StatementFormat.OFX: ofx.parse,
    StatementFormat.QFX: ofx.parse,
    StatementFormat.JSON: json_parser.parse,
    StatementFormat.XML: xml_parser.parse,
    StatementFormat.TXT: mt940.parse,
    StatementFormat.MT940: mt940.parse,
    StatementFormat.XLS: spreadsheet.parse_xls,
    StatementFormat.XLSX: spreadsheet.parse_xlsx,
    StatementFormat.PDF: pdf.parse,
}


def parse_statement(
    content: bytes, statement_format: StatementFormat, options: ParseOptions | None = None
) -> list[ParsedTransaction]:
    """Run the parser registered for a format.

    Raises:
        ParseError: If the file is structurally invalid for its format
    """
    return FORMAT_PARSERS[statement_format](content, options or ParseOptions())


__all__ = [
    "FORMAT_PARSERS",
    "ParseOptions",
    "SUPPORTED_EXTENSIONS",
    "StatementFormat",
    "detect_format",
    "parse_statement",
]
