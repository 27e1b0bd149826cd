"""CSV statement parser.

The first line is the header. Rows are deliberately lenient: a row with fewer
fields than the header is padded with empty strings and a row with more is
truncated, so one sloppy export line does not reject the whole file.
"""

import csv
import io

from bankimport.domain.entities import ParsedTransaction
from bankimport.domain.errors import ParseError
from bankimport.parsers.base import ParseOptions, decode_text
from bankimport.parsers.normalizer import RawRecord, normalize_records


def read_csv_records(text: str) -> list[RawRecord]:
    """Split CSV text into header-keyed records.

    Raises:
        ParseError: If the file has no header line
    """
    lines = text.strip().splitlines()
    if not lines or not lines[0].strip():
        raise ParseError("Empty CSV file")

    delimiter = ";" if ";" in lines[0] else ","
    reader = csv.reader(io.StringIO("\n".join(lines)), delimiter=delimiter)
    try:
        headers = [h.strip().strip('"') for h in next(reader)]
        rows = list(reader)
    except csv.Error as e:
        raise ParseError(f"Malformed CSV: {e}") from e

    records = []
    for values in rows:
        if not any(v.strip() for v in values):
            continue
        values = (values + [""] * len(headers))[: len(headers)]
        records.append({header: value.strip() for header, value in zip(headers, values)})
    return records


def parse(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse CSV bytes into transactions."""
    records = read_csv_records(decode_text(content))
    return normalize_records(records, options.date_locale)
