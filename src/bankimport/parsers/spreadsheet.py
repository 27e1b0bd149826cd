"""XLS/XLSX statement parser.

Bank exports often carry a few lines of account details above the table, so
the header row is the first row that names a date column and an amount (or
debit/credit) column. Rows below it are handled exactly like CSV rows.
"""

import io
import zipfile
from typing import Any, Iterable

import openpyxl
import xlrd

from bankimport.domain.entities import ParsedTransaction
from bankimport.domain.errors import ParseError
from bankimport.parsers.base import ParseOptions
from bankimport.parsers.normalizer import RawRecord, has_transaction_shape, normalize_records


def _cell_text(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def rows_to_records(rows: Iterable[list[Any]]) -> list[RawRecord]:
    """Find the header row and turn the remaining rows into records."""
    headers: list[str] | None = None
    records: list[RawRecord] = []
    for row in rows:
        cells = [_cell_text(c) for c in row]
        if headers is None:
            candidate = [str(c) if c not in (None, "") else "" for c in cells]
            if has_transaction_shape(h for h in candidate if h):
                headers = candidate
            continue
        if all(c in (None, "") for c in cells):
            continue
        cells = (cells + [None] * len(headers))[: len(headers)]
        records.append({h: v for h, v in zip(headers, cells) if h})
    return records


def read_xlsx_rows(content: bytes) -> list[list[Any]]:
    """Read the first worksheet of an XLSX workbook."""
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise ParseError(f"Invalid XLSX workbook: {e}") from e
    try:
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def read_xls_rows(content: bytes) -> list[list[Any]]:
    """Read the first worksheet of a legacy XLS workbook."""
    try:
        book = xlrd.open_workbook(file_contents=content)
    except (xlrd.XLRDError, xlrd.compdoc.CompDocError) as e:
        raise ParseError(f"Invalid XLS workbook: {e}") from e
    sheet = book.sheet_by_index(0)
    rows = []
    for row_idx in range(sheet.nrows):
        row = []
        for cell in sheet.row(row_idx):
            if cell.ctype == xlrd.XL_CELL_DATE:
                row.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
            else:
                row.append(cell.value)
        rows.append(row)
    return rows


def parse_xlsx(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse XLSX bytes into transactions."""
    return normalize_records(rows_to_records(read_xlsx_rows(content)), options.date_locale)


def parse_xls(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse XLS bytes into transactions."""
    return normalize_records(rows_to_records(read_xls_rows(content)), options.date_locale)
