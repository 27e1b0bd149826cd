"""Statement format detection from file names."""

from enum import Enum
from pathlib import PurePath

from bankimport.domain.errors import UnsupportedFormatError, unsupported_format


class StatementFormat(str, Enum):
    """Supported statement formats, keyed by file extension."""

    CSV = "csv"
    OFX = "ofx"
    QFX = "qfx"
    JSON = "json"
    XML = "xml"
    TXT = "txt"
    MT940 = "mt940"
    XLS = "xls"
    XLSX = "xlsx"
    PDF = "pdf"


SUPPORTED_EXTENSIONS = [f".{fmt.value}" for fmt in StatementFormat]


def detect_format(filename: str) -> StatementFormat:
    """Map a file name to its statement format.

    Args:
        filename: Uploaded file name, e.g. "statement.OFX"

    Returns:
        StatementFormat for the lowercase extension

    Raises:
        UnsupportedFormatError: If the extension is missing or not supported
    """
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    try:
        return StatementFormat(suffix)
    except ValueError:
        raise UnsupportedFormatError(unsupported_format(filename, SUPPORTED_EXTENSIONS)) from None
