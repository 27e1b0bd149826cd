"""Date parsing utilities."""

import re
from datetime import date, datetime
from enum import Enum

from dateutil import parser as date_parser


class DateLocale(str, Enum):
    """How to read ambiguous numeric dates such as 01/02/2024."""

    UK = "uk"  # day first
    US = "us"  # month first


_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})")

# strptime equivalents of the date formats used by PDF templates
TEMPLATE_DATE_FORMATS = {
    "dd/MM/yyyy": "%d/%m/%Y",
    "MM/dd/yyyy": "%m/%d/%Y",
    "yyyy-MM-dd": "%Y-%m-%d",
}


def locale_for_currency(currency: str | None) -> DateLocale:
    """Pick the date locale for an account currency."""
    if currency and currency.strip().upper() == "USD":
        return DateLocale.US
    return DateLocale.UK


def parse_statement_date(value: str | date | datetime, locale: DateLocale = DateLocale.UK) -> date:
    """Parse a statement date into a date object.

    Supports:
    - native date/datetime values (spreadsheet cells)
    - ISO dates: "2024-01-15", "2024-01-15T10:00:00"
    - compact dates: "20240115", "20240115120000[-5:EST]" (OFX)
    - ambiguous numeric dates resolved by locale: "01/02/2024"
    - free text: "15 Jan 2024", "January 15, 2024"

    Args:
        value: Date string or value
        locale: Day-first (uk) or month-first (us) reading of numeric dates

    Returns:
        Date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    date_str = str(value).strip()
    if not date_str:
        raise ValueError("Empty date string")

    if _ISO_DATE.match(date_str):
        try:
            return date.fromisoformat(date_str[:10])
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}") from e

    compact = _COMPACT_DATE.match(date_str)
    if compact and (len(date_str) == 8 or not date_str[8].isdigit() or len(date_str) >= 14):
        year, month, day = (int(part) for part in compact.groups())
        try:
            return date(year, month, day)
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}") from e

    try:
        dt = date_parser.parse(date_str, dayfirst=locale is DateLocale.UK)
        return dt.date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def parse_template_date(date_str: str, date_format: str) -> date:
    """Parse a date with an explicit PDF template format like ``dd/MM/yyyy``."""
    try:
        strptime_format = TEMPLATE_DATE_FORMATS[date_format]
    except KeyError:
        raise ValueError(f"Unknown date format '{date_format}'") from None
    return datetime.strptime(date_str.strip(), strptime_format).date()
