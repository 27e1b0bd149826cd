"""Map header-keyed raw records onto ParsedTransaction.

CSV, JSON, XML and spreadsheet parsers all produce plain dicts keyed by the
source's own column names. This module owns the synonym table that decides
which column is the date, the amount and so on, and the sign rules that turn
single signed columns or separate debit/credit columns into a non-negative
amount plus a transaction type.
"""

import logging
import re
from decimal import Decimal
from typing import Any, Optional

from bankimport.domain.entities import ParsedTransaction, TransactionType
from bankimport.utils.amount_parser import parse_amount
from bankimport.utils.date_parser import DateLocale, parse_statement_date

logger = logging.getLogger(__name__)

RawRecord = dict[str, Any]

# Canonical field -> accepted header names (compared after _normalize_header)
FIELD_SYNONYMS: dict[str, tuple[str, ...]] = {
    "date": (
        "date", "transaction date", "trans date", "posted date", "posting date",
        "booking date", "value date", "txn date", "dtposted", "completed date",
    ),
    "description": (
        "description", "narrative", "details", "payee", "name", "merchant",
        "particulars", "transaction description", "reference", "counterparty",
    ),
    "amount": (
        "amount", "transaction amount", "value", "net amount", "trnamt", "sum",
    ),
    "debit": (
        "debit", "debit amount", "money out", "paid out", "withdrawal",
        "withdrawals", "dr", "out",
    ),
    "credit": (
        "credit", "credit amount", "money in", "paid in", "deposit",
        "deposits", "cr", "in",
    ),
    "type": (
        "type", "transaction type", "dr/cr", "cr/dr", "direction", "trntype",
    ),
    "category": ("category", "category name"),
    "notes": ("notes", "note", "memo", "comment", "comments"),
    "id": (
        "id", "transaction id", "txn id", "fitid", "provider transaction id",
        "external id",
    ),
}

_EXPENSE_MARKERS = {"debit", "dr", "db", "expense", "withdrawal", "payment", "out", "d"}
_INCOME_MARKERS = {"credit", "cr", "income", "deposit", "dep", "in", "c"}


def _normalize_header(header: str) -> str:
    return re.sub(r"[\s_\-]+", " ", str(header).strip().lower())


_LOOKUP = {
    _normalize_header(name): field
    for field, names in FIELD_SYNONYMS.items()
    for name in names
}


def map_headers(headers) -> dict[str, str]:
    """Return canonical field -> source header for the headers we recognise.

    The first matching header wins when a source has several synonyms for the
    same field (e.g. both "Description" and "Payee").
    """
    mapping: dict[str, str] = {}
    for header in headers:
        if header is None:
            continue
        field = _LOOKUP.get(_normalize_header(header))
        if field is not None and field not in mapping:
            mapping[field] = header
    return mapping


def has_transaction_shape(headers) -> bool:
    """True when the headers name a date and some amount column."""
    fields = map_headers(headers)
    return "date" in fields and bool({"amount", "debit", "credit"} & fields.keys())


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_amount(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_amount(value)


def _signed_amount(record: RawRecord, fields: dict[str, str]) -> Optional[Decimal]:
    """Signed amount from a single column or from debit/credit columns."""
    if "amount" in fields:
        amount = _optional_amount(record.get(fields["amount"]))
        if amount is not None:
            return amount

    debit = _optional_amount(record.get(fields["debit"])) if "debit" in fields else None
    credit = _optional_amount(record.get(fields["credit"])) if "credit" in fields else None
    if debit:
        return -abs(debit)
    if credit:
        return abs(credit)
    if debit is not None or credit is not None:
        return Decimal("0")
    return None


def _direction_override(value: Any) -> Optional[TransactionType]:
    marker = _text(value)
    if marker is None:
        return None
    marker = marker.lower()
    if marker in _EXPENSE_MARKERS:
        return TransactionType.EXPENSE
    if marker in _INCOME_MARKERS:
        return TransactionType.INCOME
    return None


def normalize_record(
    record: RawRecord, date_locale: DateLocale = DateLocale.UK
) -> Optional[ParsedTransaction]:
    """Convert one raw record into a ParsedTransaction.

    Args:
        record: Mapping of source column name to cell value
        date_locale: How to read ambiguous numeric dates

    Returns:
        ParsedTransaction, or None when the record has no usable date or amount
    """
    fields = map_headers(record.keys())

    raw_date = record.get(fields["date"]) if "date" in fields else None
    if raw_date is None or (isinstance(raw_date, str) and not raw_date.strip()):
        return None

    try:
        txn_date = parse_statement_date(raw_date, date_locale)
        signed = _signed_amount(record, fields)
    except ValueError as e:
        logger.debug("Skipping record %r: %s", record, e)
        return None
    if signed is None:
        return None

    txn_type = TransactionType.EXPENSE if signed < 0 else TransactionType.INCOME
    override = _direction_override(record.get(fields["type"])) if "type" in fields else None
    if override is not None:
        txn_type = override

    description = _text(record.get(fields["description"])) if "description" in fields else None
    notes = _text(record.get(fields["notes"])) if "notes" in fields else None

    return ParsedTransaction(
        date=txn_date,
        description=description or notes or "Unknown",
        amount=abs(signed),
        type=txn_type,
        category=_text(record.get(fields["category"])) if "category" in fields else None,
        notes=notes,
        provider_transaction_id=_text(record.get(fields["id"])) if "id" in fields else None,
    )


def normalize_records(records, date_locale: DateLocale = DateLocale.UK) -> list[ParsedTransaction]:
    """Normalize a sequence of raw records, dropping the unusable ones."""
    transactions = []
    for row_num, record in enumerate(records, start=1):
        parsed = normalize_record(record, date_locale)
        if parsed is None:
            logger.debug("Record %d has no usable date/amount, skipped", row_num)
            continue
        transactions.append(parsed)
    return transactions
