"""MT940 (SWIFT customer statement) parser.

Only the movement lines matter here:

    :61:2401020102D5,50NTRFNONREF//B4A02
    :86:COFFEE SHOP LONDON
    CARD 1234

Each ``:61:`` line is paired with the ``:86:`` narrative that follows it; the
narrative may continue over several untagged lines.
"""

import re
from datetime import date
from typing import Optional

from bankimport.domain.entities import ParsedTransaction, TransactionType
from bankimport.parsers.base import ParseOptions, decode_text
from bankimport.utils.amount_parser import parse_comma_decimal

_TAG_LINE = re.compile(r"^:(?P<tag>\d{2}[A-Z]?):(?P<value>.*)$")
_STATEMENT_LINE = re.compile(
    r"^(?P<value_date>\d{6})"
    r"(?P<entry_date>\d{4})?"
    r"(?P<mark>R?[DC])"
    r"(?P<funds_code>[A-Z])?"
    r"(?P<amount>\d[\d,]*)"
    r"(?P<type_code>[NFS][A-Z0-9]{3})"
    r"(?P<reference>[^/]*)"
    r"(?://(?P<bank_reference>.*))?$"
)

# Credit and reversal-of-debit add money; debit and reversal-of-credit remove it
_INCOME_MARKS = {"C", "RD"}


def iter_tags(text: str):
    """Yield (tag, value) pairs, folding untagged continuation lines into the value."""
    tag: Optional[str] = None
    parts: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line == "-" or line.startswith("{") or line.startswith("}"):
            continue
        match = _TAG_LINE.match(line)
        if match:
            if tag is not None:
                yield tag, parts
            tag, parts = match.group("tag"), [match.group("value").strip()]
        elif tag is not None:
            parts.append(line)
    if tag is not None:
        yield tag, parts


def _swift_date(yymmdd: str) -> date:
    year, month, day = int(yymmdd[:2]), int(yymmdd[2:4]), int(yymmdd[4:6])
    return date(2000 + year if year < 80 else 1900 + year, month, day)


def parse_statement_line(value: str) -> Optional[dict]:
    """Decode the fields of a ``:61:`` line, or None if it is malformed."""
    match = _STATEMENT_LINE.match(value.replace(" ", ""))
    if match is None:
        return None
    try:
        fields = match.groupdict()
        fields["date"] = _swift_date(fields["value_date"])
        fields["amount"] = parse_comma_decimal(fields["amount"])
    except ValueError:
        return None
    return fields


def _build(movement: dict, narrative: Optional[str]) -> ParsedTransaction:
    reference = (movement.get("reference") or "").strip()
    if reference.upper() == "NONREF":
        reference = ""
    return ParsedTransaction(
        date=movement["date"],
        description=narrative or reference or "Unknown",
        amount=movement["amount"],
        type=(
            TransactionType.INCOME
            if movement["mark"] in _INCOME_MARKS
            else TransactionType.EXPENSE
        ),
        notes=reference or None,
    )


def parse(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse MT940 bytes into transactions."""
    transactions = []
    pending: Optional[dict] = None

    for tag, parts in iter_tags(decode_text(content)):
        if tag == "61":
            if pending is not None:
                transactions.append(_build(pending, None))
            pending = parse_statement_line(parts[0])
        elif tag == "86" and pending is not None:
            narrative = " ".join(p for p in parts if p).strip()
            transactions.append(_build(pending, narrative or None))
            pending = None
        elif pending is not None:
            transactions.append(_build(pending, None))
            pending = None

    if pending is not None:
        transactions.append(_build(pending, None))
    return transactions
