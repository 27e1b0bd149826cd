"""OFX/QFX parser.

Handles both XML-style files and SGML files where closing tags are optional.
Tags are <TAG>value; we extract values using regex, not an XML parser.
"""

import logging
import re
from typing import Optional

from bankimport.domain.entities import ParsedTransaction, TransactionType
from bankimport.parsers.base import ParseOptions, decode_text
from bankimport.utils.amount_parser import parse_amount
from bankimport.utils.date_parser import parse_statement_date

logger = logging.getLogger(__name__)

# From <STMTTRN> to </STMTTRN>, the next <STMTTRN>, </BANKTRANLIST> or end of input
_STMTTRN_BLOCK = re.compile(
    r"<STMTTRN>(.*?)(?=</STMTTRN>|<STMTTRN>|</BANKTRANLIST>|\Z)",
    re.DOTALL | re.IGNORECASE,
)


def split_transactions(content: str) -> list[str]:
    """Split content into individual STMTTRN blocks."""
    return _STMTTRN_BLOCK.findall(content)


def extract_tag(block: str, tag: str) -> Optional[str]:
    """Return the trimmed value of ``<TAG>value`` inside a block."""
    match = re.search(rf"<{tag}>([^<\r\n]+)", block, re.IGNORECASE)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def parse_transaction_block(block: str) -> Optional[ParsedTransaction]:
    """Build a transaction from one STMTTRN block, or None if it is unusable."""
    dtposted = extract_tag(block, "DTPOSTED")
    trnamt = extract_tag(block, "TRNAMT")
    if not dtposted or not trnamt:
        return None

    try:
        txn_date = parse_statement_date(dtposted)
        amount = parse_amount(trnamt)
    except ValueError as e:
        logger.debug("Skipping STMTTRN block: %s", e)
        return None

    name = extract_tag(block, "NAME")
    memo = extract_tag(block, "MEMO")
    return ParsedTransaction(
        date=txn_date,
        description=name or memo or "Unknown",
        amount=abs(amount),
        type=TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME,
        notes=memo,
        provider_transaction_id=extract_tag(block, "FITID"),
    )


def parse(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse OFX/QFX bytes into transactions."""
    transactions = []
    for block in split_transactions(decode_text(content)):
        txn = parse_transaction_block(block)
        if txn is not None:
            transactions.append(txn)
    return transactions
