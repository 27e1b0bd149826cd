"""Bank PDF statement templates.

A template describes one statement layout: the phrases that identify it, a
regex for a single transaction line and how its columns carry the amount.
Templates are immutable and live in a module-level tuple; detection is a
pure scoring function over that tuple.
"""

import re
from dataclasses import dataclass, asdict
from decimal import Decimal
from enum import Enum
from typing import Optional

from bankimport.domain.entities import ParsedTransaction, TransactionType
from bankimport.utils.amount_parser import parse_amount
from bankimport.utils.date_parser import DateLocale, parse_statement_date, parse_template_date


class AmountStyle(str, Enum):
    """How a template's row carries money."""

    SIGNED = "signed"  # one amount column, sign gives the direction
    DEBIT_CREDIT = "debitCredit"  # separate money-out / money-in columns


@dataclass(frozen=True)
class PdfTemplate:
    """Immutable description of one bank statement layout."""

    id: str
    display_name: str
    detect_keywords: tuple[str, ...]
    row_pattern: re.Pattern
    date_format: Optional[str]
    amount_style: AmountStyle
    description: Optional[str] = None
    currency_symbol: Optional[str] = None
    multi_line_descriptions: bool = False
    skip_line_markers: tuple[str, ...] = ()
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        """Public fields for template pickers (no regex)."""
        data = asdict(self)
        data.pop("row_pattern")
        data["detect_keywords"] = list(self.detect_keywords)
        data["skip_line_markers"] = list(self.skip_line_markers)
        data["amount_style"] = self.amount_style.value
        return data


BANK_PDF_TEMPLATES: tuple[PdfTemplate, ...] = (
    PdfTemplate(
        id="uk-generic",
        display_name="UK Generic Statement",
        description="Date, description, debit, credit columns",
        detect_keywords=("Sort Code", "Account Number", "Balance Brought Forward"),
        row_pattern=re.compile(
            r"^(?P<date>\d{2}/\d{2}/\d{4})\s+(?P<description>.+?)"
            r"\s+(?P<debit>-?[£\d,]+\.\d{2})?"
            r"\s+(?P<credit>-?[£\d,]+\.\d{2})?"
            r"\s*(?P<balance>-?[£\d,]+\.\d{2})?$"
        ),
        date_format="dd/MM/yyyy",
        amount_style=AmountStyle.DEBIT_CREDIT,
        currency_symbol="£",
        multi_line_descriptions=True,
        skip_line_markers=("Date", "Description", "Money Out", "Money In", "Balance"),
        notes="Matches most UK retail bank statements with debit/credit columns.",
    ),
    PdfTemplate(
        id="us-generic",
        display_name="US Generic Statement",
        description="Date, description, amount (signed) columns",
        detect_keywords=("Beginning Balance", "Ending Balance", "Deposits and Credits"),
        row_pattern=re.compile(
            r"^(?P<date>\d{2}/\d{2}/\d{4})\s+(?P<description>.+?)"
            r"\s+(?P<amount>[-+]?\$?[\d,]+\.\d{2})$"
        ),
        date_format="MM/dd/yyyy",
        amount_style=AmountStyle.SIGNED,
        currency_symbol="$",
        multi_line_descriptions=True,
        skip_line_markers=("Date", "Description", "Amount", "Deposits and Credits"),
        notes="Matches many US statements where credits are positive and debits negative.",
    ),
)

# Used when no template's signature is found. The date is read with the
# caller's locale since the layout does not say which one it uses.
GENERIC_TEMPLATE = PdfTemplate(
    id="generic",
    display_name="Generic Statement",
    description="Date, description, signed amount, optional running balance",
    detect_keywords=(),
    row_pattern=re.compile(
        r"^(?P<date>\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}|\d{4}-\d{2}-\d{2})\s+(?P<description>.+?)"
        r"\s+(?P<amount>[-+]?[£$€]?[\d,]+\.\d{2})"
        r"(?:\s+(?P<balance>-?[£$€]?[\d,]+\.\d{2}))?$"
    ),
    date_format=None,
    amount_style=AmountStyle.SIGNED,
    skip_line_markers=("Date", "Description", "Amount", "Balance"),
)

_PAGE_FOOTER = re.compile(r"^page\s+\d+(\s+of\s+\d+)?$", re.IGNORECASE)
_ANY_AMOUNT = re.compile(r"\d[\d,]*\.\d{2}")


def get_template(template_id: str) -> Optional[PdfTemplate]:
    """Return the registered template with this id, if any."""
    for template in BANK_PDF_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def score_template(template: PdfTemplate, text: str) -> int:
    """Number of the template's signature phrases present in the text."""
    haystack = text.lower()
    return sum(1 for keyword in template.detect_keywords if keyword.lower() in haystack)


def detect_pdf_template(
    text: str, template_id: Optional[str] = None, templates=BANK_PDF_TEMPLATES
) -> Optional[PdfTemplate]:
    """Pick the template for a statement.

    Args:
        text: Full statement text
        template_id: Explicit template choice; bypasses keyword detection
        templates: Candidate templates

    Returns:
        The fully matching template with the highest score, or None
    """
    if template_id:
        return next((t for t in templates if t.id == template_id), None)

    best: Optional[PdfTemplate] = None
    best_score = 0
    for template in templates:
        score = score_template(template, text)
        if score == len(template.detect_keywords) and score > best_score:
            best, best_score = template, score
    return best


def _money(value: Optional[str]) -> Decimal:
    if not value:
        return Decimal("0")
    return parse_amount(value)


def parse_pdf_line(
    template: PdfTemplate, line: str, date_locale: DateLocale = DateLocale.UK
) -> Optional[ParsedTransaction]:
    """Apply a template's row grammar to one line of statement text.

    Returns None for lines that are not transactions (headers, footers,
    lines without a populated amount).
    """
    match = template.row_pattern.match(line.strip())
    if match is None:
        return None
    groups = match.groupdict()

    try:
        if template.date_format:
            txn_date = parse_template_date(groups["date"], template.date_format)
        else:
            txn_date = parse_statement_date(groups["date"], date_locale)

        if template.amount_style is AmountStyle.DEBIT_CREDIT:
            debit = _money(groups.get("debit"))
            credit = _money(groups.get("credit"))
            if debit != 0:
                amount, txn_type = abs(debit), TransactionType.EXPENSE
            elif credit != 0:
                amount, txn_type = abs(credit), TransactionType.INCOME
            else:
                return None
        else:
            signed = _money(groups.get("amount"))
            if signed == 0:
                return None
            amount = abs(signed)
            txn_type = TransactionType.EXPENSE if signed < 0 else TransactionType.INCOME
    except ValueError:
        return None

    return ParsedTransaction(
        date=txn_date,
        description=groups["description"].strip(),
        amount=amount,
        type=txn_type,
    )


def is_continuation_line(template: PdfTemplate, line: str) -> bool:
    """True if a non-matching line can extend the previous description."""
    stripped = line.strip()
    if not stripped or _PAGE_FOOTER.match(stripped) or _ANY_AMOUNT.search(stripped):
        return False
    return not any(marker in stripped for marker in template.skip_line_markers)
