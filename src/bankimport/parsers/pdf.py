"""PDF statement parser.

Text comes out of pdfplumber page by page; every line is then offered to the
detected template's row grammar. Headers, footers and summary lines simply do
not match and are skipped, so a statement with no recognisable rows yields an
empty list rather than an error.
"""

import io
import logging
from dataclasses import replace
from typing import Optional

import pdfplumber

from bankimport.domain.entities import ParsedTransaction
from bankimport.domain.errors import ParseError
from bankimport.parsers.base import ParseOptions
from bankimport.parsers.pdf_templates import (
    GENERIC_TEMPLATE,
    detect_pdf_template,
    is_continuation_line,
    parse_pdf_line,
)
from bankimport.utils.date_parser import DateLocale

logger = logging.getLogger(__name__)


def extract_pdf_text(content: bytes) -> str:
    """Extract the text of every page, pages separated by newlines.

    Raises:
        ParseError: If the bytes are not a readable PDF
    """
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            logger.debug("pdfplumber: processing %d pages", len(pdf.pages))
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        raise ParseError(f"Could not read PDF: {e}") from e
    return "\n".join(pages)


def parse_pdf_text(
    text: str,
    template_id: Optional[str] = None,
    date_locale: DateLocale = DateLocale.UK,
) -> list[ParsedTransaction]:
    """Parse extracted statement text with the matching template."""
    template = detect_pdf_template(text, template_id)
    if template is None:
        if template_id:
            logger.warning("Unknown PDF template '%s', using generic layout", template_id)
        template = GENERIC_TEMPLATE
    logger.info("Parsing PDF statement with template '%s'", template.id)

    transactions: list[ParsedTransaction] = []
    extendable = False
    for line in text.splitlines():
        parsed = parse_pdf_line(template, line, date_locale)
        if parsed is not None:
            transactions.append(parsed)
            extendable = template.multi_line_descriptions
            continue
        if extendable and is_continuation_line(template, line):
            last = transactions[-1]
            transactions[-1] = replace(last, description=f"{last.description} {line.strip()}")
        else:
            extendable = False
    return transactions


def parse(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse PDF bytes into transactions."""
    text = extract_pdf_text(content)
    return parse_pdf_text(text, options.pdf_template_id, options.date_locale)
