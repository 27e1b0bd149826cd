"""Shared parser types and helpers."""

from dataclasses import dataclass
from typing import Optional

from bankimport.utils.date_parser import DateLocale


@dataclass(frozen=True)
class ParseOptions:
    """Per-import knobs passed to every parser."""

    date_locale: DateLocale = DateLocale.UK
    pdf_template_id: Optional[str] = None


def decode_text(content: bytes) -> str:
    """Decode statement bytes, tolerating a BOM and legacy Windows encodings."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("cp1252", errors="replace")
