"""JSON statement parser.

Accepts a bare array of transaction objects or any document that nests one,
e.g. ``{"account": {...}, "transactions": [...]}``.
"""

import json
from typing import Any, Optional

from bankimport.domain.entities import ParsedTransaction
from bankimport.domain.errors import ParseError
from bankimport.parsers.base import ParseOptions, decode_text
from bankimport.parsers.normalizer import RawRecord, normalize_records

PREFERRED_KEYS = ("transactions", "data", "items", "records", "entries")


def _is_record_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)


def find_record_list(document: Any) -> Optional[list[RawRecord]]:
    """Locate the array of transaction-shaped objects in a JSON document."""
    if _is_record_list(document):
        return document
    if isinstance(document, dict):
        lowered = {str(k).lower(): v for k, v in document.items()}
        for key in PREFERRED_KEYS:
            if _is_record_list(lowered.get(key)):
                return lowered[key]
        for value in document.values():
            found = find_record_list(value)
            if found is not None:
                return found
    elif isinstance(document, list):
        for value in document:
            found = find_record_list(value)
            if found is not None:
                return found
    return None


def parse(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse JSON bytes into transactions."""
    try:
        document = json.loads(decode_text(content))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    records = find_record_list(document)
    if records is None:
        return []
    return normalize_records(records, options.date_locale)
