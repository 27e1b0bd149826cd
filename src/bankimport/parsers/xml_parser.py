"""XML statement parser.

Any element whose direct children (or attributes) name a date and an amount
is treated as one transaction, so ``<Transactions><Transaction>...`` and
``<statement><entry date=".." amount=".."/>`` layouts both work.
"""

import xml.etree.ElementTree as ET

from bankimport.domain.entities import ParsedTransaction
from bankimport.domain.errors import ParseError
from bankimport.parsers.base import ParseOptions
from bankimport.parsers.normalizer import RawRecord, has_transaction_shape, normalize_records


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def element_record(element: ET.Element) -> RawRecord:
    """Flatten an element's attributes and leaf children into a record."""
    record: RawRecord = {_local_name(k): v for k, v in element.attrib.items()}
    for child in element:
        if len(child) == 0:
            record[_local_name(child.tag)] = (child.text or "").strip()
    return record


def find_transaction_elements(root: ET.Element) -> list[ET.Element]:
    """Return every element that looks like a transaction, in document order."""
    return [
        element
        for element in root.iter()
        if has_transaction_shape(element_record(element).keys())
    ]


def parse(content: bytes, options: ParseOptions) -> list[ParsedTransaction]:
    """Parse XML bytes into transactions."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ParseError(f"Invalid XML: {e}") from e

    records = [element_record(element) for element in find_transaction_elements(root)]
    return normalize_records(records, options.date_locale)
