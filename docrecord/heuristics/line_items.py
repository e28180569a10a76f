"""
Receipt line-item parser.

Scans the text line by line. Two shapes are recognized:

    tabular          2  Latte  4.50  9.00     (qty name unit_price amount)
    trailing amount  Bagel w/ cream cheese  3.25   (name [N x] amount)

Matches become line_item_{n}_name / _qty / _unit_price / _price fields,
numbered from 1 in encounter order. Total/tax/tender lines are skipped
regardless of shape.
"""

import re
from typing import List, Optional

from config import get_config
from docrecord.model_inference.extraction_result import ExtractedField
from .normalizers import AmountNormalizer
from .patterns import make_field

_AMOUNT = r'[$€]?\s?\d+(?:[.,]\d{2})?'
_TABLE_LINE_RE = re.compile(rf'^(\d+)\s+(.+?)\s+({_AMOUNT})\s+({_AMOUNT})$')
# Trailing amounts must carry cents; bare integers are too noisy
_TRAILING_LINE_RE = re.compile(r'^(.+?)\s+(?:(\d+)\s*x\s*)?([$€]?\s?\d+[.,]\d{2})$', re.IGNORECASE)

_STOP_RE = re.compile(
    r'^(?:receipt total|total|sub\s?-?total|sales tax|tax|cash|change|tender(?:ed)?'
    r'|visa|mastercard|amex|american express|discover|debit|credit card'
    r'|balance|amount due|thank you)\b',
    re.IGNORECASE,
)
_NAME_WORD_RE = re.compile(r'[A-Za-z]{2,}')

_amounts = AmountNormalizer()


def _clean_name(name: str) -> str:
    return re.sub(r'\s{2,}', ' ', name.strip()).strip(' .:-')


def _is_item_name(name: str) -> bool:
    return bool(_NAME_WORD_RE.search(name)) and not _STOP_RE.match(name)


def _table_item(line: str) -> Optional[tuple]:
    match = _TABLE_LINE_RE.match(line)
    if not match:
        return None

    quantity = int(match.group(1))
    name = _clean_name(match.group(2))
    unit_price = _amounts.to_float(match.group(3))
    amount = _amounts.to_float(match.group(4))
    if quantity <= 0 or unit_price is None or unit_price < 0 or amount is None or amount <= 0:
        return None
    if not _is_item_name(name):
        return None
    return name, quantity, unit_price, amount


def _trailing_item(line: str) -> Optional[tuple]:
    match = _TRAILING_LINE_RE.match(line)
    if not match:
        return None

    name = _clean_name(match.group(1))
    quantity = int(match.group(2)) if match.group(2) else None
    amount = _amounts.to_float(match.group(3))
    if amount is None or amount <= 0 or not _is_item_name(name):
        return None
    return name, quantity, amount


def parse_line_items(text: str) -> List[ExtractedField]:
    """
    Parse receipt line items out of raw text.

    Args:
        text: Raw document text.

    Returns:
        Line-item fields in encounter order; empty when none are found.
    """
    table_conf = get_config("heuristics.table_item_confidence", 0.83)
    unit_conf = get_config("heuristics.unit_price_confidence", 0.8)
    line_conf = get_config("heuristics.line_item_confidence", 0.72)

    fields = []
    index = 1
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or _STOP_RE.match(line):
            continue

        table = _table_item(line)
        if table:
            name, quantity, unit_price, amount = table
            prefix = f"line_item_{index}"
            fields.append(make_field(f"{prefix}_name", name, confidence=table_conf))
            fields.append(make_field(f"{prefix}_qty", quantity, confidence=table_conf))
            fields.append(make_field(f"{prefix}_unit_price", unit_price, confidence=unit_conf))
            fields.append(make_field(f"{prefix}_price", amount, confidence=table_conf))
            index += 1
            continue

        trailing = _trailing_item(line)
        if trailing:
            name, quantity, amount = trailing
            prefix = f"line_item_{index}"
            fields.append(make_field(f"{prefix}_name", name, confidence=line_conf))
            fields.append(make_field(f"{prefix}_price", amount, confidence=line_conf))
            if quantity and quantity > 1:
                fields.append(make_field(f"{prefix}_qty", quantity, confidence=line_conf))
            index += 1

    return fields
