"""
Independent pattern families run over the full document text.

Each family returns its own list of ExtractedField; the extractor
concatenates them. Matches are non-exclusive: the same span may feed
more than one family.
"""

import re
from typing import List, Optional

from config import get_config
from docrecord.model_inference.extraction_result import ExtractedField, SOURCE_HEURISTIC
from .normalizers import AmountNormalizer

# ── Currency ────────────────────────────────────────────────────
# Either thousands-grouped (1,234 / 1,234.56) or plain (42 / 42.19)
_AMOUNT_BODY = r'(\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?)'
_USD_RE = re.compile(r'(?:USD\s*)?\$\s?' + _AMOUNT_BODY, re.IGNORECASE)
_EUR_RE = re.compile(r'€\s?' + _AMOUNT_BODY)

# ── Dates ───────────────────────────────────────────────────────
_MONTHS = (
    r'(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?'
    r'|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)'
)
_DATE_RE = re.compile(
    r'\b\d{4}-\d{2}-\d{2}\b'
    r'|\b\d{1,2}/\d{1,2}/\d{4}\b'
    r'|\b' + _MONTHS + r'\.?\s\d{1,2},\s\d{4}\b'
)

# ── Identifiers ─────────────────────────────────────────────────
# "Invoice #X" needs a digit in X so "Invoice Date" is not an id
_INVOICE_RE = re.compile(
    r'invoice\s*(?:#|no\.?|number)?\s*:?\s*([A-Za-z0-9-]*\d[A-Za-z0-9-]*)'
    r'|#\s*([A-Za-z0-9-]{4,})',
    re.IGNORECASE,
)
_RECEIPT_NO_RE = re.compile(
    r'\b(?:receipt|order|po)\s*(?:#|no\.?|number)\s*:?\s*([A-Z0-9/-]{3,})',
    re.IGNORECASE,
)
_EMAIL_RE = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
_PHONE_RE = re.compile(r'\+?\(?\d[\d \t().-]{7,}\d')
_PHONE_MIN_DIGITS = 7
_DATE_SHAPE_RE = re.compile(r'\d{4}-\d{2}-\d{2}|\d{1,2}[/-]\d{1,2}[/-]\d{2,4}')
_DECIMAL_AMOUNT_RE = re.compile(r'\d\.\d{2}(?!\d)')

# ── Measurements ────────────────────────────────────────────────
_WEIGHT_RE = re.compile(r'\b(\d+(?:\.\d+)?)\s?(kg|lbs)\b', re.IGNORECASE)
_CALORIES_RE = re.compile(r'\b(\d+(?:\.\d+)?)\s?(k?cals?)\b', re.IGNORECASE)

# ── Receipt header / footer ─────────────────────────────────────
_TAX_RE = re.compile(r'\btax\b[:\s]*([$€]?\s?\d+(?:[.,]\d{2})?)', re.IGNORECASE)
_STORE_STOP_RE = re.compile(
    r'receipt|invoice|total|tax|thank you|credit card|date|time|e-?mail|phone|\btel\b'
    r'|cashier|order|www\.|https?:|@',
    re.IGNORECASE,
)
_STORE_SCAN_LINES = 5

_RECEIPT_SIGNAL_RE = re.compile(r'\b(?:receipt|invoice|subtotal|tax|total|cashier|payment)\b')

_amounts = AmountNormalizer()


def make_field(key: str, value, unit: Optional[str] = None, confidence: Optional[float] = None) -> ExtractedField:
    """Build a heuristic field with the configured default confidence."""
    if confidence is None:
        confidence = get_config("heuristics.default_confidence", 0.6)
    return ExtractedField(key=key, value=value, unit=unit, confidence=confidence, source=SOURCE_HEURISTIC)


def looks_like_receipt(text: str) -> bool:
    """True when the text carries receipt/invoice/payment vocabulary."""
    return bool(_RECEIPT_SIGNAL_RE.search(text.lower()))


def extract_currency(text: str) -> List[ExtractedField]:
    fields = []
    for pattern, unit in ((_USD_RE, "USD"), (_EUR_RE, "EUR")):
        for match in pattern.finditer(text):
            value = _amounts.to_float(match.group(1))
            if value is not None:
                fields.append(make_field("total_amount", value, unit))
    return fields


def extract_dates(text: str) -> List[ExtractedField]:
    return [make_field("date", match.group(0)) for match in _DATE_RE.finditer(text)]


def extract_identifiers(text: str) -> List[ExtractedField]:
    """Invoice and receipt numbers, emails and phone numbers."""
    fields = []
    for match in _INVOICE_RE.finditer(text):
        fields.append(make_field("invoice_number", match.group(1) or match.group(2)))

    for match in _RECEIPT_NO_RE.finditer(text):
        fields.append(make_field("receipt_number", match.group(1)))

    for match in _EMAIL_RE.finditer(text):
        fields.append(make_field("email", match.group(0)))

    for match in _PHONE_RE.finditer(text):
        candidate = match.group(0).strip()
        if sum(ch.isdigit() for ch in candidate) < _PHONE_MIN_DIGITS:
            continue
        # A date followed by a time ("2026-02-14 10:30") still starts date-shaped
        if _DATE_SHAPE_RE.match(candidate) or _DECIMAL_AMOUNT_RE.search(candidate):
            continue
        fields.append(make_field("phone", candidate))
    return fields


def extract_measurements(text: str) -> List[ExtractedField]:
    fields = []
    for match in _WEIGHT_RE.finditer(text):
        fields.append(make_field("weight", float(match.group(1)), match.group(2).lower()))
    for match in _CALORIES_RE.finditer(text):
        fields.append(make_field("calories", float(match.group(1)), "kcal"))
    return fields


def extract_receipt_header(text: str) -> List[ExtractedField]:
    """
    Store name and tax amount for receipt-like text.

    The store name is the first of the leading lines that has a word of
    three or more letters and is neither a label ("Date: ...") nor a
    receipt keyword line.
    """
    if not looks_like_receipt(text):
        return []

    fields = []
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:_STORE_SCAN_LINES]:
        if not re.search(r'[A-Za-z]{3,}', line) or ':' in line:
            continue
        if _STORE_STOP_RE.search(line):
            continue
        fields.append(make_field(
            "store_name", line,
            confidence=get_config("heuristics.store_name_confidence", 0.7)
        ))
        break

    for match in _TAX_RE.finditer(text):
        value = _amounts.to_float(match.group(1))
        if value is not None and value > 0:
            fields.append(make_field("tax_amount", value))
    return fields
