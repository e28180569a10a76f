"""
Pattern Extractor Module.

Deterministic, stateless extraction of typed fields from raw document
text. Every pattern family runs over the full text and the matches are
concatenated in a fixed family order:

    currency -> dates -> identifiers -> measurements -> receipt header
    -> line items -> workout schedule

The extractor never raises: empty or unusable text yields an empty
result in the "general" category.

Author: ML Engineering Team
"""

import re
from datetime import date
from typing import List, Optional

from config import get_config
from docrecord.classification.rules import guess_category
from docrecord.model_inference.extraction_result import ExtractedField, ExtractionResult
from docrecord.utils.logger import get_logger
from .line_items import parse_line_items
from .patterns import (
    extract_currency,
    extract_dates,
    extract_identifiers,
    extract_measurements,
    extract_receipt_header,
)
from .workout import parse_workout_schedule, should_parse_workout_schedule

logger = get_logger(__name__)

_ENTITY_RE = re.compile(r'\b[A-Z][A-Za-z0-9&.-]{2,}\b')
SUMMARY_KEY_COUNT = 3


def extract_fields(text: str) -> List[ExtractedField]:
    """
    Run every pattern family over the text.

    Args:
        text: Raw document text.

    Returns:
        Concatenated fields; the same key may appear several times.
    """
    fields = []
    fields.extend(extract_currency(text))
    fields.extend(extract_dates(text))
    fields.extend(extract_identifiers(text))
    fields.extend(extract_measurements(text))
    fields.extend(extract_receipt_header(text))
    fields.extend(parse_line_items(text))
    if should_parse_workout_schedule(text):
        fields.extend(parse_workout_schedule(text))
    return fields


def extract_entities(text: str) -> List[str]:
    """Title-case tokens of three or more characters, minus the stoplist."""
    stoplist = set(get_config("heuristics.entity_stoplist", ["Invoice", "Total", "Date", "Receipt"]))
    candidates = [token for token in _ENTITY_RE.findall(text) if token not in stoplist]
    return list(dict.fromkeys(candidates))[:get_config("heuristics.max_entities", 20)]


def build_summary(fields: List[ExtractedField], uploaded_on: Optional[date] = None) -> str:
    """
    Describe an extraction pass in one sentence.

    Example:
        >>> build_summary([], date(2026, 2, 14))
        "Document uploaded on 2026-02-14. Contains 0 extracted fields including no key fields."
    """
    uploaded_on = uploaded_on or date.today()
    top_keys = list(dict.fromkeys(f.key for f in fields))[:SUMMARY_KEY_COUNT]
    return (
        f"Document uploaded on {uploaded_on.isoformat()}. "
        f"Contains {len(fields)} extracted fields including {', '.join(top_keys) or 'no key fields'}."
    )


def extract(raw_text: Optional[str], uploaded_on: Optional[date] = None) -> ExtractionResult:
    """
    Extract a structured record from raw document text.

    Args:
        raw_text: Text of the document, typically from an OCR pass.
        uploaded_on: Date stamped into the summary. Defaults to today.

    Returns:
        ExtractionResult with heuristic fields, entities and a simple
        category guess.

    Example:
        >>> result = extract("Invoice #ABCD1234\\nTotal: $42.19")
        >>> result.suggested_category_slug
        "finance"
        >>> result.get_value("total_amount")
        42.19
    """
    text = (raw_text or "").strip()
    fields = extract_fields(text) if text else []

    result = ExtractionResult(
        summary=build_summary(fields, uploaded_on),
        fields=fields,
        entities=extract_entities(text),
        suggested_category_slug=guess_category(text),
        raw_text=text,
    )
    logger.debug(f"Pattern extraction produced {result!r}")
    return result
