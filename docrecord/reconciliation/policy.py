"""
Augmentation trigger policy.

Decides whether a primary result is thin enough to be worth a second,
pattern-based pass. The orchestrator calls this; merge() itself never
does.
"""

import re

from config import get_config
from docrecord.model_inference.extraction_result import ExtractionResult

_RECEIPT_SIGNAL_RE = re.compile(
    r'receipt|invoice|subtotal|\btax\b|total|payment instruction|bill[ -]to|ship[ -]to'
)


def is_receipt_like(result: ExtractionResult, file_name: str = "") -> bool:
    """True when the filename, category or raw text carries receipt vocabulary."""
    signal = " ".join([
        file_name or "",
        result.suggested_category_slug or "",
        result.suggested_category_name or "",
        result.raw_text or "",
    ]).lower()
    return bool(_RECEIPT_SIGNAL_RE.search(signal))


def should_augment(result: ExtractionResult, file_name: str = "") -> bool:
    """
    Decide whether to run augmentation on a primary result.

    Fires for receipt-like results short on fields or line items, and
    for any result with very few fields.

    Args:
        result: Primary extraction result.
        file_name: Original document filename, used as extra signal.

    Returns:
        True when augmentation should run.
    """
    field_count = len(result.fields)
    if field_count < get_config("augmentation.sparse_fields", 3):
        return True

    if not is_receipt_like(result, file_name):
        return False
    return (
        field_count < get_config("augmentation.min_fields", 10)
        or result.line_item_count < get_config("augmentation.min_line_items", 4)
    )
