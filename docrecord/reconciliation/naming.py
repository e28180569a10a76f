"""
Asset name derivation.

Builds a presentable, filesystem-safe title for a document from its
fields. Finance documents get "Store - Receipt - Number - Date"; every
other document gets "Category - original name". The original file
extension is always kept.
"""

import re
from typing import Iterable, Optional

from config import get_config
from docrecord.heuristics.normalizers import DateNormalizer
from docrecord.model_inference.extraction_result import ExtractedField
from docrecord.utils.helpers import get_file_extension, sanitize_asset_name, strip_extension

RECEIPT_LABEL = "Receipt"
DEFAULT_PREFIX = "Document"

_dates = DateNormalizer()


def _first_value(fields: Iterable[ExtractedField], key: str) -> Optional[str]:
    for item in fields:
        if item.key == key:
            value = str(item.value).strip()
            return value or None
    return None


def _title_date(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    normalized = _dates.normalize(raw)
    if normalized:
        return normalized
    return re.sub(r'[^\d/-]', '', raw) or None


def derive_asset_name(fields: Iterable[ExtractedField], category_name: Optional[str], fallback_filename: str) -> str:
    """
    Derive a document title.

    Args:
        fields: Extracted fields to pull store, number and date from.
        category_name: Display name of the resolved category.
        fallback_filename: Original filename; supplies the extension and
            the fallback title.

    Returns:
        Sanitized title ending in the original extension.

    Example:
        >>> derive_asset_name(fields, "Finance", "IMG_0042.jpg")
        "Corner Market - Receipt - 88123 - 2026-02-14.jpg"
        >>> derive_asset_name([], "Travel", "boarding.pdf")
        "Travel - boarding.pdf"
    """
    fields = list(fields)
    max_length = get_config("limits.asset_name_chars", 180)
    extension = get_file_extension(fallback_filename)
    category_name = (category_name or "").strip()

    if category_name.lower() == "finance":
        pieces = [
            _first_value(fields, "store_name"),
            RECEIPT_LABEL,
            _first_value(fields, "receipt_number") or _first_value(fields, "invoice_number"),
            _title_date(_first_value(fields, "date")),
        ]
        candidate = sanitize_asset_name(" - ".join(p for p in pieces if p), max_length)
        if candidate:
            return f"{candidate}{extension}"

    base = strip_extension(fallback_filename)
    candidate = sanitize_asset_name(f"{category_name or DEFAULT_PREFIX} - {base}", max_length)
    if not candidate:
        return fallback_filename
    return f"{candidate}{extension}"
