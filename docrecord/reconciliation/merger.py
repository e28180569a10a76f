"""
Reconciliation Engine.

Merges a primary ExtractionResult (usually from a model provider) with
an augmentation result (usually from the pattern extractor) into a new
result. Neither input is modified.

Rules:
    - Fields: primary then augmentation, deduplicated by
      (lowercased key, lowercased str(value)); the first occurrence wins
      so primary fields always survive.
    - Entities: ordered union.
    - Category: an augmentation "finance" beats any non-finance primary;
      a "general" primary takes the augmentation's category; otherwise
      the primary's category stands.
    - Summary, raw text and asset name come from the primary when set.

Author: ML Engineering Team
"""

from typing import Iterable, List

from config import get_config
from docrecord.model_inference.extraction_result import ExtractedField, ExtractionResult
from docrecord.utils.logger import get_logger

logger = get_logger(__name__)

FINANCE_SLUG = "finance"
GENERAL_SLUG = "general"


def dedupe_fields(fields: Iterable[ExtractedField]) -> List[ExtractedField]:
    """Drop fields whose signature was already seen, keeping order."""
    seen = set()
    unique = []
    for item in fields:
        if item.signature in seen:
            continue
        seen.add(item.signature)
        unique.append(item)
    return unique


def _prefer_augmentation_category(primary: ExtractionResult, augmentation: ExtractionResult) -> bool:
    if augmentation.suggested_category_slug == FINANCE_SLUG and primary.suggested_category_slug != FINANCE_SLUG:
        return True
    return primary.suggested_category_slug == GENERAL_SLUG and bool(augmentation.suggested_category_slug)


def merge(primary: ExtractionResult, augmentation: ExtractionResult) -> ExtractionResult:
    """
    Reconcile two extraction results into a new one.

    Args:
        primary: Result whose fields and text take precedence.
        augmentation: Supplementary result.

    Returns:
        New ExtractionResult.

    Example:
        >>> merged = merge(model_result, heuristic_result)
        >>> merged.suggested_category_slug
        "finance"
    """
    fields = dedupe_fields(list(primary.fields) + list(augmentation.fields))
    entities = list(dict.fromkeys(list(primary.entities) + list(augmentation.entities)))

    if _prefer_augmentation_category(primary, augmentation):
        category_source = augmentation
    else:
        category_source = primary

    merged = ExtractionResult(
        summary=primary.summary or augmentation.summary,
        fields=fields[:get_config("limits.max_fields", 200)],
        entities=entities[:get_config("limits.max_entities", 60)],
        suggested_category_slug=category_source.suggested_category_slug,
        suggested_category_name=category_source.suggested_category_name,
        raw_text=primary.raw_text or augmentation.raw_text,
        asset_name=primary.asset_name or augmentation.asset_name,
    )
    logger.debug(
        f"Merged {len(primary.fields)} + {len(augmentation.fields)} fields into {len(merged.fields)}; "
        f"category '{merged.suggested_category_slug}'"
    )
    return merged
