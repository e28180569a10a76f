"""
Output record builders.

Shapes a finished ExtractionResult into the two payloads handed to
external collaborators: the persisted record and the best-effort search
index request. Keys are camelCase to match the downstream contracts.
"""

from typing import Any, Dict, Optional, Sequence

from docrecord.classification.category import rank_fields
from docrecord.model_inference.extraction_result import ExtractionResult


def build_output_record(
    result: ExtractionResult,
    category_id: str,
    extraction_mode: str,
    field_priorities: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    """
    Build the record persisted for a processed document.

    Args:
        result: Final extraction result.
        category_id: Resolved category identifier.
        extraction_mode: "heuristic" or "model-assisted".
        field_priorities: The category's field priorities. Fields are
            stored in display order: prioritized keys first, the rest in
            extraction order.

    Returns:
        Dictionary with summary, fields, entities, categoryId and
        extractionMode; rawText and assetName only when present.
    """
    fields = rank_fields(result.fields, list(field_priorities or []))
    record = {
        'summary': result.summary,
        'fields': [f.to_dict() for f in fields],
        'entities': list(result.entities),
        'categoryId': category_id,
        'extractionMode': extraction_mode,
    }
    if result.raw_text:
        record['rawText'] = result.raw_text
    if result.asset_name:
        record['assetName'] = result.asset_name
    return record


def build_index_request(document_id: str, result: ExtractionResult, category_id: str) -> Dict[str, Any]:
    """Build the search index request for a processed document."""
    return {
        'id': document_id,
        'summary': result.summary,
        'categoryId': category_id,
        'rawText': result.raw_text or "",
        'entities': list(result.entities),
        'fieldKeys': [f.key for f in result.fields],
        'fieldValues': [f.display_value for f in result.fields],
    }
