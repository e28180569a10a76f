"""
Response Normalizer Module.

Turns untrusted model output into a validated ExtractionResult. Nothing
the payload declares is trusted: keys, values, units, confidences and
entities are each coerced and capped before entering the data model,
and the field source is always forced to "model".

Author: ML Engineering Team
"""

import json
from typing import Any, Dict, List, Optional

from config import get_config
from docrecord.utils.exceptions import ProviderError
from docrecord.utils.logger import get_logger
from .extraction_result import (
    DEFAULT_CATEGORY_SLUG,
    SOURCE_MODEL,
    ExtractedField,
    ExtractionResult,
    clamp_confidence,
)

logger = get_logger(__name__)

UNKNOWN_FIELD_KEY = "unknown_field"


def extract_json_block(raw_text: Any, provider: Optional[str] = None) -> str:
    """
    Return the substring from the first "{" to the last "}".

    Raises:
        ProviderError: If the reply is not text or holds no
            brace-delimited block.
    """
    text = "" if raw_text is None else raw_text
    if not isinstance(text, str):
        raise ProviderError(
            "Model response is not text",
            provider,
            {"response_type": type(text).__name__}
        )
    first = text.find('{')
    last = text.rfind('}')
    if first == -1 or last == -1 or last <= first:
        raise ProviderError(
            "Model response did not contain a JSON object",
            provider,
            {"response_preview": text[:200]}
        )
    return text[first:last + 1]


def coerce_value(value: Any) -> Any:
    """Keep numbers, stringify everything else, cap string length."""
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        value = json.dumps(value)
    return str(value)[:get_config("limits.value_chars", 2000)]


def coerce_field(raw: Any) -> Optional[ExtractedField]:
    """
    Build a model-sourced field from one untrusted payload entry.

    Args:
        raw: Entry from the payload's "fields" array.

    Returns:
        ExtractedField, or None when the entry is not an object.
    """
    if not isinstance(raw, dict):
        return None

    key = raw.get('key')
    key = str(key).strip() if key is not None else ""
    unit = raw.get('unit')

    return ExtractedField(
        key=key or UNKNOWN_FIELD_KEY,
        value=coerce_value(raw.get('value')),
        unit=None if unit is None or unit == "" else str(unit),
        confidence=clamp_confidence(raw.get('confidence'), default=0.5),
        source=SOURCE_MODEL,
    )


def coerce_fields(raw_fields: Any) -> List[ExtractedField]:
    if not isinstance(raw_fields, list):
        return []
    fields = [f for f in (coerce_field(entry) for entry in raw_fields) if f is not None]
    return fields[:get_config("limits.normalized_fields", 150)]


def coerce_entities(raw_entities: Any) -> List[str]:
    """Drop non-strings and blanks, dedupe, cap count and length."""
    if not isinstance(raw_entities, list):
        return []
    max_chars = get_config("limits.entity_chars", 120)
    entities = []
    for entity in raw_entities:
        if not isinstance(entity, str):
            continue
        entity = entity.strip()[:max_chars]
        if entity and entity not in entities:
            entities.append(entity)
    return entities[:get_config("limits.normalized_entities", 50)]


def coerce_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def normalize_payload(payload: Dict[str, Any]) -> ExtractionResult:
    """
    Build an ExtractionResult from an already-parsed payload object.

    Args:
        payload: Dictionary with summary, fields, suggested_category and
            entities, any of which may be missing or mistyped.

    Returns:
        Normalized ExtractionResult.
    """
    category = coerce_text(payload.get('suggested_category'), DEFAULT_CATEGORY_SLUG).strip()
    return ExtractionResult(
        summary=coerce_text(payload.get('summary')),
        fields=coerce_fields(payload.get('fields')),
        entities=coerce_entities(payload.get('entities')),
        suggested_category_slug=category or DEFAULT_CATEGORY_SLUG,
    )


def parse_extraction_response(raw_text: str, provider: Optional[str] = None) -> ExtractionResult:
    """
    Parse raw model text into an ExtractionResult.

    Args:
        raw_text: Full text of the model reply.
        provider: Provider identifier, attached to errors.

    Returns:
        Normalized ExtractionResult.

    Raises:
        ProviderError: No JSON object, invalid JSON, or a JSON value
            that is not an object. No partial result is returned.
    """
    block = extract_json_block(raw_text, provider)
    try:
        payload = json.loads(block)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in model response: {e}")
        raise ProviderError("Model response contained invalid JSON", provider, {"error": str(e)})

    if not isinstance(payload, dict):
        raise ProviderError("Model response JSON is not an object", provider)

    return normalize_payload(payload)
