"""
Extraction Result Data Classes.

Defines the standardized record every extraction strategy produces:
pattern-based heuristics, model providers, and the local extractor
protocol all return an ExtractionResult built from ExtractedFields.

Author: ML Engineering Team
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from config import get_config

FieldValue = Union[str, int, float]

SOURCE_HEURISTIC = "heuristic"
SOURCE_MODEL = "model"
VALID_SOURCES = (SOURCE_HEURISTIC, SOURCE_MODEL)

DEFAULT_CATEGORY_SLUG = "general"


def clamp_confidence(value: Any, default: float = 0.5) -> float:
    """
    Coerce an arbitrary value into a confidence in [0.0, 1.0].

    Non-numeric values (including booleans and NaN) fall back to default.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if math.isnan(value):
        return default
    return max(0.0, min(1.0, float(value)))


@dataclass
class ExtractedField:
    """
    A single typed key/value pulled out of a document.

    Keys follow a stable snake_case convention (total_amount,
    line_item_1_price, ...). Several fields may share a key within one
    extractor pass; duplicates are only collapsed during merge.

    Attributes:
        key: Short identifier, at most 100 characters
        value: String or number
        unit: Optional unit (USD, kg, kcal), at most 50 characters
        confidence: Score in [0.0, 1.0], clamped on construction
        source: "heuristic" or "model"
    """
    key: str
    value: FieldValue
    unit: Optional[str] = None
    confidence: float = 0.5
    source: str = SOURCE_HEURISTIC

    def __post_init__(self):
        self.key = self.key[:get_config("limits.key_chars", 100)]
        if self.unit is not None:
            self.unit = self.unit[:get_config("limits.unit_chars", 50)]
        self.confidence = clamp_confidence(self.confidence)
        if self.source not in VALID_SOURCES:
            raise ValueError(f"Unknown field source: {self.source}")

    @property
    def signature(self) -> Tuple[str, str]:
        """Merge identity: lowercased key and lowercased stringified value."""
        return self.key.lower(), str(self.value).lower()

    @property
    def display_value(self) -> str:
        return str(self.value)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'key': self.key,
            'value': self.value,
            'confidence': self.confidence,
            'source': self.source,
        }
        if self.unit is not None:
            data['unit'] = self.unit
        return data


@dataclass
class ExtractionResult:
    """
    Structured record produced by one extraction pass.

    Results are created fresh per job invocation and never mutated in
    place; reconciliation builds a new result. Lengths are capped on
    construction using the limits section of settings.yaml.

    Attributes:
        summary: Free-text human summary
        fields: Ordered list of ExtractedField
        entities: Deduplicated named entities
        suggested_category_slug: Best-fit category slug
        suggested_category_name: Display name of that category, if known
        raw_text: Source text the result was derived from, if any
        asset_name: Derived presentable title, if any

    Example:
        >>> result = ExtractionResult(
        ...     summary="Grocery receipt.",
        ...     fields=[ExtractedField("total_amount", 42.19, "USD", 0.6)],
        ...     suggested_category_slug="finance",
        ... )
        >>> result.get_value("total_amount")
        42.19
    """
    summary: str = ""
    fields: List[ExtractedField] = field(default_factory=list)
    entities: List[str] = field(default_factory=list)
    suggested_category_slug: str = DEFAULT_CATEGORY_SLUG
    suggested_category_name: Optional[str] = None
    raw_text: Optional[str] = None
    asset_name: Optional[str] = None

    def __post_init__(self):
        self.summary = self.summary[:get_config("limits.summary_chars", 5000)]
        self.fields = list(self.fields)[:get_config("limits.max_fields", 200)]
        self.entities = list(dict.fromkeys(self.entities))[:get_config("limits.max_entities", 60)]
        if self.raw_text is not None:
            self.raw_text = self.raw_text[:get_config("limits.raw_text_chars", 20000)]

    @property
    def line_item_count(self) -> int:
        """Number of fields belonging to receipt line items."""
        return sum(1 for f in self.fields if f.key.startswith("line_item_"))

    def get_value(self, key: str) -> Optional[FieldValue]:
        """
        Return the value of the first field with the given key.

        Args:
            key: Field key to look up.

        Returns:
            The value, or None when no field has that key.
        """
        for f in self.fields:
            if f.key == key:
                return f.value
        return None

    def with_category(self, slug: str, name: Optional[str] = None) -> 'ExtractionResult':
        """Return a copy carrying a different suggested category."""
        return replace(self, suggested_category_slug=slug, suggested_category_name=name)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation of the extraction result.
        """
        return {
            'summary': self.summary,
            'fields': [f.to_dict() for f in self.fields],
            'entities': list(self.entities),
            'suggested_category_slug': self.suggested_category_slug,
            'suggested_category_name': self.suggested_category_name,
            'raw_text': self.raw_text,
            'asset_name': self.asset_name,
        }

    def __repr__(self) -> str:
        return (
            f"ExtractionResult("
            f"category={self.suggested_category_slug}, "
            f"fields={len(self.fields)}, "
            f"entities={len(self.entities)})"
        )
