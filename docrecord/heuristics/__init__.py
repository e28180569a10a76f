"""
Heuristics Module.

Deterministic pattern-based extraction:
    - Currency, date, identifier and measurement patterns
    - Receipt header and line-item parsing
    - Weekly workout schedule parsing
    - Amount and date normalizers
"""

from .extractor import extract, extract_entities, extract_fields, build_summary
from .line_items import parse_line_items
from .normalizers import AmountNormalizer, DateNormalizer
from .patterns import looks_like_receipt
from .workout import parse_workout_schedule, should_parse_workout_schedule

__all__ = [
    'extract',
    'extract_entities',
    'extract_fields',
    'build_summary',
    'parse_line_items',
    'AmountNormalizer',
    'DateNormalizer',
    'looks_like_receipt',
    'parse_workout_schedule',
    'should_parse_workout_schedule',
]
