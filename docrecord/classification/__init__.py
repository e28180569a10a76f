"""
Classification Module.

Category model, default categories, the scored category classifier and
the simple keyword table used by the pattern extractor.
"""

from .category import Category, CategoryChoice, default_category_specs, name_for_slug, rank_fields
from .classifier import classify, score_categories
from .rules import FALLBACK_SLUG, guess_category

__all__ = [
    'Category',
    'CategoryChoice',
    'default_category_specs',
    'name_for_slug',
    'rank_fields',
    'classify',
    'score_categories',
    'FALLBACK_SLUG',
    'guess_category',
]
