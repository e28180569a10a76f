"""
Category keyword tables.

Two tables drive categorization:
    - SIMPLE_CATEGORY_RULES: ordered regex table used by the pattern
      extractor when no category list is available. First match wins.
    - SCORED_CATEGORY_RULES: slug -> keywords, used by the scored
      classifier against an owner's known categories.
"""

import re
from typing import List, Pattern, Tuple

SIMPLE_CATEGORY_RULES: List[Tuple[str, Pattern]] = [
    ("finance", re.compile(r'[$€]|\b(?:invoice|receipt|subtotal)\b')),
    ("travel", re.compile(r'\b(?:flight|hotel|boarding|itinerary)\b')),
    ("health", re.compile(r'\b(?:prescription|diagnosis|lab|clinic)\b')),
    ("fitness", re.compile(r'\b(?:k?cal|calories|workout|protein|exercise)\b')),
    ("work", re.compile(r'\b(?:salary|contract|timesheet|payroll)\b')),
]

SCORED_CATEGORY_RULES: List[Tuple[str, List[str]]] = [
    ("finance", ["invoice", "receipt", "bill", "expense", "tax", "total", "subtotal", "payment"]),
    ("travel", ["flight", "hotel", "boarding", "itinerary", "trip", "reservation"]),
    ("health", ["health", "lab", "medical", "prescription", "clinic", "doctor"]),
    ("fitness", ["fitness", "workout", "calorie", "weight", "protein", "exercise"]),
    ("work", ["contract", "timesheet", "salary", "proposal", "payroll", "meeting"]),
    ("school", ["class", "homework", "lecture", "exam", "whiteboard", "syllabus", "school"]),
]

FALLBACK_SLUG = "general"


def guess_category(text: str) -> str:
    """
    Simple first-match category guess over lowercased text.

    Example:
        >>> guess_category("Boarding pass for flight to Tokyo.")
        "travel"
    """
    lowered = (text or "").lower()
    for slug, pattern in SIMPLE_CATEGORY_RULES:
        if pattern.search(lowered):
            return slug
    return FALLBACK_SLUG
