"""
Category Classifier Module.

Scores an owner's known categories against a signal text (usually the
filename plus whatever text is available) and returns the best slug.
The scorer is a pure function: it never raises and never touches
storage.
"""

import re
from typing import Dict, Iterable, List, Sequence, Union

from docrecord.utils.logger import get_logger
from .category import Category, CategoryChoice
from .rules import FALLBACK_SLUG, SCORED_CATEGORY_RULES

logger = get_logger(__name__)

KEYWORD_WEIGHT = 2
MIN_TOKEN_LENGTH = 3

KnownCategory = Union[CategoryChoice, Category, Dict[str, str]]


def _as_choice(category: KnownCategory) -> CategoryChoice:
    if isinstance(category, CategoryChoice):
        return category
    if isinstance(category, dict):
        return CategoryChoice(category.get('name', ''), category.get('slug', ''))
    return CategoryChoice(category.name, category.slug)


def _category_tokens(choice: CategoryChoice) -> List[str]:
    name_tokens = [t for t in re.split(r'[^a-z0-9]+', choice.name.lower()) if t]
    slug_tokens = [t for t in choice.slug.split('-') if t]
    return name_tokens + slug_tokens


def score_categories(signal_text: str, known_categories: Iterable[KnownCategory]) -> Dict[str, int]:
    """
    Score every known category against the signal text.

    Keyword rules add two points per distinct keyword present, but only
    for slugs the owner actually has. Each category then gets one point
    per name or slug token longer than two characters found in the text.

    Args:
        signal_text: Text to classify.
        known_categories: Categories the owner has.

    Returns:
        Mapping of slug to score for slugs that scored.
    """
    signal = (signal_text or "").lower()
    choices = [_as_choice(c) for c in known_categories]
    known_slugs = {c.slug for c in choices}
    scores: Dict[str, int] = {}

    for slug, keywords in SCORED_CATEGORY_RULES:
        if slug not in known_slugs:
            continue
        matches = sum(1 for keyword in keywords if keyword in signal)
        if matches:
            scores[slug] = scores.get(slug, 0) + matches * KEYWORD_WEIGHT

    for choice in choices:
        overlap = sum(
            1 for token in _category_tokens(choice)
            if len(token) >= MIN_TOKEN_LENGTH and token in signal
        )
        if overlap:
            scores[choice.slug] = scores.get(choice.slug, 0) + overlap

    return scores


def classify(signal_text: str, known_categories: Sequence[KnownCategory]) -> str:
    """
    Pick the best-fit category slug for a signal text.

    Args:
        signal_text: Text to classify, e.g. filename plus raw text.
        known_categories: The owner's categories, as CategoryChoice,
            Category or {name, slug} dictionaries.

    Returns:
        The highest-scoring known slug; the first category to reach the
        top score wins ties. With no positive score, the known "general"
        category, else the first known category, else "general".

    Example:
        >>> classify("Flight itinerary.pdf", [CategoryChoice("Travel", "travel"),
        ...                                   CategoryChoice("General", "general")])
        "travel"
    """
    choices = [_as_choice(c) for c in known_categories]
    scores = score_categories(signal_text, choices)

    winner = None
    winner_score = 0
    for choice in choices:
        score = scores.get(choice.slug, 0)
        if score > winner_score:
            winner, winner_score = choice.slug, score

    if winner is None:
        slugs = [c.slug for c in choices]
        if FALLBACK_SLUG in slugs:
            winner = FALLBACK_SLUG
        elif slugs:
            winner = slugs[0]
        else:
            winner = FALLBACK_SLUG

    logger.debug(f"Classified signal as '{winner}' (score={winner_score})")
    return winner
