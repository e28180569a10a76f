"""
Category Data Classes.

A Category groups an owner's documents. Categories are created lazily
the first time a new slug is referenced for an owner and are looked up
by slug afterwards.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from config import get_config
from docrecord.model_inference.extraction_result import ExtractedField
from docrecord.utils.helpers import humanize_slug, slugify


class CategoryChoice(NamedTuple):
    """Name/slug pair the classifier scores against."""
    name: str
    slug: str


@dataclass
class Category:
    """
    An owner's document category.

    Attributes:
        id: Storage identifier
        owner_id: Owner the category belongs to
        name: Display name
        slug: Lowercase [a-z0-9-] identifier, at most 50 characters
        is_default: Whether the category was seeded as a default
        field_priorities: Field keys ranked first when displaying fields
    """
    id: str
    owner_id: str
    name: str
    slug: str
    is_default: bool = False
    field_priorities: List[str] = field(default_factory=list)

    @property
    def choice(self) -> CategoryChoice:
        return CategoryChoice(self.name, self.slug)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'name': self.name,
            'slug': self.slug,
            'is_default': self.is_default,
            'field_priorities': list(self.field_priorities),
        }


def name_for_slug(slug: str, fallback_name: Optional[str] = None) -> str:
    """Display name for a lazily created category."""
    return fallback_name or humanize_slug(slug)


def default_category_specs() -> List[Dict[str, Any]]:
    """
    Default categories seeded for a new owner.

    Returns:
        List of {name, slug, field_priorities} dictionaries from
        settings.yaml, slugs normalized.
    """
    specs = []
    for entry in get_config("categories.defaults", []) or []:
        specs.append({
            'name': entry['name'],
            'slug': slugify(entry.get('slug') or entry['name']),
            'field_priorities': list(entry.get('field_priorities', [])),
        })
    return specs


def rank_fields(fields: Iterable[ExtractedField], priorities: List[str]) -> List[ExtractedField]:
    """
    Order fields for display by a category's field priorities.

    A field matches a priority when its key starts with it
    (case-insensitive). Fields matching an earlier priority come first;
    ties and unmatched fields keep their original order.

    Example:
        >>> [f.key for f in rank_fields(fields, ["total", "date"])]
        ['total_amount', 'date', 'email']
    """
    lowered = [p.lower() for p in priorities if p]

    def rank(item: ExtractedField) -> int:
        key = item.key.lower()
        for index, prefix in enumerate(lowered):
            if key.startswith(prefix):
                return index
        return len(lowered)

    return sorted(fields, key=rank)
