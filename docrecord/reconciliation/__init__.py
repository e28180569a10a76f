"""
Reconciliation Module.

Combines extraction results and finishes the record:
    - merge() with signature deduplication and category preference
    - Augmentation trigger policy
    - Asset name derivation
"""

from .merger import dedupe_fields, merge
from .naming import derive_asset_name
from .policy import is_receipt_like, should_augment

__all__ = ['dedupe_fields', 'merge', 'derive_asset_name', 'is_receipt_like', 'should_augment']
