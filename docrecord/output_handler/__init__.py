"""
Output Handler Module.

Hands extraction results to storage:
    - SQLite category store with create-or-fetch semantics
    - Output record and search index request builders
"""

from .category_store import CategoryStore
from .records import build_index_request, build_output_record

__all__ = ['CategoryStore', 'build_index_request', 'build_output_record']
