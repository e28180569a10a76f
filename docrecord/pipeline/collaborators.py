"""
External collaborator interfaces.

The orchestrator only talks to storage, credentials, OCR and search
through these protocols. Any object with matching methods works.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from docrecord.classification.category import Category
from docrecord.input_handler.loader import sniff_media_type


class CredentialResolver(Protocol):
    def resolve(self, credential_ref: str) -> str:
        """Return the API key a credential reference points to."""
        ...


class TextSource(Protocol):
    def get_text(self, document_id: str, pages: Sequence[bytes]) -> Optional[str]:
        """Return raw text for the pages (an OCR pass), or None."""
        ...


class CategoryRepository(Protocol):
    def ensure_default_categories(self, owner_id: str) -> List[Category]:
        ...

    def resolve(self, owner_id: str, slug: str, fallback_name: Optional[str] = None) -> Category:
        ...


class RecordSink(Protocol):
    def save(self, document_id: str, record: Dict[str, Any]) -> None:
        ...


class SearchIndexer(Protocol):
    def index(self, request: Dict[str, Any]) -> None:
        ...


class StaticCredentialResolver:
    """Resolves credential references from a fixed mapping."""

    def __init__(self, keys: Dict[str, str]) -> None:
        self.keys = dict(keys)

    def resolve(self, credential_ref: str) -> str:
        return self.keys.get(credential_ref, "")


class Utf8TextSource:
    """
    Treats page bytes as UTF-8 text; for documents that are already text.

    Image and PDF pages are skipped, so a scan without OCR yields None.
    """

    def get_text(self, document_id: str, pages: Sequence[bytes]) -> Optional[str]:
        text_pages = [page for page in pages if sniff_media_type(page) is None]
        text = "\n".join(page.decode('utf-8', errors='ignore') for page in text_pages)
        return text if text.strip() else None
