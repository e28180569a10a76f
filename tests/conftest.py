"""Shared test fixtures for the extraction engine tests."""

import io
import json
import logging
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path so we can import the packages
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import ConfigurationManager  # noqa: E402

RECEIPT_TEXT = """CORNER MARKET
123 Main St
Receipt #88123
02/14/2026
2 Latte 4.50 9.00
Bagel w/ cream cheese 3.25
Orange Juice 2 x 3.10
Subtotal 15.35
Tax 1.23
Total $16.58
Visa 16.58
Thank you"""

WORKOUT_TEXT = """Weekly Workout Schedule
Monday - Chest 6 Tris
Tuesday: back and bice
Wednesday: Legs
Thursday - shoulders + lats
Sunday: Rest Day"""


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload settings.yaml for every test and undo CLI logging setup."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()
    app_logger = logging.getLogger("docrecord")
    app_logger.handlers.clear()
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture
def receipt_text() -> str:
    return RECEIPT_TEXT


@pytest.fixture
def workout_text() -> str:
    return WORKOUT_TEXT


@pytest.fixture
def png_bytes() -> bytes:
    """A minimal valid PNG page."""
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (240, 240, 240)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (30, 30, 30)).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def model_payload() -> dict:
    """A well-formed provider reply payload."""
    return {
        "summary": "Grocery receipt from Corner Market.",
        "fields": [
            {"key": "total_amount", "value": 16.58, "unit": "USD", "confidence": 0.92},
            {"key": "vendor", "value": "Corner Market", "unit": None, "confidence": 0.88},
        ],
        "suggested_category": "general",
        "entities": ["Corner Market"],
    }


def anthropic_body(payload: dict) -> dict:
    return {"content": [{"type": "text", "text": "Here is the data:\n" + json.dumps(payload)}]}


@pytest.fixture
def anthropic_reply():
    """Factory for Anthropic Messages API response bodies."""
    return anthropic_body


class FakeTextSource:
    """Serves fixed OCR text and counts how often it was asked."""

    def __init__(self, text):
        self.text = text
        self.calls = 0

    def get_text(self, document_id, pages):
        self.calls += 1
        return self.text


class RecordingSink:
    def __init__(self):
        self.saved = []

    def save(self, document_id, record):
        self.saved.append((document_id, record))


class RecordingIndexer:
    def __init__(self):
        self.requests = []

    def index(self, request):
        self.requests.append(request)


class FailingIndexer:
    def index(self, request):
        raise RuntimeError("search service unavailable")


@pytest.fixture
def text_source_factory():
    return FakeTextSource


@pytest.fixture
def record_sink():
    return RecordingSink()


@pytest.fixture
def indexer():
    return RecordingIndexer()


@pytest.fixture
def failing_indexer():
    return FailingIndexer()
