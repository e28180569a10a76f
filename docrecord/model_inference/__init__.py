"""
Model Inference Module.

Everything that produces an ExtractionResult from a model:
    - ExtractedField / ExtractionResult data model
    - Fixed extraction prompt
    - Provider dispatch table (openai, anthropic, google)
    - Response normalizer for untrusted model output

The external local-extractor runner lives in
docrecord.model_inference.local_extractor.
"""

from .extraction_result import (
    DEFAULT_CATEGORY_SLUG,
    SOURCE_HEURISTIC,
    SOURCE_MODEL,
    ExtractedField,
    ExtractionResult,
    clamp_confidence,
)
from .normalizer import parse_extraction_response
from .prompt import EXTRACTION_SYSTEM_PROMPT
from .providers import PROVIDERS, build_http_client, extract_with_provider

__all__ = [
    'DEFAULT_CATEGORY_SLUG',
    'SOURCE_HEURISTIC',
    'SOURCE_MODEL',
    'ExtractedField',
    'ExtractionResult',
    'clamp_confidence',
    'parse_extraction_response',
    'EXTRACTION_SYSTEM_PROMPT',
    'PROVIDERS',
    'build_http_client',
    'extract_with_provider',
]
