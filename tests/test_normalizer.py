"""Tests for normalizing untrusted model output."""

import json

import pytest

from docrecord.model_inference import parse_extraction_response
from docrecord.model_inference.normalizer import coerce_entities, coerce_value, extract_json_block
from docrecord.utils.exceptions import ProviderError


class TestJsonBlock:
    def test_no_braces_raises(self):
        with pytest.raises(ProviderError):
            parse_extraction_response("I could not read this document, sorry.")

    def test_reversed_braces_raise(self):
        with pytest.raises(ProviderError):
            extract_json_block("} nothing here {")

    def test_non_text_reply_raises(self):
        with pytest.raises(ProviderError, match="not text"):
            extract_json_block([{"type": "text", "text": "{}"}], "openai")
        with pytest.raises(ProviderError):
            parse_extraction_response(None)

    def test_invalid_json_raises(self):
        with pytest.raises(ProviderError, match="invalid JSON"):
            parse_extraction_response("{summary: not quoted}")

    def test_markdown_fences_are_ignored(self, model_payload):
        text = "```json\n" + json.dumps(model_payload) + "\n```"
        result = parse_extraction_response(text)
        assert result.summary == "Grocery receipt from Corner Market."
        assert len(result.fields) == 2


class TestCoercion:
    def test_fields_are_coerced(self):
        payload = {
            "fields": [
                {"key": "total", "value": "12.50", "unit": "USD", "confidence": 1.7, "source": "heuristic"},
                {"value": 3, "confidence": "high"},
                {"key": "paid", "value": True, "confidence": -2},
                "junk",
                {"key": "nested", "value": {"a": 1}},
                {"key": "empty", "value": None, "unit": None},
            ]
        }
        result = parse_extraction_response(json.dumps(payload))

        assert [f.key for f in result.fields] == ["total", "unknown_field", "paid", "nested", "empty"]
        total, unknown, paid, nested, empty = result.fields

        assert total.value == "12.50"
        assert total.unit == "USD"
        assert total.confidence == 1.0
        assert unknown.value == 3
        assert unknown.confidence == 0.5
        assert paid.value == "true"
        assert paid.confidence == 0.0
        assert nested.value == '{"a": 1}'
        assert empty.value == ""
        assert empty.unit is None
        assert all(f.source == "model" for f in result.fields)

    def test_missing_top_level_keys(self):
        result = parse_extraction_response("{}")
        assert result.summary == ""
        assert result.fields == []
        assert result.entities == []
        assert result.suggested_category_slug == "general"

    def test_non_list_fields_are_ignored(self):
        result = parse_extraction_response('{"fields": "none", "entities": "Acme"}')
        assert result.fields == []
        assert result.entities == []

    def test_long_keys_and_values_are_capped(self):
        payload = {"fields": [{"key": "k" * 300, "value": "v" * 5000, "unit": "u" * 80}]}
        field = parse_extraction_response(json.dumps(payload)).fields[0]
        assert len(field.key) == 100
        assert len(field.value) == 2000
        assert len(field.unit) == 50

    def test_field_count_is_capped(self):
        payload = {"fields": [{"key": f"k{i}", "value": i} for i in range(400)]}
        assert len(parse_extraction_response(json.dumps(payload)).fields) == 150

    def test_entities(self):
        assert coerce_entities(["Acme", 5, None, "Acme", "  Bob  ", ""]) == ["Acme", "Bob"]
        assert len(coerce_entities([f"E{i}" for i in range(80)])) == 50

    def test_values(self):
        assert coerce_value(4.5) == 4.5
        assert coerce_value(None) == ""
        assert coerce_value(["a", 1]) == '["a", 1]'

    def test_category_passthrough(self):
        result = parse_extraction_response('{"suggested_category": "travel"}')
        assert result.suggested_category_slug == "travel"
