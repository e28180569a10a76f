"""Tests for merge, augmentation policy and asset names."""

import pytest

from docrecord.heuristics import extract
from docrecord.model_inference import ExtractedField, ExtractionResult
from docrecord.reconciliation import (
    dedupe_fields,
    derive_asset_name,
    is_receipt_like,
    merge,
    should_augment,
)


def model_field(key, value, unit=None, confidence=0.9):
    return ExtractedField(key, value, unit, confidence, "model")


def result_with(slug="general", fields=None, **kwargs):
    return ExtractionResult(fields=fields or [], suggested_category_slug=slug, **kwargs)


def signatures(result):
    return [f.signature for f in result.fields]


@pytest.fixture
def model_result():
    return ExtractionResult(
        summary="Model summary.",
        fields=[model_field("total_amount", 16.58, "USD"), model_field("vendor", "Corner Market")],
        entities=["Corner Market"],
        suggested_category_slug="general",
    )


class TestMerge:
    def test_model_result_augmented_by_receipt_heuristics(self, model_result, receipt_text):
        assert should_augment(model_result, "receipt_0214.jpg")
        augmentation = extract(receipt_text)
        assert len(augmentation.fields) >= 8
        assert augmentation.suggested_category_slug == "finance"

        merged = merge(model_result, augmentation)

        assert merged.suggested_category_slug == "finance"
        assert len(merged.fields) >= 8
        assert len(set(signatures(merged))) == len(merged.fields)

    def test_merge_with_itself_is_idempotent(self, receipt_text):
        result = extract(receipt_text)
        merged = merge(result, result)
        assert signatures(merged) == signatures(ExtractionResult(fields=dedupe_fields(result.fields)))

    def test_primary_fields_always_survive(self, model_result, receipt_text):
        merged = merge(model_result, extract(receipt_text))
        for item in model_result.fields:
            assert item in merged.fields

    def test_primary_wins_duplicate_signature(self):
        primary = result_with(fields=[model_field("Total_Amount", "16.58", confidence=0.9)])
        augmentation = result_with(fields=[ExtractedField("total_amount", 16.58, "USD", 0.6)])
        merged = merge(primary, augmentation)
        assert len(merged.fields) == 1
        assert merged.fields[0].source == "model"

    def test_inputs_are_not_modified(self, model_result, receipt_text):
        augmentation = extract(receipt_text)
        before = (list(model_result.fields), list(augmentation.fields))
        merge(model_result, augmentation)
        assert (model_result.fields, augmentation.fields) == before

    @pytest.mark.parametrize("primary_slug, augmentation_slug, expected", [
        ("travel", "finance", "finance"),
        ("general", "travel", "travel"),
        ("travel", "fitness", "travel"),
        ("finance", "finance", "finance"),
        ("general", "", "general"),
    ])
    def test_category_preference(self, primary_slug, augmentation_slug, expected):
        merged = merge(result_with(primary_slug), result_with(augmentation_slug))
        assert merged.suggested_category_slug == expected

    def test_category_name_follows_slug(self):
        primary = ExtractionResult(suggested_category_slug="travel", suggested_category_name="Travel")
        augmentation = ExtractionResult(suggested_category_slug="finance", suggested_category_name="Finance")
        assert merge(primary, augmentation).suggested_category_name == "Finance"

    def test_text_falls_back_to_augmentation(self):
        primary = ExtractionResult(summary="", raw_text=None)
        augmentation = ExtractionResult(summary="From patterns.", raw_text="RAW")
        merged = merge(primary, augmentation)
        assert merged.summary == "From patterns."
        assert merged.raw_text == "RAW"

    def test_caps(self):
        primary = result_with(
            fields=[model_field(f"p{i}", i) for i in range(150)],
            entities=[f"P{i}" for i in range(50)],
        )
        augmentation = result_with(
            fields=[ExtractedField(f"a{i}", i) for i in range(150)],
            entities=[f"A{i}" for i in range(50)],
        )
        merged = merge(primary, augmentation)
        assert len(merged.fields) == 200
        assert len(merged.entities) == 60
        assert merged.entities[:50] == primary.entities


class TestAugmentationPolicy:
    def test_receipt_signal(self):
        assert is_receipt_like(result_with("travel"), "receipt.jpg")
        assert is_receipt_like(result_with("finance", raw_text="BILL TO: Acme"))
        assert not is_receipt_like(result_with("travel"), "boarding.png")

    def test_thin_receipt_triggers(self):
        fields = [model_field(f"k{i}", i) for i in range(5)]
        assert should_augment(result_with("general", fields, raw_text="Subtotal 4.00"))

    def test_rich_receipt_does_not_trigger(self):
        fields = [model_field(f"k{i}", i) for i in range(8)]
        fields += [model_field(f"line_item_{i}_price", i) for i in range(1, 5)]
        assert not should_augment(result_with("finance", fields, raw_text="Receipt total"))

    def test_receipt_with_few_line_items_triggers(self):
        fields = [model_field(f"k{i}", i) for i in range(12)]
        assert should_augment(result_with("finance", fields, raw_text="Receipt total"))

    def test_non_receipt(self):
        assert not should_augment(result_with("travel", [model_field(f"k{i}", i) for i in range(5)]))
        assert should_augment(result_with("travel", [model_field("k", 1)]))


class TestAssetName:
    def test_finance_title(self):
        fields = [
            ExtractedField("store_name", "Corner Market"),
            ExtractedField("receipt_number", "88123"),
            ExtractedField("date", "02/14/2026"),
        ]
        assert derive_asset_name(fields, "Finance", "IMG_0042.jpg") == (
            "Corner Market - Receipt - 88123 - 2026-02-14.jpg"
        )

    def test_finance_title_falls_back_to_invoice_number(self):
        fields = [ExtractedField("store_name", "Acme"), ExtractedField("invoice_number", "INV-7")]
        assert derive_asset_name(fields, "finance", "scan.pdf") == "Acme - Receipt - INV-7.pdf"

    def test_unparseable_date_keeps_digits(self):
        fields = [ExtractedField("date", "14th of Febtober")]
        assert derive_asset_name(fields, "Finance", "scan.png") == "Receipt - 14.png"

    def test_other_categories(self):
        assert derive_asset_name([], "Travel", "boarding pass.pdf") == "Travel - boarding pass.pdf"
        assert derive_asset_name([], "", "scan.png") == "Document - scan.png"

    def test_unsafe_characters_are_stripped(self):
        assert derive_asset_name([], "Work", 'q3:report?.png') == "Work - q3report.png"
        store = [ExtractedField("store_name", 'Joe\'s "Diner"...')]
        assert derive_asset_name(store, "Finance", "r.jpg") == "Joe's Diner... - Receipt.jpg"
