"""Tests for the end-to-end extraction orchestrator."""

import json
import logging
from unittest.mock import patch

import httpx
import pytest

from docrecord.model_inference import build_http_client
from docrecord.model_inference.extraction_result import ExtractedField, ExtractionResult
from docrecord.output_handler import CategoryStore, build_output_record
from docrecord.pipeline import (
    MODE_HEURISTIC,
    MODE_MODEL_ASSISTED,
    ExtractionJob,
    ExtractionOrchestrator,
    StaticCredentialResolver,
    Utf8TextSource,
)
from docrecord.utils.exceptions import NotFoundError, ProviderError, ValidationError

OWNER = "owner-1"


@pytest.fixture
def store(tmp_path):
    return CategoryStore(str(tmp_path / "categories.db"))


@pytest.fixture
def client():
    http_client = build_http_client(timeout=5, connect_timeout=2)
    yield http_client
    http_client.close()


@pytest.fixture
def credentials():
    return StaticCredentialResolver({"vault/anthropic": "ak-test"})


@pytest.fixture
def receipt_page(tmp_path, receipt_text):
    path = tmp_path / "receipt.txt"
    path.write_text(receipt_text, encoding="utf-8")
    return str(path)


@pytest.fixture
def image_page(tmp_path, jpeg_bytes):
    def make(name):
        path = tmp_path / name
        path.write_bytes(jpeg_bytes)
        return str(path)
    return make


def model_job(page, document_id="doc-2"):
    return ExtractionJob(
        document_id=document_id,
        owner_id=OWNER,
        page_paths=[page],
        mode=MODE_MODEL_ASSISTED,
        provider_id="anthropic",
        credential_ref="vault/anthropic",
    )


class TestHeuristicJobs:
    def test_receipt_text_page(self, store, receipt_page, record_sink, indexer):
        orchestrator = ExtractionOrchestrator(
            store, text_source=Utf8TextSource(), record_sink=record_sink, indexer=indexer
        )
        job = ExtractionJob(document_id="doc-1", owner_id=OWNER, page_paths=[receipt_page])

        outcome = orchestrator.run(job)

        assert outcome.category.slug == "finance"
        assert outcome.result.suggested_category_name == "Finance"
        assert outcome.result.asset_name == "CORNER MARKET - Receipt - 88123 - 2026-02-14.txt"
        assert not outcome.augmented
        assert outcome.indexed

        document_id, record = record_sink.saved[0]
        assert document_id == "doc-1"
        assert record["categoryId"] == outcome.category.id
        assert record["extractionMode"] == MODE_HEURISTIC
        assert record["assetName"] == outcome.result.asset_name

        assert indexer.requests[0]["id"] == "doc-1"
        assert "total_amount" in indexer.requests[0]["fieldKeys"]

    def test_page_without_text_falls_back_to_general(self, store, image_page, text_source_factory):
        orchestrator = ExtractionOrchestrator(store, text_source=text_source_factory(None))
        job = ExtractionJob(document_id="doc-3", owner_id=OWNER, page_paths=[image_page("scan.png")])

        outcome = orchestrator.run(job)

        assert outcome.category.slug == "general"
        assert outcome.result.fields == []
        assert outcome.result.asset_name == "General - scan.png"
        assert not outcome.indexed

    def test_text_source_skips_image_pages(self, store, image_page, receipt_page, record_sink):
        orchestrator = ExtractionOrchestrator(store, text_source=Utf8TextSource(), record_sink=record_sink)

        scan_only = orchestrator.run(
            ExtractionJob(document_id="doc-6", owner_id=OWNER, page_paths=[image_page("scan.jpg")])
        )
        mixed = orchestrator.run(
            ExtractionJob(document_id="doc-7", owner_id=OWNER, page_paths=[image_page("cover.jpg"), receipt_page])
        )

        assert scan_only.category.slug == "general"
        assert scan_only.result.fields == []
        assert mixed.category.slug == "finance"
        assert mixed.result.raw_text.startswith("CORNER MARKET")

    def test_missing_page(self, store, tmp_path):
        job = ExtractionJob(document_id="doc-4", owner_id=OWNER, page_paths=[str(tmp_path / "gone.png")])
        with pytest.raises(NotFoundError):
            ExtractionOrchestrator(store).run(job)


class TestModelAssistedJobs:
    def test_thin_model_result_is_augmented(
        self, store, client, credentials, image_page, model_payload, anthropic_reply,
        text_source_factory, receipt_text, record_sink
    ):
        text_source = text_source_factory(receipt_text)
        orchestrator = ExtractionOrchestrator(
            store, http_client=client, credential_resolver=credentials,
            text_source=text_source, record_sink=record_sink,
        )
        reply = httpx.Response(200, json=anthropic_reply(model_payload))

        with patch.object(client, "post", return_value=reply):
            outcome = orchestrator.run(model_job(image_page("receipt_0214.jpg")))

        assert outcome.augmented
        assert text_source.calls == 1
        assert outcome.category.slug == "finance"
        assert len(outcome.result.fields) >= 8
        assert outcome.result.fields[0].source == "model"
        assert outcome.result.asset_name.startswith("CORNER MARKET - Receipt - 88123")
        assert outcome.result.asset_name.endswith(".jpg")
        assert record_sink.saved[0][1]["extractionMode"] == MODE_MODEL_ASSISTED

    def test_rich_non_receipt_is_not_augmented(
        self, store, client, credentials, image_page, anthropic_reply, text_source_factory
    ):
        payload = {
            "summary": "Boarding pass for flight UA 88.",
            "fields": [{"key": f"detail_{i}", "value": f"v{i}", "confidence": 0.8} for i in range(12)],
            "suggested_category": "travel",
            "entities": ["United"],
        }
        text_source = text_source_factory("unused")
        orchestrator = ExtractionOrchestrator(
            store, http_client=client, credential_resolver=credentials, text_source=text_source
        )

        with patch.object(client, "post", return_value=httpx.Response(200, json=anthropic_reply(payload))):
            outcome = orchestrator.run(model_job(image_page("boarding.png")))

        assert not outcome.augmented
        assert text_source.calls == 0
        assert outcome.category.slug == "travel"
        assert len(outcome.result.fields) == 12

    def test_new_suggested_category_is_created(
        self, store, client, credentials, image_page, model_payload, anthropic_reply
    ):
        payload = dict(model_payload, suggested_category="Home Garden")
        orchestrator = ExtractionOrchestrator(store, http_client=client, credential_resolver=credentials)

        with patch.object(client, "post", return_value=httpx.Response(200, json=anthropic_reply(payload))):
            outcome = orchestrator.run(model_job(image_page("hose.jpg")))

        assert outcome.category.slug == "home-garden"
        assert outcome.category.name == "Home Garden"
        assert store.get_by_slug(OWNER, "home-garden").id == outcome.category.id
        assert len(store.list_categories(OWNER)) == 7

    def test_indexing_failure_is_swallowed(
        self, store, client, credentials, image_page, model_payload, anthropic_reply,
        record_sink, failing_indexer, caplog
    ):
        orchestrator = ExtractionOrchestrator(
            store, http_client=client, credential_resolver=credentials,
            record_sink=record_sink, indexer=failing_indexer,
        )

        with caplog.at_level(logging.WARNING):
            with patch.object(client, "post", return_value=httpx.Response(200, json=anthropic_reply(model_payload))):
                outcome = orchestrator.run(model_job(image_page("photo.jpg")))

        assert not outcome.indexed
        assert len(record_sink.saved) == 1
        assert "Indexing failed" in caplog.text

    def test_provider_failure_propagates(self, store, client, credentials, image_page, record_sink):
        orchestrator = ExtractionOrchestrator(
            store, http_client=client, credential_resolver=credentials, record_sink=record_sink
        )
        error = httpx.Response(500, text="internal error")

        with patch.object(client, "post", return_value=error):
            with pytest.raises(ProviderError):
                orchestrator.run(model_job(image_page("photo.jpg")))

        assert record_sink.saved == []

    def test_unresolvable_credential(self, store, client, image_page):
        orchestrator = ExtractionOrchestrator(
            store, http_client=client, credential_resolver=StaticCredentialResolver({})
        )
        with patch.object(client, "post") as mock_post:
            with pytest.raises(ValidationError):
                orchestrator.run(model_job(image_page("photo.jpg")))
        mock_post.assert_not_called()


class TestJobValidation:
    def test_from_dict(self):
        job = ExtractionJob.from_dict({
            "documentId": "doc-9",
            "ownerId": OWNER,
            "pagePaths": ["scans/a.jpg", "scans/b.jpg"],
            "mode": "model-assisted",
            "providerId": "google",
            "credentialRef": "vault/google",
        })
        assert job.is_model_assisted
        assert job.display_name == "a.jpg"

    def test_file_name_overrides_display_name(self):
        job = ExtractionJob("doc", OWNER, ["p/1.png"], file_name="Lease.pdf")
        assert job.display_name == "Lease.pdf"

    @pytest.mark.parametrize("payload", [
        {"ownerId": OWNER, "pagePaths": ["a.png"]},
        {"documentId": "d", "pagePaths": ["a.png"]},
        {"documentId": "d", "ownerId": OWNER, "pagePaths": []},
        {"documentId": "d", "ownerId": OWNER, "pagePaths": ["a.png"], "mode": "magic"},
        {"documentId": "d", "ownerId": OWNER, "pagePaths": ["a.png"], "mode": "model-assisted"},
        {"documentId": "d", "ownerId": OWNER, "pagePaths": ["a.png"], "providerId": "openai"},
        {"documentId": "d", "ownerId": OWNER, "pagePaths": "a.png"},
        ["not", "an", "object"],
    ])
    def test_malformed_jobs(self, payload):
        with pytest.raises(ValidationError):
            ExtractionJob.from_dict(payload)


class TestOutputRecord:
    def test_fields_follow_category_priorities(self):
        result = ExtractionResult(
            summary="Receipt",
            fields=[
                ExtractedField("email", "a@b.co"),
                ExtractedField("vendor_name", "CORNER MARKET"),
                ExtractedField("total_amount", 12.0, unit="USD"),
            ],
        )
        record = build_output_record(result, "cat-1", MODE_HEURISTIC, ["total", "vendor", "date"])

        assert [f["key"] for f in record["fields"]] == ["total_amount", "vendor_name", "email"]
        assert [f.key for f in result.fields][0] == "email"

    def test_without_priorities_keeps_extraction_order(self):
        result = ExtractionResult(fields=[ExtractedField("b", 1), ExtractedField("a", 2)])
        record = build_output_record(result, "cat-1", MODE_HEURISTIC)
        assert [f["key"] for f in record["fields"]] == ["b", "a"]
        assert "rawText" not in record

    def test_stored_receipt_record_leads_with_total(self, store, receipt_page, record_sink):
        orchestrator = ExtractionOrchestrator(store, text_source=Utf8TextSource(), record_sink=record_sink)
        orchestrator.run(ExtractionJob(document_id="doc-5", owner_id=OWNER, page_paths=[receipt_page]))

        _, record = record_sink.saved[0]
        assert record["fields"][0]["key"].startswith("total")
