"""
Extraction Orchestrator Module.

Runs one extraction job end to end:

    1. Load page bytes (concurrent, order preserved)
    2. Primary pass: pattern extractor (heuristic) or model provider
       (model-assisted)
    3. Model-assisted only: augment with a pattern pass over OCR text
       when the primary result is thin, then merge
    4. Resolve or create the owner's category
    5. Emit the output record and request indexing

Failures in steps 1-4 propagate to the caller, which owns the
document's ready/failed state. Indexing failures are logged and
swallowed.

Usage:
    orchestrator = ExtractionOrchestrator(
        categories=CategoryStore(),
        http_client=build_http_client(),
        credential_resolver=vault,
        text_source=ocr_service,
    )
    outcome = orchestrator.run(job)

Author: ML Engineering Team
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import httpx

from docrecord.classification.category import Category
from docrecord.classification.classifier import classify
from docrecord.classification.rules import guess_category
from docrecord.heuristics.extractor import extract
from docrecord.input_handler.loader import PageLoader
from docrecord.model_inference.extraction_result import ExtractionResult
from docrecord.model_inference.providers import extract_with_provider
from docrecord.output_handler.records import build_index_request, build_output_record
from docrecord.reconciliation.merger import merge
from docrecord.reconciliation.naming import derive_asset_name
from docrecord.reconciliation.policy import should_augment
from docrecord.utils.exceptions import ValidationError
from docrecord.utils.helpers import humanize_slug, slugify
from docrecord.utils.logger import get_logger
from .collaborators import (
    CategoryRepository,
    CredentialResolver,
    RecordSink,
    SearchIndexer,
    TextSource,
)
from .job import ExtractionJob

logger = get_logger(__name__)


@dataclass
class ExtractionOutcome:
    """
    Everything a finished job produced.

    Attributes:
        result: Final extraction result, category applied
        category: Resolved category
        record: Output record handed to the record sink
        index_request: Request handed to the search indexer
        augmented: Whether an augmentation pass was merged in
        indexed: Whether indexing succeeded
    """
    result: ExtractionResult
    category: Category
    record: Dict[str, Any]
    index_request: Dict[str, Any]
    augmented: bool = False
    indexed: bool = False


class ExtractionOrchestrator:
    """
    Sequences the extraction stages for one job at a time.

    All collaborators are injected; the orchestrator holds no state
    between jobs, so one instance may serve several worker threads.

    Attributes:
        categories: Category repository with create-or-fetch semantics
        http_client: Client used for provider calls
        credential_resolver: Resolves credential references to API keys
        text_source: External OCR pass over page bytes
        record_sink: Receives the output record
        indexer: Receives the best-effort index request
        page_loader: Loads page bytes
    """

    def __init__(
        self,
        categories: CategoryRepository,
        http_client: Optional[httpx.Client] = None,
        credential_resolver: Optional[CredentialResolver] = None,
        text_source: Optional[TextSource] = None,
        record_sink: Optional[RecordSink] = None,
        indexer: Optional[SearchIndexer] = None,
        page_loader: Optional[PageLoader] = None,
    ) -> None:
        self.categories = categories
        self.http_client = http_client
        self.credential_resolver = credential_resolver
        self.text_source = text_source
        self.record_sink = record_sink
        self.indexer = indexer
        self.page_loader = page_loader or PageLoader()

    def run(self, job: ExtractionJob) -> ExtractionOutcome:
        """
        Process one job.

        Args:
            job: The extraction job.

        Returns:
            ExtractionOutcome for the job.

        Raises:
            ValidationError: Malformed job, missing credential or client.
            ProviderError: Provider call or response failed.
            TimeoutError: Provider call exceeded its budget.
            NotFoundError: A page could not be found.
            StorageError: The category store failed.
        """
        job.validate()
        logger.info(f"Processing document {job.document_id} ({job.mode}, {len(job.page_paths)} page(s))")

        pages = self.page_loader.load(job.page_paths)
        logger.debug(f"Loaded {len(pages)} page(s) for {job.document_id}")

        augmented = False
        if job.is_model_assisted:
            result = self._model_pass(job, pages)
            if pages and should_augment(result, job.display_name):
                result, augmented = self._augment(job, pages, result)
            else:
                logger.debug("Augmentation not needed")
        else:
            result = extract(self._page_text(job, pages))

        known = self.categories.ensure_default_categories(job.owner_id)
        category = self._resolve_category(job, result, known)

        result = result.with_category(category.slug, category.name)
        if not result.asset_name:
            result = replace(result, asset_name=derive_asset_name(result.fields, category.name, job.display_name))

        record = build_output_record(result, category.id, job.mode, category.field_priorities)
        if self.record_sink is not None:
            self.record_sink.save(job.document_id, record)

        index_request = build_index_request(job.document_id, result, category.id)
        indexed = self._request_indexing(job, index_request)

        logger.info(
            f"Document {job.document_id} extracted: {len(result.fields)} fields, "
            f"category '{category.slug}'"
        )
        return ExtractionOutcome(result, category, record, index_request, augmented, indexed)

    def _page_text(self, job: ExtractionJob, pages: List[bytes]) -> str:
        if self.text_source is None:
            return ""
        return self.text_source.get_text(job.document_id, pages) or ""

    def _model_pass(self, job: ExtractionJob, pages: List[bytes]) -> ExtractionResult:
        if self.credential_resolver is None:
            raise ValidationError("No credential resolver configured for model-assisted extraction")
        if self.http_client is None:
            raise ValidationError("No HTTP client configured for model-assisted extraction")

        api_key = self.credential_resolver.resolve(job.credential_ref)
        if not api_key:
            raise ValidationError(
                "Credential could not be resolved",
                {"documentId": job.document_id, "provider": job.provider_id}
            )
        logger.info(f"Using provider {job.provider_id} for {job.document_id}")
        return extract_with_provider(job.provider_id, pages, api_key, self.http_client)

    def _augment(self, job: ExtractionJob, pages: List[bytes], primary: ExtractionResult):
        raw_text = self._page_text(job, pages)
        if not raw_text.strip():
            logger.info(f"Augmentation wanted for {job.document_id} but no text is available")
            return primary, False

        augmentation = extract(raw_text)
        logger.info(
            f"Augmenting {job.document_id}: {len(primary.fields)} model fields + "
            f"{len(augmentation.fields)} pattern fields"
        )
        return merge(primary, augmentation), True

    def _resolve_category(self, job: ExtractionJob, result: ExtractionResult, known: List[Category]) -> Category:
        raw_text = result.raw_text or ""
        if job.is_model_assisted:
            slug = slugify(result.suggested_category_slug)
            if not slug:
                slug = classify(f"{job.display_name}\n{raw_text}", known) if known else guess_category(raw_text)
        elif known:
            slug = classify(f"{job.display_name}\n{raw_text}", known)
        else:
            slug = slugify(result.suggested_category_slug)

        if not slug:
            raise ValidationError("Category could not be resolved", {"documentId": job.document_id})

        name = next((c.name for c in known if c.slug == slug), None)
        name = name or result.suggested_category_name or humanize_slug(slug)
        category = self.categories.resolve(job.owner_id, slug, name)
        logger.info(f"Resolved category '{category.slug}' ({category.id}) for {job.document_id}")
        return category

    def _request_indexing(self, job: ExtractionJob, request: Dict[str, Any]) -> bool:
        if self.indexer is None:
            return False
        try:
            self.indexer.index(request)
        except Exception as e:
            logger.warning(f"Indexing failed for {job.document_id}: {e}")
            return False
        return True
