"""Batch pipeline: fetch and extract documents concurrently, then reconcile.

Each document is extracted in its own task. The batch waits for every task
before merging (fan-out / fan-in), and results are always ordered by the
caller's document order, never by completion order, so the first-wins
merge stays deterministic.
"""

import asyncio
from typing import Any, Mapping, Optional, Sequence

import structlog

from taxi_core.assembler import assemble
from taxi_core.calculator import TaxCalculator
from taxi_core.exceptions import StorageError
from taxi_core.models import ExtractedFieldSet, ExtractionFailureKind, RawDocument
from taxi_core.reconciler import fill_missing, reconcile

from .config import TaxiConfig
from .extraction_agent import DocumentExtractor
from .interfaces.base import DocumentRef, DocumentRegistry, ObjectStore
from .interfaces.types import PreparedReturn

logger = structlog.get_logger()


class ExtractionBatch:
    """In-flight extractions for one request, one task per document.

    Individual documents can be cancelled while the rest keep running; a
    cancelled document yields a ``cancelled`` field set rather than
    disappearing from the results.
    """

    def __init__(self, document_ids: Sequence[str], tasks: Sequence["asyncio.Task[ExtractedFieldSet]"]):
        self.document_ids = tuple(document_ids)
        self._tasks = tuple(tasks)

    def cancel(self, document_id: str) -> bool:
        """Cancel the extraction of one document. Returns False if already done."""
        cancelled = False
        for task_document_id, task in zip(self.document_ids, self._tasks):
            if task_document_id == document_id and not task.done():
                cancelled = task.cancel() or cancelled
        if cancelled:
            logger.info("extraction_cancel_requested", document_id=document_id)
        return cancelled

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()

    async def wait(self) -> tuple[ExtractedFieldSet, ...]:
        """Wait for every extraction and return results in caller order.

        Raises:
            ConfigurationError: If any extraction hit a configuration error;
                the remaining extractions are cancelled.
        """
        pending = set(self._tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                for task in done:
                    if not task.cancelled() and task.exception() is not None:
                        for other in pending:
                            other.cancel()
                        await asyncio.gather(*pending, return_exceptions=True)
                        raise task.exception()
        except asyncio.CancelledError:
            self.cancel_all()
            raise

        results = []
        for document_id, task in zip(self.document_ids, self._tasks):
            if task.cancelled():
                results.append(
                    ExtractedFieldSet.failed(
                        document_id,
                        ExtractionFailureKind.CANCELLED,
                        "Extraction was cancelled",
                    )
                )
            else:
                results.append(task.result())
        return tuple(results)


class ReturnPipeline:
    """
    Prepare a return from an owner's documents.

    Documents are fetched from the object store, extracted concurrently,
    reconciled first-wins in caller order, completed with user answers and,
    once nothing is missing, computed and assembled.
    """

    def __init__(
        self,
        extractor: DocumentExtractor,
        store: ObjectStore,
        registry: DocumentRegistry,
        config: Optional[TaxiConfig] = None,
        calculator: Optional[TaxCalculator] = None,
    ):
        self.extractor = extractor
        self.store = store
        self.registry = registry
        self.config = config or TaxiConfig()
        self.calculator = calculator or TaxCalculator()

    async def start_extraction(self, owner_id: str, document_ids: Sequence[str]) -> ExtractionBatch:
        """Look up the owner's documents and start one task per requested id."""
        refs = await self.registry.authorized_documents(owner_id, document_ids)
        by_id = {ref.document_id: ref for ref in refs}
        semaphore = asyncio.Semaphore(self.config.pipeline.max_concurrency)

        logger.info(
            "extraction_batch_started",
            requested=len(document_ids),
            authorized=len(by_id),
        )

        tasks = [
            asyncio.create_task(
                self._extract_one(document_id, by_id.get(document_id), semaphore),
                name=f"extract:{document_id}",
            )
            for document_id in document_ids
        ]
        return ExtractionBatch(document_ids, tasks)

    async def extract_documents(self, owner_id: str, document_ids: Sequence[str]) -> tuple[ExtractedFieldSet, ...]:
        """Extract every requested document and return results in caller order."""
        batch = await self.start_extraction(owner_id, document_ids)
        return await batch.wait()

    async def _extract_one(
        self,
        document_id: str,
        ref: Optional[DocumentRef],
        semaphore: asyncio.Semaphore,
    ) -> ExtractedFieldSet:
        if ref is None:
            return ExtractedFieldSet.failed(
                document_id,
                ExtractionFailureKind.NOT_FOUND,
                "Document not found or not accessible",
            )

        async with semaphore:
            try:
                stored = await self.store.fetch(ref.location)
            except StorageError as e:
                logger.warning("document_fetch_failed", document_id=document_id, error=e.message)
                kind = (
                    ExtractionFailureKind.NOT_FOUND
                    if e.not_found
                    else ExtractionFailureKind.STORAGE_FAILED
                )
                return ExtractedFieldSet.failed(document_id, kind, e.message)

            document = RawDocument(
                document_id=document_id,
                content=stored.content,
                mime_type=ref.mime_type or stored.mime_type,
                filename=ref.filename,
            )
            # Budget for the whole document; each generation attempt has its own
            # request_timeout inside the client
            timeout = self.config.llm.timeout
            try:
                return await asyncio.wait_for(self.extractor.extract(document), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("extraction_timed_out", document_id=document_id, timeout=timeout)
                return ExtractedFieldSet.failed(
                    document_id,
                    ExtractionFailureKind.GENERATION_FAILED,
                    f"Extraction timed out after {timeout:g}s",
                )

    def finish(
        self,
        field_sets: Sequence[ExtractedFieldSet],
        answers: Optional[Mapping[str, Any]] = None,
    ) -> PreparedReturn:
        """Reconcile field sets, apply answers and compute when complete.

        Raises:
            ValidationError: If an answer is invalid.
        """
        result = reconcile(field_sets)
        if answers:
            result = fill_missing(result, answers)

        if not result.is_complete:
            logger.info("return_incomplete", missing_fields=list(result.missing_fields))
            return PreparedReturn(field_sets=tuple(field_sets), reconciliation=result)

        computed = self.calculator.compute(result.record)
        renderable = assemble(computed)
        logger.info("return_prepared", documents=len(field_sets))
        return PreparedReturn(
            field_sets=tuple(field_sets),
            reconciliation=result,
            computed=computed,
            renderable=renderable,
        )

    async def prepare(
        self,
        owner_id: str,
        document_ids: Sequence[str],
        answers: Optional[Mapping[str, Any]] = None,
    ) -> PreparedReturn:
        """Extract, reconcile, complete and, when possible, compute a return."""
        field_sets = await self.extract_documents(owner_id, document_ids)
        return self.finish(field_sets, answers)
