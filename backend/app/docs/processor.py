"""Document upload and processing pipeline.

Status moves uploaded -> parsing -> categorizing -> processed, with error
reachable from parsing and categorizing. Processing runs as a supervised
background job; callers poll get_status.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from backend.app.db.context import RequestContext
from backend.app.db.repositories import DocumentRepository
from backend.app.docs.categorizer import DocumentCategorizer
from backend.app.docs.extract import TextExtractor, infer_file_kind
from backend.app.docs.jobs import JobRunner
from backend.app.docs.storage import LocalFileStore
from backend.app.errors import ExtractionError, NotFoundError, StorageError, ValidationError
from backend.app.models.docs import (
    Document,
    DocumentStatus,
    DocumentStatusView,
    DocumentSummary,
)
from backend.app.utils.logging import StructuredPipelineLogger
from backend.app.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_title(title: str) -> str:
    """Return the trimmed title or raise ValidationError."""
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title is required")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    return cleaned


class _DocumentGone(Exception):
    """Document was deleted while its pipeline was running."""

    pass


class DocumentProcessor:
    """Owns document submission, the processing pipeline and document queries."""

    def __init__(
        self,
        *,
        repository: DocumentRepository,
        store: LocalFileStore,
        extractor: TextExtractor,
        categorizer: DocumentCategorizer,
        jobs: JobRunner,
        max_upload_bytes: int = 10 * 1024 * 1024,
        pipeline_logger: StructuredPipelineLogger | None = None,
        metrics: PrometheusPipelineMetrics | None = None,
    ) -> None:
        self._repo = repository
        self._store = store
        self._extractor = extractor
        self._categorizer = categorizer
        self._jobs = jobs
        self._max_upload_bytes = max_upload_bytes
        self._log = pipeline_logger or StructuredPipelineLogger()
        self._metrics = metrics or PrometheusPipelineMetrics()

    async def submit(
        self,
        ctx: RequestContext,
        *,
        filename: str,
        content_type: str | None,
        data: bytes,
        title: str,
        description: str = "",
    ) -> Document:
        """Store an upload, create its record and schedule processing.

        Args:
            ctx: Request context (owner)
            filename: Client-supplied file name
            content_type: Declared MIME type
            data: File bytes
            title: Document title
            description: Optional description

        Returns:
            The new document in status uploaded

        Raises:
            ValidationError: Bad title, unsupported type or oversized file
            StorageError: File or record could not be persisted
        """
        title = validate_title(title)
        kind = infer_file_kind(filename, content_type)
        if kind is None:
            raise ValidationError(
                "Unsupported file type. Upload a PDF, DOCX, TXT or Markdown file."
            )
        if len(data) > self._max_upload_bytes:
            raise ValidationError(
                f"File exceeds the maximum upload size of {self._max_upload_bytes} bytes"
            )

        file_path = await self._store.save(filename, data)
        now = utcnow()
        doc = Document(
            document_id=uuid.uuid4(),
            org_id=ctx.org_id,
            user_id=ctx.user_id,
            title=title,
            description=(description or "").strip(),
            file_path=file_path,
            original_file_name=filename,
            file_kind=kind,
            status=DocumentStatus.uploaded,
            uploaded_at=now,
            updated_at=now,
        )

        try:
            await self._repo.add(doc)
        except StorageError:
            await self._store.delete(file_path)
            raise

        self._metrics.inc_transition(DocumentStatus.uploaded.value)
        self._log.log_transition(doc.document_id, ctx.org_id, "new", DocumentStatus.uploaded.value)

        self._jobs.submit(
            self.process(doc.document_id, ctx), name=f"process-document-{doc.document_id}"
        )
        return doc

    async def process(self, document_id: uuid.UUID, ctx: RequestContext) -> None:
        """Run the pipeline for one uploaded document.

        Always leaves the document in processed or error unless it was deleted
        mid-way. Documents not in uploaded are left untouched.
        """
        doc = await self._repo.get(document_id, ctx)
        if doc is None:
            logger.warning(f"Document {document_id} not found for processing")
            return
        if doc.status != DocumentStatus.uploaded:
            logger.info(f"Document {document_id} already {doc.status.value}, skipping processing")
            return

        try:
            doc = await self._transition(doc, ctx, DocumentStatus.parsing)

            try:
                text = await self._extractor.extract(doc.file_path, doc.file_kind)
            except ExtractionError as e:
                logger.warning(f"Extraction failed for {document_id} ({e.reason}): {e.message}")
                await self._transition(doc, ctx, DocumentStatus.error, error_message=e.message)
                return

            doc = await self._transition(
                doc, ctx, DocumentStatus.categorizing, extracted_text=text
            )

            result = await self._categorizer.categorize(text)
            if result.error_message:
                await self._transition(
                    doc,
                    ctx,
                    DocumentStatus.error,
                    categories=result.categories,
                    error_message=result.error_message,
                )
                return

            await self._transition(
                doc, ctx, DocumentStatus.processed, categories=result.categories
            )
        except _DocumentGone:
            logger.info(f"Document {document_id} was deleted during processing")
        except Exception as e:
            logger.exception(f"Unexpected error processing document {document_id}")
            await self._mark_failed(doc, ctx, f"Processing failed: {type(e).__name__}: {e}")

    async def _transition(
        self,
        doc: Document,
        ctx: RequestContext,
        status: DocumentStatus,
        **changes: Any,
    ) -> Document:
        updated = doc.model_copy(update={"status": status, "updated_at": utcnow(), **changes})
        if not await self._repo.save(updated, ctx):
            raise _DocumentGone()

        self._metrics.inc_transition(status.value)
        self._log.log_transition(
            doc.document_id,
            doc.org_id,
            doc.status.value,
            status.value,
            error_message=changes.get("error_message"),
        )
        return updated

    async def _mark_failed(self, doc: Document, ctx: RequestContext, message: str) -> None:
        # Re-read so a partially applied transition is not rolled back
        current = await self._repo.get(doc.document_id, ctx) or doc
        if current.status in (DocumentStatus.processed, DocumentStatus.error):
            return
        try:
            await self._transition(current, ctx, DocumentStatus.error, error_message=message)
        except _DocumentGone:
            logger.info(f"Document {doc.document_id} was deleted during processing")

    async def get_document(self, ctx: RequestContext, document_id: uuid.UUID) -> Document:
        """Get a document owned by the caller.

        Raises:
            NotFoundError: If absent or owned by another tenant
        """
        doc = await self._repo.get(document_id, ctx)
        if doc is None:
            raise NotFoundError(f"Document {document_id} not found")
        return doc

    async def list_documents(self, ctx: RequestContext) -> list[DocumentSummary]:
        """List the caller's documents, newest first."""
        docs = await self._repo.list(ctx)
        return [DocumentSummary.from_document(d) for d in docs]

    async def get_status(self, ctx: RequestContext, document_id: uuid.UUID) -> DocumentStatusView:
        """Status poll for an uploaded document."""
        doc = await self.get_document(ctx, document_id)
        return DocumentStatusView(
            status=doc.status,
            error_message=doc.error_message,
            title=doc.title,
            uploaded_at=doc.uploaded_at,
        )

    async def delete_document(self, ctx: RequestContext, document_id: uuid.UUID) -> None:
        """Delete the record, then try to delete its stored file.

        Raises:
            NotFoundError: If absent or owned by another tenant
        """
        doc = await self.get_document(ctx, document_id)
        if not await self._repo.delete(document_id, ctx):
            raise NotFoundError(f"Document {document_id} not found")
        await self._store.delete(doc.file_path)
        logger.info(f"Deleted document {document_id}")
