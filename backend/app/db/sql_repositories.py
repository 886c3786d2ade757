"""SQL implementations of repository interfaces.

Each call opens its own AsyncSession on the shared engine, so repositories
can be used from request handlers and background jobs alike.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import DocumentRow, QuestionDraftRow
from backend.app.db.queries import select_documents, select_drafts
from backend.app.errors import StorageError
from backend.app.models.docs import CategoryNode, Document
from backend.app.models.questions import QuestionDraftRecord, QuestionOption

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on DateTime(timezone=True) columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _row_to_document(row: DocumentRow) -> Document:
    return Document(
        document_id=row.document_id,
        org_id=row.org_id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        file_path=row.file_path,
        original_file_name=row.original_file_name,
        file_kind=row.file_kind,
        extracted_text=row.extracted_text,
        categories=[CategoryNode.model_validate(n) for n in row.categories or []],
        status=row.status,
        error_message=row.error_message,
        question_generation_status=row.question_generation_status,
        question_count=row.question_count,
        uploaded_at=_as_utc(row.uploaded_at),
        updated_at=_as_utc(row.updated_at),
    )


def _row_to_draft(row: QuestionDraftRow) -> QuestionDraftRecord:
    return QuestionDraftRecord(
        draft_id=row.draft_id,
        org_id=row.org_id,
        user_id=row.user_id,
        document_id=row.document_id,
        category_node_id=row.category_node_id,
        source=row.source,
        question_text=row.question_text,
        question_type=row.question_type,
        options=[QuestionOption.model_validate(o) for o in row.options],
        category=row.category,
        difficulty=row.difficulty,
        explanation=row.explanation,
        focus=row.focus,
        status=row.status,
        created_by=row.created_by,
        created_at=_as_utc(row.created_at),
    )


def _apply_document(row: DocumentRow, doc: Document) -> None:
    row.title = doc.title
    row.description = doc.description
    row.file_path = doc.file_path
    row.original_file_name = doc.original_file_name
    row.file_kind = doc.file_kind.value
    row.extracted_text = doc.extracted_text
    row.categories = [n.model_dump(mode="json") for n in doc.categories]
    row.status = doc.status.value
    row.error_message = doc.error_message
    row.question_generation_status = doc.question_generation_status.value
    row.question_count = doc.question_count
    row.updated_at = doc.updated_at


class SqlDocumentRepository:
    """SQL implementation of DocumentRepository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def add(self, doc: Document) -> None:
        """Persist a new document."""
        row = DocumentRow(
            document_id=doc.document_id,
            org_id=doc.org_id,
            user_id=doc.user_id,
            uploaded_at=doc.uploaded_at,
        )
        _apply_document(row, doc)

        try:
            async with AsyncSession(self._engine) as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert document {doc.document_id}: {e}")
            raise StorageError(f"Could not save document record: {type(e).__name__}") from e

    async def get(self, document_id: uuid.UUID, ctx: RequestContext) -> Document | None:
        """Get document by ID."""
        try:
            async with AsyncSession(self._engine) as session:
                result = await session.execute(
                    select_documents(ctx).where(DocumentRow.document_id == document_id)
                )
                row = result.scalar_one_or_none()

                if row is None:
                    return None

                return _row_to_document(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load document {document_id}: {e}")
            raise StorageError(f"Could not load document record: {type(e).__name__}") from e

    async def save(self, doc: Document, ctx: RequestContext) -> bool:
        """Replace a stored document."""
        try:
            async with AsyncSession(self._engine) as session:
                result = await session.execute(
                    select_documents(ctx).where(DocumentRow.document_id == doc.document_id)
                )
                row = result.scalar_one_or_none()

                if row is None:
                    return False

                _apply_document(row, doc)
                await session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to update document {doc.document_id}: {e}")
            raise StorageError(f"Could not update document record: {type(e).__name__}") from e

    async def list(self, ctx: RequestContext) -> list[Document]:
        """List the tenant's documents, newest first."""
        try:
            async with AsyncSession(self._engine) as session:
                result = await session.execute(
                    select_documents(ctx).order_by(DocumentRow.uploaded_at.desc())
                )
                return [_row_to_document(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list documents for org {ctx.org_id}: {e}")
            raise StorageError(f"Could not list documents: {type(e).__name__}") from e

    async def delete(self, document_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete document by ID."""
        try:
            async with AsyncSession(self._engine) as session:
                result = await session.execute(
                    delete(DocumentRow).where(
                        DocumentRow.document_id == document_id,
                        DocumentRow.org_id == ctx.org_id,
                    )
                )
                await session.commit()
                return bool(result.rowcount)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete document {document_id}: {e}")
            raise StorageError(f"Could not delete document record: {type(e).__name__}") from e


class SqlDraftRepository:
    """SQL implementation of DraftRepository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def add_many(self, drafts: list[QuestionDraftRecord]) -> None:
        """Persist drafts in one transaction."""
        rows = [
            QuestionDraftRow(
                draft_id=d.draft_id,
                org_id=d.org_id,
                user_id=d.user_id,
                document_id=d.document_id,
                category_node_id=d.category_node_id,
                source=d.source.value,
                question_text=d.question_text,
                question_type=d.question_type.value,
                options=[o.model_dump(by_alias=True) for o in d.options],
                category=d.category,
                difficulty=d.difficulty.value,
                explanation=d.explanation,
                focus=d.focus,
                status=d.status.value,
                created_by=d.created_by,
                created_at=d.created_at,
            )
            for d in drafts
        ]

        try:
            async with AsyncSession(self._engine) as session:
                session.add_all(rows)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert {len(rows)} question drafts: {e}")
            raise StorageError(f"Could not save question drafts: {type(e).__name__}") from e

    async def list(
        self, ctx: RequestContext, document_id: uuid.UUID | None = None
    ) -> list[QuestionDraftRecord]:
        """List the tenant's drafts, newest first."""
        query = select_drafts(ctx)
        if document_id is not None:
            query = query.where(QuestionDraftRow.document_id == document_id)
        query = query.order_by(QuestionDraftRow.created_at.desc())

        try:
            async with AsyncSession(self._engine) as session:
                result = await session.execute(query)
                return [_row_to_draft(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list question drafts for org {ctx.org_id}: {e}")
            raise StorageError(f"Could not list question drafts: {type(e).__name__}") from e
