"""Repository protocol interfaces for data access."""

from typing import Protocol
from uuid import UUID

from backend.app.db.context import RequestContext
from backend.app.models.docs import Document
from backend.app.models.questions import QuestionDraftRecord


class DocumentRepository(Protocol):
    """Repository for uploaded documents.

    Writes are whole-record replacements (last write wins).
    """

    async def add(self, doc: Document) -> None:
        """Persist a new document.

        Args:
            doc: Document to insert (owner taken from doc.org_id)

        Raises:
            StorageError: If the record cannot be written
        """
        ...

    async def get(self, document_id: UUID, ctx: RequestContext) -> Document | None:
        """Get document by ID.

        Args:
            document_id: Document ID
            ctx: Request context (enforces tenancy)

        Returns:
            Document or None if absent or owned by another tenant
        """
        ...

    async def save(self, doc: Document, ctx: RequestContext) -> bool:
        """Replace a stored document with the given state.

        Args:
            doc: Full document state to store
            ctx: Request context (enforces tenancy)

        Returns:
            False if the document no longer exists for this tenant
        """
        ...

    async def list(self, ctx: RequestContext) -> list[Document]:
        """List the tenant's documents, newest first.

        Args:
            ctx: Request context (enforces tenancy)

        Returns:
            Documents ordered by uploaded_at descending
        """
        ...

    async def delete(self, document_id: UUID, ctx: RequestContext) -> bool:
        """Delete document by ID.

        Args:
            document_id: Document ID
            ctx: Request context (enforces tenancy)

        Returns:
            True if a record was removed
        """
        ...


class DraftRepository(Protocol):
    """Repository for generated question drafts."""

    async def add_many(self, drafts: list[QuestionDraftRecord]) -> None:
        """Persist drafts in one unit of work.

        Raises:
            StorageError: If the records cannot be written
        """
        ...

    async def list(
        self, ctx: RequestContext, document_id: UUID | None = None
    ) -> list[QuestionDraftRecord]:
        """List the tenant's drafts, newest first.

        Args:
            ctx: Request context (enforces tenancy)
            document_id: Optional filter by source document

        Returns:
            Draft records
        """
        ...
