"""In-memory implementations of repository interfaces."""

import uuid

from backend.app.db.context import RequestContext
from backend.app.models.docs import Document
from backend.app.models.questions import QuestionDraftRecord


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository."""

    def __init__(self) -> None:
        self._docs: dict[uuid.UUID, Document] = {}

    async def add(self, doc: Document) -> None:
        """Persist a new document."""
        self._docs[doc.document_id] = doc.model_copy(deep=True)

    async def get(self, document_id: uuid.UUID, ctx: RequestContext) -> Document | None:
        """Get document by ID."""
        doc = self._docs.get(document_id)

        if doc is None:
            return None

        # Enforce tenancy
        if not ctx.owns(doc.org_id):
            return None

        return doc.model_copy(deep=True)

    async def save(self, doc: Document, ctx: RequestContext) -> bool:
        """Replace a stored document."""
        stored = self._docs.get(doc.document_id)

        if stored is None or not ctx.owns(stored.org_id):
            return False

        self._docs[doc.document_id] = doc.model_copy(deep=True)
        return True

    async def list(self, ctx: RequestContext) -> list[Document]:
        """List the tenant's documents, newest first."""
        docs = [d for d in self._docs.values() if ctx.owns(d.org_id)]
        docs.sort(key=lambda d: d.uploaded_at, reverse=True)
        return [d.model_copy(deep=True) for d in docs]

    async def delete(self, document_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete document by ID."""
        doc = self._docs.get(document_id)

        if doc is None or not ctx.owns(doc.org_id):
            return False

        del self._docs[document_id]
        return True


class InMemoryDraftRepository:
    """In-memory implementation of DraftRepository."""

    def __init__(self) -> None:
        self._drafts: list[QuestionDraftRecord] = []

    async def add_many(self, drafts: list[QuestionDraftRecord]) -> None:
        """Persist drafts."""
        self._drafts.extend(d.model_copy(deep=True) for d in drafts)

    async def list(
        self, ctx: RequestContext, document_id: uuid.UUID | None = None
    ) -> list[QuestionDraftRecord]:
        """List the tenant's drafts, newest first."""
        drafts = [
            d
            for d in self._drafts
            if ctx.owns(d.org_id) and (document_id is None or d.document_id == document_id)
        ]
        drafts.sort(key=lambda d: d.created_at, reverse=True)
        return drafts
