"""User edits to a processed document: category tree CRUD and metadata."""

import logging
import uuid

from backend.app.db.context import RequestContext
from backend.app.db.repositories import DocumentRepository
from backend.app.docs import tree
from backend.app.docs.processor import utcnow, validate_title
from backend.app.errors import NotFoundError, ValidationError
from backend.app.models.docs import CategoryNode, Document

logger = logging.getLogger(__name__)


class DocumentEditor:
    """Applies edits to documents, re-checking ownership on every call."""

    def __init__(self, repository: DocumentRepository, *, name_max_length: int = 100) -> None:
        self._repo = repository
        self._name_max_length = name_max_length

    async def _load(self, ctx: RequestContext, document_id: uuid.UUID) -> Document:
        doc = await self._repo.get(document_id, ctx)
        if doc is None:
            raise NotFoundError(f"Document {document_id} not found")
        return doc

    async def _store(self, ctx: RequestContext, doc: Document, **changes: object) -> Document:
        updated = doc.model_copy(update={**changes, "updated_at": utcnow()})
        if not await self._repo.save(updated, ctx):
            raise NotFoundError(f"Document {doc.document_id} not found")
        return updated

    def _check_name(self, name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Category name is required")
        if len(cleaned) > self._name_max_length:
            raise ValidationError(
                f"Category name must be at most {self._name_max_length} characters"
            )
        return cleaned

    async def add_node(
        self,
        ctx: RequestContext,
        document_id: uuid.UUID,
        parent_node_id: str | None,
        name: str,
        content: str,
    ) -> tuple[list[CategoryNode], CategoryNode]:
        """Add a category at the top level or under parent_node_id.

        Returns:
            (updated tree, created node)

        Raises:
            NotFoundError: Unknown document or parent node
            ValidationError: Invalid name
        """
        name = self._check_name(name)
        doc = await self._load(ctx, document_id)
        categories, created = tree.add_node(doc.categories, parent_node_id, name, content or "")
        await self._store(ctx, doc, categories=categories)
        logger.info(f"Added category {created.id} to document {document_id}")
        return categories, created

    async def update_node(
        self,
        ctx: RequestContext,
        document_id: uuid.UUID,
        node_id: str,
        *,
        name: str | None = None,
        content: str | None = None,
    ) -> list[CategoryNode]:
        """Patch a category's name and/or content at any depth.

        Raises:
            NotFoundError: Unknown document or node
            ValidationError: Nothing to update or invalid name
        """
        if name is None and content is None:
            raise ValidationError("Provide a name or content to update")
        if name is not None:
            name = self._check_name(name)

        doc = await self._load(ctx, document_id)
        categories = tree.update_node(doc.categories, node_id, name=name, content=content)
        await self._store(ctx, doc, categories=categories)
        return categories

    async def delete_node(
        self, ctx: RequestContext, document_id: uuid.UUID, node_id: str
    ) -> list[CategoryNode]:
        """Delete a category and its subtree. Unknown node ids are a no-op.

        Raises:
            NotFoundError: Unknown document
        """
        doc = await self._load(ctx, document_id)
        categories, removed = tree.remove_node(doc.categories, node_id)
        if not removed:
            logger.info(f"Category {node_id} not in document {document_id}, nothing to delete")
            return categories

        await self._store(ctx, doc, categories=categories)
        return categories

    async def update_title(
        self, ctx: RequestContext, document_id: uuid.UUID, title: str
    ) -> Document:
        """Rename a document."""
        title = validate_title(title)
        doc = await self._load(ctx, document_id)
        return await self._store(ctx, doc, title=title)

    async def update_description(
        self, ctx: RequestContext, document_id: uuid.UUID, description: str
    ) -> Document:
        """Replace a document's description (may be empty)."""
        doc = await self._load(ctx, document_id)
        return await self._store(ctx, doc, description=(description or "").strip())
