"""Category tree endpoints - add, update and delete nodes at any depth."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_editor
from backend.app.db.context import RequestContext
from backend.app.docs.editor import DocumentEditor
from backend.app.models.docs import CategoryNode

router = APIRouter(prefix="/documents/{document_id}/categories", tags=["categories"])


class AddCategoryRequest(BaseModel):
    """Request body for POST /documents/{id}/categories."""

    name: str = Field(..., min_length=1, max_length=100)
    content: str = ""
    parent_node_id: str | None = Field(None, description="Parent node; omit for top level")


class UpdateCategoryRequest(BaseModel):
    """Request body for PATCH /documents/{id}/categories/{node_id}."""

    name: str | None = Field(None, min_length=1, max_length=100)
    content: str | None = None


class CategoryTreeResponse(BaseModel):
    """Updated tree, plus the created node for additions."""

    categories: list[CategoryNode]
    node: CategoryNode | None = None


@router.post("", response_model=CategoryTreeResponse, status_code=status.HTTP_201_CREATED)
async def add_category(
    document_id: uuid.UUID,
    request: AddCategoryRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    editor: Annotated[DocumentEditor, Depends(get_editor)],
) -> CategoryTreeResponse:
    """Add a category at the top level or under a parent node."""
    categories, created = await editor.add_node(
        ctx, document_id, request.parent_node_id, request.name, request.content
    )
    return CategoryTreeResponse(categories=categories, node=created)


@router.patch("/{node_id}", response_model=CategoryTreeResponse)
async def update_category(
    document_id: uuid.UUID,
    node_id: str,
    request: UpdateCategoryRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    editor: Annotated[DocumentEditor, Depends(get_editor)],
) -> CategoryTreeResponse:
    """Patch a category's name and/or content."""
    categories = await editor.update_node(
        ctx, document_id, node_id, name=request.name, content=request.content
    )
    return CategoryTreeResponse(categories=categories)


@router.delete("/{node_id}", response_model=CategoryTreeResponse)
async def delete_category(
    document_id: uuid.UUID,
    node_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    editor: Annotated[DocumentEditor, Depends(get_editor)],
) -> CategoryTreeResponse:
    """Delete a category and its subtree. Unknown node ids leave the tree unchanged."""
    categories = await editor.delete_node(ctx, document_id, node_id)
    return CategoryTreeResponse(categories=categories)
