"""Document endpoints - upload, list, status, edit metadata, delete."""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_editor, get_processor
from backend.app.db.context import RequestContext
from backend.app.docs.editor import DocumentEditor
from backend.app.docs.processor import DocumentProcessor
from backend.app.models.docs import (
    Document,
    DocumentStatus,
    DocumentStatusView,
    DocumentSummary,
)

router = APIRouter(prefix="/documents", tags=["documents"])


class UploadDocumentResponse(BaseModel):
    """Response for POST /documents."""

    document_id: uuid.UUID
    title: str
    status: DocumentStatus
    uploaded_at: datetime


class DocumentListResponse(BaseModel):
    """Response for GET /documents."""

    documents: list[DocumentSummary]


class UpdateTitleRequest(BaseModel):
    """Request body for PATCH /documents/{id}/title."""

    title: str = Field(..., min_length=1, max_length=200)


class UpdateDescriptionRequest(BaseModel):
    """Request body for PATCH /documents/{id}/description."""

    description: str = Field("", max_length=5000)


@router.post("", response_model=UploadDocumentResponse, status_code=status.HTTP_202_ACCEPTED)
async def upload_document(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    processor: Annotated[DocumentProcessor, Depends(get_processor)],
    file: Annotated[UploadFile, File(description="PDF, DOCX, TXT or Markdown file")],
    title: Annotated[str, Form(min_length=1, max_length=200)],
    description: Annotated[str, Form(max_length=5000)] = "",
) -> UploadDocumentResponse:
    """Upload a document and start processing in the background.

    Returns:
        The new document id and its initial status (uploaded)
    """
    data = await file.read()
    doc = await processor.submit(
        ctx,
        filename=file.filename or "upload",
        content_type=file.content_type,
        data=data,
        title=title,
        description=description,
    )
    return UploadDocumentResponse(
        document_id=doc.document_id,
        title=doc.title,
        status=doc.status,
        uploaded_at=doc.uploaded_at,
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    processor: Annotated[DocumentProcessor, Depends(get_processor)],
) -> DocumentListResponse:
    """List the tenant's documents, newest first."""
    return DocumentListResponse(documents=await processor.list_documents(ctx))


@router.get("/{document_id}", response_model=Document)
async def get_document(
    document_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    processor: Annotated[DocumentProcessor, Depends(get_processor)],
) -> Document:
    """Get a document with its extracted text and category tree."""
    return await processor.get_document(ctx, document_id)


@router.get("/{document_id}/status", response_model=DocumentStatusView)
async def get_document_status(
    document_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    processor: Annotated[DocumentProcessor, Depends(get_processor)],
) -> DocumentStatusView:
    """Poll processing status."""
    return await processor.get_status(ctx, document_id)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    processor: Annotated[DocumentProcessor, Depends(get_processor)],
) -> Response:
    """Delete a document and its stored file."""
    await processor.delete_document(ctx, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{document_id}/title", response_model=Document)
async def update_title(
    document_id: uuid.UUID,
    request: UpdateTitleRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    editor: Annotated[DocumentEditor, Depends(get_editor)],
) -> Document:
    """Rename a document."""
    return await editor.update_title(ctx, document_id, request.title)


@router.patch("/{document_id}/description", response_model=Document)
async def update_description(
    document_id: uuid.UUID,
    request: UpdateDescriptionRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    editor: Annotated[DocumentEditor, Depends(get_editor)],
) -> Document:
    """Replace a document's description."""
    return await editor.update_description(ctx, document_id, request.description)
