"""Question generation endpoints - document sections, menus, draft listing."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_generation_service
from backend.app.db.context import RequestContext
from backend.app.generation.service import QuestionGenerationService
from backend.app.models.common import Difficulty, QuestionType
from backend.app.models.questions import GenerationReport, MenuCatalog, QuestionDraftRecord

router = APIRouter(tags=["questions"])


class GenerationOptions(BaseModel):
    """Options shared by both generation endpoints."""

    questions_per_category: int = Field(3, ge=1, le=20)
    question_types: list[QuestionType] = Field(
        default_factory=lambda: [QuestionType.multiple_choice_single, QuestionType.true_false],
        min_length=1,
    )
    difficulty: Difficulty = Difficulty.medium
    focus_areas: list[str] = Field(default_factory=list)


class DocumentQuestionsRequest(GenerationOptions):
    """Request body for POST /documents/{id}/questions."""

    category_ids: list[str] = Field(..., min_length=1)


class MenuQuestionsRequest(GenerationOptions):
    """Request body for POST /questions/menu."""

    catalog: MenuCatalog
    categories: list[str] | None = Field(None, description="Category labels; omit for all")


class DraftListResponse(BaseModel):
    """Response for GET /questions/drafts."""

    drafts: list[QuestionDraftRecord]


@router.post("/documents/{document_id}/questions", response_model=GenerationReport)
async def generate_document_questions(
    document_id: uuid.UUID,
    request: DocumentQuestionsRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[QuestionGenerationService, Depends(get_generation_service)],
) -> GenerationReport:
    """Generate review-pending questions from selected document categories."""
    return await service.generate_for_document(
        ctx,
        document_id,
        request.category_ids,
        questions_per_category=request.questions_per_category,
        question_types=request.question_types,
        difficulty=request.difficulty,
        focus_areas=request.focus_areas,
    )


@router.post("/questions/menu", response_model=GenerationReport)
async def generate_menu_questions(
    request: MenuQuestionsRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[QuestionGenerationService, Depends(get_generation_service)],
) -> GenerationReport:
    """Generate review-pending questions from a menu catalog."""
    return await service.generate_for_menu(
        ctx,
        request.catalog,
        categories=request.categories,
        questions_per_category=request.questions_per_category,
        question_types=request.question_types,
        difficulty=request.difficulty,
        focus_areas=request.focus_areas or None,
    )


@router.get("/questions/drafts", response_model=DraftListResponse)
async def list_drafts(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[QuestionGenerationService, Depends(get_generation_service)],
    document_id: Annotated[uuid.UUID | None, Query()] = None,
) -> DraftListResponse:
    """List generated questions awaiting review."""
    return DraftListResponse(drafts=await service.list_drafts(ctx, document_id=document_id))
