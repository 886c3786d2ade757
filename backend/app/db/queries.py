"""Tenancy-safe query helpers."""

from sqlalchemy import Select, select

from backend.app.db.context import RequestContext
from backend.app.db.models import DocumentRow, QuestionDraftRow


def select_documents(ctx: RequestContext) -> Select[tuple[DocumentRow]]:
    """Select from the document table with org scoping enforced.

    Args:
        ctx: Request context with org_id

    Returns:
        Select filtered by org_id
    """
    return select(DocumentRow).where(DocumentRow.org_id == ctx.org_id)


def select_drafts(ctx: RequestContext) -> Select[tuple[QuestionDraftRow]]:
    """Select from the question_draft table with org scoping enforced.

    Args:
        ctx: Request context with org_id

    Returns:
        Select filtered by org_id
    """
    return select(QuestionDraftRow).where(QuestionDraftRow.org_id == ctx.org_id)
