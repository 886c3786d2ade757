"""Integration tests for the SQL repositories on in-memory SQLite."""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.app.db.context import RequestContext
from backend.app.db.sql_repositories import SqlDocumentRepository, SqlDraftRepository
from backend.app.errors import StorageError
from backend.app.models.common import ContentDomain, Difficulty, QuestionType
from backend.app.models.docs import (
    CategoryNode,
    Document,
    DocumentStatus,
    FileKind,
    QuestionGenerationStatus,
)
from backend.app.models.questions import QuestionDraftRecord, QuestionOption

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _document(ctx: RequestContext, title: str = "Kitchen SOP", offset: int = 0) -> Document:
    when = BASE_TIME + timedelta(minutes=offset)
    return Document(
        document_id=uuid.uuid4(),
        org_id=ctx.org_id,
        user_id=ctx.user_id,
        title=title,
        file_path=f"/uploads/{title}.txt",
        original_file_name=f"{title}.txt",
        file_kind=FileKind.txt,
        uploaded_at=when,
        updated_at=when,
    )


def _draft(ctx: RequestContext, document_id: uuid.UUID | None, text: str) -> QuestionDraftRecord:
    return QuestionDraftRecord(
        draft_id=uuid.uuid4(),
        org_id=ctx.org_id,
        user_id=ctx.user_id,
        document_id=document_id,
        category_node_id="fire",
        source=ContentDomain.policy,
        question_text=text,
        question_type=QuestionType.multiple_choice_single,
        options=[
            QuestionOption(text="Class K", isCorrect=True),
            QuestionOption(text="Class A", isCorrect=False),
        ],
        category="Fire Safety",
        difficulty=Difficulty.medium,
        explanation="Grease fires need class K.",
        created_at=datetime.now(timezone.utc),
    )


@pytest.mark.asyncio
async def test_document_round_trip_with_nested_tree(
    sqlite_engine: AsyncEngine, ctx: RequestContext, sample_tree: list[CategoryNode]
) -> None:
    repo = SqlDocumentRepository(sqlite_engine)
    doc = _document(ctx)
    await repo.add(doc)

    processed = doc.model_copy(
        update={
            "status": DocumentStatus.processed,
            "extracted_text": "Kitchen rules.",
            "categories": sample_tree,
        }
    )
    assert await repo.save(processed, ctx) is True

    loaded = await repo.get(doc.document_id, ctx)
    assert loaded is not None
    assert loaded.status == DocumentStatus.processed
    assert loaded.extracted_text == "Kitchen rules."
    assert loaded.categories == sample_tree
    assert loaded.question_generation_status == QuestionGenerationStatus.none


@pytest.mark.asyncio
async def test_error_status_round_trip(sqlite_engine: AsyncEngine, ctx: RequestContext) -> None:
    repo = SqlDocumentRepository(sqlite_engine)
    doc = _document(ctx)
    await repo.add(doc)

    failed = doc.model_copy(
        update={"status": DocumentStatus.error, "error_message": "PDF text extraction failed"}
    )
    await repo.save(failed, ctx)

    loaded = await repo.get(doc.document_id, ctx)
    assert loaded is not None
    assert loaded.status == DocumentStatus.error
    assert loaded.error_message == "PDF text extraction failed"


@pytest.mark.asyncio
async def test_documents_are_tenant_scoped(
    sqlite_engine: AsyncEngine, ctx: RequestContext, other_ctx: RequestContext
) -> None:
    repo = SqlDocumentRepository(sqlite_engine)
    doc = _document(ctx)
    await repo.add(doc)

    assert await repo.get(doc.document_id, other_ctx) is None
    assert await repo.list(other_ctx) == []
    assert await repo.save(doc.model_copy(update={"title": "Stolen"}), other_ctx) is False
    assert await repo.delete(doc.document_id, other_ctx) is False

    loaded = await repo.get(doc.document_id, ctx)
    assert loaded is not None
    assert loaded.title == "Kitchen SOP"


@pytest.mark.asyncio
async def test_list_newest_first(sqlite_engine: AsyncEngine, ctx: RequestContext) -> None:
    repo = SqlDocumentRepository(sqlite_engine)
    older = _document(ctx, "Older", offset=0)
    newer = _document(ctx, "Newer", offset=5)
    await repo.add(older)
    await repo.add(newer)

    assert [d.title for d in await repo.list(ctx)] == ["Newer", "Older"]


@pytest.mark.asyncio
async def test_delete_and_save_after_delete(
    sqlite_engine: AsyncEngine, ctx: RequestContext
) -> None:
    repo = SqlDocumentRepository(sqlite_engine)
    doc = _document(ctx)
    await repo.add(doc)

    assert await repo.delete(doc.document_id, ctx) is True
    assert await repo.get(doc.document_id, ctx) is None
    assert await repo.save(doc, ctx) is False
    assert await repo.delete(doc.document_id, ctx) is False


@pytest.mark.asyncio
async def test_drafts_round_trip_and_filter(
    sqlite_engine: AsyncEngine, ctx: RequestContext, other_ctx: RequestContext
) -> None:
    documents = SqlDocumentRepository(sqlite_engine)
    drafts = SqlDraftRepository(sqlite_engine)
    doc = _document(ctx)
    await documents.add(doc)

    await drafts.add_many(
        [_draft(ctx, doc.document_id, "Which extinguisher?"), _draft(ctx, None, "Menu question")]
    )

    all_drafts = await drafts.list(ctx)
    for_doc = await drafts.list(ctx, document_id=doc.document_id)

    assert len(all_drafts) == 2
    assert [d.question_text for d in for_doc] == ["Which extinguisher?"]
    assert for_doc[0].options[0].is_correct is True
    assert for_doc[0].category_node_id == "fire"
    assert for_doc[0].status == "pending_review"
    assert await drafts.list(other_ctx) == []


@pytest.mark.asyncio
async def test_add_many_with_no_drafts_is_noop(
    sqlite_engine: AsyncEngine, ctx: RequestContext
) -> None:
    drafts = SqlDraftRepository(sqlite_engine)

    await drafts.add_many([])

    assert await drafts.list(ctx) == []


@pytest.mark.asyncio
async def test_timestamps_come_back_timezone_aware(
    sqlite_engine: AsyncEngine, ctx: RequestContext
) -> None:
    documents = SqlDocumentRepository(sqlite_engine)
    drafts = SqlDraftRepository(sqlite_engine)
    doc = _document(ctx)
    await documents.add(doc)
    await drafts.add_many([_draft(ctx, doc.document_id, "Which extinguisher?")])

    loaded = await documents.get(doc.document_id, ctx)
    assert loaded is not None
    assert loaded.uploaded_at == BASE_TIME
    assert loaded.uploaded_at.tzinfo is not None
    assert loaded.updated_at.tzinfo is not None
    assert (await documents.list(ctx))[0].uploaded_at.tzinfo is not None
    assert (await drafts.list(ctx))[0].created_at.tzinfo is not None


@pytest_asyncio.fixture
async def engine_without_tables() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    yield engine
    await engine.dispose()


@pytest.mark.asyncio
async def test_database_failures_raise_storage_error(
    engine_without_tables: AsyncEngine, ctx: RequestContext
) -> None:
    documents = SqlDocumentRepository(engine_without_tables)
    drafts = SqlDraftRepository(engine_without_tables)
    document_id = uuid.uuid4()

    with pytest.raises(StorageError):
        await documents.get(document_id, ctx)
    with pytest.raises(StorageError):
        await documents.list(ctx)
    with pytest.raises(StorageError):
        await documents.delete(document_id, ctx)
    with pytest.raises(StorageError):
        await drafts.list(ctx)
