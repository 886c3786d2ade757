"""PostgreSQL-specific integration tests for JSONB columns.

These tests require a real PostgreSQL instance and validate that category
trees and draft options are stored as JSONB (SQLite stores plain JSON).

Run with: DATABASE_URL='postgresql://...' pytest -m postgres
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from backend.app.config import Settings
from backend.app.db.context import RequestContext
from backend.app.db.engine import create_all_tables, create_async_engine_from_settings
from backend.app.db.sql_repositories import SqlDocumentRepository
from backend.app.models.docs import CategoryNode, Document, DocumentStatus, FileKind


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    database_url = os.environ.get("DATABASE_URL", "")
    if not database_url.startswith("postgresql"):
        pytest.skip("DATABASE_URL does not point at PostgreSQL")

    engine = create_async_engine_from_settings(Settings(database_url=database_url))
    await create_all_tables(engine)
    yield engine
    await engine.dispose()


@pytest.mark.postgres
@pytest.mark.asyncio
async def test_category_tree_stored_as_jsonb(
    postgres_engine: AsyncEngine, sample_tree: list[CategoryNode]
) -> None:
    """Test that the nested tree survives a JSONB round trip and is queryable."""
    ctx = RequestContext(org_id=uuid.uuid4(), user_id=uuid.uuid4())
    repo = SqlDocumentRepository(postgres_engine)
    now = datetime.now(timezone.utc)
    doc = Document(
        document_id=uuid.uuid4(),
        org_id=ctx.org_id,
        user_id=ctx.user_id,
        title="Kitchen SOP",
        file_path="/uploads/sop.txt",
        original_file_name="sop.txt",
        file_kind=FileKind.txt,
        categories=sample_tree,
        status=DocumentStatus.processed,
        uploaded_at=now,
        updated_at=now,
    )
    await repo.add(doc)

    loaded = await repo.get(doc.document_id, ctx)
    assert loaded is not None
    assert loaded.categories == sample_tree

    async with postgres_engine.connect() as conn:
        result = await conn.execute(
            text(
                "SELECT categories->0->>'name', jsonb_typeof(categories) "
                "FROM document WHERE document_id = :document_id"
            ).bindparams(document_id=doc.document_id)
        )
        first_name, json_type = result.one()

    assert first_name == "Kitchen Safety"
    assert json_type == "array"
