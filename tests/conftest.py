"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.app.db.context import RequestContext
from backend.app.db.inmemory import InMemoryDocumentRepository, InMemoryDraftRepository
from backend.app.db.models import Base
from backend.app.models.docs import CategoryNode


@pytest.fixture
def ctx() -> RequestContext:
    """Request context for the owning tenant."""
    return RequestContext(org_id=uuid.uuid4(), user_id=uuid.uuid4())


@pytest.fixture
def other_ctx() -> RequestContext:
    """Request context for an unrelated tenant."""
    return RequestContext(org_id=uuid.uuid4(), user_id=uuid.uuid4())


@pytest.fixture
def document_repo() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def draft_repo() -> InMemoryDraftRepository:
    return InMemoryDraftRepository()


@pytest.fixture
def sample_tree() -> list[CategoryNode]:
    """Three-level tree:

    safety
      fire
        extinguishers
          class-k
      spills
    service
    """
    return [
        CategoryNode(
            id="safety",
            name="Kitchen Safety",
            content="General safety rules for all kitchen staff.",
            children=[
                CategoryNode(
                    id="fire",
                    name="Fire Safety",
                    content="Know where every exit and alarm is located.",
                    children=[
                        CategoryNode(
                            id="extinguishers",
                            name="Extinguishers",
                            content="Extinguishers are inspected monthly by the manager.",
                            children=[
                                CategoryNode(
                                    id="class-k",
                                    name="Class K",
                                    content="Use the class K extinguisher on grease fires.",
                                )
                            ],
                        )
                    ],
                ),
                CategoryNode(
                    id="spills",
                    name="Spills",
                    content="Place a wet floor sign before cleaning any spill.",
                ),
            ],
        ),
        CategoryNode(
            id="service",
            name="Guest Service",
            content="Greet every table within two minutes of seating.",
        ),
    ]


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
