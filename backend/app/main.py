"""FastAPI application factory and default app instance."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from backend.app.api.errors import register_error_handlers
from backend.app.api.routes.categories import router as categories_router
from backend.app.api.routes.documents import router as documents_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.questions import router as questions_router
from backend.app.config import Settings, get_settings
from backend.app.db.engine import create_all_tables, create_async_engine_from_settings
from backend.app.db.repositories import DocumentRepository, DraftRepository
from backend.app.db.sql_repositories import SqlDocumentRepository, SqlDraftRepository
from backend.app.docs.categorizer import DocumentCategorizer
from backend.app.docs.editor import DocumentEditor
from backend.app.docs.extract import FileTextExtractor, TextExtractor
from backend.app.docs.jobs import JobRunner
from backend.app.docs.processor import DocumentProcessor
from backend.app.docs.storage import LocalFileStore
from backend.app.generation.aggregator import GenerationResultAggregator
from backend.app.generation.orchestrator import BatchOrchestrator
from backend.app.generation.prompts import default_builders
from backend.app.generation.service import QuestionGenerationService
from backend.app.llm.client import StructuredCompletionClient, get_llm_client
from backend.app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_SECONDS = 30.0


def create_app(
    settings: Settings | None = None,
    *,
    engine: AsyncEngine | None = None,
    documents: DocumentRepository | None = None,
    drafts: DraftRepository | None = None,
    llm_client: StructuredCompletionClient | None = None,
    extractor: TextExtractor | None = None,
    sleep_fn: Callable[[float], Awaitable[None]] | None = None,
) -> FastAPI:
    """Build the application and wire its services.

    Every collaborator can be injected; anything omitted is built from settings.
    """
    settings = settings or get_settings()
    engine = engine or create_async_engine_from_settings(settings)
    documents = documents or SqlDocumentRepository(engine)
    drafts = drafts or SqlDraftRepository(engine)
    llm_client = llm_client or get_llm_client(settings)
    jobs = JobRunner()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        await create_all_tables(engine)
        yield
        try:
            await asyncio.wait_for(jobs.drain(), timeout=SHUTDOWN_DRAIN_SECONDS)
        except asyncio.TimeoutError:
            logger.warning(f"Cancelling {jobs.pending} background job(s) at shutdown")
            await jobs.cancel_all()
        await engine.dispose()

    app = FastAPI(title="Knowledge Quiz API", version="0.1.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.jobs = jobs
    app.state.llm_client = llm_client
    app.state.processor = DocumentProcessor(
        repository=documents,
        store=LocalFileStore(settings.upload_dir),
        extractor=extractor or FileTextExtractor(),
        categorizer=DocumentCategorizer(
            llm_client,
            name_max_length=settings.category_name_max_length,
            content_min_length=settings.category_content_min_length,
        ),
        jobs=jobs,
        max_upload_bytes=settings.max_upload_bytes,
    )
    app.state.editor = DocumentEditor(
        documents, name_max_length=settings.category_name_max_length
    )
    app.state.generation = QuestionGenerationService(
        documents=documents,
        drafts=drafts,
        orchestrator=BatchOrchestrator(
            llm_client,
            builders=default_builders(
                settings.distractor_name_limit, settings.distractor_keyword_limit
            ),
            aggregator=GenerationResultAggregator(settings.explanation_max_length),
            sleep_fn=sleep_fn,
        ),
        batch_size=settings.generation_batch_size,
        inter_batch_delay=settings.generation_batch_delay_seconds,
        keyword_limit=settings.distractor_keyword_limit,
    )

    register_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(documents_router)
    app.include_router(categories_router)
    app.include_router(questions_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Knowledge Quiz API", "version": "0.1.0"}

    return app


app = create_app()
