"""Question generation for documents and menus, persisted for review."""

import logging
import uuid
from datetime import datetime, timezone

from backend.app.db.context import RequestContext
from backend.app.db.repositories import DocumentRepository, DraftRepository
from backend.app.docs.tree import find_node, iter_nodes
from backend.app.errors import GenerationError, NotFoundError, StorageError, ValidationError
from backend.app.generation.orchestrator import BatchOrchestrator, BatchRunResult
from backend.app.generation.prompts import extract_keywords
from backend.app.generation.validation import split_valid
from backend.app.models.common import ContentDomain, Difficulty, QuestionType
from backend.app.models.docs import (
    TERMINAL_STATUSES,
    CategoryNode,
    Document,
    QuestionGenerationStatus,
)
from backend.app.models.questions import (
    GenerationReport,
    GenerationTask,
    MenuCatalog,
    PolicySectionUnit,
    QuestionDraftRecord,
)
from backend.app.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_TYPES = [QuestionType.multiple_choice_single, QuestionType.true_false]
DEFAULT_MENU_FOCUS_AREAS = ["Ingredients", "Allergens", "Dietary Information"]


class QuestionGenerationService:
    """Builds tasks from documents or menus, runs them and stores valid drafts."""

    def __init__(
        self,
        *,
        documents: DocumentRepository,
        drafts: DraftRepository,
        orchestrator: BatchOrchestrator,
        batch_size: int = 3,
        inter_batch_delay: float = 5.0,
        keyword_limit: int = 50,
        metrics: PrometheusPipelineMetrics | None = None,
    ) -> None:
        self._documents = documents
        self._drafts = drafts
        self._orchestrator = orchestrator
        self._batch_size = batch_size
        self._inter_batch_delay = inter_batch_delay
        self._keyword_limit = keyword_limit
        self._metrics = metrics or PrometheusPipelineMetrics()

    async def generate_for_document(
        self,
        ctx: RequestContext,
        document_id: uuid.UUID,
        category_ids: list[str],
        *,
        questions_per_category: int = 3,
        question_types: list[QuestionType] | None = None,
        difficulty: Difficulty = Difficulty.medium,
        focus_areas: list[str] | None = None,
    ) -> GenerationReport:
        """Generate questions for selected categories of a processed document.

        Args:
            ctx: Request context (owner)
            document_id: Source document
            category_ids: Node ids at any depth
            questions_per_category: Questions requested per node
            question_types: Allowed question types
            difficulty: Requested difficulty
            focus_areas: Optional themes to cover

        Returns:
            GenerationReport with the persisted drafts

        Raises:
            NotFoundError: Unknown document or category id
            ValidationError: Document not ready or no category has content
            GenerationError: No valid question could be produced
        """
        doc = await self._documents.get(document_id, ctx)
        if doc is None:
            raise NotFoundError(f"Document {document_id} not found")
        if doc.status not in TERMINAL_STATUSES or not doc.categories:
            raise ValidationError("Document has not finished processing")
        if not category_ids:
            raise ValidationError("Select at least one category")

        nodes: list[CategoryNode] = []
        for node_id in dict.fromkeys(category_ids):
            node = find_node(doc.categories, node_id)
            if node is None:
                raise NotFoundError(f"Category {node_id} not found")
            if not node.content.strip():
                logger.info(f"Skipping category '{node.name}' ({node_id}): no content")
                continue
            nodes.append(node)

        if not nodes:
            raise ValidationError("None of the selected categories has any content")

        all_nodes = [n for n, _ in iter_nodes(doc.categories)]
        tasks: list[GenerationTask] = []
        for node in nodes:
            others = [n for n in all_nodes if n.id != node.id]
            tasks.append(
                GenerationTask(
                    task_id=f"{document_id.hex[:8]}-{node.id[:8]}",
                    unit=PolicySectionUnit(label=node.name, text=node.content, node_id=node.id),
                    desired_count=questions_per_category,
                    question_types=question_types or DEFAULT_QUESTION_TYPES,
                    difficulty=difficulty,
                    focus_areas=focus_areas or [],
                    contextual_names=[n.name for n in others],
                    contextual_keywords=extract_keywords(
                        (n.content for n in others), self._keyword_limit
                    ),
                )
            )

        await self._set_generation_status(ctx, doc, QuestionGenerationStatus.pending)

        try:
            report = await self._run_and_persist(
                ctx, tasks, ContentDomain.policy, document_id=document_id
            )
        except (GenerationError, StorageError):
            await self._set_generation_status(ctx, doc, QuestionGenerationStatus.failed)
            raise

        await self._set_generation_status(
            ctx, doc, QuestionGenerationStatus.completed, added=report.persisted
        )
        return report

    async def generate_for_menu(
        self,
        ctx: RequestContext,
        catalog: MenuCatalog,
        *,
        categories: list[str] | None = None,
        questions_per_category: int = 3,
        question_types: list[QuestionType] | None = None,
        difficulty: Difficulty = Difficulty.medium,
        focus_areas: list[str] | None = None,
    ) -> GenerationReport:
        """Generate questions for the categories of a menu.

        Contextual names and ingredients for each category come from the items
        of every other category.

        Raises:
            ValidationError: No selected category has items
            GenerationError: No valid question could be produced
        """
        wanted = {c.strip().lower() for c in categories} if categories else None
        units = [
            u
            for u in catalog.categories
            if u.items and (wanted is None or u.label.strip().lower() in wanted)
        ]
        if not units:
            raise ValidationError("No menu category with items was selected")

        tasks: list[GenerationTask] = []
        for index, unit in enumerate(units):
            other_items = [
                item
                for other in catalog.categories
                if other is not unit
                for item in other.items
            ]
            tasks.append(
                GenerationTask(
                    task_id=f"menu-{index + 1}-{unit.label[:20]}",
                    unit=unit,
                    desired_count=questions_per_category,
                    question_types=question_types or DEFAULT_QUESTION_TYPES,
                    difficulty=difficulty,
                    focus_areas=focus_areas or DEFAULT_MENU_FOCUS_AREAS,
                    contextual_names=[item.name for item in other_items],
                    contextual_keywords=[i for item in other_items for i in item.ingredients],
                )
            )

        logger.info(f"Generating menu questions for '{catalog.name}': {len(tasks)} categories")
        return await self._run_and_persist(ctx, tasks, ContentDomain.menu)

    async def list_drafts(
        self, ctx: RequestContext, document_id: uuid.UUID | None = None
    ) -> list[QuestionDraftRecord]:
        """List the caller's pending drafts."""
        return await self._drafts.list(ctx, document_id=document_id)

    async def _run_and_persist(
        self,
        ctx: RequestContext,
        tasks: list[GenerationTask],
        source: ContentDomain,
        document_id: uuid.UUID | None = None,
    ) -> GenerationReport:
        result = await self._orchestrator.execute(
            tasks, self._batch_size, self._inter_batch_delay
        )
        for diagnostic in result.diagnostics:
            logger.warning(f"Generation diagnostic: {diagnostic.question_text}")

        records: list[QuestionDraftRecord] = []
        generated = 0
        rejected = 0
        now = datetime.now(timezone.utc)

        for outcome in result.outcomes:
            generated += len(outcome.drafts)
            valid, invalid = split_valid(outcome.drafts)
            rejected += len(invalid)
            node_id = getattr(outcome.task.unit, "node_id", None)
            for draft in valid:
                records.append(
                    QuestionDraftRecord(
                        draft_id=uuid.uuid4(),
                        org_id=ctx.org_id,
                        user_id=ctx.user_id,
                        document_id=document_id,
                        category_node_id=node_id,
                        source=source,
                        question_text=draft.question_text.strip(),
                        question_type=draft.question_type,
                        options=draft.options,
                        category=draft.category or outcome.task.unit.label,
                        difficulty=draft.difficulty or outcome.task.difficulty,
                        explanation=draft.explanation or "",
                        focus=draft.focus,
                        created_at=now,
                    )
                )

        self._metrics.inc_drafts("valid", len(records))
        self._metrics.inc_drafts("invalid", rejected)

        if not records:
            raise GenerationError(
                self._failure_reason(result),
                "AI did not produce any valid questions for the selected content",
            )

        await self._drafts.add_many(records)
        logger.info(
            f"Saved {len(records)} generated question(s) for review "
            f"({rejected} rejected, {result.failed_tasks} failed task(s))"
        )
        return GenerationReport(
            document_id=document_id,
            tasks=len(tasks),
            failed_tasks=result.failed_tasks,
            generated=generated,
            persisted=len(records),
            rejected=rejected,
            drafts=records,
        )

    @staticmethod
    def _failure_reason(result: BatchRunResult) -> str:
        reasons = [o.error_reason for o in result.outcomes if o.error_reason]
        if reasons and len(reasons) == len(result.outcomes):
            return reasons[0]
        return "malformed_output"

    async def _set_generation_status(
        self,
        ctx: RequestContext,
        doc: Document,
        status: QuestionGenerationStatus,
        added: int = 0,
    ) -> None:
        # Re-read so edits made while generation ran are not overwritten
        current = await self._documents.get(doc.document_id, ctx)
        if current is None:
            logger.info(f"Document {doc.document_id} deleted during question generation")
            return
        updated = current.model_copy(
            update={
                "question_generation_status": status,
                "question_count": current.question_count + added,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        await self._documents.save(updated, ctx)
