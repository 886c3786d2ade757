"""Batched, rate-limit friendly execution of generation tasks.

Tasks run in consecutive chunks of batch_size. Tasks inside a chunk call the
completion client concurrently and settle independently; the orchestrator
pauses between chunks (never after the last) and never retries.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from backend.app.errors import GenerationError, ValidationError
from backend.app.generation.aggregator import GenerationResultAggregator
from backend.app.generation.prompts import PromptBuilder, default_builders
from backend.app.llm.client import StructuredCompletionClient
from backend.app.llm.schemas import QUESTION_LIST_SCHEMA
from backend.app.models.common import ERROR_MARKER_TYPE
from backend.app.models.questions import GeneratedQuestionDraft, GenerationTask
from backend.app.utils.logging import StructuredPipelineLogger
from backend.app.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)


@dataclass
class TaskOutcome:
    """Result of one task: normalized drafts, or a diagnostic on failure."""

    task: GenerationTask
    drafts: list[GeneratedQuestionDraft] = field(default_factory=list)
    error_reason: str | None = None
    diagnostic: GeneratedQuestionDraft | None = None

    @property
    def failed(self) -> bool:
        return self.error_reason is not None


@dataclass
class BatchRunResult:
    """All task outcomes of a run, in chunk order."""

    outcomes: list[TaskOutcome]
    chunk_sizes: list[int]

    @property
    def drafts(self) -> list[GeneratedQuestionDraft]:
        """Concatenation of drafts from successful tasks."""
        return [d for o in self.outcomes for d in o.drafts]

    @property
    def diagnostics(self) -> list[GeneratedQuestionDraft]:
        """Error-marker drafts for failed tasks. Never persisted."""
        return [o.diagnostic for o in self.outcomes if o.diagnostic is not None]

    @property
    def failed_tasks(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)


def diagnostic_draft(task: GenerationTask, reason: str, message: str) -> GeneratedQuestionDraft:
    """Placeholder draft standing in for a failed task."""
    return GeneratedQuestionDraft(
        questionText=f"Question generation failed for '{task.unit.label}': {message}",
        questionType=ERROR_MARKER_TYPE,
        category=task.unit.label,
        difficulty=task.difficulty.value,
        explanation=reason,
    )


class BatchOrchestrator:
    """Runs generation tasks in rate-limited chunks, isolating task failures."""

    def __init__(
        self,
        client: StructuredCompletionClient,
        *,
        builders: dict[str, PromptBuilder] | None = None,
        aggregator: GenerationResultAggregator | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
        pipeline_logger: StructuredPipelineLogger | None = None,
        metrics: PrometheusPipelineMetrics | None = None,
    ) -> None:
        self._client = client
        self._builders = builders or default_builders()
        self._aggregator = aggregator or GenerationResultAggregator()
        self._sleep = sleep_fn or asyncio.sleep
        self._log = pipeline_logger or StructuredPipelineLogger()
        self._metrics = metrics or PrometheusPipelineMetrics()

    async def run(
        self, tasks: list[GenerationTask], batch_size: int, inter_batch_delay: float
    ) -> list[GeneratedQuestionDraft]:
        """Run tasks and return the drafts of every successful task."""
        result = await self.execute(tasks, batch_size, inter_batch_delay)
        return result.drafts

    async def execute(
        self, tasks: list[GenerationTask], batch_size: int, inter_batch_delay: float
    ) -> BatchRunResult:
        """Run tasks chunk by chunk and return every outcome.

        Args:
            tasks: Independent generation tasks
            batch_size: Maximum concurrent completion calls
            inter_batch_delay: Seconds to pause between chunks

        Returns:
            BatchRunResult with outcomes in chunk order

        Raises:
            ValidationError: If batch_size < 1 or the delay is negative
        """
        if batch_size < 1:
            raise ValidationError("batch_size must be at least 1")
        if inter_batch_delay < 0:
            raise ValidationError("inter_batch_delay must not be negative")

        chunks = [tasks[i : i + batch_size] for i in range(0, len(tasks), batch_size)]
        outcomes: list[TaskOutcome] = []

        for index, chunk in enumerate(chunks):
            if index > 0:
                logger.info(f"Pausing {inter_batch_delay}s before generation chunk {index + 1}")
                await self._sleep(inter_batch_delay)

            started = time.perf_counter()
            settled = await asyncio.gather(
                *(self._run_task(task, index) for task in chunk), return_exceptions=True
            )
            self._metrics.record_batch_latency((time.perf_counter() - started) * 1000)

            for task, item in zip(chunk, settled):
                if isinstance(item, BaseException):
                    if isinstance(item, asyncio.CancelledError):
                        raise item
                    logger.error(f"Generation task {task.task_id} crashed: {item!r}")
                    self._metrics.inc_task("error")
                    item = TaskOutcome(
                        task=task,
                        error_reason="internal",
                        diagnostic=diagnostic_draft(task, "internal", type(item).__name__),
                    )
                outcomes.append(item)

        result = BatchRunResult(outcomes=outcomes, chunk_sizes=[len(c) for c in chunks])
        logger.info(
            f"Generation run finished: {len(tasks)} task(s) in {len(chunks)} chunk(s), "
            f"{result.failed_tasks} failed, {len(result.drafts)} draft(s)"
        )
        return result

    async def _run_task(self, task: GenerationTask, chunk_index: int) -> TaskOutcome:
        builder = self._builders[task.unit.domain]
        payload = builder.build(
            task.unit,
            focus_areas=task.focus_areas,
            desired_count=task.desired_count,
            question_types=task.question_types,
            difficulty=task.difficulty,
            contextual_names=task.contextual_names,
            contextual_keywords=task.contextual_keywords,
        )

        started = time.perf_counter()
        try:
            raw = await self._client.complete(
                system_instruction=builder.system_instruction,
                output_schema=QUESTION_LIST_SCHEMA,
                user_payload=payload,
            )
            if not isinstance(raw, list):
                raise GenerationError("malformed_output", "AI did not return a list of questions")
        except GenerationError as e:
            latency_ms = (time.perf_counter() - started) * 1000
            self._log.log_task(
                task.task_id, task.unit.label, chunk_index, "error", latency_ms,
                error_reason=e.reason,
            )
            self._metrics.inc_task("error")
            return TaskOutcome(
                task=task,
                error_reason=e.reason,
                diagnostic=diagnostic_draft(task, e.reason, e.message),
            )

        drafts = self._aggregator.normalize(raw, task)
        latency_ms = (time.perf_counter() - started) * 1000
        self._log.log_task(
            task.task_id, task.unit.label, chunk_index, "success", latency_ms,
            draft_count=len(drafts),
        )
        self._metrics.inc_task("success")
        return TaskOutcome(task=task, drafts=drafts)
