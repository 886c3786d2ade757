"""Supervised background jobs."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class JobRunner:
    """Tracks background tasks so they are neither garbage collected nor lost.

    Unexpected exceptions are logged from the done-callback; the job bodies are
    expected to record their own failure state before that point.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def submit(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule coro on the running loop and keep a reference to it."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info(f"Background job cancelled: {task.get_name()}")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Background job failed: {task.get_name()}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    @property
    def pending(self) -> int:
        """Number of jobs still running."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        """Cancel outstanding jobs and wait for them to unwind."""
        for task in list(self._tasks):
            task.cancel()
        await self.drain()
