"""Structured logging for the document pipeline and question generation."""

import logging
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the application process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


class StructuredPipelineLogger:
    """Structured logger for document transitions and generation outcomes."""

    def log_transition(
        self,
        document_id: UUID,
        org_id: UUID,
        from_status: str,
        to_status: str,
        error_message: str | None = None,
    ) -> None:
        """Log a document status transition with structured data."""
        log_data: dict[str, Any] = {
            "document_id": str(document_id),
            "org_id": str(org_id),
            "from_status": from_status,
            "to_status": to_status,
        }

        if error_message:
            log_data["error_message"] = error_message

        log_msg = f"Document {document_id}: {from_status} -> {to_status}"

        if to_status == "error":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})

    def log_task(
        self,
        task_id: str,
        label: str,
        chunk_index: int,
        outcome: str,
        latency_ms: float,
        draft_count: int = 0,
        error_reason: str | None = None,
    ) -> None:
        """Log one generation task outcome with structured data."""
        log_data: dict[str, Any] = {
            "task_id": task_id,
            "label": label,
            "chunk": chunk_index,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "drafts": draft_count,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Generation task {task_id} ({label}) - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
