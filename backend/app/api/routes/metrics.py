"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - document_transitions_total{status}
    - generation_tasks_total{outcome}
    - generation_batch_latency_ms
    - generated_drafts_total{outcome}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
