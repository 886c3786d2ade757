"""Health check endpoints.

- /health: liveness, always ok while the process runs
- /healthz: readiness, checks database connectivity and reports background jobs
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

router = APIRouter()


async def check_db(engine: AsyncEngine) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness check.

    Returns:
        200 with component status if the database is reachable, 503 otherwise
    """
    db_ok, db_status = await check_db(request.app.state.engine)

    response_body = {
        "status": "ok" if db_ok else "degraded",
        "components": {
            "db": db_status,
            "llm": request.app.state.llm_client.__class__.__name__,
        },
        "pending_jobs": request.app.state.jobs.pending,
    }

    if not db_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
