"""Exception handlers mapping service errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.app.errors import (
    ExtractionError,
    GenerationError,
    NotFoundError,
    ServiceError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[ServiceError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ExtractionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    GenerationError: status.HTTP_502_BAD_GATEWAY,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def service_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a ServiceError as {"detail", "error"[, "reason"]}."""
    assert isinstance(exc, ServiceError)
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    body: dict[str, str] = {"detail": exc.message, "error": exc.kind}
    reason = getattr(exc, "reason", None)
    if reason:
        body["reason"] = reason

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers for every ServiceError subclass."""
    app.add_exception_handler(ServiceError, service_error_handler)
