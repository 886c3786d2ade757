"""Tenant context dependency.

Stub bearer scheme: "Bearer <org_id>:<user_id>". Requests without a header
run as the development tenant. Real token validation sits outside this service.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.db.context import RequestContext

DEV_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
DEV_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <org_id>:<user_id>")

    Returns:
        RequestContext with org_id and user_id

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(org_id=DEV_ORG_ID, user_id=DEV_USER_ID)

    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid authorization header format")

    token = authorization[7:]
    if ":" not in token:
        raise _unauthorized("Invalid bearer token (expected org_id:user_id)")

    org_id_str, user_id_str = token.split(":", 1)
    try:
        return RequestContext(org_id=uuid.UUID(org_id_str), user_id=uuid.UUID(user_id_str))
    except ValueError as e:
        raise _unauthorized("Invalid token format (expected org_id:user_id)") from e
