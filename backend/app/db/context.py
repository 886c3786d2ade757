"""Request context for tenancy enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing tenant and acting user identity.

    The org is the owning tenant of every document and draft; the user is
    recorded as the uploader/requester. All repository reads and writes are
    scoped by org_id.
    """

    org_id: UUID
    user_id: UUID

    def owns(self, org_id: UUID) -> bool:
        """Check whether a record owned by org_id is visible to this context."""
        return self.org_id == org_id
