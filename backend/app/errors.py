"""Service error kinds shared by the pipeline, generation and API layers."""


class ServiceError(Exception):
    """Base class for all domain errors surfaced to callers."""

    kind = "service_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Caller supplied invalid input."""

    kind = "validation_error"


class NotFoundError(ServiceError):
    """Entity is absent or not owned by the requesting tenant."""

    kind = "not_found"


class StorageError(ServiceError):
    """Persistence or file storage failed."""

    kind = "storage_error"


class ExtractionError(ServiceError):
    """Text extraction failed.

    Attributes:
        reason: One of "unreadable", "unsupported", "not_found"
    """

    kind = "extraction_error"

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or f"Text extraction failed: {reason}")
        self.reason = reason


class GenerationError(ServiceError):
    """Structured completion failed.

    Attributes:
        reason: One of "unavailable", "malformed_output", "rejected", "timeout"
    """

    kind = "generation_error"

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or f"AI generation failed: {reason}")
        self.reason = reason
