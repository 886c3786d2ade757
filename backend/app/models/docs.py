"""Document domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class DocumentStatus(str, Enum):
    """Processing status of an uploaded document."""

    uploaded = "uploaded"
    parsing = "parsing"
    categorizing = "categorizing"
    processed = "processed"
    error = "error"


TERMINAL_STATUSES = frozenset({DocumentStatus.processed, DocumentStatus.error})


class FileKind(str, Enum):
    """Declared file type of an uploaded document."""

    pdf = "pdf"
    docx = "docx"
    txt = "txt"
    md = "md"


class QuestionGenerationStatus(str, Enum):
    """State of question generation for a document."""

    none = "none"
    pending = "pending"
    completed = "completed"
    failed = "failed"


class CategoryNode(BaseModel):
    """One named section of a document, with nested subsections."""

    id: str
    name: str
    content: str = ""
    children: list["CategoryNode"] = Field(default_factory=list)


class Document(BaseModel):
    """Uploaded document with its extracted text and category tree."""

    document_id: UUID
    org_id: UUID
    user_id: UUID
    title: str
    description: str = ""
    file_path: str
    original_file_name: str
    file_kind: FileKind
    extracted_text: str | None = None
    categories: list[CategoryNode] = Field(default_factory=list)
    status: DocumentStatus = DocumentStatus.uploaded
    error_message: str | None = None
    question_generation_status: QuestionGenerationStatus = QuestionGenerationStatus.none
    question_count: int = 0
    uploaded_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def validate_error_message(self) -> "Document":
        """Error message is present exactly when status is error."""
        if self.status == DocumentStatus.error and not self.error_message:
            raise ValueError("error_message is required when status is 'error'")
        if self.status != DocumentStatus.error and self.error_message is not None:
            raise ValueError("error_message must be unset unless status is 'error'")
        return self


class DocumentSummary(BaseModel):
    """Document metadata for listing (no text, no node contents)."""

    document_id: UUID
    title: str
    description: str
    original_file_name: str
    file_kind: FileKind
    status: DocumentStatus
    category_count: int
    question_generation_status: QuestionGenerationStatus
    uploaded_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentSummary":
        return cls(
            document_id=doc.document_id,
            title=doc.title,
            description=doc.description,
            original_file_name=doc.original_file_name,
            file_kind=doc.file_kind,
            status=doc.status,
            category_count=len(doc.categories),
            question_generation_status=doc.question_generation_status,
            uploaded_at=doc.uploaded_at,
            updated_at=doc.updated_at,
        )


class DocumentStatusView(BaseModel):
    """Lightweight status poll result."""

    status: DocumentStatus
    error_message: str | None = None
    title: str
    uploaded_at: datetime
