"""Models package - re-exports for convenience."""

from backend.app.models.common import (
    ContentDomain,
    Difficulty,
    DraftStatus,
    QuestionType,
)
from backend.app.models.docs import (
    CategoryNode,
    Document,
    DocumentStatus,
    DocumentStatusView,
    DocumentSummary,
    FileKind,
    QuestionGenerationStatus,
)
from backend.app.models.questions import (
    GeneratedQuestionDraft,
    GenerationReport,
    GenerationTask,
    MenuCatalog,
    MenuCategoryUnit,
    MenuItemFacts,
    PolicySectionUnit,
    QuestionDraftRecord,
    QuestionOption,
)

__all__ = [
    # Common
    "ContentDomain",
    "Difficulty",
    "DraftStatus",
    "QuestionType",
    # Documents
    "CategoryNode",
    "Document",
    "DocumentStatus",
    "DocumentStatusView",
    "DocumentSummary",
    "FileKind",
    "QuestionGenerationStatus",
    # Questions
    "GeneratedQuestionDraft",
    "GenerationReport",
    "GenerationTask",
    "MenuCatalog",
    "MenuCategoryUnit",
    "MenuItemFacts",
    "PolicySectionUnit",
    "QuestionDraftRecord",
    "QuestionOption",
]
