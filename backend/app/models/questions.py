"""Question generation models: tasks, content units and drafts."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.models.common import (
    ERROR_MARKER_TYPE,
    ContentDomain,
    Difficulty,
    DraftStatus,
    QuestionType,
)


class QuestionOption(BaseModel):
    """Answer option as returned by the model (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str = ""
    is_correct: bool = Field(False, alias="isCorrect")


class GeneratedQuestionDraft(BaseModel):
    """Question produced by the LLM, before review.

    Fields are lenient on purpose: raw model output is parsed into this shape
    first and checked by the validation gate before anything is persisted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    question_text: str = Field("", alias="questionText")
    question_type: str = Field("", alias="questionType")
    options: list[QuestionOption] = Field(default_factory=list)
    category: str | None = None
    difficulty: str | None = None
    explanation: str | None = None
    focus: str | None = None
    validation_status: Literal["unchecked", "valid", "invalid"] = "unchecked"
    validation_issues: list[str] = Field(default_factory=list)

    @field_validator("question_text", "question_type", mode="before")
    @classmethod
    def _coerce_required_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, (list, dict)):
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("category", "difficulty", "explanation", "focus", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> Any:
        # Off-type scalars become text, anything structured is dropped
        if isinstance(value, (list, dict)):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @property
    def is_diagnostic(self) -> bool:
        """True for the placeholder emitted in place of a failed task."""
        return self.question_type == ERROR_MARKER_TYPE


class MenuItemFacts(BaseModel):
    """Facts about one menu item that questions may be asked about."""

    name: str = Field(..., min_length=1)
    description: str = ""
    ingredients: list[str] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list)


class MenuCategoryUnit(BaseModel):
    """Menu category with its items (catalog domain)."""

    domain: Literal["menu"] = "menu"
    label: str
    items: list[MenuItemFacts] = Field(default_factory=list)


class PolicySectionUnit(BaseModel):
    """Free-text section of a policy document (policy domain)."""

    domain: Literal["policy"] = "policy"
    label: str
    text: str
    node_id: str | None = None


ContentUnit = MenuCategoryUnit | PolicySectionUnit


class GenerationTask(BaseModel):
    """One unit of LLM work: generate questions about a single content unit."""

    task_id: str
    unit: ContentUnit = Field(..., discriminator="domain")
    desired_count: int = Field(3, ge=1, le=50)
    question_types: list[QuestionType] = Field(
        default_factory=lambda: [QuestionType.multiple_choice_single, QuestionType.true_false]
    )
    difficulty: Difficulty = Difficulty.medium
    focus_areas: list[str] = Field(default_factory=list)
    contextual_names: list[str] = Field(default_factory=list)
    contextual_keywords: list[str] = Field(default_factory=list)


class MenuCatalog(BaseModel):
    """Menu submitted for question generation."""

    name: str = Field(..., min_length=1, max_length=200)
    categories: list[MenuCategoryUnit] = Field(default_factory=list)


class QuestionDraftRecord(BaseModel):
    """Persisted question awaiting review."""

    draft_id: UUID
    org_id: UUID
    user_id: UUID
    document_id: UUID | None = None
    category_node_id: str | None = None
    source: ContentDomain
    question_text: str
    question_type: QuestionType
    options: list[QuestionOption]
    category: str
    difficulty: Difficulty
    explanation: str
    focus: str | None = None
    status: DraftStatus = DraftStatus.pending_review
    created_by: Literal["ai", "manual"] = "ai"
    created_at: datetime


class GenerationReport(BaseModel):
    """Summary of one generation request."""

    document_id: UUID | None = None
    tasks: int
    failed_tasks: int
    generated: int
    persisted: int
    rejected: int
    drafts: list[QuestionDraftRecord] = Field(default_factory=list)
