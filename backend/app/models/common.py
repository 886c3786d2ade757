"""Common types and enums shared across all models."""

from enum import Enum


class QuestionType(str, Enum):
    """Quiz question type."""

    multiple_choice_single = "multiple-choice-single"
    multiple_choice_multiple = "multiple-choice-multiple"
    true_false = "true-false"


class Difficulty(str, Enum):
    """Question difficulty."""

    easy = "easy"
    medium = "medium"
    hard = "hard"


class DraftStatus(str, Enum):
    """Review status of a persisted question."""

    pending_review = "pending_review"
    active = "active"
    rejected = "rejected"


class ContentDomain(str, Enum):
    """Kind of source material a generation task is built from."""

    menu = "menu"
    policy = "policy"


# Question type emitted by the orchestrator for a failed task. Never persisted.
ERROR_MARKER_TYPE = "error-marker"

SINGLE_ANSWER_TYPES = frozenset(
    {QuestionType.multiple_choice_single.value, QuestionType.true_false.value}
)
