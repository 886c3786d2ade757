"""Persistence gate for generated drafts."""

import logging

from backend.app.models.common import SINGLE_ANSWER_TYPES, Difficulty, QuestionType
from backend.app.models.questions import GeneratedQuestionDraft

logger = logging.getLogger(__name__)

_KNOWN_TYPES = frozenset(t.value for t in QuestionType)
_KNOWN_DIFFICULTIES = frozenset(d.value for d in Difficulty)


def draft_issues(draft: GeneratedQuestionDraft) -> list[str]:
    """Return the reasons a draft cannot be persisted (empty when valid)."""
    issues: list[str] = []

    if not draft.question_text.strip():
        issues.append("missing question text")
    if draft.question_type not in _KNOWN_TYPES:
        issues.append(f"unknown question type '{draft.question_type}'")
    if draft.difficulty not in _KNOWN_DIFFICULTIES:
        issues.append(f"unknown difficulty '{draft.difficulty}'")

    options = draft.options
    if len(options) < 2:
        issues.append("fewer than two options")
    if any(not o.text.strip() for o in options):
        issues.append("empty option text")

    correct = sum(1 for o in options if o.is_correct)
    if correct == 0:
        issues.append("no correct option")
    elif draft.question_type in SINGLE_ANSWER_TYPES and correct != 1:
        issues.append("single-answer question with several correct options")

    if draft.question_type == QuestionType.true_false.value and len(options) != 2:
        issues.append("true-false question must have exactly two options")

    return issues


def split_valid(
    drafts: list[GeneratedQuestionDraft],
) -> tuple[list[GeneratedQuestionDraft], list[GeneratedQuestionDraft]]:
    """Mark drafts valid/invalid.

    Returns:
        (valid drafts, invalid drafts), each with validation_status set
    """
    valid: list[GeneratedQuestionDraft] = []
    invalid: list[GeneratedQuestionDraft] = []
    for draft in drafts:
        issues = draft_issues(draft)
        if issues:
            logger.info(
                f"Rejected generated question '{draft.question_text[:60]}': {', '.join(issues)}"
            )
            invalid.append(
                draft.model_copy(
                    update={"validation_status": "invalid", "validation_issues": issues}
                )
            )
        else:
            valid.append(draft.model_copy(update={"validation_status": "valid"}))
    return valid, invalid
