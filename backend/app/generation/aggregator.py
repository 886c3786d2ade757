"""Normalization of raw structured results into question drafts."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from backend.app.models.common import Difficulty
from backend.app.models.questions import (
    GeneratedQuestionDraft,
    GenerationTask,
    QuestionOption,
)

logger = logging.getLogger(__name__)

EXPLANATION_PLACEHOLDER = "No explanation provided."

_KNOWN_DIFFICULTIES = frozenset(d.value for d in Difficulty)
_DRAFT_KEYS = ("questionText", "questionType", "category", "difficulty", "explanation", "focus")


def truncate(text: str, max_length: int) -> str:
    """Cut text to max_length characters, ending with an ellipsis when cut."""
    if len(text) <= max_length:
        return text
    return text[: max(max_length - 3, 0)] + "..."


class GenerationResultAggregator:
    """Fills defaults on raw items from one task. Never drops an item."""

    def __init__(self, explanation_max_length: int = 500) -> None:
        self._explanation_max_length = explanation_max_length

    def normalize(self, raw_items: list[Any], task: GenerationTask) -> list[GeneratedQuestionDraft]:
        """Convert raw items to drafts with category, difficulty and explanation set.

        Args:
            raw_items: Items returned by the completion client
            task: Task the items were generated for

        Returns:
            One draft per raw item, in order
        """
        drafts: list[GeneratedQuestionDraft] = []
        for raw in raw_items:
            draft = self._coerce(raw)

            explanation = (draft.explanation or "").strip()
            if explanation:
                explanation = truncate(explanation, self._explanation_max_length)
            else:
                explanation = EXPLANATION_PLACEHOLDER

            difficulty = (draft.difficulty or "").strip().lower()
            if difficulty not in _KNOWN_DIFFICULTIES:
                difficulty = task.difficulty.value

            drafts.append(
                draft.model_copy(
                    update={
                        "question_type": draft.question_type.strip().lower(),
                        "category": (draft.category or "").strip() or task.unit.label,
                        "difficulty": difficulty,
                        "explanation": explanation,
                    }
                )
            )
        return drafts

    def _coerce(self, raw: Any) -> GeneratedQuestionDraft:
        if not isinstance(raw, dict):
            logger.warning(f"Generated item is not an object: {type(raw).__name__}")
            return GeneratedQuestionDraft()
        try:
            return GeneratedQuestionDraft.model_validate(raw)
        except PydanticValidationError as e:
            # Keep the item; the validation gate decides whether it is usable
            logger.warning(f"Generated item has unexpected shape: {e.error_count()} issue(s)")

        fields = {key: raw.get(key) for key in _DRAFT_KEYS if raw.get(key) is not None}
        fields["options"] = self._coerce_options(raw.get("options"))
        return GeneratedQuestionDraft.model_validate(fields)

    def _coerce_options(self, raw_options: Any) -> list[QuestionOption]:
        """Options are kept only when every one of them parses."""
        if not isinstance(raw_options, list):
            return []
        try:
            return [QuestionOption.model_validate(o) for o in raw_options]
        except PydanticValidationError:
            return []
