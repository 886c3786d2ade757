"""Prompt payload builders for question generation.

Both builders share one contract: given a content unit and generation options,
return a JSON payload for the completion client. Contextual names and keywords
are distractor material from *other* content; anything belonging to the unit
itself is filtered out before capping.
"""

import json
import re
from collections import Counter
from collections.abc import Iterable
from typing import Protocol

from backend.app.llm.schemas import MENU_QUESTION_INSTRUCTION, POLICY_QUESTION_INSTRUCTION
from backend.app.models.common import Difficulty, QuestionType
from backend.app.models.questions import ContentUnit, MenuCategoryUnit, PolicySectionUnit

DEFAULT_NAME_LIMIT = 30
DEFAULT_KEYWORD_LIMIT = 50

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z'-]{4,}")
_STOPWORDS = frozenset(
    {
        "about", "above", "after", "again", "against", "all", "along", "also", "among",
        "because", "before", "being", "below", "between", "could", "during", "each",
        "every", "first", "following", "from", "have", "having", "into", "itself",
        "made", "make", "must", "never", "other", "should", "since", "their", "there",
        "these", "they", "thing", "those", "through", "under", "until", "using", "when",
        "where", "which", "while", "within", "without", "would", "your",
    }
)


def select_contextual(values: Iterable[str], exclude: Iterable[str], limit: int) -> list[str]:
    """Dedupe values (case-insensitive, order kept), drop excluded ones, cap at limit."""
    excluded = {v.strip().lower() for v in exclude if v and v.strip()}
    seen: set[str] = set()
    selected: list[str] = []
    for value in values:
        cleaned = (value or "").strip()
        key = cleaned.lower()
        if not cleaned or key in excluded or key in seen:
            continue
        seen.add(key)
        selected.append(cleaned)
        if len(selected) >= limit:
            break
    return selected


def extract_keywords(texts: Iterable[str], limit: int = DEFAULT_KEYWORD_LIMIT) -> list[str]:
    """Most frequent content words across texts, for policy-domain distractors."""
    counts: Counter[str] = Counter()
    for text in texts:
        for word in _WORD_RE.findall(text or ""):
            lowered = word.lower().strip("'-")
            if lowered not in _STOPWORDS:
                counts[lowered] += 1
    return [word for word, _ in counts.most_common(limit)]


class PromptBuilder(Protocol):
    """Builds the user payload for one generation task."""

    system_instruction: str

    def build(
        self,
        unit: ContentUnit,
        *,
        focus_areas: list[str],
        desired_count: int,
        question_types: list[QuestionType],
        difficulty: Difficulty,
        contextual_names: list[str],
        contextual_keywords: list[str],
    ) -> str:
        """Serialize one task into a prompt payload."""
        ...


class MenuPromptBuilder:
    """Catalog-domain builder: menu category with item facts."""

    system_instruction = MENU_QUESTION_INSTRUCTION

    def __init__(
        self, name_limit: int = DEFAULT_NAME_LIMIT, keyword_limit: int = DEFAULT_KEYWORD_LIMIT
    ) -> None:
        self._name_limit = name_limit
        self._keyword_limit = keyword_limit

    def build(
        self,
        unit: ContentUnit,
        *,
        focus_areas: list[str],
        desired_count: int,
        question_types: list[QuestionType],
        difficulty: Difficulty,
        contextual_names: list[str],
        contextual_keywords: list[str],
    ) -> str:
        if not isinstance(unit, MenuCategoryUnit):
            raise TypeError(f"MenuPromptBuilder cannot build for {type(unit).__name__}")

        own_names = [item.name for item in unit.items]
        own_ingredients = [i for item in unit.items for i in item.ingredients]

        payload = {
            "categoryName": unit.label,
            "targetQuestionCount": desired_count,
            "questionTypes": [t.value for t in question_types],
            "difficulty": difficulty.value,
            "questionFocusAreas": focus_areas,
            "itemsInCategory": [
                {
                    "name": item.name,
                    "description": item.description,
                    "ingredients": item.ingredients,
                    "allergens": item.allergens,
                }
                for item in unit.items
            ],
            "contextualItemNames": select_contextual(
                contextual_names, own_names, self._name_limit
            ),
            "contextualIngredients": select_contextual(
                contextual_keywords, own_ingredients, self._keyword_limit
            ),
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)


class PolicyPromptBuilder:
    """Policy-domain builder: one free-text document section."""

    system_instruction = POLICY_QUESTION_INSTRUCTION

    def __init__(
        self, name_limit: int = DEFAULT_NAME_LIMIT, keyword_limit: int = DEFAULT_KEYWORD_LIMIT
    ) -> None:
        self._name_limit = name_limit
        self._keyword_limit = keyword_limit

    def build(
        self,
        unit: ContentUnit,
        *,
        focus_areas: list[str],
        desired_count: int,
        question_types: list[QuestionType],
        difficulty: Difficulty,
        contextual_names: list[str],
        contextual_keywords: list[str],
    ) -> str:
        if not isinstance(unit, PolicySectionUnit):
            raise TypeError(f"PolicyPromptBuilder cannot build for {type(unit).__name__}")

        own_words = {w.lower() for w in _WORD_RE.findall(unit.text)} | {unit.label.lower()}

        payload = {
            "sopCategoryName": unit.label,
            "sopCategoryText": unit.text,
            "targetQuestionCount": desired_count,
            "questionTypes": [t.value for t in question_types],
            "difficulty": difficulty.value,
            "questionFocusAreas": focus_areas,
            "contextualSectionNames": select_contextual(
                contextual_names, [unit.label], self._name_limit
            ),
            "contextualKeywords": select_contextual(
                contextual_keywords, own_words, self._keyword_limit
            ),
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)


def default_builders(
    name_limit: int = DEFAULT_NAME_LIMIT, keyword_limit: int = DEFAULT_KEYWORD_LIMIT
) -> dict[str, PromptBuilder]:
    """Builders keyed by content domain."""
    return {
        "menu": MenuPromptBuilder(name_limit, keyword_limit),
        "policy": PolicyPromptBuilder(name_limit, keyword_limit),
    }
