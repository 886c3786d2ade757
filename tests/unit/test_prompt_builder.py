"""Unit tests for menu and policy prompt builders."""

import json

import pytest

from backend.app.generation.prompts import (
    MenuPromptBuilder,
    PolicyPromptBuilder,
    extract_keywords,
    select_contextual,
)
from backend.app.llm.schemas import MENU_QUESTION_INSTRUCTION, POLICY_QUESTION_INSTRUCTION
from backend.app.models.common import Difficulty, QuestionType
from backend.app.models.questions import MenuCategoryUnit, MenuItemFacts, PolicySectionUnit

TYPES = [QuestionType.multiple_choice_single, QuestionType.true_false]


@pytest.fixture
def starters() -> MenuCategoryUnit:
    return MenuCategoryUnit(
        label="Starters",
        items=[
            MenuItemFacts(
                name="Bruschetta",
                description="Toasted bread with tomato",
                ingredients=["bread", "tomato", "basil"],
                allergens=["gluten"],
            ),
            MenuItemFacts(name="Soup of the Day", ingredients=["stock"]),
        ],
    )


def test_menu_payload_fields(starters: MenuCategoryUnit) -> None:
    builder = MenuPromptBuilder()

    payload = json.loads(
        builder.build(
            starters,
            focus_areas=["Ingredients"],
            desired_count=4,
            question_types=TYPES,
            difficulty=Difficulty.hard,
            contextual_names=["Tiramisu", "Steak"],
            contextual_keywords=["mascarpone", "beef"],
        )
    )

    assert builder.system_instruction == MENU_QUESTION_INSTRUCTION
    assert payload["categoryName"] == "Starters"
    assert payload["targetQuestionCount"] == 4
    assert payload["questionTypes"] == ["multiple-choice-single", "true-false"]
    assert payload["difficulty"] == "hard"
    assert payload["questionFocusAreas"] == ["Ingredients"]
    assert payload["itemsInCategory"][0] == {
        "name": "Bruschetta",
        "description": "Toasted bread with tomato",
        "ingredients": ["bread", "tomato", "basil"],
        "allergens": ["gluten"],
    }
    assert payload["contextualItemNames"] == ["Tiramisu", "Steak"]
    assert payload["contextualIngredients"] == ["mascarpone", "beef"]


def test_menu_contextual_material_excludes_own_data_and_is_capped(
    starters: MenuCategoryUnit,
) -> None:
    builder = MenuPromptBuilder()
    names = ["bruschetta", "Steak"] + [f"Dish {i}" for i in range(40)]
    keywords = ["Tomato", "beef", "beef"] + [f"ing{i}" for i in range(80)]

    payload = json.loads(
        builder.build(
            starters,
            focus_areas=[],
            desired_count=3,
            question_types=TYPES,
            difficulty=Difficulty.medium,
            contextual_names=names,
            contextual_keywords=keywords,
        )
    )

    ctx_names = payload["contextualItemNames"]
    ctx_ingredients = payload["contextualIngredients"]
    assert len(ctx_names) == 30
    assert len(ctx_ingredients) == 50
    assert "bruschetta" not in [n.lower() for n in ctx_names]
    assert "tomato" not in [i.lower() for i in ctx_ingredients]
    assert ctx_ingredients.count("beef") == 1


def test_menu_builder_rejects_policy_unit() -> None:
    with pytest.raises(TypeError):
        MenuPromptBuilder().build(
            PolicySectionUnit(label="X", text="Y"),
            focus_areas=[],
            desired_count=1,
            question_types=TYPES,
            difficulty=Difficulty.medium,
            contextual_names=[],
            contextual_keywords=[],
        )


def test_policy_payload_fields() -> None:
    builder = PolicyPromptBuilder()
    unit = PolicySectionUnit(
        label="Fire Safety", text="Use the class K extinguisher on grease fires."
    )

    payload = json.loads(
        builder.build(
            unit,
            focus_areas=["Equipment"],
            desired_count=2,
            question_types=[QuestionType.true_false],
            difficulty=Difficulty.easy,
            contextual_names=["Fire Safety", "Spills", "Guest Service"],
            contextual_keywords=["grease", "sign", "greeting"],
        )
    )

    assert builder.system_instruction == POLICY_QUESTION_INSTRUCTION
    assert payload["sopCategoryName"] == "Fire Safety"
    assert payload["sopCategoryText"] == unit.text
    assert payload["targetQuestionCount"] == 2
    assert payload["questionTypes"] == ["true-false"]
    assert payload["difficulty"] == "easy"
    assert payload["contextualSectionNames"] == ["Spills", "Guest Service"]
    # "grease" occurs in the section's own text
    assert payload["contextualKeywords"] == ["sign", "greeting"]


def test_select_contextual_dedupes_case_insensitively_in_order() -> None:
    assert select_contextual(["Beef", "beef", " Pork ", "", "Lamb"], ["lamb"], 10) == [
        "Beef",
        "Pork",
    ]


def test_extract_keywords_ranks_by_frequency_and_skips_stopwords() -> None:
    keywords = extract_keywords(
        ["Sanitize every surface. Sanitize utensils.", "Utensils should be sanitized."],
        limit=3,
    )

    assert keywords[0] == "sanitize"
    assert "should" not in keywords
    assert "utensils" in keywords
