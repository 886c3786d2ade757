"""Output schemas and system instructions for structured completions."""

from typing import Any

CATEGORY_TREE_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {"$ref": "#/$defs/category"},
    "$defs": {
        "category": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Short section heading"},
                "content": {
                    "type": "string",
                    "description": "Text belonging to this section, excluding its subsections",
                },
                "children": {
                    "type": "array",
                    "items": {"$ref": "#/$defs/category"},
                },
            },
            "required": ["name", "content"],
        }
    },
}

QUESTION_LIST_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "questionText": {"type": "string"},
            "questionType": {
                "type": "string",
                "enum": ["multiple-choice-single", "multiple-choice-multiple", "true-false"],
            },
            "options": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "text": {"type": "string"},
                        "isCorrect": {"type": "boolean"},
                    },
                    "required": ["text", "isCorrect"],
                },
            },
            "category": {"type": "string"},
            "difficulty": {"type": "string", "enum": ["easy", "medium", "hard"]},
            "explanation": {"type": "string"},
            "focus": {"type": "string"},
        },
        "required": ["questionText", "questionType", "options", "explanation"],
    },
}

CATEGORIZATION_INSTRUCTION = """You split training documents (standard operating procedures,
policies, manuals) into a hierarchy of sections.

Return an array of sections. Each section has:
- "name": the heading of the section, short (under 100 characters), taken from the document
  where a heading exists.
- "content": the text that belongs directly to this section, copied from the document, NOT
  including the text of its subsections.
- "children": optional array of subsections with the same shape.

Rules:
- Cover the whole document; do not drop procedures, numbers or warnings.
- Do not invent content or rewrite wording beyond removing page artefacts.
- Use nesting only where the document itself has subsections.
- Text before the first heading goes into a section named "Overview"."""

_QUESTION_RULES = """Question rules:
- The correct answer must be verifiable from the supplied material only.
- Questions must be clear, grammatical and unambiguous.
- "multiple-choice-single": exactly one correct option and three plausible but wrong options.
- "multiple-choice-multiple": two or more correct options out of four.
- "true-false": exactly two options, {"text": "True"} and {"text": "False"}, one correct.
- Always give a short "explanation" of why the answer is correct.
- Set "focus" to the main theme of the question.
- Set "category" to the category name given in the input.
- Generate exactly "targetQuestionCount" questions, mixing the requested question types."""

MENU_QUESTION_INSTRUCTION = f"""You write quiz questions for hospitality staff training based
strictly on menu information.

The input gives a menu category, the items in it (name, description, ingredients,
allergens), the focus areas to cover, and contextual item names and ingredients from the
rest of the menu. Use the contextual names and ingredients only as wrong options
(distractors); never as facts about the items in the category. Spread questions across the
items and focus areas.

{_QUESTION_RULES}"""

POLICY_QUESTION_INSTRUCTION = f"""You write quiz questions for employee training based on
standard operating procedures and policy documents.

The input gives the name of one document section, its full text, the desired question
types and count, and contextual section names and keywords from the rest of the document.
Base every question on the section text. Wrong options may draw on the contextual
material but must be clearly incorrect according to the section text. If the section is
long, cover different parts of it.

{_QUESTION_RULES}"""
