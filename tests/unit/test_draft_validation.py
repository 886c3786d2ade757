"""Unit tests for the draft persistence gate."""

from backend.app.generation.validation import draft_issues, split_valid
from backend.app.models.questions import GeneratedQuestionDraft
from tests.fakes import make_question


def _draft(**overrides: object) -> GeneratedQuestionDraft:
    raw = make_question(difficulty="medium", category="Safety")
    raw.update(overrides)
    return GeneratedQuestionDraft.model_validate(raw)


def test_well_formed_mcq_is_valid() -> None:
    assert draft_issues(_draft()) == []


def test_well_formed_true_false_is_valid() -> None:
    raw = make_question(question_type="true-false", correct=1, difficulty="easy", category="S")
    assert draft_issues(GeneratedQuestionDraft.model_validate(raw)) == []


def test_missing_text_and_unknown_type() -> None:
    issues = draft_issues(_draft(questionText="  ", questionType="essay"))

    assert "missing question text" in issues
    assert "unknown question type 'essay'" in issues


def test_no_correct_option() -> None:
    options = [{"text": "A", "isCorrect": False}, {"text": "B", "isCorrect": False}]

    assert "no correct option" in draft_issues(_draft(options=options))


def test_too_few_options() -> None:
    assert "fewer than two options" in draft_issues(
        _draft(options=[{"text": "Only", "isCorrect": True}])
    )


def test_single_answer_with_two_correct_options() -> None:
    options = [
        {"text": "A", "isCorrect": True},
        {"text": "B", "isCorrect": True},
        {"text": "C", "isCorrect": False},
    ]

    assert "single-answer question with several correct options" in draft_issues(
        _draft(options=options)
    )


def test_multiple_answer_allows_several_correct() -> None:
    options = [
        {"text": "A", "isCorrect": True},
        {"text": "B", "isCorrect": True},
        {"text": "C", "isCorrect": False},
    ]

    assert draft_issues(_draft(questionType="multiple-choice-multiple", options=options)) == []


def test_split_valid_marks_status() -> None:
    good = _draft()
    bad = _draft(options=[])

    valid, invalid = split_valid([good, bad])

    assert [d.validation_status for d in valid] == ["valid"]
    assert [d.validation_status for d in invalid] == ["invalid"]
    assert invalid[0].validation_issues
