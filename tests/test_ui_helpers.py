from datetime import datetime, timezone

import pytest

pytest.importorskip("PySide6.QtWebEngineWidgets")

from quizo.core.models import AnswerRecord, QuizResult  # noqa: E402
from quizo.ui.components.take_quiz_panel import quiz_id_from_link, render_result_review  # noqa: E402
from quizo.ui.question_renderer import render_question_with_options  # noqa: E402

from conftest import make_quiz  # noqa: E402


def test_preview_uses_placeholders_for_empty_fields():
    html = render_question_with_options("  ", ["Red", "", "Blue", ""])

    assert "(No question text)" in html
    assert html.count("(empty)") == 2


@pytest.mark.parametrize(
    "text",
    [
        "abc123",
        "  abc123  ",
        "http://192.168.1.5:8000/quiz/abc123",
        "http://192.168.1.5:8000/quiz/abc123/",
        "http://localhost:8000/quiz/abc123?ref=mail#top",
    ],
)
def test_share_links_resolve_to_quiz_id(text):
    assert quiz_id_from_link(text) == "abc123"


def test_result_review_reveals_answers():
    quiz = make_quiz(2, correct=1)
    answers = (
        AnswerRecord(question_id="q0", selected_option_index=1, is_correct=True, time_spent_ms=1500),
        AnswerRecord(question_id="q1", selected_option_index=None, is_correct=False, time_spent_ms=30000),
    )
    result = QuizResult(
        id="r1",
        quiz_id=quiz.id,
        participant_name="Bob",
        score=1,
        total_questions=2,
        time_spent_seconds=32,
        answers=answers,
        completed_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )

    html = render_result_review(quiz, result, 14)

    assert "Question 1" in html and "Question 2" in html
    assert "Your answer: B | Correct answer: B | 1.5s" in html
    assert "Your answer: No answer | Correct answer: B" in html
