"""Turns a participant's selection for one question into an answer record."""

from __future__ import annotations

from quizo.core.models import AnswerRecord, Question


def record_answer(question: Question, selected_option_index: int | None, elapsed_ms: int) -> AnswerRecord:
    """Build the immutable record for ``question``.

    ``None`` means the question was left unanswered and is always incorrect.
    An out-of-range index is a caller bug, not participant input.
    """
    if selected_option_index is not None and not 0 <= selected_option_index < len(question.options):
        raise ValueError(
            f"Selected option {selected_option_index} is out of range for question {question.id}."
        )
    return AnswerRecord(
        question_id=question.id,
        selected_option_index=selected_option_index,
        is_correct=selected_option_index is not None
        and selected_option_index == question.correct_option_index,
        time_spent_ms=max(0, int(elapsed_ms)),
    )
