"""Conversion between domain models and the JSON documents kept in storage."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from quizo.core.models import (
    AnswerRecord,
    Difficulty,
    Question,
    Quiz,
    QuizResult,
    SubscriptionType,
    UserAccount,
)


def format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_datetime(raw: str | None) -> datetime | None:
    if not raw:
        return None
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def question_to_dict(question: Question) -> dict[str, Any]:
    return {
        "id": question.id,
        "question": question.question_text,
        "options": list(question.options),
        "correct_answer": question.correct_option_index,
        "category": question.category,
    }


def question_from_dict(payload: dict[str, Any]) -> Question:
    return Question(
        id=str(payload["id"]),
        question_text=payload["question"],
        options=list(payload["options"]),
        correct_option_index=int(payload["correct_answer"]),
        category=payload.get("category") or "General",
    )


def quiz_to_dict(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "difficulty": quiz.difficulty.value,
        "question_count": quiz.question_count,
        "categories": quiz.categories,
        "time_limit": quiz.time_limit_seconds,
        "created_at": format_datetime(quiz.created_at),
        "created_by": quiz.created_by,
        "questions": [question_to_dict(question) for question in quiz.questions],
        "is_published": quiz.is_published,
    }


def quiz_from_dict(payload: dict[str, Any]) -> Quiz:
    return Quiz(
        id=str(payload["id"]),
        title=payload["title"],
        description=payload.get("description", ""),
        difficulty=Difficulty(payload.get("difficulty", Difficulty.EASY.value)),
        questions=[question_from_dict(item) for item in payload.get("questions") or []],
        created_by=payload.get("created_by") or "",
        created_at=parse_datetime(payload.get("created_at")) or datetime.now(timezone.utc),
        time_limit_seconds=payload.get("time_limit"),
        is_published=bool(payload.get("is_published", False)),
    )


def answer_to_dict(answer: AnswerRecord) -> dict[str, Any]:
    return {
        "question_id": answer.question_id,
        "selected_answer": answer.selected_option_index,
        "is_correct": answer.is_correct,
        "time_spent": answer.time_spent_ms,
    }


def answer_from_dict(payload: dict[str, Any]) -> AnswerRecord:
    selected = payload.get("selected_answer")
    # Older documents stored -1 for an unanswered question.
    if selected is not None and int(selected) < 0:
        selected = None
    return AnswerRecord(
        question_id=str(payload["question_id"]),
        selected_option_index=None if selected is None else int(selected),
        is_correct=bool(payload["is_correct"]),
        time_spent_ms=int(payload.get("time_spent", 0)),
    )


def result_to_dict(result: QuizResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "quiz_id": result.quiz_id,
        "participant_name": result.participant_name,
        "score": result.score,
        "total_questions": result.total_questions,
        "time_spent": result.time_spent_seconds,
        "answers": [answer_to_dict(answer) for answer in result.answers],
        "completed_at": format_datetime(result.completed_at),
    }


def result_from_dict(payload: dict[str, Any]) -> QuizResult:
    return QuizResult(
        id=str(payload["id"]),
        quiz_id=str(payload["quiz_id"]),
        participant_name=payload["participant_name"],
        score=int(payload["score"]),
        total_questions=int(payload["total_questions"]),
        time_spent_seconds=int(payload.get("time_spent", 0)),
        answers=tuple(answer_from_dict(item) for item in payload.get("answers") or []),
        completed_at=parse_datetime(payload.get("completed_at")) or datetime.now(timezone.utc),
    )


def account_to_dict(account: UserAccount) -> dict[str, Any]:
    return {
        "username": account.username,
        "email": account.email,
        "quizzes_today": account.quizzes_today,
        "last_quiz_date": account.last_quiz_date.isoformat() if account.last_quiz_date else None,
        "subscription_type": account.subscription_type.value,
        "subscription_end": format_datetime(account.subscription_end),
    }


def account_from_dict(payload: dict[str, Any]) -> UserAccount:
    raw_date = payload.get("last_quiz_date")
    return UserAccount(
        username=payload["username"],
        email=payload.get("email") or f"{payload['username']}@quizo.app",
        quizzes_today=int(payload.get("quizzes_today", 0)),
        last_quiz_date=date.fromisoformat(raw_date) if raw_date else None,
        subscription_type=SubscriptionType(payload.get("subscription_type", SubscriptionType.FREE.value)),
        subscription_end=parse_datetime(payload.get("subscription_end")),
    )
