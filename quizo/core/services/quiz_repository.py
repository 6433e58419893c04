"""Service for managing the collection of quizzes in the key-value store."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from uuid import uuid4

from quizo.constants.quiz_constants import DEFAULT_CATEGORY, OPTION_COUNT
from quizo.constants.storage_constants import QUIZZES_KEY
from quizo.core.models import Difficulty, Question, Quiz
from quizo.core.serialization import quiz_from_dict, quiz_to_dict
from quizo.core.storage import JsonFileStore

logger = logging.getLogger(__name__)


class QuizNotFoundError(LookupError):
    """Raised when a quiz does not exist or is not available to the caller."""


class QuizRepository:
    """Manages the lifecycle and storage of quizzes."""

    def __init__(self, store: JsonFileStore) -> None:
        self._store = store

    # --- Queries ---

    def list_quizzes(self) -> list[Quiz]:
        return [quiz_from_dict(item) for item in self._store.get(QUIZZES_KEY, [])]

    def get_quiz(self, quiz_id: str) -> Quiz:
        for quiz in self.list_quizzes():
            if quiz.id == quiz_id:
                return quiz
        raise QuizNotFoundError(f"Quiz {quiz_id} does not exist.")

    def get_published_quiz(self, quiz_id: str) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        if not quiz.is_published or not quiz.questions:
            raise QuizNotFoundError("This quiz doesn't exist or is not published.")
        return quiz

    def published_quizzes(self) -> list[Quiz]:
        return [quiz for quiz in self.list_quizzes() if quiz.is_published]

    def quizzes_by_creator(self, username: str) -> list[Quiz]:
        return [quiz for quiz in self.list_quizzes() if quiz.created_by == username]

    # --- Mutations ---

    def create_quiz(
        self,
        author: str,
        title: str,
        description: str,
        difficulty: Difficulty,
        questions: list[Question],
        now: datetime | None = None,
    ) -> Quiz:
        """Validate and store a new draft quiz owned by ``author``."""
        cleaned_title = title.strip()
        if not cleaned_title:
            raise ValueError("Quiz title must not be empty.")
        difficulty = Difficulty(difficulty)
        prepared = self._prepare_questions(questions, difficulty)
        quiz = Quiz(
            id=uuid4().hex,
            title=cleaned_title,
            description=description.strip(),
            difficulty=difficulty,
            questions=prepared,
            created_by=author,
            created_at=now or datetime.now(timezone.utc),
            time_limit_seconds=difficulty.rules.time_limit_seconds,
            is_published=False,
        )
        self._save(quiz)
        logger.info("Quiz %s created by %s with %d questions", quiz.id, author, quiz.question_count)
        return quiz

    def update_quiz(
        self,
        author: str,
        quiz_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        questions: list[Question] | None = None,
    ) -> Quiz:
        quiz = self._get_owned(author, quiz_id)
        if title is not None:
            cleaned_title = title.strip()
            if not cleaned_title:
                raise ValueError("Quiz title must not be empty.")
            quiz.title = cleaned_title
        if description is not None:
            quiz.description = description.strip()
        if questions is not None:
            if quiz.is_published:
                raise RuntimeError("Unpublish the quiz before editing its questions.")
            quiz.questions = self._prepare_questions(questions, quiz.difficulty)
        self._save(quiz)
        return quiz

    def set_published(self, author: str, quiz_id: str, published: bool) -> Quiz:
        quiz = self._get_owned(author, quiz_id)
        if published and not quiz.questions:
            raise ValueError("Quiz must contain at least one question.")
        quiz.is_published = published
        self._save(quiz)
        logger.info("Quiz %s %s by %s", quiz_id, "published" if published else "unpublished", author)
        return quiz

    def delete_quiz(self, author: str, quiz_id: str) -> None:
        self._get_owned(author, quiz_id)
        self.remove_quiz(quiz_id)

    def remove_quiz(self, quiz_id: str) -> None:
        """Delete a quiz regardless of its owner."""
        remaining = [quiz_to_dict(quiz) for quiz in self.list_quizzes() if quiz.id != quiz_id]
        self._store.set(QUIZZES_KEY, remaining)
        logger.info("Quiz %s deleted", quiz_id)

    def clear(self) -> None:
        self._store.remove(QUIZZES_KEY)

    # --- Internals ---

    def _get_owned(self, author: str, quiz_id: str) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        if quiz.created_by != author:
            raise PermissionError("Only the quiz creator can change this quiz.")
        return quiz

    def _save(self, quiz: Quiz) -> None:
        documents = self._store.get(QUIZZES_KEY, [])
        encoded = quiz_to_dict(quiz)
        for index, document in enumerate(documents):
            if document.get("id") == quiz.id:
                documents[index] = encoded
                break
        else:
            documents.append(encoded)
        self._store.set(QUIZZES_KEY, documents)

    def _prepare_questions(self, questions: list[Question], difficulty: Difficulty) -> list[Question]:
        if not questions:
            raise ValueError("Quiz must contain at least one question.")
        max_questions = difficulty.rules.max_questions
        if len(questions) > max_questions:
            raise ValueError(
                f"{difficulty.rules.label} quizzes allow at most {max_questions} questions."
            )
        return [self._prepare_question(question) for question in questions]

    def _prepare_question(self, question: Question) -> Question:
        """Validate and normalize a question before storage."""
        options = self._validate_options(question.options)
        if isinstance(question.correct_option_index, bool) or not 0 <= question.correct_option_index < OPTION_COUNT:
            raise ValueError("Correct option index must be between 0 and 3.")

        cleaned_text = question.question_text.strip()
        if not cleaned_text:
            raise ValueError("Question text must not be empty.")

        return Question(
            id=question.id or uuid4().hex,
            question_text=cleaned_text,
            options=options,
            correct_option_index=question.correct_option_index,
            category=question.category.strip() or DEFAULT_CATEGORY,
        )

    @staticmethod
    def _validate_options(options: list[str]) -> list[str]:
        if len(options) != OPTION_COUNT:
            raise ValueError("Each question must have exactly four options.")
        cleaned = [option.strip() for option in options]
        if any(not option for option in cleaned):
            raise ValueError("Option text cannot be empty.")
        return cleaned
