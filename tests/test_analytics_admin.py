from datetime import datetime, timedelta, timezone

import pytest

from quizo.core.models import AnswerRecord, Difficulty, QuizResult
from quizo.core.services.account_service import AccountService
from quizo.core.services.admin_service import AdminService
from quizo.core.services.analytics import average_score_percentage, build_quiz_analytics
from quizo.core.services.quiz_repository import QuizNotFoundError, QuizRepository
from quizo.core.services.result_repository import ResultRepository
from quizo.core.services.scoreboard import Scoreboard
from quizo.core.storage import JsonFileStore

from conftest import draft_questions, make_quiz

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _result(quiz_id, name, score, total, *, seconds=10, completed_at=NOW):
    answers = tuple(AnswerRecord(f"q{i}", 0, i < score, 1000) for i in range(total))
    return QuizResult(
        id=f"{quiz_id}-{name}-{completed_at.isoformat()}",
        quiz_id=quiz_id,
        participant_name=name,
        score=score,
        total_questions=total,
        time_spent_seconds=seconds,
        answers=answers,
        completed_at=completed_at,
    )


def test_average_is_mean_of_ratios():
    results = [_result("a", "x", 1, 2), _result("a", "y", 3, 4)]

    assert average_score_percentage(results) == 63
    assert average_score_percentage([]) == 0


def test_quiz_analytics():
    quiz = make_quiz(4)
    results = [
        _result(quiz.id, f"p{i}", score=i % 5, total=4, seconds=10 + i, completed_at=NOW + timedelta(minutes=i))
        for i in range(12)
    ]

    analytics = build_quiz_analytics(quiz, results)

    assert analytics.attempts == 12
    assert analytics.best_score == 4
    assert analytics.average_time_seconds == 16
    assert len(analytics.recent_results) == 10
    assert analytics.recent_results[0].participant_name == "p11"


def test_quiz_analytics_without_attempts():
    analytics = build_quiz_analytics(make_quiz(2), [])

    assert (analytics.attempts, analytics.average_score_percentage, analytics.best_score) == (0, 0, 0)
    assert analytics.recent_results == []


def test_scoreboard_ranks_by_ratio():
    board = Scoreboard.from_results(
        [_result("a", "ann", 1, 4), _result("a", "ben", 3, 4), _result("b", "ann", 4, 4)]
    )

    rows = board.get_top_participants()

    assert [row.participant_name for row in rows] == ["ben", "ann"]
    assert rows[1].attempts == 2
    assert rows[1].percentage == 63
    assert board.participant_count() == 2


@pytest.fixture
def admin_setup():
    store = JsonFileStore()
    quizzes = QuizRepository(store)
    results = ResultRepository(store)
    accounts = AccountService(store)
    admin = AdminService(store, quizzes, results, accounts)
    return admin, quizzes, results, accounts


def test_authenticate(admin_setup):
    admin = admin_setup[0]

    assert admin.authenticate("admin123")
    assert not admin.authenticate("admin")


def test_overview_counts(admin_setup):
    admin, quizzes, results, _ = admin_setup
    first = quizzes.create_quiz("alice", "One", "", Difficulty.EASY, draft_questions(2), NOW)
    quizzes.create_quiz("bob", "Two", "", Difficulty.EASY, draft_questions(2), NOW - timedelta(days=2))
    quizzes.set_published("alice", first.id, True)
    results.append(_result(first.id, "ann", 2, 2))
    results.append(_result(first.id, "ben", 0, 2, completed_at=NOW - timedelta(days=1)))
    results.append(_result("deleted-quiz", "zed", 1, 2))

    overview = admin.overview(NOW)

    assert overview.total_quizzes == 2
    assert overview.published_quizzes == 1
    assert overview.total_creators == 2
    assert overview.total_participants == 2
    assert overview.total_attempts == 2
    assert overview.average_score_percentage == 50
    assert overview.quizzes_today == 1
    assert overview.attempts_today == 1
    assert overview.attempts_per_participant == 1


def test_recent_activity_names_unknown_quizzes(admin_setup):
    admin, quizzes, results, _ = admin_setup
    quiz = quizzes.create_quiz("alice", "One", "", Difficulty.EASY, draft_questions(1), NOW)
    results.append(_result(quiz.id, "ann", 1, 1, completed_at=NOW))
    results.append(_result("gone", "ben", 1, 1, completed_at=NOW + timedelta(minutes=1)))

    activity = admin.recent_activity()

    assert [(a.result.participant_name, a.quiz_title) for a in activity] == [("ben", "Unknown Quiz"), ("ann", "One")]


def test_delete_quiz_removes_its_results(admin_setup):
    admin, quizzes, results, _ = admin_setup
    keep = quizzes.create_quiz("alice", "Keep", "", Difficulty.EASY, draft_questions(1), NOW)
    drop = quizzes.create_quiz("bob", "Drop", "", Difficulty.EASY, draft_questions(1), NOW)
    results.append(_result(keep.id, "ann", 1, 1))
    results.append(_result(drop.id, "ann", 0, 1))
    results.append(_result(drop.id, "ben", 1, 1))

    assert admin.delete_quiz(drop.id) == 2

    assert [q.id for q in quizzes.list_quizzes()] == [keep.id]
    assert [r.quiz_id for r in results.all_results()] == [keep.id]
    with pytest.raises(QuizNotFoundError):
        admin.delete_quiz(drop.id)


def test_clear_all_data(admin_setup):
    admin, quizzes, results, accounts = admin_setup
    accounts.login("alice")
    quiz = quizzes.create_quiz("alice", "One", "", Difficulty.EASY, draft_questions(1), NOW)
    results.append(_result(quiz.id, "ann", 1, 1))

    admin.clear_all_data()

    assert quizzes.list_quizzes() == []
    assert results.all_results() == []
    assert accounts.usernames() == []
    assert admin.storage_usage().quizzes_kb == 0


def test_quiz_summaries_and_storage_usage(admin_setup):
    admin, quizzes, results, _ = admin_setup
    quiz = quizzes.create_quiz("alice", "One", "", Difficulty.EASY, draft_questions(2), NOW)
    results.append(_result(quiz.id, "ann", 1, 2))

    summaries = admin.quiz_summaries()
    usage = admin.storage_usage()

    assert [(s.quiz.id, s.attempts, s.average_score_percentage) for s in summaries] == [(quiz.id, 1, 50)]
    assert usage.quizzes_kb > 0
    assert usage.results_kb > 0
