import logging
from datetime import timedelta

import pytest

from quizo.constants.quiz_constants import ATTEMPT_IDLE_TTL_SECONDS, FINISHED_ATTEMPT_RETENTION_SECONDS
from quizo.core.models import Difficulty, SubscriptionType
from quizo.core.quiz_manager import AttemptNotFoundError, QuizManager
from quizo.core.services.attempt_runner import AttemptPhase
from quizo.core.services.quiz_repository import QuizNotFoundError
from quizo.core.storage import JsonFileStore

from conftest import draft_questions


def _published_quiz(manager, author="alice", count=3, difficulty=Difficulty.EASY):
    manager.login(author)
    quiz = manager.create_quiz(author, "Colours", "Pick a colour", difficulty, draft_questions(count, correct=1))
    return manager.set_quiz_published(author, quiz.id, True)


def test_create_requires_login(manager):
    with pytest.raises(PermissionError, match="User not logged in"):
        manager.create_quiz("ghost", "Quiz", "", Difficulty.EASY, draft_questions(1))


def test_daily_quota_blocks_fourth_quiz(manager, wall_clock):
    manager.login("alice")
    for _ in range(3):
        manager.create_quiz("alice", "Quiz", "", Difficulty.EASY, draft_questions(1))

    with pytest.raises(PermissionError, match="Daily limit reached"):
        manager.create_quiz("alice", "Quiz", "", Difficulty.EASY, draft_questions(1))

    manager.apply_subscription("alice", SubscriptionType.WEEKLY)
    manager.create_quiz("alice", "Quiz", "", Difficulty.EASY, draft_questions(1))

    wall_clock.now += timedelta(days=8)
    manager.apply_subscription("alice", SubscriptionType.FREE)
    assert manager.check_quota("alice").allowed


def test_invalid_quiz_does_not_use_quota(manager):
    manager.login("alice")

    with pytest.raises(ValueError):
        manager.create_quiz("alice", "", "", Difficulty.EASY, draft_questions(1))

    assert manager.get_account("alice").quizzes_today == 0


def test_finished_attempt_is_persisted_once(manager):
    quiz = _published_quiz(manager)
    attempt_id, runner = manager.begin_attempt(quiz.id)

    runner.start("Ben")
    for option in (1, 0, 1):
        runner.select(option)
        state = runner.submit()

    assert state.phase is AttemptPhase.FINISHED
    stored = manager.get_results_for_quiz(quiz.id)
    assert len(stored) == 1
    assert stored[0].score == 2
    assert stored[0].participant_name == "Ben"
    assert manager.get_attempt(attempt_id) is runner


def test_abandoned_attempt_persists_nothing(manager):
    quiz = _published_quiz(manager)
    attempt_id, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")
    runner.select(1)
    runner.submit()

    manager.discard_attempt(attempt_id)

    assert manager.get_results_for_quiz(quiz.id) == []
    with pytest.raises(AttemptNotFoundError):
        manager.get_attempt(attempt_id)


def test_timed_attempt_uses_injected_clock(manager, clock):
    quiz = _published_quiz(manager, count=1, difficulty=Difficulty.SPEED)
    _, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")

    clock.advance(30)
    state = runner.pump()

    assert state.phase is AttemptPhase.FINISHED
    assert manager.get_results_for_quiz(quiz.id)[0].answers[0].selected_option_index is None


def test_draft_quiz_cannot_be_attempted_or_shared(manager):
    manager.login("alice")
    quiz = manager.create_quiz("alice", "Draft", "", Difficulty.EASY, draft_questions(1))

    with pytest.raises(QuizNotFoundError):
        manager.begin_attempt(quiz.id)
    with pytest.raises(RuntimeError):
        manager.build_share_link(quiz.id, "http://host:8000")


def test_share_link(manager):
    quiz = _published_quiz(manager)

    assert manager.build_share_link(quiz.id, "http://10.0.0.5:8000/") == f"http://10.0.0.5:8000/quiz/{quiz.id}"


def test_creator_views(manager):
    quiz = _published_quiz(manager)
    _, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")
    for _ in range(3):
        runner.select(1)
        runner.submit()

    summaries = manager.get_quizzes_for_creator("alice")
    analytics = manager.get_quiz_analytics("alice", quiz.id)

    assert [(s.quiz.id, s.attempts, s.average_score_percentage) for s in summaries] == [(quiz.id, 1, 100)]
    assert analytics.best_score == 3
    with pytest.raises(PermissionError):
        manager.get_quiz_analytics("bob", quiz.id)


def test_admin_delete_and_clear(manager):
    quiz = _published_quiz(manager)
    attempt_id, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")
    runner.select(1)
    runner.submit()
    runner.select(1)
    runner.submit()
    runner.select(1)
    runner.submit()

    assert manager.authenticate_admin("admin123")
    assert manager.get_admin_overview().total_attempts == 1
    assert [row.participant_name for row in manager.get_leaderboard()] == ["Ben"]
    assert manager.admin_delete_quiz(quiz.id) == 1
    assert manager.get_published_quizzes() == []

    manager.clear_all_data()
    assert manager.get_account("alice") is None
    with pytest.raises(AttemptNotFoundError):
        manager.get_attempt(attempt_id)


def _finish(runner, option=1):
    while runner.state.phase is AttemptPhase.IN_PROGRESS:
        runner.select(option)
        state = runner.submit()
    return state


def test_failed_result_write_still_finishes_the_attempt(tmp_path, clock, wall_clock, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    manager = QuizManager(JsonFileStore(blocker / "storage.json"), clock=clock, wall_clock=wall_clock)
    quiz = _published_quiz(manager)
    _, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")

    with caplog.at_level(logging.ERROR):
        state = _finish(runner)

    assert state.phase is AttemptPhase.FINISHED
    assert state.result.score == 3
    assert runner.state.result == state.result
    assert not (blocker / "storage.json").exists()
    assert "Error saving quiz result" in caplog.text


def test_result_for_deleted_quiz_is_dropped(manager):
    quiz = _published_quiz(manager)
    _, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")
    runner.select(1)
    runner.submit()

    manager.delete_quiz("alice", quiz.id)
    state = _finish(runner)

    assert state.phase is AttemptPhase.FINISHED
    assert manager.get_results_for_quiz(quiz.id) == []
    assert manager.get_admin_overview().total_attempts == 0
    assert manager.live_attempt_count() == 0


def test_result_after_clear_all_data_is_dropped(manager):
    quiz = _published_quiz(manager)
    _, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")

    manager.clear_all_data()
    _finish(runner)

    assert manager.get_results_for_quiz(quiz.id) == []
    assert manager.get_admin_overview().total_attempts == 0
    assert manager.live_attempt_count() == 0


def test_finished_attempt_is_kept_briefly_then_pruned(manager, clock):
    quiz = _published_quiz(manager)
    attempt_id, runner = manager.begin_attempt(quiz.id)
    runner.start("Ben")
    _finish(runner)

    clock.advance(FINISHED_ATTEMPT_RETENTION_SECONDS - 1)
    assert manager.get_attempt(attempt_id) is runner

    clock.advance(1)
    assert manager.prune_attempts() == 1
    with pytest.raises(AttemptNotFoundError):
        manager.get_attempt(attempt_id)


def test_idle_attempts_expire(manager, clock):
    quiz = _published_quiz(manager)
    idle_id, _ = manager.begin_attempt(quiz.id)
    active_id, _ = manager.begin_attempt(quiz.id)

    clock.advance(ATTEMPT_IDLE_TTL_SECONDS - 1)
    manager.get_attempt(active_id)
    clock.advance(1)

    assert manager.prune_attempts() == 1
    assert manager.live_attempt_count() == 1
    manager.get_attempt(active_id)
    with pytest.raises(AttemptNotFoundError):
        manager.get_attempt(idle_id)
