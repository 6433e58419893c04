import pytest

from quizo.core.services.attempt_runner import (
    AttemptPhase,
    AttemptRunner,
    AttemptStateError,
    AttemptValidationError,
)

from conftest import FakeClock, make_quiz


def _runner(question_count=3, time_limit_seconds=None, clock=None, finished=None):
    quiz = make_quiz(question_count, time_limit_seconds=time_limit_seconds, correct=0)
    on_finished = finished.append if finished is not None else None
    return AttemptRunner(quiz, on_finished=on_finished, clock=clock or FakeClock())


def _answer(runner, option_index):
    runner.select(option_index)
    return runner.submit()


def test_new_runner_is_not_started():
    state = _runner().state

    assert state.phase is AttemptPhase.NOT_STARTED
    assert state.question_count == 3


def test_quiz_without_questions_cannot_be_run():
    with pytest.raises(ValueError):
        AttemptRunner(make_quiz(0))


def test_start_shows_first_question():
    state = _runner().start("  Ann  ")

    assert state.phase is AttemptPhase.IN_PROGRESS
    assert state.participant_name == "Ann"
    assert state.question_index == 0
    assert state.question.id == "q0"
    assert state.staged_selection is None
    assert state.time_remaining_seconds is None


@pytest.mark.parametrize("name", ["", "   "])
def test_start_requires_a_name(name):
    runner = _runner()

    with pytest.raises(AttemptValidationError):
        runner.start(name)

    assert runner.state.phase is AttemptPhase.NOT_STARTED


def test_three_questions_scored_two_of_three():
    finished = []
    runner = _runner(3, finished=finished)
    runner.start("Ann")

    _answer(runner, 0)
    _answer(runner, 1)
    state = _answer(runner, 0)

    assert state.phase is AttemptPhase.FINISHED
    assert state.result.score == 2
    assert state.result.total_questions == 3
    assert [a.is_correct for a in state.result.answers] == [True, False, True]
    assert finished == [state.result]


def test_full_attempt_records_one_answer_per_question():
    runner = _runner(5)
    runner.start("Ann")
    for _ in range(5):
        state = _answer(runner, 2)

    result = state.result
    assert len(result.answers) == 5
    assert [a.question_id for a in result.answers] == [f"q{i}" for i in range(5)]
    assert result.score == sum(1 for a in result.answers if a.is_correct)


def test_select_stages_and_can_be_changed():
    runner = _runner()
    runner.start("Ann")

    runner.select(1)
    state = runner.select(3)

    assert state.staged_selection == 3
    assert state.answered_count == 0


@pytest.mark.parametrize("index", [-1, 4, True])
def test_select_rejects_invalid_index(index):
    runner = _runner()
    runner.start("Ann")

    with pytest.raises(AttemptValidationError):
        runner.select(index)


def test_select_before_start_is_rejected():
    with pytest.raises(AttemptStateError):
        _runner().select(0)


def test_submit_without_selection_is_rejected_and_state_unchanged():
    runner = _runner()
    runner.start("Ann")
    before = runner.state

    with pytest.raises(AttemptValidationError):
        runner.submit()

    assert runner.state == before


def test_second_start_is_rejected_without_resetting_progress():
    clock = FakeClock()
    runner = _runner(3, time_limit_seconds=30, clock=clock)
    runner.start("Ann")
    _answer(runner, 0)
    clock.advance(10)

    with pytest.raises(AttemptStateError):
        runner.start("Someone else")

    state = runner.state
    assert state.participant_name == "Ann"
    assert state.answered_count == 1
    assert state.question_index == 1
    assert state.time_remaining_seconds == 20


def test_elapsed_time_is_recorded_per_question():
    clock = FakeClock()
    finished = []
    runner = _runner(2, clock=clock, finished=finished)
    runner.start("Ann")

    clock.advance(2.5)
    _answer(runner, 0)
    clock.advance(1.25)
    _answer(runner, 0)

    result = finished[0]
    assert [a.time_spent_ms for a in result.answers] == [2500, 1250]
    assert result.time_spent_seconds == 4


def test_timer_expiry_without_selection_records_no_answer():
    clock = FakeClock()
    runner = _runner(1, time_limit_seconds=30, clock=clock)
    runner.start("Ann")

    clock.advance(29)
    assert runner.pump().time_remaining_seconds == 1
    clock.advance(1)
    state = runner.pump()

    assert state.phase is AttemptPhase.FINISHED
    assert state.result.score == 0
    assert len(state.result.answers) == 1
    assert state.result.answers[0].selected_option_index is None
    assert state.result.answers[0].is_correct is False


def test_timer_expiry_records_staged_selection():
    clock = FakeClock()
    runner = _runner(2, time_limit_seconds=30, clock=clock)
    runner.start("Ann")
    runner.select(0)

    clock.advance(30)
    state = runner.pump()

    assert state.question_index == 1
    assert state.answered_count == 1
    assert state.staged_selection is None
    assert state.time_remaining_seconds == 30


def test_late_pump_records_each_expiry_at_its_deadline():
    clock = FakeClock()
    finished = []
    runner = _runner(3, time_limit_seconds=30, clock=clock, finished=finished)
    runner.start("Ann")
    runner.select(2)

    clock.advance(100)
    state = runner.pump()

    assert state.phase is AttemptPhase.FINISHED
    assert [a.time_spent_ms for a in state.result.answers] == [30_000, 30_000, 30_000]
    assert [a.selected_option_index for a in state.result.answers] == [2, None, None]
    assert state.result.time_spent_seconds == 90
    assert len(finished) == 1


def test_next_question_starts_at_the_previous_deadline():
    clock = FakeClock()
    runner = _runner(3, time_limit_seconds=30, clock=clock)
    runner.start("Ann")

    clock.advance(45)
    state = runner.pump()

    assert state.answered_count == 1
    assert state.question_index == 1
    assert state.time_remaining_seconds == 15
    clock.advance(5)
    state = _answer(runner, 0)
    assert state.recorded_answer is None
    assert state.answered_count == 2


def test_timer_rearms_for_each_question():
    clock = FakeClock()
    runner = _runner(3, time_limit_seconds=30, clock=clock)
    runner.start("Ann")
    clock.advance(12)

    state = _answer(runner, 0)

    assert state.time_remaining_seconds == 30


def test_answering_just_before_expiry_is_not_recorded_twice():
    clock = FakeClock()
    finished = []
    runner = _runner(2, time_limit_seconds=30, clock=clock, finished=finished)
    runner.start("Ann")

    clock.advance(29)
    _answer(runner, 0)
    clock.advance(1)
    state = runner.pump()

    assert state.answered_count == 1
    assert state.question_index == 1
    assert state.time_remaining_seconds == 29


def test_due_expiry_is_applied_before_a_late_submit():
    clock = FakeClock()
    runner = _runner(2, time_limit_seconds=30, clock=clock)
    runner.start("Ann")
    runner.select(0)
    clock.advance(31)

    with pytest.raises(AttemptValidationError):
        runner.submit()

    state = runner.state
    assert state.answered_count == 1
    assert state.question_index == 1


def test_go_back_shows_recorded_answer_without_changing_it():
    clock = FakeClock()
    runner = _runner(3, time_limit_seconds=30, clock=clock)
    runner.start("Ann")
    _answer(runner, 2)
    clock.advance(5)

    state = runner.go_back()

    assert state.question_index == 0
    assert state.is_reviewing
    assert state.recorded_answer.selected_option_index == 2
    assert state.answered_count == 1
    assert state.time_remaining_seconds == 25


def test_go_back_clears_staged_selection():
    runner = _runner(3)
    runner.start("Ann")
    _answer(runner, 0)
    runner.select(1)

    state = runner.go_back()

    assert state.staged_selection is None


def test_select_while_reviewing_is_rejected():
    runner = _runner(3)
    runner.start("Ann")
    _answer(runner, 0)
    runner.go_back()

    with pytest.raises(AttemptStateError):
        runner.select(1)


def test_submit_while_reviewing_moves_forward_without_recording():
    runner = _runner(3)
    runner.start("Ann")
    _answer(runner, 0)
    _answer(runner, 0)
    runner.go_back()
    runner.go_back()

    state = runner.submit()

    assert state.question_index == 1
    assert state.is_reviewing
    assert state.answered_count == 2
    state = runner.submit()
    assert state.question_index == 2
    assert not state.is_reviewing


def test_go_back_at_first_question_is_rejected():
    runner = _runner(3)
    runner.start("Ann")

    with pytest.raises(AttemptStateError):
        runner.go_back()


def test_expiry_while_reviewing_records_no_answer_for_frontier():
    clock = FakeClock()
    runner = _runner(3, time_limit_seconds=30, clock=clock)
    runner.start("Ann")
    _answer(runner, 0)
    runner.select(0)
    runner.go_back()

    clock.advance(30)
    state = runner.pump()

    assert state.answered_count == 2
    assert state.question_index == 2
    assert not state.is_reviewing


def test_finished_is_terminal_and_callback_runs_once():
    finished = []
    runner = _runner(1, finished=finished)
    runner.start("Ann")
    _answer(runner, 0)

    for operation in (runner.submit, runner.go_back, lambda: runner.select(0), lambda: runner.start("Ann")):
        with pytest.raises(AttemptStateError):
            operation()

    assert len(finished) == 1
    assert runner.state.result == finished[0]


def test_finishing_cancels_the_timer():
    clock = FakeClock()
    finished = []
    runner = _runner(1, time_limit_seconds=30, clock=clock, finished=finished)
    runner.start("Ann")
    _answer(runner, 1)

    clock.advance(60)
    state = runner.pump()

    assert state.phase is AttemptPhase.FINISHED
    assert len(finished) == 1
    assert state.result.answers[0].selected_option_index == 1
