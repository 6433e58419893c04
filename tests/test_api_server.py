from fastapi.testclient import TestClient
import pytest

from quizo.constants.quiz_constants import ATTEMPT_IDLE_TTL_SECONDS
from quizo.core.models import Difficulty
from quizo.server.api_server import create_api_app

from conftest import draft_questions


@pytest.fixture
def client(manager):
    return TestClient(create_api_app(manager))


@pytest.fixture
def quiz(manager):
    manager.login("alice")
    quiz = manager.create_quiz("alice", "Colours", "Pick one", Difficulty.SPEED, draft_questions(2, correct=1))
    return manager.set_quiz_published("alice", quiz.id, True)


def _new_attempt(client, quiz_id):
    response = client.post(f"/api/quizzes/{quiz_id}/attempts")
    assert response.status_code == 201
    return response.json()["attempt_id"]


def test_index_lists_published_quizzes(client, quiz):
    response = client.get("/")

    assert response.status_code == 200
    assert f"/quiz/{quiz.id}" in response.text


def test_take_page(client, quiz):
    response = client.get(f"/quiz/{quiz.id}")

    assert response.status_code == 200
    assert "Colours" in response.text
    assert f'"{quiz.id}"' in response.text


def test_take_page_for_unknown_quiz(client):
    response = client.get("/quiz/missing")

    assert response.status_code == 404
    assert "not available" in response.text


def test_quiz_summaries_hide_answers(client, quiz):
    listing = client.get("/api/quizzes").json()
    detail = client.get(f"/api/quizzes/{quiz.id}").json()

    assert [item["id"] for item in listing] == [quiz.id]
    assert detail["question_count"] == 2
    assert detail["time_limit"] == 30
    assert "questions" not in detail
    assert client.get("/api/quizzes/missing").status_code == 404


def test_full_attempt_over_http(client, manager, quiz):
    attempt_id = _new_attempt(client, quiz.id)

    state = client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"}).json()
    assert state["phase"] == "in_progress"
    assert state["question_index"] == 0
    assert state["time_remaining_seconds"] == 30
    assert "correct_option_index" not in state["question"]

    client.post(f"/api/attempts/{attempt_id}/select", json={"option_index": 1})
    state = client.post(f"/api/attempts/{attempt_id}/submit").json()
    assert state["question_index"] == 1

    state = client.post(f"/api/attempts/{attempt_id}/back").json()
    assert state["is_reviewing"] is True
    assert state["recorded_selection"] == 1

    client.post(f"/api/attempts/{attempt_id}/submit")
    client.post(f"/api/attempts/{attempt_id}/select", json={"option_index": 0})
    state = client.post(f"/api/attempts/{attempt_id}/submit").json()

    assert state["phase"] == "finished"
    result = state["result"]
    assert (result["score"], result["total_questions"], result["percentage"]) == (1, 2, 50)
    assert [item["correct_option_index"] for item in result["review"]] == [1, 1]
    assert result["share_text"] == (
        f'I just completed "Colours" and scored 1/2! Try it yourself: http://testserver/quiz/{quiz.id}'
    )
    assert len(manager.get_results_for_quiz(quiz.id)) == 1


def test_polling_applies_timer_expiry(client, clock, quiz):
    attempt_id = _new_attempt(client, quiz.id)
    client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"})

    clock.advance(30)
    state = client.get(f"/api/attempts/{attempt_id}").json()

    assert state["question_index"] == 1
    assert state["answered_count"] == 1


def test_error_status_codes(client, quiz):
    attempt_id = _new_attempt(client, quiz.id)

    assert client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "  "}).status_code == 422
    assert client.post(f"/api/attempts/{attempt_id}/submit").status_code == 409

    client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"})
    assert client.post(f"/api/attempts/{attempt_id}/submit").status_code == 422
    assert client.post(f"/api/attempts/{attempt_id}/select", json={"option_index": 7}).status_code == 422
    assert client.post(f"/api/attempts/{attempt_id}/back").status_code == 409
    response = client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"})
    assert response.status_code == 409

    assert client.get("/api/attempts/unknown").status_code == 404
    assert client.post("/api/quizzes/missing/attempts").status_code == 404


def test_abandoned_attempt_is_gone(client, manager, quiz):
    attempt_id = _new_attempt(client, quiz.id)
    client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"})

    assert client.delete(f"/api/attempts/{attempt_id}").status_code == 204
    assert client.get(f"/api/attempts/{attempt_id}").status_code == 404
    assert manager.get_results_for_quiz(quiz.id) == []


def test_finished_and_unstarted_attempts_are_released(client, manager, clock, quiz):
    for _ in range(5):
        attempt_id = _new_attempt(client, quiz.id)
        client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"})
        for _ in range(2):
            client.post(f"/api/attempts/{attempt_id}/select", json={"option_index": 1})
            state = client.post(f"/api/attempts/{attempt_id}/submit").json()
        assert state["phase"] == "finished"
    for _ in range(5):
        _new_attempt(client, quiz.id)
    assert manager.live_attempt_count() == 10

    clock.advance(ATTEMPT_IDLE_TTL_SECONDS)
    manager.prune_attempts()

    assert manager.live_attempt_count() == 0
    assert len(manager.get_results_for_quiz(quiz.id)) == 5


def test_finished_attempt_can_be_released_by_the_page(client, manager, quiz):
    attempt_id = _new_attempt(client, quiz.id)
    client.post(f"/api/attempts/{attempt_id}/start", json={"participant_name": "Ben"})
    for _ in range(2):
        client.post(f"/api/attempts/{attempt_id}/select", json={"option_index": 0})
        client.post(f"/api/attempts/{attempt_id}/submit")

    assert client.get(f"/api/attempts/{attempt_id}").json()["phase"] == "finished"
    assert client.delete(f"/api/attempts/{attempt_id}").status_code == 204
    assert manager.live_attempt_count() == 0
    assert len(manager.get_results_for_quiz(quiz.id)) == 1


def test_take_page_offers_copy_result(client, quiz):
    page = client.get(f"/quiz/{quiz.id}").text

    assert 'id="copy-result-button"' in page
    assert "navigator.clipboard.writeText" in page
