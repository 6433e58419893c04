"""FastAPI server behind quiz share links.

Anyone holding a share link can open ``/quiz/{quiz_id}`` in a browser and take
the quiz. The page drives an :class:`AttemptRunner` through the JSON routes
below and polls it about once a second so timer expiries show up without user
input.
"""

from __future__ import annotations

from contextlib import contextmanager
import html
import json
import logging
from threading import Thread
from typing import Any, Iterator

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from quizo.constants.about import APP_NAME, APP_VERSION
from quizo.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT, SHARE_PATH_TEMPLATE
from quizo.core.markdown_math_renderer import MATHJAX_CONFIG, MATHJAX_SCRIPT, renderer
from quizo.core.models import Quiz
from quizo.core.quiz_manager import QuizManager
from quizo.core.serialization import format_datetime
from quizo.core.services.attempt_runner import AttemptPhase, AttemptState
from quizo.core.services.result_aggregator import format_share_text

logger = logging.getLogger(__name__)

_PAGE_STYLE = """
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0 auto; max-width: 860px; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; }
      a { color: #5eead4; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none; }
      .muted { color: #94a3b8; font-size: 0.95rem; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; }
      .primary-button:hover { background: #16808a; }
      .primary-button:disabled { opacity: 0.5; cursor: not-allowed; }
      .secondary-button { border: 1px solid #334155; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: transparent; color: #f5f7ff; cursor: pointer; }
      .secondary-button:disabled { opacity: 0.4; cursor: not-allowed; }
      input[type=text] { width: 100%; box-sizing: border-box; padding: 0.75rem; border-radius: 0.5rem; border: 1px solid #334155; background: #0b1120; color: #f5f7ff; font-size: 1rem; margin-bottom: 1rem; }
      .quiz-list { list-style: none; padding: 0; display: flex; flex-direction: column; gap: 0.75rem; }
"""

_INDEX_PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{app_name} quizzes</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>{style}</style>
  </head>
  <body>
    <section class="card">
      <h1>{app_name}</h1>
      <p class="muted">Published quizzes on this machine.</p>
      {body}
    </section>
  </body>
</html>
"""

_MISSING_QUIZ_PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{app_name}</title>
    <style>{style}</style>
  </head>
  <body>
    <section class="card">
      <h1>Quiz not available</h1>
      <p>{message}</p>
      <p><a href="/">Browse published quizzes</a></p>
    </section>
  </body>
</html>
"""

_TAKE_PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>__TITLE__ | __APP_NAME__</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
__STYLE__
      #question-container { min-height: 5rem; font-size: 1.1rem; line-height: 1.6; }
      .options-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 0.75rem; margin: 1rem 0; }
      .option-button { border: 2px solid transparent; border-radius: 0.75rem; padding: 1rem; font-size: 1rem; background: #1e293b; color: #fff; cursor: pointer; text-align: left; }
      .option-button.selected { border-color: #1f9aa5; background: #164e63; }
      .option-button:disabled { cursor: default; }
      .nav-row { display: flex; justify-content: space-between; gap: 1rem; }
      #timer-wrapper { display: flex; flex-direction: column; gap: 0.35rem; margin: 0.75rem 0; }
      #timer-label { font-size: 0.95rem; color: #facc15; }
      #timer-label.urgent { color: #f87171; }
      .timer-track { width: 100%; height: 0.6rem; background: rgba(250, 204, 21, 0.25); border-radius: 999px; overflow: hidden; }
      #timer-fill { width: 100%; height: 100%; background: #facc15; transform-origin: left center; transition: transform 200ms linear; }
      #status { min-height: 1.25rem; color: #f87171; }
      .review-item { border-top: 1px solid #1e293b; padding: 0.75rem 0; }
      .review-item .correct { color: #4ade80; }
      .review-item .wrong { color: #f87171; }
      .score { font-size: 2.5rem; margin: 0.25rem 0; }
    </style>
    <script>__MATHJAX_CONFIG__</script>
    <script defer src="__MATHJAX_SCRIPT__"></script>
  </head>
  <body>
    <section class="card" id="intro-card">
      <h1 id="quiz-title"></h1>
      <p id="quiz-description"></p>
      <p id="quiz-meta" class="muted"></p>
      <label for="name-input">Your name</label>
      <input type="text" id="name-input" maxlength="60" autocomplete="name" />
      <button id="start-button" class="primary-button">Start Quiz</button>
    </section>
    <section class="card hidden" id="quiz-card">
      <p id="progress-label" class="muted"></p>
      <div id="timer-wrapper" class="hidden">
        <span id="timer-label"></span>
        <div class="timer-track"><div id="timer-fill"></div></div>
      </div>
      <div id="question-container"></div>
      <div id="options-container" class="options-grid"></div>
      <div class="nav-row">
        <button id="back-button" class="secondary-button">Previous</button>
        <button id="next-button" class="primary-button">Next</button>
      </div>
    </section>
    <section class="card hidden" id="result-card">
      <h2>Quiz complete</h2>
      <p class="score" id="score-label"></p>
      <p id="result-meta" class="muted"></p>
      <button id="copy-result-button" class="secondary-button">Copy Result</button>
      <div id="review-container"></div>
      <p><a href="/">More quizzes</a></p>
    </section>
    <p id="status"></p>
    <script>
      const QUIZ_ID = __QUIZ_ID__;
      const POLL_INTERVAL_MS = 1000;

      const introCard = document.getElementById('intro-card');
      const quizCard = document.getElementById('quiz-card');
      const resultCard = document.getElementById('result-card');
      const nameInput = document.getElementById('name-input');
      const startButton = document.getElementById('start-button');
      const progressLabel = document.getElementById('progress-label');
      const questionContainer = document.getElementById('question-container');
      const optionsContainer = document.getElementById('options-container');
      const backButton = document.getElementById('back-button');
      const nextButton = document.getElementById('next-button');
      const timerWrapper = document.getElementById('timer-wrapper');
      const timerLabel = document.getElementById('timer-label');
      const timerFill = document.getElementById('timer-fill');
      const statusEl = document.getElementById('status');
      const copyResultButton = document.getElementById('copy-result-button');

      let attemptId = null;
      let timeLimit = null;
      let renderedQuestionKey = null;
      let pollHandle = null;
      let busy = false;
      let shareText = null;

      function setVisibility(element, isVisible) {
        element.classList.toggle('hidden', !isVisible);
      }

      async function callApi(method, path, body) {
        const options = { method, headers: { 'Content-Type': 'application/json' } };
        if (body !== undefined) {
          options.body = JSON.stringify(body);
        }
        const response = await fetch(path, options);
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          const detail = typeof payload.detail === 'string' ? payload.detail : 'Request failed.';
          throw new Error(detail);
        }
        return payload;
      }

      async function typesetMath(targets) {
        for (let i = 0; i < 15; i++) {
          if (window.MathJax && window.MathJax.typesetPromise) {
            try {
              await window.MathJax.typesetPromise(targets);
              return;
            } catch (err) {
              console.warn('MathJax typeset error:', err);
            }
          }
          await new Promise(resolve => setTimeout(resolve, 150));
        }
      }

      function renderTimer(state) {
        if (timeLimit === null || state.time_remaining_seconds === null || state.is_reviewing) {
          setVisibility(timerWrapper, false);
          return;
        }
        setVisibility(timerWrapper, true);
        const remaining = state.time_remaining_seconds;
        timerLabel.textContent = `${remaining}s remaining`;
        timerLabel.classList.toggle('urgent', remaining <= 5);
        timerFill.style.transform = `scaleX(${Math.max(0, remaining / timeLimit)})`;
      }

      function renderInProgress(state) {
        setVisibility(introCard, false);
        setVisibility(resultCard, false);
        setVisibility(quizCard, true);
        const question = state.question;
        progressLabel.textContent = `Question ${state.question_index + 1} of ${state.question_count}` +
          (state.is_reviewing ? ' (answered)' : '') + ` | ${question.category}`;

        const questionKey = `${state.question_index}:${state.answered_count}`;
        if (questionKey !== renderedQuestionKey) {
          renderedQuestionKey = questionKey;
          questionContainer.innerHTML = question.question_html;
          optionsContainer.innerHTML = '';
          question.options_html.forEach((optionHtml, index) => {
            const button = document.createElement('button');
            button.className = 'option-button';
            button.dataset.index = String(index);
            button.innerHTML = `<strong>${String.fromCharCode(65 + index)}.</strong> ${optionHtml}`;
            button.addEventListener('click', () => selectOption(index));
            optionsContainer.appendChild(button);
          });
          typesetMath([questionContainer, optionsContainer]);
        }

        const highlighted = state.is_reviewing ? state.recorded_selection : state.staged_selection;
        optionsContainer.querySelectorAll('.option-button').forEach(button => {
          button.disabled = state.is_reviewing;
          button.classList.toggle('selected', Number(button.dataset.index) === highlighted);
        });
        backButton.disabled = state.question_index === 0;
        nextButton.textContent = state.is_last_question && !state.is_reviewing ? 'Finish' : 'Next';
        renderTimer(state);
      }

      function renderFinished(state) {
        stopPolling();
        setVisibility(introCard, false);
        setVisibility(quizCard, false);
        setVisibility(resultCard, true);
        const result = state.result;
        shareText = result.share_text;
        document.getElementById('score-label').textContent =
          `${result.score} / ${result.total_questions} (${result.percentage}%)`;
        document.getElementById('result-meta').textContent =
          `${result.participant_name} | ${result.time_spent_seconds}s total`;
        const reviewContainer = document.getElementById('review-container');
        reviewContainer.innerHTML = '';
        result.review.forEach((item, index) => {
          const entry = document.createElement('div');
          entry.className = 'review-item';
          const chosen = item.selected_option_index === null
            ? 'No answer'
            : String.fromCharCode(65 + item.selected_option_index);
          const correct = String.fromCharCode(65 + item.correct_option_index);
          entry.innerHTML = `<div><strong>${index + 1}.</strong> ${item.question_html}</div>` +
            `<div class="${item.is_correct ? 'correct' : 'wrong'}">Your answer: ${chosen}` +
            ` | Correct answer: ${correct}</div>`;
          reviewContainer.appendChild(entry);
        });
        typesetMath([reviewContainer]);
      }

      async function copyResult() {
        if (shareText === null) return;
        try {
          await navigator.clipboard.writeText(shareText);
          statusEl.textContent = 'Result copied to clipboard.';
        } catch (error) {
          statusEl.textContent = 'Could not copy the result. Copy it manually: ' + shareText;
        }
      }

      function render(state) {
        statusEl.textContent = '';
        if (state.phase === 'in_progress') {
          renderInProgress(state);
        } else if (state.phase === 'finished') {
          renderFinished(state);
        }
      }

      async function runAction(method, path, body) {
        if (busy || attemptId === null) return;
        busy = true;
        try {
          render(await callApi(method, path, body));
        } catch (error) {
          statusEl.textContent = error.message;
        } finally {
          busy = false;
        }
      }

      function selectOption(index) {
        runAction('POST', `/api/attempts/${attemptId}/select`, { option_index: index });
      }

      async function refreshAttempt() {
        if (busy || attemptId === null) return;
        try {
          render(await callApi('GET', `/api/attempts/${attemptId}`));
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      function stopPolling() {
        if (pollHandle) {
          clearInterval(pollHandle);
          pollHandle = null;
        }
      }

      async function startQuiz() {
        startButton.disabled = true;
        try {
          if (attemptId === null) {
            const created = await callApi('POST', `/api/quizzes/${QUIZ_ID}/attempts`);
            attemptId = created.attempt_id;
          }
          const state = await callApi('POST', `/api/attempts/${attemptId}/start`, {
            participant_name: nameInput.value,
          });
          render(state);
          pollHandle = setInterval(refreshAttempt, POLL_INTERVAL_MS);
        } catch (error) {
          statusEl.textContent = error.message;
          startButton.disabled = false;
        }
      }

      async function loadQuiz() {
        try {
          const quiz = await callApi('GET', `/api/quizzes/${QUIZ_ID}`);
          timeLimit = quiz.time_limit;
          document.getElementById('quiz-title').textContent = quiz.title;
          document.getElementById('quiz-description').textContent = quiz.description;
          const limitText = quiz.time_limit === null ? 'no time limit' : `${quiz.time_limit}s per question`;
          document.getElementById('quiz-meta').textContent =
            `${quiz.question_count} questions | ${quiz.difficulty} | ${limitText} | by ${quiz.created_by}`;
        } catch (error) {
          statusEl.textContent = error.message;
          startButton.disabled = true;
        }
      }

      startButton.addEventListener('click', startQuiz);
      nameInput.addEventListener('keydown', event => {
        if (event.key === 'Enter') startQuiz();
      });
      backButton.addEventListener('click', () => runAction('POST', `/api/attempts/${attemptId}/back`));
      nextButton.addEventListener('click', () => runAction('POST', `/api/attempts/${attemptId}/submit`));
      copyResultButton.addEventListener('click', copyResult);
      window.addEventListener('beforeunload', () => {
        if (attemptId !== null) {
          fetch(`/api/attempts/${attemptId}`, { method: 'DELETE', keepalive: true });
        }
      });

      loadQuiz();
    </script>
  </body>
</html>
"""


class StartPayload(BaseModel):
    """Payload schema for starting an attempt."""

    participant_name: str


class SelectPayload(BaseModel):
    """Payload schema for staging an option."""

    option_index: int


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map domain exceptions onto HTTP status codes."""
    try:
        yield
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _quiz_summary_payload(quiz: Quiz) -> dict[str, Any]:
    """Public view of a quiz; never includes correct answers."""
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "difficulty": quiz.difficulty.value,
        "question_count": quiz.question_count,
        "categories": quiz.categories,
        "time_limit": quiz.time_limit_seconds,
        "created_by": quiz.created_by,
        "created_at": format_datetime(quiz.created_at),
        "share_path": SHARE_PATH_TEMPLATE.format(quiz_id=quiz.id),
    }


def _share_link(request: Request, quiz: Quiz) -> str:
    return str(request.base_url).rstrip("/") + SHARE_PATH_TEMPLATE.format(quiz_id=quiz.id)


def _attempt_payload(state: AttemptState, quiz: Quiz, share_link: str) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "phase": state.phase.name.lower(),
        "question_count": state.question_count,
        "participant_name": state.participant_name,
        "answered_count": state.answered_count,
    }
    if state.phase is AttemptPhase.IN_PROGRESS and state.question is not None:
        question = state.question
        payload.update(
            {
                "question_index": state.question_index,
                "question": {
                    "id": question.id,
                    "category": question.category,
                    "question_html": renderer.render_fragment(question.question_text),
                    "options_html": [renderer.render_inline(option) for option in question.options],
                },
                "time_remaining_seconds": state.time_remaining_seconds,
                "staged_selection": state.staged_selection,
                "is_reviewing": state.is_reviewing,
                "recorded_selection": (
                    state.recorded_answer.selected_option_index if state.recorded_answer else None
                ),
                "is_last_question": state.is_last_question,
            }
        )
    elif state.phase is AttemptPhase.FINISHED and state.result is not None:
        result = state.result
        questions = {question.id: question for question in quiz.questions}
        review = []
        for answer in result.answers:
            question = questions[answer.question_id]
            review.append(
                {
                    "question_id": answer.question_id,
                    "question_html": renderer.render_fragment(question.question_text),
                    "options": list(question.options),
                    "selected_option_index": answer.selected_option_index,
                    "correct_option_index": question.correct_option_index,
                    "is_correct": answer.is_correct,
                    "time_spent_ms": answer.time_spent_ms,
                }
            )
        payload["result"] = {
            "id": result.id,
            "participant_name": result.participant_name,
            "score": result.score,
            "total_questions": result.total_questions,
            "percentage": result.percentage,
            "time_spent_seconds": result.time_spent_seconds,
            "completed_at": format_datetime(result.completed_at),
            "review": review,
            "share_text": format_share_text(quiz.title, result, share_link),
        }
    return payload


def _render_index_page(quizzes: list[Quiz]) -> str:
    if quizzes:
        items = "".join(
            f'<li><a href="{SHARE_PATH_TEMPLATE.format(quiz_id=quiz.id)}">{html.escape(quiz.title)}</a>'
            f' <span class="muted">{quiz.question_count} questions | {quiz.difficulty.rules.label}'
            f" | by {html.escape(quiz.created_by)}</span></li>"
            for quiz in quizzes
        )
        body = f'<ul class="quiz-list">{items}</ul>'
    else:
        body = "<p>No quizzes have been published yet.</p>"
    return _INDEX_PAGE_TEMPLATE.format(app_name=APP_NAME, style=_PAGE_STYLE, body=body)


def _render_take_page(quiz: Quiz) -> str:
    replacements = {
        "__TITLE__": html.escape(quiz.title),
        "__APP_NAME__": APP_NAME,
        "__STYLE__": _PAGE_STYLE,
        "__MATHJAX_CONFIG__": MATHJAX_CONFIG,
        "__MATHJAX_SCRIPT__": MATHJAX_SCRIPT,
        "__QUIZ_ID__": json.dumps(quiz.id),
    }
    page = _TAKE_PAGE_TEMPLATE
    for placeholder, value in replacements.items():
        page = page.replace(placeholder, value)
    return page


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.get("/", response_class=HTMLResponse)
    def serve_index_page(manager: QuizManager = Depends(quiz_manager_dep)) -> str:
        return _render_index_page(manager.get_published_quizzes())

    @app.get("/quiz/{quiz_id}", response_class=HTMLResponse)
    def serve_take_page(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> HTMLResponse:
        try:
            quiz = manager.get_published_quiz(quiz_id)
        except LookupError as exc:
            page = _MISSING_QUIZ_PAGE_TEMPLATE.format(
                app_name=APP_NAME, style=_PAGE_STYLE, message=html.escape(str(exc))
            )
            return HTMLResponse(page, status_code=404)
        return HTMLResponse(_render_take_page(quiz))

    @app.get("/api/quizzes")
    def list_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, Any]]:
        return [_quiz_summary_payload(quiz) for quiz in manager.get_published_quizzes()]

    @app.get("/api/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, request: Request, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        with _translate_errors():
            quiz = manager.get_published_quiz(quiz_id)
        return _quiz_summary_payload(quiz)

    @app.post("/api/quizzes/{quiz_id}/attempts", status_code=201)
    def create_attempt(quiz_id: str, request: Request, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        with _translate_errors():
            attempt_id, runner = manager.begin_attempt(quiz_id)
        logger.info("Attempt %s created for quiz %s", attempt_id, quiz_id)
        return {"attempt_id": attempt_id, "state": _attempt_payload(runner.state, runner.quiz, _share_link(request, runner.quiz))}

    @app.get("/api/attempts/{attempt_id}")
    def get_attempt(attempt_id: str, request: Request, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        with _translate_errors():
            runner = manager.get_attempt(attempt_id)
            state = runner.pump()
        return _attempt_payload(state, runner.quiz, _share_link(request, runner.quiz))

    @app.post("/api/attempts/{attempt_id}/start")
    def start_attempt(
        attempt_id: str,
        request: Request,
        payload: StartPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, Any]:
        with _translate_errors():
            runner = manager.get_attempt(attempt_id)
            state = runner.start(payload.participant_name)
        return _attempt_payload(state, runner.quiz, _share_link(request, runner.quiz))

    @app.post("/api/attempts/{attempt_id}/select")
    def select_option(
        attempt_id: str,
        request: Request,
        payload: SelectPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, Any]:
        with _translate_errors():
            runner = manager.get_attempt(attempt_id)
            state = runner.select(payload.option_index)
        return _attempt_payload(state, runner.quiz, _share_link(request, runner.quiz))

    @app.post("/api/attempts/{attempt_id}/submit")
    def submit_answer(attempt_id: str, request: Request, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        with _translate_errors():
            runner = manager.get_attempt(attempt_id)
            state = runner.submit()
        return _attempt_payload(state, runner.quiz, _share_link(request, runner.quiz))

    @app.post("/api/attempts/{attempt_id}/back")
    def go_back(attempt_id: str, request: Request, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, Any]:
        with _translate_errors():
            runner = manager.get_attempt(attempt_id)
            state = runner.go_back()
        return _attempt_payload(state, runner.quiz, _share_link(request, runner.quiz))

    @app.delete("/api/attempts/{attempt_id}", status_code=204)
    def abandon_attempt(attempt_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        manager.discard_attempt(attempt_id)
        return Response(status_code=204)

    return app


def start_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info", log_config=None)
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizoShareServer", daemon=True)
    thread.start()
    logger.info("Share server listening on %s:%s", host, port)
    return thread
