"""Component for browsing published quizzes and taking one inside the console."""

from __future__ import annotations

from PySide6.QtCore import QTimer
from PySide6.QtGui import QGuiApplication
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QProgressBar,
    QPushButton,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from quizo.constants.quiz_constants import OPTION_LETTERS, TIME_LIMIT_WARNING_WINDOW_SECONDS, TIMER_POLL_INTERVAL_MS
from quizo.constants.ui_constants import (
    DEFAULT_GAME_FONT_SIZE,
    NO_PUBLISHED_QUIZZES_MESSAGE,
    RESULT_COPIED_MESSAGE,
    SHARE_URL_PLACEHOLDER,
    TAKE_AGAIN_BUTTON,
    TAKE_COPY_RESULT_BUTTON,
    TAKE_FINISH_BUTTON,
    TAKE_NEXT_BUTTON,
    TAKE_PREV_BUTTON,
    TAKE_START_BUTTON,
)
from quizo.core.markdown_math_renderer import renderer
from quizo.core.models import Quiz, QuizResult
from quizo.core.quiz_manager import QuizManager
from quizo.core.services.attempt_runner import (
    AttemptPhase,
    AttemptRunner,
    AttemptState,
    AttemptStateError,
    AttemptValidationError,
)
from quizo.core.services.result_aggregator import format_share_text
from quizo.styling.color_palette import Theme
from quizo.styling.styles import Styles
from quizo.ui.dialog_helpers import confirm_leave_attempt, show_error, show_info, show_warning
from quizo.ui.question_renderer import render_question_with_options

_LIST_PAGE, _INTRO_PAGE, _QUESTION_PAGE, _RESULT_PAGE = range(4)


def quiz_id_from_link(text: str) -> str:
    """Accept a full share link or a bare quiz id."""
    cleaned = text.strip().rstrip("/")
    if "/quiz/" in cleaned:
        cleaned = cleaned.rsplit("/quiz/", 1)[1]
    return cleaned.split("?", 1)[0].split("#", 1)[0]


def render_result_review(quiz: Quiz, result: QuizResult, font_size: int) -> str:
    """Full HTML review of a finished attempt with the correct answers revealed."""
    questions = {question.id: question for question in quiz.questions}
    sections: list[str] = []
    for number, answer in enumerate(result.answers, start=1):
        question = questions[answer.question_id]
        chosen = "No answer" if answer.selected_option_index is None else OPTION_LETTERS[answer.selected_option_index]
        verdict = "correct" if answer.is_correct else "wrong"
        sections.append(
            f'<section class="review"><h3>Question {number}</h3>'
            + renderer.render_question(
                question.question_text,
                question.options,
                selected_index=answer.selected_option_index,
                correct_index=question.correct_option_index,
            )
            + f'<p class="option {verdict}">Your answer: {chosen}'
            f" | Correct answer: {OPTION_LETTERS[question.correct_option_index]}"
            f" | {answer.time_spent_ms / 1000:.1f}s</p></section>"
        )
    return renderer.wrap_with_mathjax("".join(sections), title=quiz.title, font_size_pt=font_size)


class TakeQuizPanel(QWidget):
    """Runs an :class:`AttemptRunner` and mirrors its state in the widgets.

    A ``QTimer`` pumps the runner so timer expiries are applied even when the
    participant does nothing.
    """

    def __init__(
        self,
        quiz_manager: QuizManager,
        share_base_url: str | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self.share_base_url = share_base_url or SHARE_URL_PLACEHOLDER
        self._username: str = ""
        self._published: list[Quiz] = []
        self._quiz: Quiz | None = None
        self._attempt_id: str | None = None
        self._runner: AttemptRunner | None = None
        self._last_result: QuizResult | None = None
        self._rendered_question_key: tuple[int, int] | None = None
        self._game_font_size: int = DEFAULT_GAME_FONT_SIZE
        self._theme = Theme.LIGHT

        self._build_ui()
        self._configure_pump_timer()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        self.page_stack = QStackedWidget(self)
        layout.addWidget(self.page_stack)

        self.page_stack.addWidget(self._build_list_page())
        self.page_stack.addWidget(self._build_intro_page())
        self.page_stack.addWidget(self._build_question_page())
        self.page_stack.addWidget(self._build_result_page())

    def _build_list_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        heading = QLabel("Published Quizzes", page)
        heading.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(heading)

        link_row = QHBoxLayout()
        self.link_input = QLineEdit(page)
        self.link_input.setPlaceholderText("Paste a share link or quiz id")
        self.link_input.returnPressed.connect(self._handle_open_link)
        link_row.addWidget(self.link_input)
        open_button = QPushButton("Open", page)
        open_button.clicked.connect(self._handle_open_link)
        link_row.addWidget(open_button)
        layout.addLayout(link_row)

        self.quiz_table = QTableWidget(0, 5, page)
        self.quiz_table.setHorizontalHeaderLabels(["Title", "Difficulty", "Questions", "Categories", "Creator"])
        self.quiz_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.quiz_table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.quiz_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.quiz_table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.quiz_table.cellDoubleClicked.connect(lambda row, _column: self._open_quiz_at_row(row))
        layout.addWidget(self.quiz_table, stretch=1)

        self.empty_label = QLabel(NO_PUBLISHED_QUIZZES_MESSAGE, page)
        layout.addWidget(self.empty_label)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.open_selected_button = QPushButton("Take Selected Quiz", page)
        self.open_selected_button.clicked.connect(lambda: self._open_quiz_at_row(self.quiz_table.currentRow()))
        button_row.addWidget(self.open_selected_button)
        layout.addLayout(button_row)
        return page

    def _build_intro_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        self.intro_title_label = QLabel(page)
        self.intro_title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.intro_title_label)
        self.intro_description_label = QLabel(page)
        self.intro_description_label.setWordWrap(True)
        layout.addWidget(self.intro_description_label)
        self.intro_meta_label = QLabel(page)
        self.intro_meta_label.setStyleSheet(Styles.get_muted_label_style())
        layout.addWidget(self.intro_meta_label)

        layout.addWidget(QLabel("Your name:", page))
        self.name_input = QLineEdit(page)
        self.name_input.returnPressed.connect(self._handle_start)
        layout.addWidget(self.name_input)

        button_row = QHBoxLayout()
        back_button = QPushButton("Back", page)
        back_button.clicked.connect(self._abandon_attempt)
        button_row.addWidget(back_button)
        button_row.addStretch()
        self.start_button = QPushButton(TAKE_START_BUTTON, page)
        self.start_button.setDefault(True)
        self.start_button.clicked.connect(self._handle_start)
        button_row.addWidget(self.start_button)
        layout.addLayout(button_row)
        layout.addStretch()
        return page

    def _build_question_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        header_row = QHBoxLayout()
        self.progress_label = QLabel(page)
        header_row.addWidget(self.progress_label)
        header_row.addStretch()
        self.timer_label = QLabel(page)
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        self.timer_bar = QProgressBar(page)
        self.timer_bar.setTextVisible(False)
        layout.addWidget(self.timer_bar)

        self.question_view = QWebEngineView(page)
        layout.addWidget(self.question_view, stretch=1)

        self.option_buttons: list[QPushButton] = []
        options_grid = QHBoxLayout()
        for index, letter in enumerate(OPTION_LETTERS):
            button = QPushButton(letter, page)
            button.clicked.connect(lambda _checked=False, i=index: self._handle_select(i))
            options_grid.addWidget(button)
            self.option_buttons.append(button)
        layout.addLayout(options_grid)

        self.answer_status_label = QLabel(page)
        layout.addWidget(self.answer_status_label)

        nav_row = QHBoxLayout()
        leave_button = QPushButton("Leave Quiz", page)
        leave_button.clicked.connect(self._handle_leave)
        nav_row.addWidget(leave_button)
        nav_row.addStretch()
        self.prev_button = QPushButton(TAKE_PREV_BUTTON, page)
        self.prev_button.clicked.connect(self._handle_go_back)
        nav_row.addWidget(self.prev_button)
        self.next_button = QPushButton(TAKE_NEXT_BUTTON, page)
        self.next_button.clicked.connect(self._handle_submit)
        nav_row.addWidget(self.next_button)
        layout.addLayout(nav_row)
        return page

    def _build_result_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        self.score_label = QLabel(page)
        self.score_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.score_label)
        self.result_meta_label = QLabel(page)
        layout.addWidget(self.result_meta_label)
        self.review_view = QWebEngineView(page)
        layout.addWidget(self.review_view, stretch=1)

        button_row = QHBoxLayout()
        copy_button = QPushButton(TAKE_COPY_RESULT_BUTTON, page)
        copy_button.clicked.connect(self._handle_copy_result)
        button_row.addWidget(copy_button)
        button_row.addStretch()
        again_button = QPushButton(TAKE_AGAIN_BUTTON, page)
        again_button.clicked.connect(self._show_quiz_list)
        button_row.addWidget(again_button)
        layout.addLayout(button_row)
        return page

    def _configure_pump_timer(self) -> None:
        self.pump_timer = QTimer(self)
        self.pump_timer.setInterval(TIMER_POLL_INTERVAL_MS)
        self.pump_timer.timeout.connect(self._pump)

    # --- Public API used by the main window ---

    def set_username(self, username: str) -> None:
        self._username = username

    def set_share_base_url(self, share_base_url: str) -> None:
        self.share_base_url = share_base_url

    def is_attempt_running(self) -> bool:
        return self._runner is not None and self._runner.state.phase is AttemptPhase.IN_PROGRESS

    def leave_attempt(self) -> bool:
        """Ask before dropping a running attempt. Returns True when the panel is free."""
        if not self.is_attempt_running():
            self._abandon_attempt()
            return True
        if not confirm_leave_attempt(self):
            return False
        self._show_quiz_list()
        return True

    def refresh(self) -> None:
        if self._runner is None:
            self._show_quiz_list()

    def apply_font_size(self, ui_font_size: int, game_font_size: int, theme: Theme = Theme.LIGHT) -> None:
        self._game_font_size = game_font_size
        self._theme = theme
        self.answer_status_label.setStyleSheet(Styles.get_review_style(False, theme))
        for button in self.option_buttons:
            button.setStyleSheet(Styles.get_option_button_style(False, game_font_size, theme))
        for button in (self.prev_button, self.next_button, self.start_button, self.open_selected_button):
            button.setStyleSheet(f"font-size: {ui_font_size}pt;")
        self._rendered_question_key = None

    # --- Quiz list ---

    def _show_quiz_list(self) -> None:
        self._abandon_attempt()
        self._published = self.quiz_manager.get_published_quizzes()
        self.quiz_table.setRowCount(len(self._published))
        for row, quiz in enumerate(self._published):
            values = (
                quiz.title,
                quiz.difficulty.rules.label,
                str(quiz.question_count),
                ", ".join(quiz.categories),
                quiz.created_by,
            )
            for column, value in enumerate(values):
                self.quiz_table.setItem(row, column, QTableWidgetItem(value))
        self.empty_label.setVisible(not self._published)
        self.page_stack.setCurrentIndex(_LIST_PAGE)

    def _open_quiz_at_row(self, row: int) -> None:
        if 0 <= row < len(self._published):
            self._open_quiz(self._published[row].id)

    def _handle_open_link(self) -> None:
        quiz_id = quiz_id_from_link(self.link_input.text())
        if quiz_id:
            self._open_quiz(quiz_id)

    def _open_quiz(self, quiz_id: str) -> None:
        try:
            attempt_id, runner = self.quiz_manager.begin_attempt(quiz_id)
        except LookupError as exc:
            show_warning(self, "Quiz not available", str(exc))
            return
        self._attempt_id = attempt_id
        self._runner = runner
        self._quiz = runner.quiz
        self._rendered_question_key = None

        quiz = runner.quiz
        rules = quiz.difficulty.rules
        limit = "no time limit" if quiz.time_limit_seconds is None else f"{quiz.time_limit_seconds}s per question"
        self.intro_title_label.setText(quiz.title)
        self.intro_description_label.setText(quiz.description)
        self.intro_meta_label.setText(
            f"{quiz.question_count} questions | {rules.label} | {limit} | by {quiz.created_by}"
        )
        self.name_input.setText(self._username)
        self.page_stack.setCurrentIndex(_INTRO_PAGE)

    def _abandon_attempt(self) -> None:
        self.pump_timer.stop()
        if self._attempt_id is not None:
            self.quiz_manager.discard_attempt(self._attempt_id)
        self._attempt_id = None
        self._runner = None
        self._quiz = None
        self._last_result = None
        if self.page_stack.currentIndex() == _INTRO_PAGE:
            self.page_stack.setCurrentIndex(_LIST_PAGE)

    # --- Attempt operations ---

    def _run(self, operation) -> None:
        """Apply one runner operation and show its outcome."""
        if self._runner is None:
            return
        try:
            state = operation(self._runner)
        except (AttemptValidationError, AttemptStateError) as exc:
            self.answer_status_label.setText(str(exc))
            self._render(self._runner.state)
            return
        self.answer_status_label.setText("")
        self._render(state)

    def _handle_start(self) -> None:
        if self._runner is None:
            return
        try:
            state = self._runner.start(self.name_input.text())
        except (AttemptValidationError, AttemptStateError) as exc:
            show_warning(self, "Cannot start", str(exc))
            return
        self.pump_timer.start()
        self._render(state)

    def _handle_select(self, option_index: int) -> None:
        self._run(lambda runner: runner.select(option_index))

    def _handle_submit(self) -> None:
        self._run(lambda runner: runner.submit())

    def _handle_go_back(self) -> None:
        self._run(lambda runner: runner.go_back())

    def _handle_leave(self) -> None:
        self.leave_attempt()

    def _pump(self) -> None:
        if self._runner is None:
            self.pump_timer.stop()
            return
        self._render(self._runner.pump())

    # --- Rendering ---

    def _render(self, state: AttemptState) -> None:
        if state.phase is AttemptPhase.IN_PROGRESS:
            self._render_question(state)
        elif state.phase is AttemptPhase.FINISHED:
            self._render_result(state)

    def _render_question(self, state: AttemptState) -> None:
        self.page_stack.setCurrentIndex(_QUESTION_PAGE)
        question = state.question
        index = state.question_index or 0
        suffix = " (answered)" if state.is_reviewing else ""
        self.progress_label.setText(
            f"Question {index + 1} of {state.question_count}{suffix} | {question.category}"
        )

        key = (index, state.answered_count)
        if key != self._rendered_question_key:
            self._rendered_question_key = key
            self.question_view.setHtml(
                render_question_with_options(question.question_text, question.options, self._game_font_size)
            )

        highlighted = state.recorded_answer.selected_option_index if state.is_reviewing else state.staged_selection
        for option_index, button in enumerate(self.option_buttons):
            button.setEnabled(not state.is_reviewing)
            button.setStyleSheet(
                Styles.get_option_button_style(option_index == highlighted, self._game_font_size, self._theme)
            )
        if state.is_reviewing and highlighted is None:
            self.answer_status_label.setText("Time ran out on this question.")

        self.prev_button.setEnabled(index > 0)
        self.next_button.setText(
            TAKE_FINISH_BUTTON if state.is_last_question and not state.is_reviewing else TAKE_NEXT_BUTTON
        )
        self._render_timer(state)

    def _render_timer(self, state: AttemptState) -> None:
        limit = self._quiz.time_limit_seconds if self._quiz else None
        remaining = state.time_remaining_seconds
        if limit is None or remaining is None or state.is_reviewing:
            self.timer_label.setText("")
            self.timer_bar.setVisible(False)
            return
        warning = remaining <= TIME_LIMIT_WARNING_WINDOW_SECONDS
        self.timer_label.setText(f"{remaining}s remaining")
        self.timer_label.setStyleSheet(Styles.get_timer_label_style(warning, self._theme))
        self.timer_bar.setVisible(True)
        self.timer_bar.setRange(0, limit)
        self.timer_bar.setValue(remaining)

    def _render_result(self, state: AttemptState) -> None:
        self.pump_timer.stop()
        result = state.result
        if result is None or self._quiz is None:
            show_error(self, "Quiz finished", "The result could not be displayed.")
            self._show_quiz_list()
            return
        self.score_label.setText(f"{result.score} / {result.total_questions} ({result.percentage}%)")
        self.result_meta_label.setText(f"{result.participant_name} | {result.time_spent_seconds}s total")
        self.review_view.setHtml(render_result_review(self._quiz, result, self._game_font_size))
        self._last_result = result
        self.page_stack.setCurrentIndex(_RESULT_PAGE)
        # The finished attempt is already stored; drop the runner so the list can reload.
        if self._attempt_id is not None:
            self.quiz_manager.discard_attempt(self._attempt_id)
        self._attempt_id = None
        self._runner = None

    def _handle_copy_result(self) -> None:
        result = self._last_result
        if result is None or self._quiz is None:
            return
        try:
            link = self.quiz_manager.build_share_link(self._quiz.id, self.share_base_url)
        except (LookupError, RuntimeError) as exc:
            show_warning(self, "Quiz not available", str(exc))
            return
        text = format_share_text(self._quiz.title, result, link)
        QGuiApplication.clipboard().setText(text)
        show_info(self, "Copy result", f"{RESULT_COPIED_MESSAGE}\n\n{text}")
