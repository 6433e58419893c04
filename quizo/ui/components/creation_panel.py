"""Component for building a new quiz or editing one of your drafts."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Signal
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quizo.constants.quiz_constants import CATEGORIES, DEFAULT_CATEGORY, FREE_DAILY_QUIZ_LIMIT, OPTION_LETTERS
from quizo.constants.ui_constants import (
    CREATE_DELETE_BUTTON,
    CREATE_EXPORT_BUTTON,
    CREATE_IMPORT_BUTTON,
    CREATE_INSERT_BUTTON,
    CREATE_NEW_QUIZ_BUTTON,
    CREATE_NEXT_BUTTON,
    CREATE_PREV_BUTTON,
    CREATE_SAVE_QUESTION_BUTTON,
    CREATE_SAVE_QUIZ_BUTTON,
    DEFAULT_GAME_FONT_SIZE,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    NO_DRAFTS_MESSAGE,
    PLACEHOLDER_DESCRIPTION,
    PLACEHOLDER_QUESTION,
    QUIZ_SAVED_MESSAGE,
)
from quizo.core.models import Difficulty, Question, Quiz
from quizo.core.quiz_exporter import save_questions_to_file
from quizo.core.quiz_importer import QuizImportError, load_questions_from_file
from quizo.core.quiz_manager import QuizManager
from quizo.ui.dialog_helpers import (
    check_unsaved_changes,
    confirm_delete_question,
    confirm_discard_drafts,
    confirm_replace_drafts,
    show_error,
    show_info,
    show_warning,
)
from quizo.ui.question_renderer import render_question_with_options


class CreationPanel(QWidget):
    """UI component for creating, editing, and navigating quiz questions.

    Questions are kept as local drafts until "Save Quiz" hands the whole set to
    the quiz manager, which validates it and charges the daily quota.
    """

    quiz_saved = Signal(object)

    def __init__(self, quiz_manager: QuizManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self._username: str = ""
        self._drafts: list[Question] = []
        self._current_question_index: int = -1
        self._has_unsaved_changes: bool = False
        self._editing_quiz_id: str | None = None
        self._preview_font_size: int = DEFAULT_GAME_FONT_SIZE
        self._last_export_path: Path | None = None

        self._build_ui()
        self.reset_state()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # Quiz details
        details_group = QGroupBox("Quiz Details", self)
        details_form = QFormLayout()
        details_group.setLayout(details_form)

        self.title_input = QLineEdit(self)
        self.title_input.setPlaceholderText("Quiz title")
        details_form.addRow("Title:", self.title_input)

        self.description_input = QPlainTextEdit(self)
        self.description_input.setPlaceholderText(PLACEHOLDER_DESCRIPTION)
        self.description_input.setMaximumHeight(60)
        details_form.addRow("Description:", self.description_input)

        self.difficulty_combo = QComboBox(self)
        for difficulty in Difficulty:
            rules = difficulty.rules
            self.difficulty_combo.addItem(f"{rules.label} - {rules.blurb}", userData=difficulty)
        self.difficulty_combo.currentIndexChanged.connect(self._handle_difficulty_changed)
        details_form.addRow("Difficulty:", self.difficulty_combo)

        self.rules_label = QLabel(self)
        details_form.addRow("", self.rules_label)
        self.quota_label = QLabel(self)
        details_form.addRow("", self.quota_label)

        layout.addWidget(details_group)

        # Question navigation
        action_row = QHBoxLayout()
        self.insert_button = QPushButton(CREATE_INSERT_BUTTON, self)
        self.insert_button.clicked.connect(self._handle_insert_new_draft)
        action_row.addWidget(self.insert_button)

        self.save_button = QPushButton(CREATE_SAVE_QUESTION_BUTTON, self)
        self.save_button.clicked.connect(self._handle_save_draft)
        action_row.addWidget(self.save_button)

        self.delete_button = QPushButton(CREATE_DELETE_BUTTON, self)
        self.delete_button.clicked.connect(self._handle_delete_draft)
        action_row.addWidget(self.delete_button)

        self.prev_button = QPushButton(CREATE_PREV_BUTTON, self)
        self.prev_button.clicked.connect(lambda: self._navigate_drafts(-1))
        action_row.addWidget(self.prev_button)

        self.next_button = QPushButton(CREATE_NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self._navigate_drafts(1))
        action_row.addWidget(self.next_button)

        layout.addLayout(action_row)

        # Question input
        self.question_input = QPlainTextEdit(self)
        self.question_input.setPlaceholderText(PLACEHOLDER_QUESTION)
        self.question_input.setMaximumHeight(90)
        self.question_input.textChanged.connect(self._on_input_changed)
        layout.addWidget(self.question_input)

        options_row = QHBoxLayout()
        self.option_inputs: list[QLineEdit] = []
        for label in OPTION_LETTERS:
            option_input = QLineEdit(self)
            option_input.setPlaceholderText(f"Option {label}")
            option_input.textChanged.connect(self._on_input_changed)
            options_row.addWidget(option_input)
            self.option_inputs.append(option_input)
        layout.addLayout(options_row)

        selector_row = QHBoxLayout()
        selector_row.addWidget(QLabel("Correct option:", self))
        self.correct_option_combo = QComboBox(self)
        self.correct_option_combo.addItem("Select...", userData=None)
        for index, label in enumerate(OPTION_LETTERS):
            self.correct_option_combo.addItem(label, userData=index)
        self.correct_option_combo.currentIndexChanged.connect(self._on_input_changed)
        selector_row.addWidget(self.correct_option_combo)

        selector_row.addWidget(QLabel("Category:", self))
        self.category_combo = QComboBox(self)
        self.category_combo.setEditable(True)
        self.category_combo.addItems([DEFAULT_CATEGORY, *CATEGORIES])
        self.category_combo.currentTextChanged.connect(lambda _: self._on_input_changed())
        selector_row.addWidget(self.category_combo)
        selector_row.addStretch()
        layout.addLayout(selector_row)

        self.preview_view = QWebEngineView(self)
        layout.addWidget(self.preview_view, stretch=1)

        self.status_label = QLabel(self)
        layout.addWidget(self.status_label)

        # Whole-quiz actions
        quiz_row = QHBoxLayout()
        self.import_button = QPushButton(CREATE_IMPORT_BUTTON, self)
        self.import_button.clicked.connect(self._handle_import)
        quiz_row.addWidget(self.import_button)

        self.export_button = QPushButton(CREATE_EXPORT_BUTTON, self)
        self.export_button.clicked.connect(self._handle_export)
        quiz_row.addWidget(self.export_button)

        quiz_row.addStretch()

        self.new_quiz_button = QPushButton(CREATE_NEW_QUIZ_BUTTON, self)
        self.new_quiz_button.clicked.connect(self._handle_start_over)
        quiz_row.addWidget(self.new_quiz_button)

        self.save_quiz_button = QPushButton(CREATE_SAVE_QUIZ_BUTTON, self)
        self.save_quiz_button.setDefault(True)
        self.save_quiz_button.clicked.connect(self._handle_save_quiz)
        quiz_row.addWidget(self.save_quiz_button)

        layout.addLayout(quiz_row)

    # --- Public API used by the main window ---

    def set_username(self, username: str) -> None:
        self._username = username
        self.refresh_quota()

    def refresh_quota(self) -> None:
        if not self._username:
            self.quota_label.setText("")
            return
        decision = self.quiz_manager.check_quota(self._username)
        account = self.quiz_manager.get_account(self._username)
        if account is None:
            self.quota_label.setText("")
            return
        if not decision.allowed:
            self.quota_label.setText(decision.reason or "")
        elif account.subscription_end is not None:
            ends = account.subscription_end.astimezone().strftime("%Y-%m-%d")
            self.quota_label.setText(f"{account.subscription_type.value.title()} plan: unlimited quizzes until {ends}.")
        else:
            self.quota_label.setText(f"Free plan: {account.quizzes_today} of {FREE_DAILY_QUIZ_LIMIT} quizzes created today.")

    def load_quiz_for_edit(self, quiz: Quiz) -> None:
        """Load one of the user's draft quizzes into the editor."""
        self._editing_quiz_id = quiz.id
        self.title_input.setText(quiz.title)
        self.description_input.setPlainText(quiz.description)
        self.difficulty_combo.blockSignals(True)
        self.difficulty_combo.setCurrentIndex(list(Difficulty).index(quiz.difficulty))
        self.difficulty_combo.blockSignals(False)
        self.difficulty_combo.setEnabled(False)
        self._update_rules_label()
        self._drafts = list(quiz.questions)
        self._current_question_index = 0
        self.populate_fields(self._drafts[0])
        self.status_label.setText(f"Editing '{quiz.title}'. Viewing question 1 of {len(self._drafts)}.")

    def reset_state(self) -> None:
        """Reset the panel to an empty new quiz."""
        self._editing_quiz_id = None
        self._drafts = []
        self._current_question_index = -1
        self.title_input.clear()
        self.description_input.clear()
        self.difficulty_combo.setEnabled(True)
        self.difficulty_combo.setCurrentIndex(0)
        self.clear_fields()
        self._update_rules_label()
        self.status_label.setText("Ready to create a new quiz.")

    def has_pending_work(self) -> bool:
        return bool(self._drafts) or self._has_unsaved_changes

    def apply_font_size(self, ui_font_size: int, game_font_size: int) -> None:
        style = f"font-size: {ui_font_size}pt;"
        buttons = [
            self.insert_button,
            self.save_button,
            self.delete_button,
            self.prev_button,
            self.next_button,
            self.import_button,
            self.export_button,
            self.new_quiz_button,
            self.save_quiz_button,
        ]
        for button in buttons:
            button.setStyleSheet(style)
        self._preview_font_size = game_font_size
        self._refresh_preview()

    # --- Draft handling ---

    def _selected_difficulty(self) -> Difficulty:
        return self.difficulty_combo.currentData()

    def _update_rules_label(self) -> None:
        rules = self._selected_difficulty().rules
        limit = "no time limit" if rules.time_limit_seconds is None else f"{rules.time_limit_seconds}s per question"
        self.rules_label.setText(f"Up to {rules.max_questions} questions, {limit}.")

    def _handle_difficulty_changed(self) -> None:
        self._update_rules_label()
        max_questions = self._selected_difficulty().rules.max_questions
        if len(self._drafts) > max_questions:
            show_warning(
                self,
                "Too many questions",
                f"This difficulty allows {max_questions} questions; remove some before saving.",
            )

    def _on_input_changed(self) -> None:
        self._has_unsaved_changes = True
        self._refresh_preview()

    def _handle_insert_new_draft(self) -> None:
        if not self.check_unsaved_changes():
            return
        max_questions = self._selected_difficulty().rules.max_questions
        if len(self._drafts) >= max_questions:
            show_warning(self, "Question limit", f"This difficulty allows at most {max_questions} questions.")
            return
        self._current_question_index = len(self._drafts)
        self.clear_fields()
        self.status_label.setText(f"Ready to add question {len(self._drafts) + 1}.")

    def _handle_save_draft(self) -> None:
        try:
            draft = self._build_draft_from_inputs()
        except ValueError as exc:
            show_warning(self, "Invalid question", str(exc))
            return

        if self._current_question_index == -1 or self._current_question_index >= len(self._drafts):
            max_questions = self._selected_difficulty().rules.max_questions
            if len(self._drafts) >= max_questions:
                show_warning(self, "Question limit", f"This difficulty allows at most {max_questions} questions.")
                return
            self._drafts.append(draft)
            self._current_question_index = len(self._drafts) - 1
        else:
            existing = self._drafts[self._current_question_index]
            draft.id = existing.id
            self._drafts[self._current_question_index] = draft

        self._has_unsaved_changes = False
        self.status_label.setText(
            f"Saved question {self._current_question_index + 1} of {len(self._drafts)}."
        )

    def _handle_delete_draft(self) -> None:
        if self._current_question_index == -1:
            show_info(self, "No selection", "There is no saved question to delete yet.")
            return

        if self._current_question_index >= len(self._drafts):
            self.clear_fields()
            self._current_question_index = len(self._drafts) - 1 if self._drafts else -1
            self.status_label.setText("Discarded unsaved question.")
            return

        if not confirm_delete_question(self, self._current_question_index + 1):
            return

        del self._drafts[self._current_question_index]
        if not self._drafts:
            self._current_question_index = -1
            self.clear_fields()
            self.status_label.setText("All questions removed.")
            return

        self._current_question_index = min(self._current_question_index, len(self._drafts) - 1)
        self.populate_fields(self._drafts[self._current_question_index])
        self.status_label.setText(
            f"Deleted question. Now viewing {self._current_question_index + 1} of {len(self._drafts)}."
        )

    def _navigate_drafts(self, step: int) -> None:
        if not self.check_unsaved_changes():
            return
        if not self._drafts:
            return
        target = self._current_question_index + step if self._current_question_index != -1 else 0
        target = max(0, min(len(self._drafts) - 1, target))
        self._current_question_index = target
        self.populate_fields(self._drafts[target])
        self.status_label.setText(f"Viewing question {target + 1} of {len(self._drafts)}.")

    def check_unsaved_changes(self) -> bool:
        """Prompt about an unsaved question. Returns True if it is ok to proceed."""
        if not self._has_unsaved_changes:
            return True

        result = check_unsaved_changes(self)

        if result is True:
            self._handle_save_draft()
            return not self._has_unsaved_changes
        elif result is False:
            self._has_unsaved_changes = False
            return True
        else:
            return False

    def clear_fields(self) -> None:
        self.question_input.clear()
        for input_field in self.option_inputs:
            input_field.clear()
        self.correct_option_combo.setCurrentIndex(0)
        self.category_combo.setCurrentText(DEFAULT_CATEGORY)
        self._has_unsaved_changes = False
        self._refresh_preview()

    def populate_fields(self, question: Question) -> None:
        self.question_input.setPlainText(question.question_text)
        for field, text in zip(self.option_inputs, question.options):
            field.setText(text)
        self.correct_option_combo.setCurrentIndex(question.correct_option_index + 1)
        self.category_combo.setCurrentText(question.category)
        self._has_unsaved_changes = False
        self._refresh_preview()

    def _build_draft_from_inputs(self) -> Question:
        question_text = self.question_input.toPlainText().strip()
        if not question_text:
            raise ValueError("Enter the question text before saving.")
        options = [field.text().strip() for field in self.option_inputs]
        if any(not option for option in options):
            raise ValueError("Fill in all four options before saving.")
        correct_data = self.correct_option_combo.currentData()
        if correct_data is None:
            raise ValueError("Select the correct option before saving.")
        return Question(
            id="",
            question_text=question_text,
            options=options,
            correct_option_index=int(correct_data),
            category=self.category_combo.currentText().strip() or DEFAULT_CATEGORY,
        )

    def _refresh_preview(self) -> None:
        question_text = self.question_input.toPlainText()
        options = [field.text() for field in self.option_inputs]
        correct = self.correct_option_combo.currentData()
        html = render_question_with_options(
            question_text, options, self._preview_font_size, correct_index=correct
        )
        self.preview_view.setHtml(html)

    # --- Whole quiz ---

    def _handle_import(self) -> None:
        if not self.check_unsaved_changes():
            return
        if self._drafts and not confirm_replace_drafts(self):
            return

        file_path, _ = QFileDialog.getOpenFileName(self, IMPORT_DIALOG_TITLE, str(Path.home()), IMPORT_FILE_FILTER)
        if not file_path:
            return

        try:
            imported = load_questions_from_file(Path(file_path))
        except (OSError, QuizImportError) as exc:
            show_error(self, "Import failed", str(exc))
            return

        max_questions = self._selected_difficulty().rules.max_questions
        if len(imported.questions) > max_questions:
            show_warning(
                self,
                "Too many questions",
                f"The file has {len(imported.questions)} questions but this difficulty allows "
                f"{max_questions}. Only the first {max_questions} were kept.",
            )
        self._drafts = imported.questions[:max_questions]
        self._current_question_index = 0
        self.populate_fields(self._drafts[0])
        self.status_label.setText(
            f"Imported {len(self._drafts)} questions. Viewing question 1 of {len(self._drafts)}."
        )

    def _handle_export(self) -> None:
        if not self.check_unsaved_changes():
            return
        if not self._drafts:
            show_warning(self, "No questions", NO_DRAFTS_MESSAGE)
            return

        default_path = self._last_export_path or (Path.home() / "quizo_questions.txt")
        file_path, _ = QFileDialog.getSaveFileName(self, EXPORT_DIALOG_TITLE, str(default_path), EXPORT_FILE_FILTER)
        if not file_path:
            return

        try:
            save_questions_to_file(Path(file_path), self._drafts)
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return

        self._last_export_path = Path(file_path)
        show_info(self, "Questions saved", f"Questions exported to {file_path}.")

    def _handle_start_over(self) -> None:
        if self.has_pending_work() and not confirm_discard_drafts(self):
            return
        self.reset_state()

    def _handle_save_quiz(self) -> None:
        if not self.check_unsaved_changes():
            return
        if not self._drafts:
            show_warning(self, "No questions", NO_DRAFTS_MESSAGE)
            return

        title = self.title_input.text()
        description = self.description_input.toPlainText()
        try:
            if self._editing_quiz_id is None:
                quiz = self.quiz_manager.create_quiz(
                    self._username, title, description, self._selected_difficulty(), list(self._drafts)
                )
            else:
                quiz = self.quiz_manager.update_quiz(
                    self._username,
                    self._editing_quiz_id,
                    title=title,
                    description=description,
                    questions=list(self._drafts),
                )
        except PermissionError as exc:
            show_warning(self, "Cannot save quiz", str(exc))
            return
        except (ValueError, RuntimeError, LookupError) as exc:
            show_error(self, "Quiz rejected", str(exc))
            return

        self.reset_state()
        self.refresh_quota()
        show_info(self, "Quiz saved", QUIZ_SAVED_MESSAGE)
        self.quiz_saved.emit(quiz)
