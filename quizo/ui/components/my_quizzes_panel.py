"""Lists the current user's quizzes with publish, share, edit and analytics actions."""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import (
    QAbstractItemView,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from quizo.constants.ui_constants import LINK_COPIED_MESSAGE
from quizo.core.models import Quiz
from quizo.core.quiz_manager import QuizManager
from quizo.core.services.analytics import QuizAnalytics, QuizSummary
from quizo.styling.styles import Styles
from quizo.ui.dialog_helpers import confirm_delete_quiz, show_error, show_info, show_warning

_QUIZ_COLUMNS = ("Title", "Difficulty", "Questions", "Status", "Attempts", "Avg. score", "Created")


class AnalyticsDialog(QDialog):
    """Per-quiz statistics for its creator."""

    def __init__(self, analytics: QuizAnalytics, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        quiz = analytics.quiz
        self.setWindowTitle(f"Analytics: {quiz.title}")
        self.setMinimumSize(560, 420)

        layout = QVBoxLayout()
        self.setLayout(layout)

        title = QLabel(quiz.title, self)
        title.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(title)

        stats = QFormLayout()
        stats.addRow("Total attempts:", QLabel(str(analytics.attempts), self))
        stats.addRow("Average score:", QLabel(f"{analytics.average_score_percentage}%", self))
        stats.addRow("Average time:", QLabel(f"{analytics.average_time_seconds}s", self))
        stats.addRow("Best score:", QLabel(f"{analytics.best_score}/{quiz.question_count}", self))
        layout.addLayout(stats)

        layout.addWidget(QLabel("Recent results", self))
        table = QTableWidget(len(analytics.recent_results), 4, self)
        table.setHorizontalHeaderLabels(["Participant", "Score", "Time", "Completed"])
        table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        for row, result in enumerate(analytics.recent_results):
            table.setItem(row, 0, QTableWidgetItem(result.participant_name))
            table.setItem(row, 1, QTableWidgetItem(f"{result.score}/{result.total_questions} ({result.percentage}%)"))
            table.setItem(row, 2, QTableWidgetItem(f"{result.time_spent_seconds}s"))
            table.setItem(row, 3, QTableWidgetItem(result.completed_at.astimezone().strftime("%Y-%m-%d %H:%M")))
        layout.addWidget(table)

        if not analytics.recent_results:
            layout.addWidget(QLabel("Nobody has taken this quiz yet.", self))

        close_button = QPushButton("Close", self)
        close_button.clicked.connect(self.accept)  # type: ignore[arg-type]
        layout.addWidget(close_button)


class MyQuizzesPanel(QWidget):
    """Dashboard of the quizzes created by the logged-in user."""

    edit_requested = Signal(object)

    def __init__(self, quiz_manager: QuizManager, share_base_url: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self.share_base_url = share_base_url
        self._username: str = ""
        self._summaries: list[QuizSummary] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.heading_label = QLabel("My Quizzes", self)
        self.heading_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.heading_label)

        self.table = QTableWidget(0, len(_QUIZ_COLUMNS), self)
        self.table.setHorizontalHeaderLabels(list(_QUIZ_COLUMNS))
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.table.itemSelectionChanged.connect(self._update_buttons)
        layout.addWidget(self.table, stretch=1)

        self.empty_label = QLabel("You have not created any quizzes yet.", self)
        layout.addWidget(self.empty_label)

        self.share_label = QLabel(self)
        self.share_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.share_label.setStyleSheet(Styles.get_muted_label_style())
        layout.addWidget(self.share_label)

        button_row = QHBoxLayout()
        self.publish_button = QPushButton("Publish", self)
        self.publish_button.clicked.connect(self._handle_toggle_publish)
        button_row.addWidget(self.publish_button)

        self.share_button = QPushButton("Copy Share Link", self)
        self.share_button.clicked.connect(self._handle_copy_link)
        button_row.addWidget(self.share_button)

        self.edit_button = QPushButton("Edit", self)
        self.edit_button.clicked.connect(self._handle_edit)
        button_row.addWidget(self.edit_button)

        self.analytics_button = QPushButton("Analytics", self)
        self.analytics_button.clicked.connect(self._handle_analytics)
        button_row.addWidget(self.analytics_button)

        self.delete_button = QPushButton("Delete", self)
        self.delete_button.clicked.connect(self._handle_delete)
        button_row.addWidget(self.delete_button)

        button_row.addStretch()
        layout.addLayout(button_row)

        self._update_buttons()

    def set_username(self, username: str) -> None:
        self._username = username
        self.refresh()

    def set_share_base_url(self, share_base_url: str) -> None:
        self.share_base_url = share_base_url
        self._update_buttons()

    def refresh(self) -> None:
        self._summaries = self.quiz_manager.get_quizzes_for_creator(self._username) if self._username else []
        self.table.setRowCount(len(self._summaries))
        for row, summary in enumerate(self._summaries):
            quiz = summary.quiz
            values = (
                quiz.title,
                quiz.difficulty.rules.label,
                str(quiz.question_count),
                "Published" if quiz.is_published else "Draft",
                str(summary.attempts),
                f"{summary.average_score_percentage}%" if summary.attempts else "-",
                quiz.created_at.astimezone().strftime("%Y-%m-%d"),
            )
            for column, value in enumerate(values):
                self.table.setItem(row, column, QTableWidgetItem(value))
        self.empty_label.setVisible(not self._summaries)
        self._update_buttons()

    def apply_font_size(self, font_size: int) -> None:
        style = f"font-size: {font_size}pt;"
        for button in (
            self.publish_button,
            self.share_button,
            self.edit_button,
            self.analytics_button,
            self.delete_button,
        ):
            button.setStyleSheet(style)
        self.table.setStyleSheet(style)

    def _selected_summary(self) -> QuizSummary | None:
        rows = self.table.selectionModel().selectedRows()
        if not rows:
            return None
        index = rows[0].row()
        if 0 <= index < len(self._summaries):
            return self._summaries[index]
        return None

    def _share_link(self, quiz: Quiz) -> str:
        return self.quiz_manager.build_share_link(quiz.id, self.share_base_url)

    def _update_buttons(self) -> None:
        summary = self._selected_summary()
        has_selection = summary is not None
        published = has_selection and summary.quiz.is_published
        self.publish_button.setEnabled(has_selection)
        self.publish_button.setText("Unpublish" if published else "Publish")
        self.share_button.setEnabled(published)
        self.edit_button.setEnabled(has_selection and not published)
        self.analytics_button.setEnabled(has_selection)
        self.delete_button.setEnabled(has_selection)
        self.share_label.setText(f"Share link: {self._share_link(summary.quiz)}" if published else "")

    def _handle_toggle_publish(self) -> None:
        summary = self._selected_summary()
        if summary is None:
            return
        quiz = summary.quiz
        try:
            self.quiz_manager.set_quiz_published(self._username, quiz.id, not quiz.is_published)
        except (ValueError, PermissionError, LookupError) as exc:
            show_error(self, "Publish failed", str(exc))
            return
        selected_row = self.table.currentRow()
        self.refresh()
        self.table.selectRow(selected_row)

    def _handle_copy_link(self) -> None:
        summary = self._selected_summary()
        if summary is None:
            return
        try:
            link = self._share_link(summary.quiz)
        except RuntimeError as exc:
            show_warning(self, "Not published", str(exc))
            return
        QGuiApplication.clipboard().setText(link)
        show_info(self, "Share link", f"{LINK_COPIED_MESSAGE}\n\n{link}")

    def _handle_edit(self) -> None:
        summary = self._selected_summary()
        if summary is None:
            return
        if summary.quiz.is_published:
            show_warning(self, "Published quiz", "Unpublish the quiz before editing its questions.")
            return
        self.edit_requested.emit(summary.quiz)

    def _handle_analytics(self) -> None:
        summary = self._selected_summary()
        if summary is None:
            return
        try:
            analytics = self.quiz_manager.get_quiz_analytics(self._username, summary.quiz.id)
        except (PermissionError, LookupError) as exc:
            show_error(self, "Analytics unavailable", str(exc))
            return
        AnalyticsDialog(analytics, self).exec()

    def _handle_delete(self) -> None:
        summary = self._selected_summary()
        if summary is None:
            return
        if not confirm_delete_quiz(self, summary.quiz.title):
            return
        try:
            self.quiz_manager.delete_quiz(self._username, summary.quiz.id)
        except (PermissionError, LookupError) as exc:
            show_error(self, "Delete failed", str(exc))
            return
        self.refresh()
