"""Password-protected admin dashboard: platform statistics, moderation and data reset."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QAbstractItemView,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from quizo.core.quiz_manager import QuizManager
from quizo.core.services.analytics import QuizSummary
from quizo.styling.styles import Styles
from quizo.ui.dialog_helpers import ask_text, confirm_clear_all_data, confirm_delete_quiz, show_info, show_warning

_LOCKED_PAGE, _DASHBOARD_PAGE = range(2)


def _read_only_table(columns: tuple[str, ...], parent: QWidget) -> QTableWidget:
    table = QTableWidget(0, len(columns), parent)
    table.setHorizontalHeaderLabels(list(columns))
    table.setSelectionBehavior(QAbstractItemView.SelectRows)
    table.setSelectionMode(QAbstractItemView.SingleSelection)
    table.setEditTriggers(QAbstractItemView.NoEditTriggers)
    table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
    return table


def _fill_table(table: QTableWidget, rows: list[tuple[str, ...]]) -> None:
    table.setRowCount(len(rows))
    for row, values in enumerate(rows):
        for column, value in enumerate(values):
            table.setItem(row, column, QTableWidgetItem(value))


class AdminPanel(QWidget):
    """Admin view. Stays locked until the admin password has been entered."""

    def __init__(self, quiz_manager: QuizManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self._summaries: list[QuizSummary] = []
        self._stat_labels: dict[str, QLabel] = {}

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        self.page_stack = QStackedWidget(self)
        layout.addWidget(self.page_stack)
        self.page_stack.addWidget(self._build_locked_page())
        self.page_stack.addWidget(self._build_dashboard_page())

    def _build_locked_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)
        layout.addStretch()
        message = QLabel("The admin panel is locked.", page)
        message.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(message)
        self.unlock_button = QPushButton("Unlock Admin Panel", page)
        self.unlock_button.clicked.connect(self.unlock)
        layout.addWidget(self.unlock_button)
        layout.addStretch()
        return page

    def _build_dashboard_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        header_row = QHBoxLayout()
        heading = QLabel("Admin Dashboard", page)
        heading.setStyleSheet(Styles.get_large_label_style())
        header_row.addWidget(heading)
        header_row.addStretch()
        self.refresh_button = QPushButton("Refresh", page)
        self.refresh_button.clicked.connect(self.refresh)
        header_row.addWidget(self.refresh_button)
        self.lock_button = QPushButton("Lock", page)
        self.lock_button.clicked.connect(self.lock)
        header_row.addWidget(self.lock_button)
        layout.addLayout(header_row)

        stats_group = QGroupBox("Overview", page)
        stats_form = QFormLayout()
        stats_group.setLayout(stats_form)
        for key, label in (
            ("participants", "Participants:"),
            ("creators", "Quiz creators:"),
            ("quizzes", "Quizzes (published):"),
            ("attempts", "Quiz attempts:"),
            ("average", "Average score:"),
            ("per_participant", "Attempts per participant:"),
            ("today", "Today:"),
            ("storage", "Storage used:"),
        ):
            value_label = QLabel(page)
            stats_form.addRow(label, value_label)
            self._stat_labels[key] = value_label
        layout.addWidget(stats_group)

        tabs = QTabWidget(page)
        self.activity_table = _read_only_table(("Participant", "Quiz", "Score", "Completed"), page)
        tabs.addTab(self.activity_table, "Recent Activity")

        quizzes_tab = QWidget(page)
        quizzes_layout = QVBoxLayout()
        quizzes_tab.setLayout(quizzes_layout)
        self.quiz_table = _read_only_table(("Title", "Creator", "Status", "Attempts", "Avg. score"), quizzes_tab)
        quizzes_layout.addWidget(self.quiz_table)
        self.delete_quiz_button = QPushButton("Delete Selected Quiz", quizzes_tab)
        self.delete_quiz_button.clicked.connect(self._handle_delete_quiz)
        quizzes_layout.addWidget(self.delete_quiz_button)
        tabs.addTab(quizzes_tab, "All Quizzes")

        self.leaderboard_table = _read_only_table(("Participant", "Total score", "Attempts", "Accuracy"), page)
        tabs.addTab(self.leaderboard_table, "Leaderboard")
        layout.addWidget(tabs, stretch=1)

        danger_row = QHBoxLayout()
        danger_row.addStretch()
        self.clear_button = QPushButton("Clear All Data", page)
        self.clear_button.clicked.connect(self._handle_clear_all)
        danger_row.addWidget(self.clear_button)
        layout.addLayout(danger_row)
        return page

    # --- Public API used by the main window ---

    def is_unlocked(self) -> bool:
        return self.page_stack.currentIndex() == _DASHBOARD_PAGE

    def unlock(self) -> bool:
        if self.is_unlocked():
            self.refresh()
            return True
        password = ask_text(self, "Admin login", "Admin password:", password=True)
        if password is None:
            return False
        if not self.quiz_manager.authenticate_admin(password):
            show_warning(self, "Admin login", "Incorrect password.")
            return False
        self.page_stack.setCurrentIndex(_DASHBOARD_PAGE)
        self.refresh()
        return True

    def lock(self) -> None:
        self.page_stack.setCurrentIndex(_LOCKED_PAGE)

    def refresh(self) -> None:
        if not self.is_unlocked():
            return
        overview = self.quiz_manager.get_admin_overview()
        usage = self.quiz_manager.get_storage_usage()
        self._stat_labels["participants"].setText(str(overview.total_participants))
        self._stat_labels["creators"].setText(str(overview.total_creators))
        self._stat_labels["quizzes"].setText(f"{overview.total_quizzes} ({overview.published_quizzes})")
        self._stat_labels["attempts"].setText(str(overview.total_attempts))
        self._stat_labels["average"].setText(f"{overview.average_score_percentage}%")
        self._stat_labels["per_participant"].setText(str(overview.attempts_per_participant))
        self._stat_labels["today"].setText(
            f"{overview.quizzes_today} quizzes created, {overview.attempts_today} attempts"
        )
        self._stat_labels["storage"].setText(
            f"quizzes {usage.quizzes_kb:.2f} KB, results {usage.results_kb:.2f} KB"
        )

        _fill_table(
            self.activity_table,
            [
                (
                    entry.result.participant_name,
                    entry.quiz_title,
                    f"{entry.result.score}/{entry.result.total_questions} ({entry.result.percentage}%)",
                    entry.result.completed_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                )
                for entry in self.quiz_manager.get_recent_activity()
            ],
        )

        self._summaries = self.quiz_manager.get_all_quiz_summaries()
        _fill_table(
            self.quiz_table,
            [
                (
                    summary.quiz.title,
                    summary.quiz.created_by,
                    "Published" if summary.quiz.is_published else "Draft",
                    str(summary.attempts),
                    f"{summary.average_score_percentage}%" if summary.attempts else "-",
                )
                for summary in self._summaries
            ],
        )

        _fill_table(
            self.leaderboard_table,
            [
                (row.participant_name, str(row.total_score), str(row.attempts), f"{row.percentage}%")
                for row in self.quiz_manager.get_leaderboard()
            ],
        )

    def apply_font_size(self, font_size: int) -> None:
        style = f"font-size: {font_size}pt;"
        for widget in (
            self.unlock_button,
            self.refresh_button,
            self.lock_button,
            self.delete_quiz_button,
            self.clear_button,
            self.activity_table,
            self.quiz_table,
            self.leaderboard_table,
        ):
            widget.setStyleSheet(style)

    def _handle_delete_quiz(self) -> None:
        row = self.quiz_table.currentRow()
        if not 0 <= row < len(self._summaries):
            return
        summary = self._summaries[row]
        if not confirm_delete_quiz(self, summary.quiz.title, attempts=summary.attempts):
            return
        removed = self.quiz_manager.admin_delete_quiz(summary.quiz.id)
        self.refresh()
        show_info(self, "Quiz deleted", f"Deleted '{summary.quiz.title}' and {removed} result(s).")

    def _handle_clear_all(self) -> None:
        if not confirm_clear_all_data(self):
            return
        self.quiz_manager.clear_all_data()
        self.refresh()
        show_info(self, "Data cleared", "All quizzes, results and accounts were removed.")
