"""Qt main window switching between the create, my quizzes, take and admin modes."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quizo.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from quizo.constants.ui_constants import (
    DEFAULT_GAME_FONT_SIZE,
    DEFAULT_UI_FONT_SIZE,
    MODE_BUTTON_ADMIN,
    MODE_BUTTON_CREATE,
    MODE_BUTTON_LOGOUT,
    MODE_BUTTON_MY_QUIZZES,
    MODE_BUTTON_TAKE,
    MODE_BUTTON_UPGRADE,
    SHARE_URL_PLACEHOLDER,
    WINDOW_TITLE,
)
from quizo.core.models import Quiz, SubscriptionType
from quizo.core.quiz_manager import QuizManager
from quizo.styling.color_palette import Theme
from quizo.styling.styles import Styles
from quizo.ui.components.admin_panel import AdminPanel
from quizo.ui.components.creation_panel import CreationPanel
from quizo.ui.components.my_quizzes_panel import MyQuizzesPanel
from quizo.ui.components.take_quiz_panel import TakeQuizPanel
from quizo.ui.dialog_helpers import ask_choice, ask_text, confirm_discard_drafts, show_info, show_warning
from quizo.ui.settings_dialog import SettingsDialog

_PLAN_CHOICES = {
    "Weekly (7 days unlimited)": SubscriptionType.WEEKLY,
    "Monthly (30 days unlimited)": SubscriptionType.MONTHLY,
}


class AppMode(Enum):
    """High-level UI mode of the console."""

    CREATE = auto()
    MY_QUIZZES = auto()
    TAKE = auto()
    ADMIN = auto()


class QuizoMainWindow(QMainWindow):
    """Main Qt window orchestrating the application modes."""

    def __init__(self, quiz_manager: QuizManager, share_base_url: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.quiz_manager = quiz_manager
        self.share_base_url = share_base_url or SHARE_URL_PLACEHOLDER
        self._username: str = ""
        self._mode = AppMode.CREATE

        self._ui_font_size: int = DEFAULT_UI_FONT_SIZE
        self._game_font_size: int = DEFAULT_GAME_FONT_SIZE
        self._theme = Theme.LIGHT

        self._build_ui()
        self._apply_styles()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.user_label = QLabel(self)
        root_layout.addWidget(self.user_label)

        self.mode_stack = QStackedWidget(self)
        self.creation_panel = CreationPanel(self.quiz_manager, self)
        self.my_quizzes_panel = MyQuizzesPanel(self.quiz_manager, self.share_base_url, self)
        self.take_quiz_panel = TakeQuizPanel(self.quiz_manager, self.share_base_url, self)
        self.admin_panel = AdminPanel(self.quiz_manager, self)

        self.creation_panel.quiz_saved.connect(self._handle_quiz_saved)
        self.my_quizzes_panel.edit_requested.connect(self._handle_edit_requested)

        self._panels: dict[AppMode, QWidget] = {
            AppMode.CREATE: self.creation_panel,
            AppMode.MY_QUIZZES: self.my_quizzes_panel,
            AppMode.TAKE: self.take_quiz_panel,
            AppMode.ADMIN: self.admin_panel,
        }
        for panel in self._panels.values():
            self.mode_stack.addWidget(panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(AppMode.CREATE)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self._mode_buttons: dict[AppMode, QPushButton] = {}
        for mode, label in (
            (AppMode.CREATE, MODE_BUTTON_CREATE),
            (AppMode.MY_QUIZZES, MODE_BUTTON_MY_QUIZZES),
            (AppMode.TAKE, MODE_BUTTON_TAKE),
            (AppMode.ADMIN, MODE_BUTTON_ADMIN),
        ):
            button = QPushButton(label, self)
            button.setCheckable(True)
            button.clicked.connect(lambda _checked=False, m=mode: self._handle_mode_button(m))
            button_row.addWidget(button)
            self._mode_buttons[mode] = button

        button_row.addStretch()

        self.upgrade_button = QPushButton(MODE_BUTTON_UPGRADE, self)
        self.upgrade_button.clicked.connect(self._handle_upgrade)
        button_row.addWidget(self.upgrade_button)

        self.logout_button = QPushButton(MODE_BUTTON_LOGOUT, self)
        self.logout_button.clicked.connect(self._handle_switch_user)
        button_row.addWidget(self.logout_button)

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        self.settings_button = QPushButton("Settings", self)
        self.settings_button.clicked.connect(self._handle_settings)
        button_row.addWidget(self.settings_button)

        layout.addLayout(button_row)

    # --- Login ---

    def prompt_login(self) -> bool:
        """Ask for a username until one is accepted. Returns False when cancelled."""
        while True:
            username = ask_text(self, f"Log in to {APP_NAME}", "Username:", text=self._username)
            if username is None:
                return False
            try:
                account = self.quiz_manager.login(username)
            except ValueError as exc:
                show_warning(self, "Login", str(exc))
                continue
            self._set_user(account.username)
            return True

    def _set_user(self, username: str) -> None:
        self._username = username
        self.creation_panel.set_username(username)
        self.my_quizzes_panel.set_username(username)
        self.take_quiz_panel.set_username(username)
        self._update_user_label()

    def _update_user_label(self) -> None:
        account = self.quiz_manager.get_account(self._username)
        plan = account.subscription_type.value.title() if account else "Free"
        self.user_label.setText(f"Logged in as {self._username} ({plan} plan)")
        self.user_label.setStyleSheet(Styles.get_muted_label_style(self._theme))

    def _handle_switch_user(self) -> None:
        if not self._release_current_mode():
            return
        if self.creation_panel.has_pending_work() and not confirm_discard_drafts(self):
            return
        self.creation_panel.reset_state()
        self.admin_panel.lock()
        if self.prompt_login():
            self._set_mode(AppMode.CREATE)

    # --- Modes ---

    def _handle_mode_button(self, mode: AppMode) -> None:
        if mode == self._mode:
            self._set_mode(mode)
            return
        if not self._release_current_mode():
            self._set_mode(self._mode)
            return
        if mode == AppMode.ADMIN and not self.admin_panel.unlock():
            self._set_mode(self._mode)
            return
        self._set_mode(mode)

    def _release_current_mode(self) -> bool:
        if self._mode == AppMode.TAKE:
            return self.take_quiz_panel.leave_attempt()
        return True

    def _set_mode(self, mode: AppMode) -> None:
        self._mode = mode
        for button_mode, button in self._mode_buttons.items():
            button.setChecked(button_mode == mode)
        self.mode_stack.setCurrentWidget(self._panels[mode])

        if mode == AppMode.CREATE:
            self.creation_panel.refresh_quota()
        elif mode == AppMode.MY_QUIZZES:
            self.my_quizzes_panel.refresh()
        elif mode == AppMode.TAKE:
            self.take_quiz_panel.refresh()
        elif mode == AppMode.ADMIN:
            self.admin_panel.refresh()

    def _handle_quiz_saved(self, _quiz: Quiz) -> None:
        self._update_user_label()
        self._set_mode(AppMode.MY_QUIZZES)

    def _handle_edit_requested(self, quiz: Quiz) -> None:
        if self.creation_panel.has_pending_work() and not confirm_discard_drafts(self):
            return
        self.creation_panel.load_quiz_for_edit(quiz)
        self._set_mode(AppMode.CREATE)

    # --- Account actions ---

    def _handle_upgrade(self) -> None:
        choice = ask_choice(self, "Upgrade", "Choose a plan:", list(_PLAN_CHOICES))
        if choice is None:
            return
        account = self.quiz_manager.apply_subscription(self._username, _PLAN_CHOICES[choice])
        ends = account.subscription_end.astimezone().strftime("%Y-%m-%d %H:%M") if account.subscription_end else ""
        self._update_user_label()
        self.creation_panel.refresh_quota()
        show_info(self, "Upgrade", f"Unlimited quiz creation is active until {ends}.")

    def _handle_about(self) -> None:
        details = f"{APP_NAME} v{APP_VERSION}\nLicense: {APP_LICENSE}\n\n{APP_ABOUT_TEXT}"
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def _handle_settings(self) -> None:
        dialog = SettingsDialog(
            self,
            self._ui_font_size,
            self._game_font_size,
            self.share_base_url,
            self._theme == Theme.DARK,
        )
        if dialog.exec():
            self._ui_font_size = dialog.get_ui_font_size()
            self._game_font_size = dialog.get_game_font_size()
            self.share_base_url = dialog.get_share_base_url()
            self._theme = Theme.DARK if dialog.get_dark_theme() else Theme.LIGHT
            self.my_quizzes_panel.set_share_base_url(self.share_base_url)
            self.take_quiz_panel.set_share_base_url(self.share_base_url)
            self._apply_styles()

    def _apply_styles(self) -> None:
        self.setStyleSheet(Styles.get_main_window_style(self._theme))

        ui_style = f"font-size: {self._ui_font_size}pt;"
        buttons = [
            *self._mode_buttons.values(),
            self.upgrade_button,
            self.logout_button,
            self.about_button,
            self.help_button,
            self.settings_button,
        ]
        for button in buttons:
            button.setStyleSheet(ui_style)

        self.creation_panel.apply_font_size(self._ui_font_size, self._game_font_size)
        self.my_quizzes_panel.apply_font_size(self._ui_font_size)
        self.take_quiz_panel.apply_font_size(self._ui_font_size, self._game_font_size, self._theme)
        self.admin_panel.apply_font_size(self._ui_font_size)
