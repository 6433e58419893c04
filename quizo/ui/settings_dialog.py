"""Preferences dialog: font sizes, the share link address and the colour theme."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QLineEdit,
    QSpinBox,
    QVBoxLayout,
)

from quizo.constants.ui_constants import DEFAULT_GAME_FONT_SIZE, DEFAULT_UI_FONT_SIZE


def _point_size_spinbox(value: int, minimum: int, maximum: int) -> QSpinBox:
    spinbox = QSpinBox()
    spinbox.setRange(minimum, maximum)
    spinbox.setSuffix(" pt")
    spinbox.setValue(value)
    return spinbox


class SettingsDialog(QDialog):
    """Modal dialog returning the user's console preferences."""

    def __init__(
        self,
        parent=None,
        ui_font_size: int = DEFAULT_UI_FONT_SIZE,
        game_font_size: int = DEFAULT_GAME_FONT_SIZE,
        share_base_url: str = "",
        dark_theme: bool = False,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.setModal(True)
        self.setMinimumWidth(420)
        self._share_base_url = share_base_url

        layout = QVBoxLayout()
        self.setLayout(layout)

        appearance = QGroupBox("Appearance")
        appearance_form = QFormLayout()
        appearance.setLayout(appearance_form)
        self.ui_font_spinbox = _point_size_spinbox(ui_font_size, 8, 24)
        appearance_form.addRow("Buttons and lists:", self.ui_font_spinbox)
        self.game_font_spinbox = _point_size_spinbox(game_font_size, 10, 32)
        self.game_font_spinbox.setToolTip("Used for questions while taking a quiz and in previews")
        appearance_form.addRow("Questions and options:", self.game_font_spinbox)
        self.dark_theme_checkbox = QCheckBox("Dark theme")
        self.dark_theme_checkbox.setChecked(dark_theme)
        appearance_form.addRow("", self.dark_theme_checkbox)
        layout.addWidget(appearance)

        sharing = QGroupBox("Sharing")
        sharing_form = QFormLayout()
        sharing.setLayout(sharing_form)
        self.share_url_input = QLineEdit(share_base_url)
        self.share_url_input.setToolTip("Participants open <base address>/quiz/<id> in their browser.")
        sharing_form.addRow("Base address:", self.share_url_input)
        layout.addWidget(sharing)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)  # type: ignore[arg-type]
        buttons.rejected.connect(self.reject)  # type: ignore[arg-type]
        layout.addWidget(buttons)

    def get_ui_font_size(self) -> int:
        return self.ui_font_spinbox.value()

    def get_game_font_size(self) -> int:
        return self.game_font_spinbox.value()

    def get_share_base_url(self) -> str:
        """The edited base address, or the previous one when left blank."""
        return self.share_url_input.text().strip() or self._share_base_url

    def get_dark_theme(self) -> bool:
        return self.dark_theme_checkbox.isChecked()
