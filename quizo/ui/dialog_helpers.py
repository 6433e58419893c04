"""Helper functions for common dialog patterns in the Quizo console."""

from __future__ import annotations

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QInputDialog, QLineEdit, QMessageBox, QWidget


def _apply_optional_font(widget: QWidget, font_point_size: int | None) -> None:
    """Apply font size to a widget when requested."""
    if font_point_size is None or font_point_size <= 0:
        return

    font: QFont = widget.font()
    font.setPointSize(font_point_size)
    widget.setFont(font)


def _confirm(parent: QWidget, title: str, message: str) -> bool:
    reply = QMessageBox.question(
        parent,
        title,
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def confirm_delete_question(parent: QWidget, question_number: int) -> bool:
    """Ask before removing a draft question (1-indexed number)."""
    return _confirm(parent, "Confirm Delete", f"Are you sure you want to delete question {question_number}?")


def confirm_delete_quiz(parent: QWidget, title: str, attempts: int | None = None) -> bool:
    message = f"Delete the quiz '{title}'?"
    if attempts:
        message += f" Its {attempts} recorded result(s) will be removed as well."
    return _confirm(parent, "Confirm Delete", message + " This cannot be undone.")


def confirm_discard_drafts(parent: QWidget) -> bool:
    return _confirm(parent, "Discard Quiz", "Discard the quiz you are building and start over?")


def confirm_replace_drafts(parent: QWidget) -> bool:
    return _confirm(parent, "Confirm Import", "Importing will replace the questions you have added. Continue?")


def confirm_clear_all_data(parent: QWidget) -> bool:
    return _confirm(
        parent,
        "Clear All Data",
        "This removes every quiz, result and user account stored on this machine. Continue?",
    )


def confirm_leave_attempt(parent: QWidget) -> bool:
    return _confirm(parent, "Leave Quiz", "Leave this quiz? Your answers so far will not be saved.")


def check_unsaved_changes(parent: QWidget) -> bool | None:
    """Ask about an unsaved question.

    Returns True to save, False to discard, None when cancelled.
    """
    reply = QMessageBox.question(
        parent,
        "Unsaved Changes",
        "Question is not saved. Do you want to save the question?",
        QMessageBox.Yes | QMessageBox.No | QMessageBox.Cancel,
        QMessageBox.Yes,
    )

    if reply == QMessageBox.Yes:
        return True
    elif reply == QMessageBox.No:
        return False
    else:  # Cancel
        return None


def ask_text(parent: QWidget, title: str, label: str, *, password: bool = False, text: str = "") -> str | None:
    """Prompt for a single line of text; None when cancelled."""
    echo_mode = QLineEdit.Password if password else QLineEdit.Normal
    value, accepted = QInputDialog.getText(parent, title, label, echo_mode, text)
    if not accepted:
        return None
    return value


def ask_choice(parent: QWidget, title: str, label: str, items: list[str]) -> str | None:
    value, accepted = QInputDialog.getItem(parent, title, label, items, 0, False)
    if not accepted:
        return None
    return value


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(
    parent: QWidget,
    title: str,
    message: str,
    *,
    font_point_size: int | None = None,
) -> None:
    """Show an information dialog, optionally with a larger font."""
    msg_box = QMessageBox(parent)
    msg_box.setIcon(QMessageBox.Information)
    msg_box.setWindowTitle(title)
    msg_box.setText(message)
    msg_box.setStandardButtons(QMessageBox.Ok)
    _apply_optional_font(msg_box, font_point_size)
    if font_point_size is not None and font_point_size > 0:
        msg_box.setStyleSheet(
            f"QLabel {{ font-size: {font_point_size}pt; }}\n"
            f"QPushButton {{ font-size: {font_point_size}pt; }}"
        )
    msg_box.exec()


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)
