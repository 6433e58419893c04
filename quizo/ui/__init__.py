"""Qt UI components for the Quizo console."""

from .dialog_helpers import (
    ask_choice,
    ask_text,
    check_unsaved_changes,
    confirm_delete_quiz,
    show_error,
    show_info,
    show_warning,
)
from .main_window import QuizoMainWindow
from .question_renderer import render_question_with_options

__all__ = [
    "QuizoMainWindow",
    "ask_choice",
    "ask_text",
    "check_unsaved_changes",
    "confirm_delete_quiz",
    "show_error",
    "show_info",
    "show_warning",
    "render_question_with_options",
]
