"""Qt stylesheets built from the color palette."""

from .color_palette import ColorPalette, Theme


class Styles:
    """Helper class to generate Qt stylesheets based on the current theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        return f"""
            QMainWindow, QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_BG.get(theme)};
                border: 1px solid {ColorPalette.BORDER.get(theme)};
                border-radius: 6px;
                padding: 6px 12px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:checked {{
                background-color: {ColorPalette.ACCENT.get(theme)};
                color: {ColorPalette.ACCENT_TEXT.get(theme)};
                border: 1px solid {ColorPalette.ACCENT.get(theme)};
            }}
            QPushButton:disabled {{
                color: {ColorPalette.TEXT_MUTED.get(theme)};
            }}
            QLineEdit, QPlainTextEdit, QSpinBox, QComboBox {{
                border: 1px solid {ColorPalette.BORDER.get(theme)};
                border-radius: 4px;
                padding: 4px;
            }}
            QListWidget, QTableWidget {{
                border: 1px solid {ColorPalette.BORDER.get(theme)};
                border-radius: 4px;
            }}
            QGroupBox {{
                background-color: {ColorPalette.BACKGROUND_CARD.get(theme)};
                border: 1px solid {ColorPalette.BORDER.get(theme)};
                border-radius: 8px;
                margin-top: 6px;
                padding-top: 12px;
            }}
            QGroupBox::title {{
                subcontrol-origin: margin;
                left: 10px;
                padding: 0 3px 0 3px;
            }}
        """

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 16pt; font-weight: bold;"

    @staticmethod
    def get_muted_label_style(theme: Theme = Theme.LIGHT) -> str:
        return f"color: {ColorPalette.TEXT_MUTED.get(theme)};"

    @staticmethod
    def get_option_button_style(selected: bool, font_size: int, theme: Theme = Theme.LIGHT) -> str:
        if selected:
            return (
                f"font-size: {font_size}pt; text-align: left; padding: 10px;"
                f" background-color: {ColorPalette.ACCENT.get(theme)};"
                f" color: {ColorPalette.ACCENT_TEXT.get(theme)};"
            )
        return f"font-size: {font_size}pt; text-align: left; padding: 10px;"

    @staticmethod
    def get_timer_label_style(warning: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.TIMER_WARNING if warning else ColorPalette.TIMER_NORMAL
        return f"font-size: 14pt; font-weight: bold; color: {color.get(theme)};"

    @staticmethod
    def get_review_style(is_correct: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.CORRECT if is_correct else ColorPalette.WRONG
        return f"color: {color.get(theme)};"
