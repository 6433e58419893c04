"""Color palette for Quizo supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """One color in both themes."""

    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    TEXT_PRIMARY = ThemeColors(light="#1F2937", dark="#F5F5F5")
    TEXT_MUTED = ThemeColors(light="#6B7280", dark="#9CA3AF")

    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_CARD = ThemeColors(light="#F5F3FF", dark="#2A2640")

    # Brand purple used for primary actions and selections
    ACCENT = ThemeColors(light="#7C3AED", dark="#A78BFA")
    ACCENT_TEXT = ThemeColors(light="#FFFFFF", dark="#111111")

    BORDER = ThemeColors(light="#D1D5DB", dark="#4B5563")
    BUTTON_BG = ThemeColors(light="#F3F4F6", dark="#374151")
    BUTTON_HOVER_BG = ThemeColors(light="#E5E7EB", dark="#4B5563")

    # Answer review and timer states
    CORRECT = ThemeColors(light="#15803D", dark="#4ADE80")
    WRONG = ThemeColors(light="#B91C1C", dark="#F87171")
    TIMER_NORMAL = ThemeColors(light="#2563EB", dark="#60A5FA")
    TIMER_WARNING = ThemeColors(light="#DC2626", dark="#F87171")
