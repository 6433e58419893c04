"""Rounding helpers for scores and durations shown to users."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3), unlike ``round``."""
    return math.floor(value + 0.5)


def as_percentage(numerator: float, denominator: float) -> int:
    if not denominator:
        return 0
    return round_half_up(numerator / denominator * 100)
