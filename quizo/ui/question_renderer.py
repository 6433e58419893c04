"""Question rendering for the Qt web views."""

from __future__ import annotations

from quizo.core.markdown_math_renderer import renderer


def render_question_with_options(
    question_text: str,
    options: list[str],
    font_size: int = 14,
    *,
    selected_index: int | None = None,
    correct_index: int | None = None,
) -> str:
    """Render a question and its lettered options as a full HTML document.

    Empty fields render as placeholders so the creation preview stays readable
    while the author types.
    """
    body = renderer.render_question(
        question_text.strip() or "(No question text)",
        [option or "(empty)" for option in options],
        selected_index=selected_index,
        correct_index=correct_index,
    )
    return renderer.wrap_with_mathjax(body, font_size_pt=font_size)
