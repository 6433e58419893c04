"""Markdown + LaTeX rendering shared by the Qt question view and the share page.

Question and option text is stored as markdown. The same renderer turns it
into HTML for both clients and MathJax typesets any ``$...$`` math when the
page is displayed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html

from markdown_it import MarkdownIt

from quizo.constants.about import APP_NAME
from quizo.constants.quiz_constants import OPTION_LETTERS

MATHJAX_SCRIPT = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
MATHJAX_CONFIG = (
    "window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] },"
    " svg: { fontCache: 'global' } };"
)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments or full documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""
        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single line without wrapping it in a paragraph."""
        return self._markdown.renderInline((markdown_text or "").strip())

    def render_question(
        self,
        question_text: str,
        options: list[str],
        *,
        selected_index: int | None = None,
        correct_index: int | None = None,
    ) -> str:
        """Render a question with lettered options.

        ``correct_index`` is only passed once the answer may be revealed.
        """
        items: list[str] = []
        for index, (letter, option) in enumerate(zip(OPTION_LETTERS, options)):
            classes = ["option"]
            if index == selected_index:
                classes.append("selected")
            if correct_index is not None:
                if index == correct_index:
                    classes.append("correct")
                elif index == selected_index:
                    classes.append("wrong")
            items.append(
                f'<li class="{" ".join(classes)}"><strong>{letter}.</strong> {self.render_inline(option)}</li>'
            )
        return (
            f'<div class="question-text">{self.render_fragment(question_text)}</div>'
            f'<ol class="options">{"".join(items)}</ol>'
        )

    def wrap_with_mathjax(self, body_html: str, title: str = APP_NAME, font_size_pt: int = 16) -> str:
        """Wrap a fragment inside a minimal HTML document that loads MathJax."""
        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{html.escape(title)}</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 1rem; background: transparent; color: #f5f7ff; }}
      .question-html {{ font-size: {font_size_pt}pt; line-height: 1.5; }}
      .options {{ list-style: none; padding: 0; }}
      .option {{ padding: 0.4rem 0.6rem; margin: 0.3rem 0; border-radius: 6px; background: rgba(255,255,255,0.06); }}
      .option.selected {{ outline: 2px solid #3b82f6; }}
      .option.correct {{ background: rgba(34,197,94,0.35); }}
      .option.wrong {{ background: rgba(239,68,68,0.35); }}
    </style>
    <script>{MATHJAX_CONFIG}</script>
    <script defer src="{MATHJAX_SCRIPT}"></script>
  </head>
  <body>
    <div class="question-html">{body_html}</div>
  </body>
</html>"""


# Shared instance; MarkdownIt is safe for concurrent read-only renders.
renderer = MarkdownMathRenderer()
