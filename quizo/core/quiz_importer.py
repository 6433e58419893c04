"""Utilities for importing quiz questions from a human-friendly text file.

File format (repeat blocks separated by blank lines or '---'):

    Q: Question text. Additional lines until the next marker are treated as
       part of the question.
    A: First option text
    B: Second option text
    C: Third option text
    D: Fourth option text
    CORRECT: A|B|C|D
    CATEGORY: Science   (optional; defaults to General)

Example:

    Q: Which planet is known as the red planet?
    A: Venus
    B: Mars
    C: Jupiter
    D: Mercury
    CORRECT: B
    CATEGORY: Science

Title, description and difficulty are chosen in the creation panel; the file
only carries questions so one question bank can feed several quizzes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from quizo.constants.quiz_constants import DEFAULT_CATEGORY, OPTION_LETTERS
from quizo.core.models import Question

_SEPARATOR = "---"
_SINGLE_LINE_KEYS = ("CORRECT", "CATEGORY")


class QuizImportError(Exception):
    """Raised when a question file cannot be parsed."""


@dataclass(slots=True)
class ImportedQuestions:
    """Questions read from a file, with the file they came from."""

    source_path: Path
    questions: list[Question]


def load_questions_from_file(file_path: Path) -> ImportedQuestions:
    questions = parse_questions(file_path.read_text(encoding="utf-8"))
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return ImportedQuestions(source_path=file_path, questions=questions)


def parse_questions(text: str) -> list[Question]:
    return [_parse_block(block) for block in _split_blocks(text)]


def _split_blocks(text: str) -> Iterator[list[str]]:
    """Yield the non-empty lines of each block; blank lines and '---' end a block."""
    block: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line and line != _SEPARATOR:
            block.append(line)
            continue
        if block:
            yield block
            block = []
    if block:
        yield block


def _section_key(line: str) -> tuple[str, str] | None:
    """Split ``KEY: value`` when KEY is a known marker."""
    key, separator, value = line.partition(":")
    if not separator:
        return None
    key = key.strip().upper()
    if key == "Q" or key in OPTION_LETTERS or key in _SINGLE_LINE_KEYS:
        return key, value.strip()
    return None


def _parse_block(lines: list[str]) -> Question:
    sections: dict[str, list[str]] = {}
    open_section: str | None = None

    for line in lines:
        marker = _section_key(line)
        if marker is not None:
            key, value = marker
            sections[key] = [value]
            # CORRECT and CATEGORY never continue onto the next line.
            open_section = None if key in _SINGLE_LINE_KEYS else key
        elif open_section is not None:
            sections[open_section].append(line)
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{line}'.")

    question_text = "\n".join(sections.get("Q", [])).strip()
    if "Q" not in sections:
        raise QuizImportError("Question text missing (Q: ...)")
    if not question_text:
        raise QuizImportError("Question text cannot be empty.")

    if any(letter not in sections for letter in OPTION_LETTERS):
        raise QuizImportError("Each question must define exactly four options (A-D).")
    options = ["\n".join(sections[letter]).strip() for letter in OPTION_LETTERS]
    if not all(options):
        raise QuizImportError("Option text cannot be empty.")

    if "CORRECT" not in sections:
        raise QuizImportError("Each question needs a CORRECT: line.")
    correct_letter = sections["CORRECT"][0].upper()
    if correct_letter not in OPTION_LETTERS:
        raise QuizImportError("CORRECT must be one of A, B, C, or D.")

    category = sections.get("CATEGORY", [""])[0] or DEFAULT_CATEGORY
    return Question(
        id="",  # assigned by QuizRepository when the quiz is saved
        question_text=question_text,
        options=options,
        correct_option_index=OPTION_LETTERS.index(correct_letter),
        category=category,
    )
