import pytest

from quizo.core.quiz_exporter import save_questions_to_file, serialize_questions
from quizo.core.quiz_importer import QuizImportError, load_questions_from_file, parse_questions

SAMPLE = """Q: Which planet is known as the red planet?
A: Venus
B: Mars
C: Jupiter
D: Mercury
CORRECT: B
CATEGORY: Science

---

Q: Solve $x^2 = 4$
for positive x.
A: 1
B: 2
C: 3
D: 4
CORRECT: b
"""


def test_parse_questions():
    questions = parse_questions(SAMPLE)

    assert len(questions) == 2
    first, second = questions
    assert first.question_text == "Which planet is known as the red planet?"
    assert first.options == ["Venus", "Mars", "Jupiter", "Mercury"]
    assert first.correct_option_index == 1
    assert first.category == "Science"
    assert first.id == ""
    assert second.question_text == "Solve $x^2 = 4$\nfor positive x."
    assert second.category == "General"


def test_blocks_may_be_separated_by_blank_lines_only():
    text = SAMPLE.replace("---\n\n", "")

    assert len(parse_questions(text)) == 2


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("A: 1\nB: 2\nC: 3\nD: 4\nCORRECT: A", "Question text missing"),
        ("Q: Text\nA: 1\nB: 2\nC: 3\nCORRECT: A", "exactly four options"),
        ("Q: Text\nA: 1\nB: 2\nC: 3\nD: 4", "CORRECT"),
        ("Q: Text\nA: 1\nB: 2\nC: 3\nD: 4\nCORRECT: E", "CORRECT must be"),
        ("stray line\nQ: Text", "outside of a known section"),
    ],
)
def test_malformed_blocks_are_rejected(text, message):
    with pytest.raises(QuizImportError, match=message):
        parse_questions(text)


def test_empty_file_is_rejected(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("\n\n", encoding="utf-8")

    with pytest.raises(QuizImportError):
        load_questions_from_file(path)


def test_exported_file_can_be_imported_again(tmp_path):
    questions = parse_questions(SAMPLE)
    path = tmp_path / "out" / "quiz.txt"

    save_questions_to_file(path, questions)
    imported = load_questions_from_file(path)

    assert imported.questions == questions
    assert "CORRECT: B\nCATEGORY: Science" in serialize_questions(questions)


def test_export_requires_questions(tmp_path):
    with pytest.raises(ValueError):
        save_questions_to_file(tmp_path / "quiz.txt", [])
