"""Static metadata describing Quizo."""

APP_NAME = "Quizo"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Quizo is a local quiz studio built with Qt and FastAPI. "
    "Create multiple-choice quizzes, publish and share them, and follow how participants score."
)

HELP_TEXT = (
    "Log in with any username, pick a difficulty and add questions one by one, or import a .txt file "
    "using the format below. Publish a quiz from My Quizzes to get a share link that opens the quiz "
    "in a browser.\n\n"
    "Q: Which planet is known as the red planet?\n"
    "A: Venus\nB: Mars\nC: Jupiter\nD: Mercury\n"
    "CORRECT: B\nCATEGORY: Science\n\n"
    "---\n\n"
    "Q: Who painted the Mona Lisa?\n"
    "A: Michelangelo\nB: Raphael\nC: Leonardo da Vinci\nD: Donatello\n"
    "CORRECT: C\nCATEGORY: Art"
)
