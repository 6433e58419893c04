"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "Quizo"
SHARE_URL_PLACEHOLDER: str = "http://<your-ip>:8000"
PLACEHOLDER_QUESTION: str = "Enter your question text (supports Markdown + LaTeX)."
PLACEHOLDER_DESCRIPTION: str = "What is this quiz about?"

DEFAULT_UI_FONT_SIZE: int = 10
DEFAULT_GAME_FONT_SIZE: int = 14

MODE_BUTTON_CREATE: str = "Create Quiz"
MODE_BUTTON_MY_QUIZZES: str = "My Quizzes"
MODE_BUTTON_TAKE: str = "Take Quiz"
MODE_BUTTON_ADMIN: str = "Admin"
MODE_BUTTON_UPGRADE: str = "Upgrade"
MODE_BUTTON_LOGOUT: str = "Switch User"

CREATE_INSERT_BUTTON: str = "Add New Question"
CREATE_SAVE_QUESTION_BUTTON: str = "Save Question"
CREATE_DELETE_BUTTON: str = "Delete Question"
CREATE_PREV_BUTTON: str = "Previous Question"
CREATE_NEXT_BUTTON: str = "Next Question"
CREATE_IMPORT_BUTTON: str = "Import Questions"
CREATE_EXPORT_BUTTON: str = "Export Questions"
CREATE_SAVE_QUIZ_BUTTON: str = "Save Quiz"
CREATE_NEW_QUIZ_BUTTON: str = "Start Over"

IMPORT_DIALOG_TITLE: str = "Select question file"
IMPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Save questions to file"
EXPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"

TAKE_START_BUTTON: str = "Start Quiz"
TAKE_PREV_BUTTON: str = "Previous"
TAKE_NEXT_BUTTON: str = "Next"
TAKE_FINISH_BUTTON: str = "Finish"
TAKE_AGAIN_BUTTON: str = "Back to Quiz List"
TAKE_COPY_RESULT_BUTTON: str = "Copy Result"

NO_DRAFTS_MESSAGE: str = "Add at least one question before saving the quiz."
QUIZ_SAVED_MESSAGE: str = "Quiz saved as a draft. Publish it from My Quizzes to share it."
LINK_COPIED_MESSAGE: str = "Share link copied to the clipboard."
RESULT_COPIED_MESSAGE: str = "Result copied to the clipboard."
NO_PUBLISHED_QUIZZES_MESSAGE: str = "No quizzes have been published yet."
