"""Application entry point for Quizo."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from quizo.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quizo.constants.storage_constants import DEFAULT_STORAGE_PATH
from quizo.core.quiz_manager import QuizManager
from quizo.core.storage import JsonFileStore
from quizo.server.api_server import start_api_server
from quizo.ui.main_window import QuizoMainWindow
from quizo.utils.logging_config import configure_logging


def _determine_share_base_url(port: int) -> str:
    """Best-effort determination of the LAN address that share links point at."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}"


def main() -> None:
    """Initialize logging and storage, start the share server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting Quizo with data in %s", DEFAULT_STORAGE_PATH)

    quiz_manager = QuizManager(JsonFileStore(DEFAULT_STORAGE_PATH))
    start_api_server(quiz_manager=quiz_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)
    share_base_url = _determine_share_base_url(DEFAULT_PORT)
    logger.info("Shared quizzes available under %s", share_base_url)

    app = QApplication(sys.argv)
    window = QuizoMainWindow(quiz_manager=quiz_manager, share_base_url=share_base_url)
    if not window.prompt_login():
        logger.info("Login cancelled; exiting")
        return
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
