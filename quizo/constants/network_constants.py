"""Network configuration constants for the share server."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
SHARE_PATH_TEMPLATE: str = "/quiz/{quiz_id}"
