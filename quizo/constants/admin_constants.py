"""Admin panel access settings."""

ADMIN_PASSWORD: str = "admin123"
