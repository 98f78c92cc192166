"""Security helpers: CSRF tokens and the audit log."""

from availabot.security.csrf import CSRF_TOKEN_LENGTH, generate_csrf_token

__all__ = ["CSRF_TOKEN_LENGTH", "generate_csrf_token"]
