"""CSRF tokens for the OAuth ``state`` round-trip.

Tokens are 32 characters drawn from ``[A-Za-z0-9]`` with the ``secrets``
CSPRNG, so a token cannot be predicted from the ones issued before it.
"""

import secrets
import string

__all__ = ["CSRF_ALPHABET", "CSRF_TOKEN_LENGTH", "generate_csrf_token"]

CSRF_ALPHABET = string.ascii_letters + string.digits
CSRF_TOKEN_LENGTH = 32


def generate_csrf_token(length: int = CSRF_TOKEN_LENGTH) -> str:
    """Return a fresh alphanumeric token of *length* characters."""
    return "".join(secrets.choice(CSRF_ALPHABET) for _ in range(length))
