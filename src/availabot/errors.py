# Error taxonomy for the auth flow and the availability engine.
# Created: 2026-10-18

from __future__ import annotations


class AvailabotError(Exception):
    """Base class for every error raised by availabot."""


class AuthFlowError(AvailabotError):
    """An OAuth flow could not be completed."""


class MalformedState(AuthFlowError):
    """The OAuth ``state`` parameter could not be decoded."""


class NoSuchFlow(AuthFlowError):
    """No authorization flow was ever started for this user."""

    def __init__(self, user_id: str):
        super().__init__(f"no auth flow found for user {user_id}")
        self.user_id = user_id


class CSRFMismatch(AuthFlowError):
    """The CSRF token in the state does not match the current flow."""

    def __init__(self, user_id: str):
        super().__init__("invalid CSRF token")
        self.user_id = user_id


class ExchangeFailed(AuthFlowError):
    """The provider refused to exchange the authorization code."""


class TimestampParseError(AvailabotError):
    """A busy interval carried a timestamp that is not RFC 3339."""

    def __init__(self, value: object, reason: str = ""):
        msg = f"unable to parse timestamp {value!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.value = value


class CalendarError(AvailabotError):
    """The calendar provider could not deliver busy intervals."""
