# Auth State Codec: the OAuth ``state`` parameter round-tripped through Google.
# Created: 2026-10-18
#
# Format: URL-safe base64 of ``{"tuid": <user id>, "csrf": <csrf token>}``.
# The credential is never part of the state.

from __future__ import annotations

import base64
import binascii
import json
from typing import NamedTuple

from availabot.errors import MalformedState

__all__ = ["AuthState", "decode_state", "encode_state"]


class AuthState(NamedTuple):
    user_id: str
    csrf_token: str


def encode_state(user_id: str, csrf_token: str) -> str:
    """Encode *user_id* and *csrf_token* into a URL-safe state string."""
    payload = json.dumps({"tuid": user_id, "csrf": csrf_token}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_state(state: str) -> AuthState:
    """Decode a state produced by :func:`encode_state`.

    Raises:
        MalformedState: if *state* is not valid base64 JSON carrying both fields.
    """
    try:
        raw = base64.urlsafe_b64decode(state.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise MalformedState(f"state is not valid base64 JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedState("state does not decode to an object")

    user_id = data.get("tuid")
    csrf_token = data.get("csrf")
    if not isinstance(user_id, str) or not isinstance(csrf_token, str):
        raise MalformedState("state is missing the user ID or CSRF token")

    return AuthState(user_id=user_id, csrf_token=csrf_token)
