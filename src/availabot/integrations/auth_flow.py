# Auth Flow Controller: starts and completes per-user OAuth flows.
# Created: 2026-10-18
#
# Per user: NoFlow -> FlowStarted (CSRF issued) -> Authenticated (credential).
# Starting a new flow replaces the CSRF token, which invalidates any flow
# still in flight for that user.

from __future__ import annotations

import hmac
import logging
from typing import Protocol

from availabot.errors import CSRFMismatch, ExchangeFailed, MalformedState, NoSuchFlow
from availabot.integrations.auth_state import decode_state, encode_state
from availabot.integrations.session_store import Credential, SessionStore
from availabot.security.audit import AuditLogger, AuditSeverity
from availabot.security.csrf import generate_csrf_token

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    """What the controller needs from an OAuth provider client."""

    def get_auth_url(self, state: str) -> str: ...

    async def exchange(self, code: str) -> Credential: ...


class AuthFlowController:
    """Drives the OAuth handshake on top of a :class:`SessionStore`."""

    def __init__(
        self,
        store: SessionStore,
        provider: AuthProvider,
        audit: AuditLogger | None = None,
    ):
        self.store = store
        self.provider = provider
        self.audit = audit

    def start_flow(self, user_id: str) -> str:
        """Issue a fresh CSRF token for *user_id* and return the authorization URL.

        A credential already held by the user is kept; only a successful
        exchange replaces it.
        """
        csrf_token = generate_csrf_token()
        self.store.begin_flow(user_id, csrf_token)
        state = encode_state(user_id, csrf_token)

        logger.info("Started auth flow for user %s", user_id)
        self._audit(user_id, "auth_flow_start", "success")
        return self.provider.get_auth_url(state)

    async def complete_flow(self, state: str, code: str) -> None:
        """Finish the flow identified by *state* using the provider's *code*.

        Raises:
            MalformedState: *state* cannot be decoded.
            NoSuchFlow: no flow was started for the decoded user.
            CSRFMismatch: the CSRF token is not the one most recently issued.
            ExchangeFailed: the provider refused the code.
        """
        try:
            auth_state = decode_state(state)
        except MalformedState as exc:
            logger.warning("Rejected auth callback with malformed state: %s", exc)
            self._audit(
                "",
                "auth_flow_complete",
                "reject",
                AuditSeverity.WARNING,
                reason="malformed_state",
            )
            raise

        user_id = auth_state.user_id
        session = self.store.get(user_id)
        if session is None:
            logger.warning("Auth callback for user %s without a started flow", user_id)
            self._audit(
                user_id,
                "auth_flow_complete",
                "reject",
                AuditSeverity.WARNING,
                reason="no_such_flow",
            )
            raise NoSuchFlow(user_id)

        if not hmac.compare_digest(
            session.csrf_token.encode("utf-8"), auth_state.csrf_token.encode("utf-8")
        ):
            self._reject_csrf(user_id, "csrf_mismatch")
            raise CSRFMismatch(user_id)

        try:
            credential = await self.provider.exchange(code)
        except Exception as exc:
            logger.exception("Code exchange failed for user %s", user_id)
            self._audit(
                user_id,
                "auth_flow_complete",
                "error",
                AuditSeverity.WARNING,
                reason="exchange_failed",
            )
            raise ExchangeFailed(f"code exchange failed: {exc}") from exc

        if not self.store.attach_credential(user_id, auth_state.csrf_token, credential):
            self._reject_csrf(user_id, "superseded")
            raise CSRFMismatch(user_id)

        logger.info("User %s authenticated", user_id)
        self._audit(user_id, "auth_flow_complete", "success")

    def is_authenticated(self, user_id: str) -> bool:
        return self.store.is_authenticated(user_id)

    def get_credential(self, user_id: str) -> Credential | None:
        """Return the user's credential if it is present and still valid."""
        session = self.store.get(user_id)
        if session is None or not session.is_authenticated:
            return None
        return session.credential

    def _reject_csrf(self, user_id: str, reason: str) -> None:
        logger.warning("CSRF check failed for user %s (%s)", user_id, reason)
        self._audit(user_id, "auth_flow_complete", "reject", AuditSeverity.ALERT, reason=reason)

    def _audit(
        self,
        user_id: str,
        action: str,
        status: str,
        severity: AuditSeverity = AuditSeverity.INFO,
        **context: str,
    ) -> None:
        if self.audit is not None:
            self.audit.log_auth_event(user_id, action, status, severity, **context)
