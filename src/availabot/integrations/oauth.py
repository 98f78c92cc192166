# OAuth Manager: Google OAuth 2.0 auth code flow for calendar access.
# Created: 2026-10-18

from __future__ import annotations

import logging
import time
import urllib.parse
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)


# OAuth 2.0 provider configuration
PROVIDERS: dict[str, dict[str, str]] = {
    "google": {
        "auth_url": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_url": "https://oauth2.googleapis.com/token",
    },
}

# Tokens this close to expiry are treated as already expired.
EXPIRY_LEEWAY_SECONDS = 60


@dataclass
class OAuthCredential:
    """Access credential returned by the provider's token endpoint."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: float | None = None  # Unix timestamp
    scopes: list[str] = field(default_factory=list)

    def is_valid(self) -> bool:
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > time.time() + EXPIRY_LEEWAY_SECONDS

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.access_token}"


class OAuthManager:
    """Builds authorization URLs and exchanges authorization codes.

    One instance serves every user: the per-user part of a flow travels in
    the ``state`` parameter, not here.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str],
        provider: str = "google",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown OAuth provider: {provider}")
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.provider = provider
        self._transport = transport

    @property
    def _config(self) -> dict[str, str]:
        return PROVIDERS[self.provider]

    def get_auth_url(self, state: str) -> str:
        """Generate the authorization URL the user has to visit.

        Args:
            state: Encoded auth state, echoed back on the redirect.

        Returns:
            Authorization URL to send to the user.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "online",
            "state": state,
        }
        return f"{self._config['auth_url']}?{urllib.parse.urlencode(params)}"

    async def exchange(self, code: str) -> OAuthCredential:
        """Exchange an authorization code for an access credential.

        Raises:
            httpx.HTTPError: if the token endpoint is unreachable or refuses the code.
            KeyError: if the response carries no access token.
        """
        async with httpx.AsyncClient(timeout=15, transport=self._transport) as client:
            resp = await client.post(
                self._config["token_url"],
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            resp.raise_for_status()
            data = resp.json()

        expires_in = data.get("expires_in", 3600)
        granted = data.get("scope")
        credential = OAuthCredential(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type", "Bearer"),
            expires_at=time.time() + expires_in,
            scopes=granted.split() if granted else list(self.scopes),
        )
        logger.info("OAuth credential obtained via %s", self.provider)
        return credential
