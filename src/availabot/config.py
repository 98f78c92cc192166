# Settings: environment-driven configuration for the bot and callback server.
# Created: 2026-10-18

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GOOGLE_CALENDAR_READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"


def get_config_dir() -> Path:
    """Get/create the availabot config directory (~/.availabot)."""
    d = Path.home() / ".availabot"
    d.mkdir(parents=True, exist_ok=True)
    return d


class Settings(BaseSettings):
    """availabot settings, read from ``AVAILABOT_*`` env vars or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="AVAILABOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    telegram_bot_token: str = Field(default="", description="Telegram bot API token")

    # Google OAuth
    google_client_id: str = Field(default="", description="Google OAuth client ID")
    google_client_secret: str = Field(default="", description="Google OAuth client secret")
    oauth_redirect_uri: str = Field(
        default="http://localhost:8081/oauth2",
        description="Redirect URI registered with the Google OAuth client",
    )
    oauth_scopes: list[str] = Field(
        default_factory=lambda: [GOOGLE_CALENDAR_READONLY_SCOPE],
        description="Scopes requested during the auth flow",
    )

    # Calendar
    calendar_id: str = Field(default="primary", description="Calendar queried for busy slots")

    # Callback server
    callback_host: str = Field(default="0.0.0.0", description="Bind address of the OAuth callback")
    callback_port: int = Field(default=8081, description="Port of the OAuth callback")

    log_level: str = Field(default="INFO", description="Console log level")

    def validate_startup(self) -> list[str]:
        """Check required settings. Returns warnings, raises on errors."""
        if not self.telegram_bot_token:
            raise ValueError("AVAILABOT_TELEGRAM_BOT_TOKEN is not set.")

        warnings: list[str] = []
        if not self.google_client_id or not self.google_client_secret:
            warnings.append(
                "Google OAuth client is not configured; users will not be able to authorize."
            )
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (loaded once)."""
    return Settings()
