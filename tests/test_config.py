# Tests for config.py, logging_setup.py and bot_gateway.build_bot
# Created: 2026-10-18

import logging
import sys

import pytest
from rich.logging import RichHandler

from availabot.bot_gateway import build_bot
from availabot.config import (
    GOOGLE_CALENDAR_READONLY_SCOPE,
    Settings,
    get_config_dir,
    get_settings,
)
from availabot.integrations.oauth import OAuthManager
from availabot.integrations.session_store import InMemorySessionStore
from availabot.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "AVAILABOT_TELEGRAM_BOT_TOKEN",
        "AVAILABOT_GOOGLE_CLIENT_ID",
        "AVAILABOT_GOOGLE_CLIENT_SECRET",
        "AVAILABOT_CALLBACK_PORT",
    ):
        monkeypatch.delenv(key, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.oauth_redirect_uri == "http://localhost:8081/oauth2"
        assert settings.callback_port == 8081
        assert settings.calendar_id == "primary"
        assert settings.oauth_scopes == [GOOGLE_CALENDAR_READONLY_SCOPE]

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("AVAILABOT_TELEGRAM_BOT_TOKEN", "123:abc")
        monkeypatch.setenv("AVAILABOT_CALLBACK_PORT", "9000")
        settings = Settings(_env_file=None)
        assert settings.telegram_bot_token == "123:abc"
        assert settings.callback_port == 9000

    def test_validate_startup_requires_bot_token(self):
        with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
            Settings(_env_file=None).validate_startup()

    def test_validate_startup_warns_without_oauth_client(self):
        settings = Settings(_env_file=None, telegram_bot_token="123:abc")
        warnings = settings.validate_startup()
        assert any("OAuth" in w for w in warnings)

    def test_validate_startup_clean(self):
        settings = Settings(
            _env_file=None,
            telegram_bot_token="123:abc",
            google_client_id="id",
            google_client_secret="secret",
        )
        assert settings.validate_startup() == []

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

    def test_config_dir_created(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        path = get_config_dir()
        assert path == tmp_path / ".availabot"
        assert path.is_dir()


class TestSetupLogging:
    def test_idempotent(self):
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            setup_logging("DEBUG")
            setup_logging("INFO")
            rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
            assert len(rich_handlers) == 1
            assert root.level == logging.INFO
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)


class TestBuildBot:
    def test_wiring(self, monkeypatch, tmp_path):
        from availabot.security.audit import AuditLogger

        audit = AuditLogger(log_path=tmp_path / "audit.jsonl")
        monkeypatch.setattr("availabot.bot_gateway.get_audit_logger", lambda: audit)
        settings = Settings(
            _env_file=None,
            google_client_id="id",
            google_client_secret="secret",
            calendar_id="work@example.com",
        )

        bot = build_bot(settings)

        assert isinstance(bot.controller.store, InMemorySessionStore)
        assert isinstance(bot.controller.provider, OAuthManager)
        assert bot.controller.provider.client_id == "id"
        assert bot.controller.audit is audit
        assert bot.calendar_id == "work@example.com"
        assert "accounts.google.com" in bot.controller.start_flow("42")


async def test_run_bot_without_telegram_extra(monkeypatch):
    from availabot.bot_gateway import run_bot

    monkeypatch.setitem(sys.modules, "telegram", None)
    monkeypatch.setitem(sys.modules, "telegram.ext", None)
    with pytest.raises(ImportError, match=r"availabot\[telegram\]"):
        await run_bot(Settings(_env_file=None))
