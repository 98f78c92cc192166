"""Telegram bot gateway.

Runs the Telegram poller and the OAuth callback server in one event loop.
"""

import asyncio
import logging

import uvicorn

from availabot._compat import require_extra
from availabot.api.callback import create_app
from availabot.bot import AvailabilityBot
from availabot.config import Settings
from availabot.integrations.auth_flow import AuthFlowController
from availabot.integrations.gcalendar import CalendarClient
from availabot.integrations.oauth import OAuthManager
from availabot.integrations.session_store import InMemorySessionStore
from availabot.logging_setup import setup_logging
from availabot.security.audit import get_audit_logger

logger = logging.getLogger(__name__)


def build_bot(settings: Settings) -> AvailabilityBot:
    """Wire the session store, OAuth client and calendar client into a bot."""
    oauth = OAuthManager(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.oauth_redirect_uri,
        scopes=settings.oauth_scopes,
    )
    controller = AuthFlowController(InMemorySessionStore(), oauth, audit=get_audit_logger())
    return AvailabilityBot(controller, CalendarClient(), calendar_id=settings.calendar_id)


async def run_bot(settings: Settings) -> None:
    """Run the Telegram bot until cancelled."""
    try:
        from telegram import Update
        from telegram.ext import Application, ContextTypes, MessageHandler, filters
    except ImportError:
        require_extra("python-telegram-bot", "telegram")

    setup_logging(settings.log_level)
    for warning in settings.validate_startup():
        logger.warning(warning)

    bot = build_bot(settings)

    async def on_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        user = update.effective_user
        if message is None or user is None:
            return
        reply = await bot.handle_message(str(user.id), user.username or user.first_name)
        await message.reply_text(reply)

    application = Application.builder().token(settings.telegram_bot_token).build()
    application.add_handler(MessageHandler(filters.TEXT, on_message))

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(bot.controller),
            host=settings.callback_host,
            port=settings.callback_port,
            log_config=None,
        )
    )

    logger.info("Starting availabot...")
    async with application:
        await application.start()
        await application.updater.start_polling()
        try:
            await server.serve()
        except asyncio.CancelledError:
            logger.info("Stopping...")
        finally:
            await application.updater.stop()
            await application.stop()
