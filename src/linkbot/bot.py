"""Telegram bot wiring — the transport layer of LinkBot.

Registers the handlers and manages the bot lifecycle. Every private
message (text, caption or media) goes through one MessageHandler into
CommandDispatcher, which decides between /start, /replace, unknown commands
and accumulation.

Core responsibilities:
  - Authorization against ALLOWED_USERS (empty list = everyone).
  - Command menu registration (/start, /replace) in post_init.
  - Ticker shutdown in post_shutdown.
  - Application-level error handler: log and drop the failing update.

Key functions: create_bot(), message_handler().
"""

import logging

from telegram import BotCommand, Update
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from .batch_collector import BatchCollector
from .config import config
from .dispatcher import CommandDispatcher
from .handlers.message_sender import safe_send
from .session import session_store
from .texts import NOT_AUTHORIZED_TEXT

logger = logging.getLogger(__name__)

_BOT_COMMANDS: list[tuple[str, str]] = [
    ("start", "Reset and send a new message to edit"),
    ("replace", "Replace every link with the given one"),
]

# Created by create_bot(); module-level like the rest of the bot state
dispatcher: CommandDispatcher | None = None
collector: BatchCollector | None = None


def is_user_allowed(user_id: int | None) -> bool:
    return user_id is not None and config.is_user_allowed(user_id)


async def message_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.message
    if message is None or dispatcher is None:
        return
    user = update.effective_user
    if not user or not is_user_allowed(user.id):
        logger.info(
            "Rejected message from unauthorized user %s", user.id if user else None
        )
        await safe_send(context.bot, message.chat_id, NOT_AUTHORIZED_TEXT)
        return

    await dispatcher.handle_message(message)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors escaping a handler; the update is dropped, polling goes on."""
    update_id = update.update_id if isinstance(update, Update) else None
    logger.error(
        "Unhandled error while processing update %s",
        update_id,
        exc_info=context.error,
    )


# --- App lifecycle ---


async def post_init(application: Application) -> None:
    try:
        await application.bot.set_my_commands(
            [BotCommand(name, description) for name, description in _BOT_COMMANDS]
        )
    except TelegramError:
        logger.exception("Failed to register bot commands, keeping previous menu")


async def post_shutdown(_application: Application) -> None:
    if collector:
        await collector.shutdown()
        logger.info("Debounce tickers stopped")
    session_store.clear()


def create_bot() -> Application:
    global dispatcher, collector

    application = (
        Application.builder()
        .token(config.telegram_bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    collector = BatchCollector(
        session_store,
        quiet_ticks=config.quiet_ticks,
        tick_interval=config.tick_interval,
        spawn=application.create_task,
    )
    dispatcher = CommandDispatcher(application.bot, session_store, collector)

    application.add_handler(
        MessageHandler(
            filters.ChatType.PRIVATE & ~filters.StatusUpdate.ALL,
            message_handler,
        )
    )
    application.add_error_handler(error_handler)

    return application
