"""Tests for bot wiring: authorization, error handler, lifecycle."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

from telegram import Update
from telegram.error import NetworkError
from telegram.ext import Application, MessageHandler

import linkbot.bot as bot_module
from linkbot.batch_collector import BatchCollector
from linkbot.dispatcher import CommandDispatcher


def _make_update(message, user_id: int = 100) -> MagicMock:
    update = MagicMock(spec=Update)
    update.message = message
    update.effective_user = MagicMock()
    update.effective_user.id = user_id
    update.update_id = 1
    return update


class TestMessageHandler:
    async def test_allowed_user_dispatched(self, make_message) -> None:
        message = make_message("hello")
        dispatcher = AsyncMock(spec=CommandDispatcher)
        context = MagicMock()
        with (
            patch.object(bot_module, "dispatcher", dispatcher),
            patch.object(bot_module, "is_user_allowed", return_value=True),
        ):
            await bot_module.message_handler(_make_update(message), context)
        dispatcher.handle_message.assert_awaited_once_with(message)

    async def test_unauthorized_user_rejected(self, make_message) -> None:
        message = make_message("hello")
        dispatcher = AsyncMock(spec=CommandDispatcher)
        context = MagicMock()
        context.bot = AsyncMock()
        with (
            patch.object(bot_module, "dispatcher", dispatcher),
            patch.object(bot_module, "is_user_allowed", return_value=False),
        ):
            await bot_module.message_handler(_make_update(message), context)
        dispatcher.handle_message.assert_not_awaited()
        context.bot.send_message.assert_awaited_once_with(
            chat_id=message.chat_id, text="You are not authorized to use this bot."
        )

    async def test_update_without_message_ignored(self) -> None:
        dispatcher = AsyncMock(spec=CommandDispatcher)
        with patch.object(bot_module, "dispatcher", dispatcher):
            await bot_module.message_handler(_make_update(None), MagicMock())
        dispatcher.handle_message.assert_not_awaited()


class TestIsUserAllowed:
    def test_none_user(self) -> None:
        assert bot_module.is_user_allowed(None) is False

    def test_everyone_allowed_by_default(self) -> None:
        assert bot_module.is_user_allowed(424242) is True


class TestErrorHandler:
    async def test_logs_and_returns(self, caplog) -> None:
        context = MagicMock()
        context.error = NetworkError("connection reset")
        with caplog.at_level(logging.ERROR, logger="linkbot.bot"):
            await bot_module.error_handler(_make_update(None), context)
        assert "Unhandled error while processing update 1" in caplog.text


class TestCreateBot:
    def test_builds_application(self) -> None:
        application = bot_module.create_bot()
        assert isinstance(application, Application)
        assert isinstance(bot_module.collector, BatchCollector)
        assert isinstance(bot_module.dispatcher, CommandDispatcher)
        handlers = application.handlers[0]
        assert len(handlers) == 1
        assert isinstance(handlers[0], MessageHandler)
        assert application.error_handlers

    async def test_post_init_registers_commands(self) -> None:
        application = MagicMock()
        application.bot.set_my_commands = AsyncMock()
        await bot_module.post_init(application)
        commands = application.bot.set_my_commands.call_args.args[0]
        assert [c.command for c in commands] == ["start", "replace"]

    async def test_post_shutdown_stops_tickers(self) -> None:
        collector = AsyncMock(spec=BatchCollector)
        with patch.object(bot_module, "collector", collector):
            await bot_module.post_shutdown(MagicMock())
        collector.shutdown.assert_awaited_once()
