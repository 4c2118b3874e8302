"""Shared fixtures for linkbot unit tests.

Provides factories for real telegram.Message / MessageEntity objects and a
mock Bot whose copy calls return fresh message ids.
"""

import itertools
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from telegram import (
    Chat,
    InlineKeyboardMarkup,
    Message,
    MessageEntity,
    MessageId,
    User,
)

USER_ID = 100


def text_link(offset: int, length: int, url: str) -> MessageEntity:
    return MessageEntity(MessageEntity.TEXT_LINK, offset, length, url=url)


def bold(offset: int, length: int) -> MessageEntity:
    return MessageEntity(MessageEntity.BOLD, offset, length)


def command(token: str, offset: int = 0) -> MessageEntity:
    return MessageEntity(MessageEntity.BOT_COMMAND, offset, len(token))


@pytest.fixture
def make_message():
    """Factory: build a real telegram.Message from a private chat."""
    counter = itertools.count(1)

    def _make(
        text: str | None = None,
        *,
        entities: list[MessageEntity] | None = None,
        caption: str | None = None,
        caption_entities: list[MessageEntity] | None = None,
        media_group_id: str | None = None,
        reply_markup: InlineKeyboardMarkup | None = None,
        message_id: int | None = None,
        user_id: int = USER_ID,
    ) -> Message:
        return Message(
            message_id=message_id if message_id is not None else next(counter),
            date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            chat=Chat(id=user_id, type=Chat.PRIVATE),
            from_user=User(id=user_id, first_name="Alice", is_bot=False),
            text=text,
            entities=entities,
            caption=caption,
            caption_entities=caption_entities,
            media_group_id=media_group_id,
            reply_markup=reply_markup,
        )

    return _make


@pytest.fixture
def make_command(make_message):
    """Factory: a text message whose first word is a bot command entity."""

    def _make(text: str, user_id: int = USER_ID) -> Message:
        token = text.split(None, 1)[0]
        return make_message(text, entities=[command(token)], user_id=user_id)

    return _make


@pytest.fixture
def mock_bot() -> AsyncMock:
    """Bot mock: copy_message(s) hand out ids starting at 1000."""
    bot = AsyncMock()
    ids = itertools.count(1000)

    async def _copy_messages(*, chat_id, from_chat_id, message_ids):
        return tuple(MessageId(next(ids)) for _ in message_ids)

    async def _copy_message(*, chat_id, from_chat_id, message_id):
        return MessageId(next(ids))

    bot.copy_messages.side_effect = _copy_messages
    bot.copy_message.side_effect = _copy_message
    return bot
