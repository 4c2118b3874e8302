"""Safe message sending helpers and the re-emission calls of /replace.

Functions:
  - safe_send: Send plain text, logging (not raising) Telegram failures
  - reemit_album: Copy an album and edit the first copy's caption
  - reemit_single: Copy one message and edit its text or caption

Both re-emit helpers accept ``entities=None`` to send the copy untouched,
which is what the caller does when no link actually changes (Telegram
rejects an edit that leaves the message as it was).
"""

import logging
from collections.abc import Sequence

from telegram import Bot, Message, MessageEntity
from telegram.error import BadRequest, RetryAfter, TelegramError

logger = logging.getLogger(__name__)


async def safe_send(bot: Bot, chat_id: int, text: str) -> Message | None:
    """Send a plain-text message; return None if Telegram rejected it.

    RetryAfter is re-raised so PTB's flood-control handling applies.
    """
    try:
        return await bot.send_message(chat_id=chat_id, text=text)
    except RetryAfter:
        raise
    except TelegramError as e:
        logger.warning("Failed to send message to %s: %s", chat_id, e)
        return None


async def _edit_copy(
    bot: Bot,
    chat_id: int,
    message_id: int,
    template: Message,
    entities: Sequence[MessageEntity],
) -> None:
    """Apply ``entities`` to the copy, on the field that held them in ``template``."""
    try:
        if template.caption is not None:
            await bot.edit_message_caption(
                chat_id=chat_id,
                message_id=message_id,
                caption=template.caption,
                caption_entities=list(entities),
                reply_markup=template.reply_markup,
            )
        else:
            await bot.edit_message_text(
                chat_id=chat_id,
                message_id=message_id,
                text=template.text,
                entities=list(entities),
                link_preview_options=template.link_preview_options,
                reply_markup=template.reply_markup,
            )
    except BadRequest as e:
        if "message is not modified" not in e.message.lower():
            raise
        # The copy already reads as requested
        logger.info("Copy %d needed no edit", message_id)


async def reemit_album(
    bot: Bot,
    chat_id: int,
    message_ids: Sequence[int],
    template: Message,
    entities: Sequence[MessageEntity] | None,
) -> int:
    """Copy the album back into the chat and put the rewritten caption on item #1.

    ``message_ids`` must already be in send order. Returns the id of the
    first copy.
    """
    copied = await bot.copy_messages(
        chat_id=chat_id,
        from_chat_id=chat_id,
        message_ids=list(message_ids),
    )
    first_id = min(m.message_id for m in copied)
    if entities is not None:
        await _edit_copy(bot, chat_id, first_id, template, entities)
    logger.info(
        "Sent album of %d to %s (edited=%s)",
        len(copied),
        chat_id,
        entities is not None,
    )
    return first_id


async def reemit_single(
    bot: Bot,
    chat_id: int,
    template: Message,
    entities: Sequence[MessageEntity] | None,
) -> int:
    """Copy one message and apply ``entities`` to its text or caption."""
    copied = await bot.copy_message(
        chat_id=chat_id,
        from_chat_id=chat_id,
        message_id=template.message_id,
    )
    if entities is not None:
        await _edit_copy(bot, chat_id, copied.message_id, template, entities)
    logger.info("Sent single message to %s (edited=%s)", chat_id, entities is not None)
    return copied.message_id
