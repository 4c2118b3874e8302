"""Command routing — turns each inbound message into exactly one outcome.

Routes a message by the first bot-command entity in its text:
  /start         reset the user's pending submission and prompt for content
  /replace <url> rewrite every text link of the pending submission to <url>
                 and send the edited copy back
  other command  "Unknown command" reply
  no command     hand the message to BatchCollector for accumulation

Recoverable conditions are raised as LinkBotError subclasses inside the
operations and converted to a single chat reply in handle_message().

Key class: CommandDispatcher. Key function: parse_command().
"""

import logging

from telegram import Bot, Message, MessageEntity
from telegram.error import RetryAfter, TelegramError

from .batch_collector import BatchCollector, CollectOutcome
from .entities import (
    find_representative,
    links_differ,
    message_entities,
    normalize_link,
    rewrite_links,
)
from .errors import (
    BatchMismatch,
    LinkBotError,
    NoEntities,
    NoPendingSubmission,
    UnknownCommand,
)
from .handlers.message_sender import reemit_album, reemit_single, safe_send
from .session import SessionStore
from .texts import (
    READY_TEXT,
    REPLACE_COMMAND,
    SEND_FAILED_TEXT,
    START_COMMAND,
    START_TEXT,
)

logger = logging.getLogger(__name__)


def parse_command(message: Message) -> tuple[str, str] | None:
    """Find the first bot-command entity in the message text.

    Returns (token, argument_text) with the token lower-cased and stripped of
    any ``@botname`` suffix, and the argument being the rest of the command's
    line, stripped. Returns None when the text carries no command entity.
    """
    text = message.text
    if not text:
        return None
    for entity in message.entities or ():
        if entity.type != MessageEntity.BOT_COMMAND:
            continue
        # Entity offsets count UTF-16 code units
        raw = message.parse_entity(entity)
        token = raw.split("@", 1)[0].lower()
        before = len(text.encode("utf-16-le")[: entity.offset * 2].decode("utf-16-le"))
        args = text[before + len(raw) :].split("\n", 1)[0].strip()
        return token, args
    return None


class CommandDispatcher:
    """Routes messages to start / replace / accumulate and sends the replies."""

    def __init__(self, bot: Bot, store: SessionStore, collector: BatchCollector):
        self.bot = bot
        self.store = store
        self.collector = collector
        collector.on_ready = self.notify_ready

    async def handle_message(self, message: Message) -> None:
        user = message.from_user
        if user is None:
            return
        logger.info(
            "Received message [%d] with text %r from user [%d] %r (media_group=%s)",
            message.message_id,
            message.text,
            user.id,
            user.first_name,
            message.media_group_id,
        )

        command = parse_command(message)
        try:
            if command is None:
                await self.accumulate(message, user.id)
                return
            token, args = command
            if token == START_COMMAND:
                await self.start(message.chat_id, user.id)
            elif token == REPLACE_COMMAND:
                await self.replace(message.chat_id, user.id, args)
            else:
                raise UnknownCommand(token)
        except LinkBotError as e:
            logger.info("User %d: %s (%s)", user.id, type(e).__name__, e)
            await safe_send(self.bot, message.chat_id, e.reply_text())

    async def start(self, chat_id: int, user_id: int) -> None:
        async with self.store.lock(user_id):
            if self.store.reset(user_id):
                logger.info("Reset pending submission for user %d", user_id)
        await safe_send(self.bot, chat_id, START_TEXT)

    async def accumulate(self, message: Message, user_id: int) -> None:
        outcome = await self.collector.collect(message, user_id)
        if outcome is CollectOutcome.MISMATCH:
            raise BatchMismatch(message.media_group_id)
        if outcome is CollectOutcome.READY:
            await self.notify_ready(user_id, message.chat_id)
        # Albums are announced by the ticker once the quiet window elapses

    async def notify_ready(self, user_id: int, chat_id: int) -> None:
        logger.info("Submission of user %d is ready, asking for link", user_id)
        await safe_send(self.bot, chat_id, READY_TEXT)

    async def replace(self, chat_id: int, user_id: int, fragment: str) -> None:
        logger.info("Link is %s", fragment)
        new_link = normalize_link(fragment)

        # Consume the session first: a failed rewrite needs the content resent
        async with self.store.lock(user_id):
            session = self.store.get(user_id)
            if session is not None:
                self.store.reset(user_id)
        if session is None:
            raise NoPendingSubmission(user_id)

        representative = find_representative(session.messages)
        original = message_entities(representative) if representative else ()
        if representative is None or not original:
            logger.warning("No entities found for user %d, returning", user_id)
            raise NoEntities(user_id)

        entities: tuple[MessageEntity, ...] | None = None
        if links_differ(original, new_link):
            entities = rewrite_links(original, new_link)
        else:
            # Telegram refuses an edit that changes nothing; send the plain copy
            logger.warning("No text link of user %d differs from %s", user_id, new_link)

        try:
            if representative.media_group_id is not None:
                await reemit_album(
                    self.bot,
                    session.chat_id,
                    session.sorted_message_ids(),
                    representative,
                    entities,
                )
            else:
                await reemit_single(self.bot, session.chat_id, representative, entities)
        except RetryAfter:
            raise
        except TelegramError:
            logger.exception("Failed to re-emit edited message for user %d", user_id)
            await safe_send(self.bot, chat_id, SEND_FAILED_TEXT)
