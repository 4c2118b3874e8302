"""Link normalization and text-link entity rewriting.

Pure helpers with no Telegram I/O:
  - normalize_link(): turn a /replace argument into an absolute http(s) URL.
  - message_entities(): the entities of a message's text or caption.
  - find_representative(): first collected message that carries entities.
  - rewrite_links(): point every TEXT_LINK entity at a new URL.
  - links_differ(): whether such a rewrite changes anything at all.
"""

import logging
from collections.abc import Iterable, Sequence
from urllib.parse import urlsplit

from telegram import Message, MessageEntity

from .errors import MalformedLink

logger = logging.getLogger(__name__)

_SCHEMES = ("http://", "https://")


def normalize_link(fragment: str) -> str:
    """Return ``fragment`` as an absolute URL, prefixing ``https://`` if needed.

    Raises MalformedLink when the result is not an absolute http(s) URL.
    """
    link = fragment.strip()
    if not link:
        raise MalformedLink("empty link")
    if not link.lower().startswith(_SCHEMES):
        link = "https://" + link
        logger.info("Fixed link to %s", link)

    if any(ch.isspace() for ch in link):
        raise MalformedLink(f"whitespace in link: {link!r}")
    try:
        parts = urlsplit(link)
        # .port raises ValueError for a non-numeric or out-of-range port
        _ = parts.port
    except ValueError as e:
        raise MalformedLink(str(e)) from e
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise MalformedLink(f"not an absolute URL: {link!r}")
    return link


def message_entities(message: Message) -> tuple[MessageEntity, ...]:
    """Entities of the message text, or of its caption when the text has none."""
    return tuple(message.entities or ()) or tuple(message.caption_entities or ())


def find_representative(messages: Iterable[Message]) -> Message | None:
    """First message in arrival order whose text or caption carries entities."""
    for message in messages:
        if message_entities(message):
            return message
    return None


def rewrite_links(
    entities: Sequence[MessageEntity], new_url: str
) -> tuple[MessageEntity, ...]:
    """Point every TEXT_LINK entity at ``new_url``; keep the rest unchanged.

    Count, order, offsets and lengths are preserved. An empty input yields an
    empty result, which callers must treat as "nothing to rewrite".
    """
    rewritten: list[MessageEntity] = []
    for entity in entities:
        if entity.type == MessageEntity.TEXT_LINK:
            rewritten.append(
                MessageEntity(
                    type=MessageEntity.TEXT_LINK,
                    offset=entity.offset,
                    length=entity.length,
                    url=new_url,
                )
            )
            logger.info(
                "Replaced text link %s at [%d:%d] with %s",
                entity.url,
                entity.offset,
                entity.length,
                new_url,
            )
        else:
            rewritten.append(entity)
            logger.debug(
                "Kept entity %s at [%d:%d] as is",
                entity.type,
                entity.offset,
                entity.length,
            )
    logger.info("Total count of entities in message: %d", len(rewritten))
    return tuple(rewritten)


def links_differ(entities: Iterable[MessageEntity], new_url: str) -> bool:
    """True if rewriting to ``new_url`` would change at least one text link."""
    return any(
        entity.type == MessageEntity.TEXT_LINK and entity.url != new_url
        for entity in entities
    )
