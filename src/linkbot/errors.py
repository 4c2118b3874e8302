"""Recoverable error kinds raised by the dispatcher and its helpers.

Each error carries the chat reply shown to the user. None of them is fatal:
CommandDispatcher catches LinkBotError at its routing boundary and turns it
into exactly one reply.
"""

from .texts import (
    BATCH_MISMATCH_TEXT,
    MALFORMED_LINK_TEXT,
    NO_ENTITIES_TEXT,
    NO_PENDING_SUBMISSION_TEXT,
)


class LinkBotError(Exception):
    """Base class for errors that end with a reply to the user."""

    reply: str = ""

    def reply_text(self) -> str:
        return self.reply


class MalformedLink(LinkBotError, ValueError):
    """The /replace argument is not an absolute http(s) URL."""

    reply = MALFORMED_LINK_TEXT


class NoPendingSubmission(LinkBotError, LookupError):
    """/replace was sent without any collected message."""

    reply = NO_PENDING_SUBMISSION_TEXT


class NoEntities(LinkBotError):
    """None of the collected messages carries rewritable entities."""

    reply = NO_ENTITIES_TEXT


class BatchMismatch(LinkBotError):
    """An inbound item does not belong to the album being collected."""

    reply = BATCH_MISMATCH_TEXT


class UnknownCommand(LinkBotError, LookupError):
    """A command token the bot does not handle."""

    def __init__(self, token: str) -> None:
        super().__init__(token)
        self.token = token

    def reply_text(self) -> str:
        return f"Unknown command {self.token}"
