"""Per-user submission state — the single point of mutation for sessions.

A Session holds the messages a user submitted for rewriting and the album
debounce counter. SessionStore maps user_id -> Session (at most one per
user) and hands out one asyncio.Lock per user, kept only while in use;
every read-modify-write of a session (collector, ticker, dispatcher)
happens under that lock.

Counter convention:
  quiet_ticks_remaining > 0   collecting album items
  quiet_ticks_remaining == 0  ready (prompt already sent)
  quiet_ticks_remaining == CANCELLED  reset; a waking ticker must do nothing

Key classes: Session, SessionStore (singleton instantiated as `session_store`).
"""

import asyncio
import contextlib
import enum
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from telegram import Message

logger = logging.getLogger(__name__)

# Sentinel counter value meaning "cancelled, ignore further ticks"
CANCELLED = -1


class SessionState(enum.Enum):
    COLLECTING = "collecting"
    READY = "ready"
    CANCELLED = "cancelled"


@dataclass
class Session:
    """Messages collected for one pending submission.

    Attributes:
        owner: Telegram user id
        chat_id: Chat the submission was sent in (replies go there)
        messages: Collected messages in arrival order (never empty)
        pending_batch_key: media_group_id being collected, None for a single message
        quiet_ticks_remaining: Album debounce counter (see module docstring)
    """

    owner: int
    chat_id: int
    messages: list[Message] = field(default_factory=list)
    pending_batch_key: str | None = None
    quiet_ticks_remaining: int = 0

    @property
    def state(self) -> SessionState:
        if self.quiet_ticks_remaining == CANCELLED:
            return SessionState.CANCELLED
        if self.quiet_ticks_remaining > 0:
            return SessionState.COLLECTING
        return SessionState.READY

    @property
    def is_album(self) -> bool:
        return self.pending_batch_key is not None

    def sorted_message_ids(self) -> list[int]:
        """Message ids in send order (arrival order may differ for albums)."""
        return sorted(m.message_id for m in self.messages)


@dataclass
class _UserLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0  # holders + waiters


class SessionStore:
    """In-memory mapping of user id to their pending Session."""

    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}
        self._locks: dict[int, _UserLock] = {}

    @contextlib.asynccontextmanager
    async def lock(self, user_id: int) -> AsyncIterator[None]:
        """Hold the per-user lock guarding every mutation of that user's session.

        The lock entry lives only while someone holds or waits for it.
        """
        entry = self._locks.get(user_id)
        if entry is None:
            entry = self._locks[user_id] = _UserLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[user_id]

    def get(self, user_id: int) -> Session | None:
        return self._sessions.get(user_id)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        user_id: int,
        chat_id: int,
        message: Message,
        quiet_ticks: int = 0,
    ) -> Session:
        """Start a new session holding ``message``; replaces nothing."""
        if user_id in self._sessions:
            raise ValueError(f"User {user_id} already has a pending session")
        session = Session(
            owner=user_id,
            chat_id=chat_id,
            messages=[message],
            pending_batch_key=message.media_group_id,
            quiet_ticks_remaining=quiet_ticks,
        )
        self._sessions[user_id] = session
        logger.info(
            "Session created for user %d (message=%d, media_group=%s)",
            user_id,
            message.message_id,
            message.media_group_id,
        )
        return session

    def remove(self, user_id: int) -> Session | None:
        """Remove and return the user's session (None if there was none)."""
        session = self._sessions.pop(user_id, None)
        if session is not None:
            logger.info(
                "Session removed for user %d (%d messages)",
                user_id,
                len(session.messages),
            )
        return session

    def reset(self, user_id: int) -> bool:
        """Cancel any debounce in flight and drop the session.

        Returns True if a session existed.
        """
        session = self._sessions.get(user_id)
        if session is None:
            return False
        session.quiet_ticks_remaining = CANCELLED
        self.remove(user_id)
        return True

    def clear(self) -> None:
        """Drop every session (for testing and shutdown)."""
        for session in self._sessions.values():
            session.quiet_ticks_remaining = CANCELLED
        self._sessions.clear()


session_store = SessionStore()
