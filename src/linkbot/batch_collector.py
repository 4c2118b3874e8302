"""Album debounce — decides when a burst of messages is one complete submission.

Telegram delivers every item of an album (media group) as its own update,
in no guaranteed order and with no "last item" marker. The collector keeps
the items in the user's Session and counts quiet ticks: each tick decrements
the counter, each new item of the same album extends it, and the 1 -> 0
transition marks the submission READY and fires ``on_ready`` exactly once.

Core responsibilities:
  - collect(): create / extend / reject on every non-command message
  - tick(): one debounce step for one user, driven by the ticker or by tests
  - run_ticker(): background loop of sleep + tick, one task per album

Cancellation is by sentinel (see session.CANCELLED): a reset deletes the
session and a waking ticker finds nothing to do.

Key classes: BatchCollector, CollectOutcome.
"""

import asyncio
import contextlib
import enum
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from telegram import Message

from .session import Session, SessionState, SessionStore

logger = logging.getLogger(__name__)

ReadyCallback = Callable[[int, int], Awaitable[None]]
TaskSpawner = Callable[[Coroutine[Any, Any, None]], "asyncio.Task[None]"]


class CollectOutcome(enum.Enum):
    READY = "ready"  # single message, submission complete now
    COLLECTING = "collecting"  # first album item, ticker started
    EXTENDED = "extended"  # later album item, quiet window pushed out
    MISMATCH = "mismatch"  # rejected, session untouched


class BatchCollector:
    """Debounce state machine over a SessionStore."""

    def __init__(
        self,
        store: SessionStore,
        *,
        quiet_ticks: int = 3,
        tick_interval: float = 1.0,
        on_ready: ReadyCallback | None = None,
        spawn: TaskSpawner | None = None,
    ) -> None:
        self.store = store
        self.quiet_ticks = quiet_ticks
        self.tick_interval = tick_interval
        self.on_ready = on_ready
        self._spawn: TaskSpawner = spawn or asyncio.create_task
        self._tickers: dict[int, asyncio.Task[None]] = {}

    async def collect(self, message: Message, user_id: int) -> CollectOutcome:
        """Add ``message`` to the user's pending submission."""
        batch_key = message.media_group_id
        async with self.store.lock(user_id):
            session = self.store.get(user_id)

            if session is None:
                if batch_key is None:
                    self.store.create(user_id, message.chat_id, message)
                    return CollectOutcome.READY
                session = self.store.create(
                    user_id, message.chat_id, message, quiet_ticks=self.quiet_ticks
                )
                self._start_ticker(session)
                return CollectOutcome.COLLECTING

            if (
                session.pending_batch_key is None
                or batch_key != session.pending_batch_key
                or session.state is not SessionState.COLLECTING
            ):
                logger.warning(
                    "Received message %d with media group %s from user %d, "
                    "but expected %s (%s)",
                    message.message_id,
                    batch_key,
                    user_id,
                    session.pending_batch_key,
                    session.state.value,
                )
                return CollectOutcome.MISMATCH

            session.messages.append(message)
            # Extend by one tick, never below a full quiet window after this item
            session.quiet_ticks_remaining = max(
                session.quiet_ticks_remaining + 1, self.quiet_ticks
            )
            logger.debug(
                "Appended message %d to album %s for user %d (%d items, %d ticks left)",
                message.message_id,
                batch_key,
                user_id,
                len(session.messages),
                session.quiet_ticks_remaining,
            )
            return CollectOutcome.EXTENDED

    async def tick(self, user_id: int, expected: Session | None = None) -> bool:
        """Advance the user's debounce by one tick.

        Returns True exactly once per submission: on the tick that moves the
        counter from 1 to 0. Missing, ready or cancelled sessions are a no-op,
        as is a session other than ``expected`` when one is given (a ticker
        left over from a reset must not drive the next submission).
        """
        async with self.store.lock(user_id):
            session = self.store.get(user_id)
            if session is None or session.state is not SessionState.COLLECTING:
                return False
            if expected is not None and session is not expected:
                return False
            session.quiet_ticks_remaining -= 1
            if session.quiet_ticks_remaining > 0:
                return False
            logger.info(
                "Album %s for user %d is complete (%d items)",
                session.pending_batch_key,
                user_id,
                len(session.messages),
            )
            return True

    def is_collecting(self, session: Session) -> bool:
        """True while ``session`` is still the user's live, collecting session."""
        return (
            self.store.get(session.owner) is session
            and session.state is SessionState.COLLECTING
        )

    async def run_ticker(self, session: Session) -> None:
        """Background loop: sleep one interval, tick, until the album settles."""
        user_id = session.owner
        try:
            while True:
                await asyncio.sleep(self.tick_interval)
                if await self.tick(user_id, expected=session):
                    if self.on_ready is not None:
                        await self.on_ready(user_id, session.chat_id)
                    return
                if not self.is_collecting(session):
                    logger.debug("Ticker for user %d stopped (session gone)", user_id)
                    return
        finally:
            if self._tickers.get(user_id) is asyncio.current_task():
                self._tickers.pop(user_id, None)

    def _start_ticker(self, session: Session) -> None:
        self._tickers[session.owner] = self._spawn(self.run_ticker(session))

    async def shutdown(self) -> None:
        """Cancel all outstanding ticker tasks."""
        tasks = list(self._tickers.values())
        self._tickers.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
