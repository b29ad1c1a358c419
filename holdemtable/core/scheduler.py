"""
Scheduling of delayed bot turns.

Each game owns one scheduler. Bot turns run after a short delay so a
front end can show the intermediate state, and every pending turn can be
cancelled at once when the hand or the game is torn down.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set
import asyncio
import logging


logger = logging.getLogger(__name__)


class ScheduledTurn:
    """Handle for one pending callback."""

    def __init__(self, callback: Callable[[], None], delay: float):
        self.callback = callback
        self.delay = delay
        self.cancelled = False
        self.done = False
        self._timer: Optional[asyncio.TimerHandle] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.done


class TurnScheduler(ABC):
    """Runs callbacks after a delay; all of them can be cancelled together."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTurn:
        """Arrange for ``callback`` to run after ``delay`` seconds."""

    @abstractmethod
    def cancel_all(self) -> int:
        """Cancel every pending callback. Returns how many were cancelled."""

    @property
    @abstractmethod
    def pending_count(self) -> int:
        """Number of callbacks still waiting to run."""


class ManualScheduler(TurnScheduler):
    """
    Queues callbacks until the owner drives them.

    Delays are recorded but not waited for; ``run_pending()`` runs turns in
    the order they were scheduled, including turns scheduled by the turns
    it runs.
    """

    def __init__(self):
        self._queue: List[ScheduledTurn] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTurn:
        turn = ScheduledTurn(callback, delay)
        self._queue.append(turn)
        return turn

    def cancel_all(self) -> int:
        cancelled = 0
        for turn in self._queue:
            if turn.pending:
                turn.cancel()
                cancelled += 1
        self._queue = []
        return cancelled

    @property
    def pending_count(self) -> int:
        return sum(1 for turn in self._queue if turn.pending)

    def run_next(self) -> bool:
        """Run the oldest pending turn. Returns False when nothing is queued."""
        while self._queue:
            turn = self._queue.pop(0)
            if turn.pending:
                turn.done = True
                turn.callback()
                return True
        return False

    def run_pending(self, max_turns: int = 10_000) -> int:
        """
        Run queued turns until the queue is empty.

        Raises:
            RuntimeError: If more than ``max_turns`` turns run, which means
                the callbacks keep rescheduling themselves forever.
        """
        ran = 0
        while self.run_next():
            ran += 1
            if ran > max_turns:
                raise RuntimeError(f"Scheduler did not settle after {max_turns} turns")
        return ran


class AsyncioScheduler(TurnScheduler):
    """Schedules turns on an asyncio event loop with ``call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._turns: Set[ScheduledTurn] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTurn:
        turn = ScheduledTurn(callback, delay)

        def fire() -> None:
            self._turns.discard(turn)
            if not turn.pending:
                return
            turn.done = True
            try:
                callback()
            except Exception:
                logger.exception("Scheduled turn failed")

        turn._timer = self.loop.call_later(max(0.0, delay), fire)
        self._turns.add(turn)
        return turn

    def cancel_all(self) -> int:
        cancelled = 0
        for turn in list(self._turns):
            if turn.pending:
                turn.cancel()
                cancelled += 1
        self._turns.clear()
        return cancelled

    @property
    def pending_count(self) -> int:
        return sum(1 for turn in self._turns if turn.pending)
