"""
Second Chance Dice - Pacing Schedulers

The session paces dice settling, score reveals, bonus toasts and CPU
actions through a scheduler with a single operation,
``after(delay, callback)``. Three implementations:

    VirtualClockScheduler  deterministic virtual time (tests, simulations)
    ImmediateScheduler     runs everything right away, in order
    AsyncioScheduler       real-time pacing on an asyncio event loop

No scheduler cancels callbacks; the session guards stale ones itself.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections import deque
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Scheduler(Protocol):
    def after(self, delay: float, callback: Callback) -> None: ...


class VirtualClockScheduler:
    """Scheduler driven by an explicit virtual clock.

    Callbacks run in due-time order; callbacks due at the same time run
    in the order they were scheduled.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[tuple[float, int, Callback]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return len(self._queue)

    def after(self, delay: float, callback: Callback) -> None:
        if delay < 0:
            raise ValueError(f"Delay cannot be negative, got {delay}.")
        heapq.heappush(self._queue, (self._now + delay, next(self._counter), callback))

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Returns:
            Number of callbacks run
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self._now = due
            callback()
            ran += 1
        self._now = target
        return ran

    def run_next(self) -> bool:
        """Jump to the next due callback and run it. False if idle."""
        if not self._queue:
            return False
        due, _, callback = heapq.heappop(self._queue)
        self._now = max(self._now, due)
        callback()
        return True

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """Run callbacks until none are pending.

        Raises:
            RuntimeError: If more than ``max_callbacks`` run, which means
                callbacks keep rescheduling themselves
        """
        ran = 0
        while self.run_next():
            ran += 1
            if ran > max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks.")
        return ran


class ImmediateScheduler:
    """Runs callbacks synchronously, ignoring the delay.

    Callbacks scheduled while another callback runs are queued and run
    after it returns, so long CPU chains do not deepen the stack.
    """

    def __init__(self) -> None:
        self._queue: deque[Callback] = deque()
        self._draining = False

    def after(self, delay: float, callback: Callback) -> None:
        self._queue.append(callback)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._draining = False


class AsyncioScheduler:
    """Real-time pacing on an asyncio event loop.

    Exceptions raised by callbacks are logged, matching how the event
    loop itself treats ``call_later`` failures.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def after(self, delay: float, callback: Callback) -> None:
        self._get_loop().call_later(max(0.0, delay), self._run, callback)

    @staticmethod
    def _run(callback: Callback) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback failed")
