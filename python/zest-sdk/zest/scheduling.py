"""Delayed-callback schedulers for ``finish_test_with_delay``.

The engine never owns a clock. A scheduler is any callable taking a
callback and a delay in seconds, invoking the callback once after roughly
that delay. It does not need to support cancellation: a cancelled test
ignores its own callback when it fires.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Callback = Callable[[], None]
Scheduler = Callable[[Callback, float], object]


@dataclass
class _Pending:
    due: float
    order: int
    callback: Callback


class ManualScheduler:
    """Scheduler driven by explicit calls to :meth:`advance`.

    Useful for frame-driven hosts, demos and tests::

        scheduler = ManualScheduler()
        test.finish_test_with_delay(0.8, scheduler)
        scheduler.advance(1.0)   # fires the delayed finish
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._pending: list[_Pending] = []
        self._order = 0

    def __call__(self, callback: Callback, delay_seconds: float) -> int:
        self._order += 1
        self._pending.append(_Pending(self.now + max(delay_seconds, 0.0), self._order, callback))
        logger.debug("Scheduled callback #%d in %.3fs", self._order, delay_seconds)
        return self._order

    @property
    def pending(self) -> int:
        """Number of callbacks that have not fired yet."""
        return len(self._pending)

    def advance(self, seconds: float) -> int:
        """Move time forward and fire every callback that became due.

        Callbacks fire once each, in due-time then scheduling order.
        Returns the number of callbacks fired.
        """
        self.now += seconds
        due = sorted(
            (p for p in self._pending if p.due <= self.now),
            key=lambda p: (p.due, p.order),
        )
        self._pending = [p for p in self._pending if p.due > self.now]
        for pending in due:
            pending.callback()
        return len(due)

    def run_all(self) -> int:
        """Fire every pending callback regardless of its delay."""
        if not self._pending:
            return 0
        latest = max(p.due for p in self._pending)
        return self.advance(max(latest - self.now, 0.0))


def loop_scheduler(loop: asyncio.AbstractEventLoop) -> Scheduler:
    """Adapt an asyncio event loop to the scheduler contract."""

    def schedule(callback: Callback, delay_seconds: float) -> asyncio.TimerHandle:
        return loop.call_later(delay_seconds, callback)

    return schedule
