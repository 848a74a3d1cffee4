"""
Cooperative scheduler
---------------------
Virtual-time task queue for everything that happens "later" in a session:
the typewriter reveal, the half-beat before a celebration, staggered
character entrances and auto-advance.

Nothing here sleeps. Time moves only when a driver calls `advance()`
(tests, the web step endpoint) or `run_until_idle()` (the terminal front end).
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    due_ms: int
    callback: Callable[[], None]
    interval_ms: Optional[int] = None
    label: str = ""
    background: bool = False
    cancelled: bool = False
    seq: int = 0

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(order=True)
class _Entry:
    due_ms: int
    seq: int
    handle: TimerHandle = field(compare=False)


class Scheduler:
    def __init__(self):
        self.now_ms = 0
        self._queue: List[_Entry] = []
        self._seq = itertools.count()

    # ──────────────────────────────────────────────
    # Scheduling
    # ──────────────────────────────────────────────

    def call_later(self, delay_ms: int, callback: Callable[[], None], *, label: str = "", background: bool = False) -> TimerHandle:
        handle = TimerHandle(
            due_ms=self.now_ms + max(0, int(delay_ms)),
            callback=callback,
            label=label,
            background=background,
        )
        self._push(handle)
        return handle

    def call_every(self, interval_ms: int, callback: Callable[[], None], *, label: str = "", background: bool = False) -> TimerHandle:
        interval = max(1, int(interval_ms))
        handle = TimerHandle(
            due_ms=self.now_ms + interval,
            callback=callback,
            interval_ms=interval,
            label=label,
            background=background,
        )
        self._push(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def _push(self, handle: TimerHandle) -> None:
        handle.seq = next(self._seq)
        heapq.heappush(self._queue, _Entry(handle.due_ms, handle.seq, handle))

    # ──────────────────────────────────────────────
    # Introspection
    # ──────────────────────────────────────────────

    def pending(self, label: Optional[str] = None, *, include_background: bool = True) -> int:
        count = 0
        for entry in self._queue:
            h = entry.handle
            if h.cancelled:
                continue
            if not include_background and h.background:
                continue
            if label is not None and h.label != label:
                continue
            count += 1
        return count

    @property
    def idle(self) -> bool:
        return self.pending(include_background=False) == 0

    # ──────────────────────────────────────────────
    # Running
    # ──────────────────────────────────────────────

    def advance(self, ms: int) -> int:
        """
        Move the clock forward by `ms`, running every task that falls due,
        in due order. Returns the number of callbacks run.
        """
        target = self.now_ms + max(0, int(ms))
        ran = 0
        while self._queue and self._queue[0].due_ms <= target:
            entry = heapq.heappop(self._queue)
            handle = entry.handle
            if handle.cancelled:
                continue
            self.now_ms = entry.due_ms
            if handle.repeating:
                handle.due_ms = entry.due_ms + handle.interval_ms
                self._push(handle)
            handle.callback()
            ran += 1
        self.now_ms = target
        return ran

    def run_until_idle(self, limit_ms: int = 600_000) -> int:
        """
        Fast-forward until only background timers remain.
        `limit_ms` bounds the jump so a runaway foreground timer cannot hang the caller.
        """
        start = self.now_ms
        ran = 0
        while not self.idle:
            nxt = self._next_foreground_due()
            if nxt is None:
                break
            if nxt - start > limit_ms:
                logger.warning("Scheduler did not go idle within %sms", limit_ms)
                break
            ran += self.advance(nxt - self.now_ms)
        return ran

    def _next_foreground_due(self) -> Optional[int]:
        dues = [e.due_ms for e in self._queue if not e.handle.cancelled and not e.handle.background]
        return min(dues) if dues else None

    def clear(self) -> None:
        for entry in self._queue:
            entry.handle.cancel()
        self._queue = []
