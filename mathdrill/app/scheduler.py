from __future__ import annotations

"""Cooperative timer facility for the session engine.

Everything runs on one thread. `ManualScheduler` keeps a virtual clock that
only moves when `advance()` is called and fires due timers in time order;
tests drive it directly and the terminal runner feeds it real elapsed time.
"""

import heapq
import itertools
import time
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle:
    def __init__(self, interval_ms: Optional[int] = None) -> None:
        self.interval_ms = interval_ms
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False


class Scheduler(Protocol):
    def now_ms(self) -> int: ...

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval_ms: int, fn: Callable[[], None]) -> TimerHandle: ...


class ManualScheduler:
    def __init__(self, start_ms: int = 0) -> None:
        self._now = int(start_ms)
        self._seq = itertools.count()
        self._queue: List[Tuple[int, int, TimerHandle, Callable[[], None]]] = []

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()
        self._push(self._now + max(0, int(delay_ms)), handle, fn)
        return handle

    def call_every(self, interval_ms: int, fn: Callable[[], None]) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        handle = TimerHandle(interval_ms=int(interval_ms))
        self._push(self._now + handle.interval_ms, handle, fn)
        return handle

    def _push(self, due: int, handle: TimerHandle, fn: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle, fn))

    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if h.active)

    def advance(self, ms: int) -> None:
        """Move the clock forward by `ms`, firing every timer that comes due."""
        target = self._now + max(0, int(ms))
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = due
            if handle.interval_ms is None:
                handle.cancel()
            else:
                self._push(due + handle.interval_ms, handle, fn)
            fn()
        self._now = target


class RealtimeScheduler(ManualScheduler):
    """ManualScheduler whose clock follows `time.monotonic`; call `poll()` to fire timers."""

    def __init__(self) -> None:
        self._origin = time.monotonic()
        super().__init__(0)

    def poll(self) -> None:
        elapsed = int((time.monotonic() - self._origin) * 1000)
        self.advance(elapsed - self.now_ms())
