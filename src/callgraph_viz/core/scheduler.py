"""Cooperative timer queue on a virtual clock.

The engine advances the clock from its frame loop, so timers fire between
frames and never interleave with another callback. Tests drive the same
queue deterministically with ``advance``.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field

from loguru import logger


@dataclass(order=True)
class TimerHandle:
    due_ms: float
    seq: int
    name: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class TimerQueue:
    """Named, cancellable timers fired in due-time order."""

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._heap: list[TimerHandle] = []
        self._seq = itertools.count()
        self._named: dict[str, TimerHandle] = {}

    def call_later(
        self, delay_ms: float, callback: Callable[[], None], name: str = ""
    ) -> TimerHandle:
        """Schedule ``callback``; a named timer replaces the pending one."""
        if name and name in self._named:
            self._named.pop(name).cancel()
        handle = TimerHandle(self.now_ms + max(delay_ms, 0.0), next(self._seq), name, callback)
        heapq.heappush(self._heap, handle)
        if name:
            self._named[name] = handle
        return handle

    def cancel(self, name: str) -> bool:
        handle = self._named.pop(name, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._heap:
            handle.cancel()
        self._heap.clear()
        self._named.clear()

    def pending(self, name: str) -> bool:
        handle = self._named.get(name)
        return handle is not None and not handle.cancelled

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward and fire every timer that came due.

        Returns:
            Number of callbacks fired
        """
        target = self.now_ms + delta_ms
        fired = 0
        while self._heap and self._heap[0].due_ms <= target:
            handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self.now_ms = handle.due_ms
            if handle.name and self._named.get(handle.name) is handle:
                del self._named[handle.name]
            logger.debug(f"Timer fired: {handle.name or handle.seq} at {self.now_ms:.0f}ms")
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired

    def __len__(self) -> int:
        return sum(1 for h in self._heap if not h.cancelled)
