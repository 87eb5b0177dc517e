"""Interaction intents and the queue that feeds them to the engine.

Surfaces (the HTTP host, the CLI, tests) translate their own input events
into intent records and submit them here. ``process()`` drains the queue in
submission order, one intent at a time, so intents never interleave with each
other or with a frame tick.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Union

from loguru import logger

from .engine import CallGraphEngine
from .exceptions import NoMatch
from .models import Notice


@dataclass(frozen=True)
class Hover:
    node_id: str | None


@dataclass(frozen=True)
class Click:
    node_id: str


@dataclass(frozen=True)
class DragStart:
    node_id: str
    x: float
    y: float


@dataclass(frozen=True)
class Drag:
    node_id: str
    dx: float
    dy: float


@dataclass(frozen=True)
class DragEnd:
    node_id: str


@dataclass(frozen=True)
class Zoom:
    level: float
    center: tuple[float, float] | None = None


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class SetEdgeFilter:
    mode: str


@dataclass(frozen=True)
class Focus:
    node_id: str | None
    depth: int = 1


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class ToggleOverview:
    pass


Intent = Union[
    Hover,
    Click,
    DragStart,
    Drag,
    DragEnd,
    Zoom,
    Search,
    SetEdgeFilter,
    Focus,
    Resize,
    ToggleOverview,
]


class InteractionController:
    """Queues intents and applies them to a ``CallGraphEngine``."""

    def __init__(self, engine: CallGraphEngine) -> None:
        self.engine = engine
        self._queue: deque[Intent] = deque()

    def submit(self, intent: Intent) -> None:
        self._queue.append(intent)

    def __len__(self) -> int:
        return len(self._queue)

    def process(self) -> list[Any]:
        """Apply every queued intent in order.

        Returns:
            Per-intent results (a ``Notice`` where a search found nothing)
        """
        results = []
        while self._queue:
            results.append(self.apply(self._queue.popleft()))
        return results

    def apply(self, intent: Intent) -> Any:
        """Apply one intent immediately.

        ``NoMatch`` is turned into a notice for the host; every other error
        propagates to the caller.
        """
        engine = self.engine
        logger.debug(f"Intent: {intent}")

        if isinstance(intent, Search):
            try:
                return engine.set_search_query(intent.query)
            except NoMatch as e:
                notice = Notice(level="info", message=str(e), context=e.context)
                engine.notify(notice)
                return notice
        if isinstance(intent, SetEdgeFilter):
            return engine.set_edge_filter_mode(intent.mode)
        if isinstance(intent, Zoom):
            return engine.zoom(intent.level, intent.center)
        if isinstance(intent, Hover):
            return engine.hover(intent.node_id)
        if isinstance(intent, Click):
            return engine.click(intent.node_id)
        if isinstance(intent, DragStart):
            return engine.drag_start(intent.node_id, intent.x, intent.y)
        if isinstance(intent, Drag):
            return engine.drag(intent.node_id, intent.dx, intent.dy)
        if isinstance(intent, DragEnd):
            return engine.drag_end(intent.node_id)
        if isinstance(intent, Focus):
            return engine.focus(intent.node_id, intent.depth)
        if isinstance(intent, Resize):
            return engine.resize(intent.width, intent.height)
        if isinstance(intent, ToggleOverview):
            return engine.toggle_overview()
        raise TypeError(f"Unknown intent: {intent!r}")
