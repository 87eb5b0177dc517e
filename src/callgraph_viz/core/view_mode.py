"""View-mode state machine: Cluster, Detail and Subgraph-Detail.

``ViewModeController.handle(event, state)`` is a pure function returning the
next ``ViewState`` and the commands the engine must execute, in order. Every
transition emits ``SwapGraph -> ConfigureForces -> Reheat`` before any camera
or timer command, so the data swap is complete before another zoom event can
be evaluated.

Transitions:
    Cluster  -> Detail           zoom >= enter threshold, or cluster click
    Detail   -> Cluster          zoom <  exit threshold
    any      -> SubgraphDetail   non-empty search result
    SubgraphDetail -> Cluster    search cleared

While ``transitioning`` is set, zoom-driven transitions are ignored. The flag
clears on the first of: overlay delay after settle, or the fallback timer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Union

from loguru import logger

from ..config.engine_config import EngineConfig
from ..config.defaults import DEFAULT_ZOOM
from .models import ViewMode


class TimerKind(StrEnum):
    OVERLAY = "overlay"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ViewState:
    mode: ViewMode = ViewMode.CLUSTER
    transitioning: bool = False
    initial_zoom_applied: bool = False
    transition_id: int = 0
    fit_on_settle: bool = False


# --- Events ---


@dataclass(frozen=True)
class GraphLoaded:
    pass


@dataclass(frozen=True)
class ZoomChanged:
    level: float


@dataclass(frozen=True)
class ClusterClicked:
    cluster_id: str
    x: float
    y: float


@dataclass(frozen=True)
class SearchApplied:
    pass


@dataclass(frozen=True)
class SearchCleared:
    pass


@dataclass(frozen=True)
class LayoutSettled:
    pass


@dataclass(frozen=True)
class OverlayDelayElapsed:
    transition_id: int


@dataclass(frozen=True)
class FallbackElapsed:
    transition_id: int


ViewEvent = Union[
    GraphLoaded,
    ZoomChanged,
    ClusterClicked,
    SearchApplied,
    SearchCleared,
    LayoutSettled,
    OverlayDelayElapsed,
    FallbackElapsed,
]


# --- Commands ---


@dataclass(frozen=True)
class SwapGraph:
    mode: ViewMode


@dataclass(frozen=True)
class ConfigureForces:
    mode: ViewMode


@dataclass(frozen=True)
class Reheat:
    warmup: bool = False


@dataclass(frozen=True)
class MoveCamera:
    zoom: float
    center: tuple[float, float]


@dataclass(frozen=True)
class FitCamera:
    pass


@dataclass(frozen=True)
class ShowOverlay:
    mode: ViewMode


@dataclass(frozen=True)
class HideOverlay:
    pass


@dataclass(frozen=True)
class StartTimer:
    kind: TimerKind
    delay_ms: int
    transition_id: int


@dataclass(frozen=True)
class CancelTimer:
    kind: TimerKind
    transition_id: int


@dataclass(frozen=True)
class ReportStall:
    transition_id: int
    mode: ViewMode


ViewCommand = Union[
    SwapGraph,
    ConfigureForces,
    Reheat,
    MoveCamera,
    FitCamera,
    ShowOverlay,
    HideOverlay,
    StartTimer,
    CancelTimer,
    ReportStall,
]

Result = tuple[ViewState, list[ViewCommand]]

ORIGIN = (0.0, 0.0)


class ViewModeController:
    """Pure transition function over ``ViewState``."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def handle(self, event: ViewEvent, state: ViewState) -> Result:
        if isinstance(event, GraphLoaded):
            return self._on_graph_loaded(state)
        if isinstance(event, ZoomChanged):
            return self._on_zoom(event, state)
        if isinstance(event, ClusterClicked):
            return self._on_cluster_clicked(event, state)
        if isinstance(event, SearchApplied):
            return self._on_search_applied(state)
        if isinstance(event, SearchCleared):
            return self._on_search_cleared(state)
        if isinstance(event, LayoutSettled):
            return self._on_settled(state)
        if isinstance(event, OverlayDelayElapsed):
            return self._on_transition_end(event.transition_id, state, stalled=False)
        if isinstance(event, FallbackElapsed):
            return self._on_transition_end(event.transition_id, state, stalled=True)
        raise TypeError(f"Unknown view event: {event!r}")

    # -------- transitions --------

    def _begin(
        self,
        state: ViewState,
        target: ViewMode,
        *,
        warmup: bool = False,
        fit_on_settle: bool = False,
    ) -> Result:
        tid = state.transition_id + 1
        fallback = (
            self.config.timing.subgraph_fallback_ms
            if target is ViewMode.SUBGRAPH_DETAIL
            else self.config.timing.mode_switch_fallback_ms
        )
        logger.info(f"View transition #{tid}: {state.mode} -> {target}")
        new_state = replace(
            state,
            mode=target,
            transitioning=True,
            transition_id=tid,
            fit_on_settle=fit_on_settle,
        )
        commands: list[ViewCommand] = [
            SwapGraph(target),
            ConfigureForces(target),
            Reheat(warmup=warmup),
            ShowOverlay(target),
            CancelTimer(TimerKind.OVERLAY, state.transition_id),
            CancelTimer(TimerKind.FALLBACK, state.transition_id),
            StartTimer(TimerKind.FALLBACK, fallback, tid),
        ]
        return new_state, commands

    def _on_graph_loaded(self, state: ViewState) -> Result:
        # Initial zoom is applied once per session, not once per graph
        fresh = ViewState(
            transition_id=state.transition_id,
            initial_zoom_applied=state.initial_zoom_applied,
        )
        return self._begin(fresh, ViewMode.CLUSTER, warmup=True)

    def _on_zoom(self, event: ZoomChanged, state: ViewState) -> Result:
        if not state.initial_zoom_applied:
            logger.debug("Zoom ignored: waiting for initial zoom setup")
            return state, []
        if state.transitioning:
            logger.debug("Zoom ignored: transition in flight")
            return state, []
        if state.mode is ViewMode.SUBGRAPH_DETAIL:
            return state, []

        zoom = self.config.zoom
        if state.mode is ViewMode.CLUSTER and event.level >= zoom.enter_detail:
            return self._begin(state, ViewMode.DETAIL)
        if state.mode is ViewMode.DETAIL and event.level < zoom.exit_detail:
            return self._begin(state, ViewMode.CLUSTER)
        return state, []

    def _on_cluster_clicked(self, event: ClusterClicked, state: ViewState) -> Result:
        if state.mode is not ViewMode.CLUSTER or state.transitioning:
            logger.debug(f"Cluster click on {event.cluster_id} ignored in {state.mode}")
            return state, []

        new_state, commands = self._begin(state, ViewMode.DETAIL)
        drill_zoom = self.config.zoom.enter_detail + self.config.zoom.drill_bonus
        commands.append(MoveCamera(drill_zoom, (event.x, event.y)))
        return new_state, commands

    def _on_search_applied(self, state: ViewState) -> Result:
        # Subgraph nodes start without coordinates, like a freshly loaded graph
        return self._begin(
            state, ViewMode.SUBGRAPH_DETAIL, warmup=True, fit_on_settle=True
        )

    def _on_search_cleared(self, state: ViewState) -> Result:
        if state.mode is not ViewMode.SUBGRAPH_DETAIL:
            return state, []
        new_state, commands = self._begin(state, ViewMode.CLUSTER)
        commands.append(MoveCamera(DEFAULT_ZOOM, ORIGIN))
        return new_state, commands

    def _on_settled(self, state: ViewState) -> Result:
        commands: list[ViewCommand] = []
        if not state.initial_zoom_applied:
            logger.info("Initial layout settled: applying initial zoom")
            state = replace(state, initial_zoom_applied=True)
            commands.append(MoveCamera(DEFAULT_ZOOM, ORIGIN))

        if not state.transitioning:
            return state, commands

        if state.fit_on_settle:
            state = replace(state, fit_on_settle=False)
            commands.append(FitCamera())

        tid = state.transition_id
        commands += [
            CancelTimer(TimerKind.FALLBACK, tid),
            StartTimer(TimerKind.OVERLAY, self.config.timing.overlay_min_delay_ms, tid),
        ]
        return state, commands

    def _on_transition_end(
        self, transition_id: int, state: ViewState, stalled: bool
    ) -> Result:
        if not state.transitioning or transition_id != state.transition_id:
            logger.debug(f"Stale transition timer #{transition_id} ignored")
            return state, []

        commands: list[ViewCommand] = []
        if stalled:
            commands.append(ReportStall(transition_id, state.mode))
            if state.fit_on_settle:
                commands.append(FitCamera())
        commands += [
            CancelTimer(TimerKind.OVERLAY, transition_id),
            CancelTimer(TimerKind.FALLBACK, transition_id),
            HideOverlay(),
        ]
        return replace(state, transitioning=False, fit_on_settle=False), commands
