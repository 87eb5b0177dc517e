"""Configuration for callgraph-viz."""

from .engine_config import (
    EngineConfig,
    ForceSettings,
    LayoutSettings,
    RenderSettings,
    TimingSettings,
    ZoomSettings,
)

__all__ = [
    "EngineConfig",
    "ForceSettings",
    "LayoutSettings",
    "RenderSettings",
    "TimingSettings",
    "ZoomSettings",
]
