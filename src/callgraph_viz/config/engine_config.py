"""Engine configuration: force presets, zoom thresholds, timing and rendering."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.exceptions import ConfigError
from . import defaults


@dataclass
class ForceSettings:
    """Force parameters for one view mode."""

    charge: float = -120.0  # many-body strength, negative repels
    link_distance: float = 15.0
    link_strength: float = 1.2
    center_strength: float = 0.005
    collide_base: float = 40.0  # collide radius = sqrt(size) * collide_scale + base
    collide_scale: float = 12.0
    collide_strength: float = 0.6
    collide_iterations: int = 1


def _cluster_forces() -> ForceSettings:
    return ForceSettings(
        charge=-60.0,
        link_distance=100.0,
        link_strength=0.25,
        center_strength=0.02,
        collide_scale=8.0,
        collide_strength=0.5,
    )


def _subgraph_forces() -> ForceSettings:
    return ForceSettings(charge=-150.0, link_distance=30.0, link_strength=1.0)


@dataclass
class LayoutSettings:
    """Simulation settings shared by every mode."""

    cluster: ForceSettings = field(default_factory=_cluster_forces)
    detail: ForceSettings = field(default_factory=ForceSettings)
    subgraph: ForceSettings = field(default_factory=_subgraph_forces)

    alpha_decay: float = defaults.ALPHA_DECAY
    alpha_min: float = defaults.ALPHA_MIN
    velocity_decay: float = defaults.VELOCITY_DECAY
    cooldown_ticks: int = defaults.COOLDOWN_TICKS
    warmup_ticks: int = defaults.WARMUP_TICKS
    drag_alpha_target: float = defaults.DRAG_ALPHA_TARGET


@dataclass
class ZoomSettings:
    """Zoom thresholds (hysteresis) and camera limits."""

    enter_detail: float = defaults.ZOOM_THRESHOLD_ENTER_DETAIL
    exit_detail: float = defaults.ZOOM_THRESHOLD_EXIT_DETAIL
    min_zoom: float = defaults.MIN_ZOOM
    max_zoom: float = defaults.MAX_ZOOM
    drill_bonus: float = defaults.CLUSTER_DRILL_ZOOM_BONUS
    fit_padding: float = defaults.SUBGRAPH_FIT_PADDING
    fit_min_extent: float = defaults.SUBGRAPH_FIT_MIN_EXTENT
    fit_min_zoom: float = defaults.SUBGRAPH_MIN_ZOOM
    fit_max_zoom: float = defaults.SUBGRAPH_MAX_ZOOM


@dataclass
class TimingSettings:
    """Frame cadence and transition timers, in milliseconds."""

    frame_interval_ms: int = defaults.FRAME_INTERVAL_MS
    overlay_min_delay_ms: int = defaults.OVERLAY_MIN_DELAY_MS
    mode_switch_fallback_ms: int = defaults.MODE_SWITCH_FALLBACK_MS
    subgraph_fallback_ms: int = defaults.SUBGRAPH_FALLBACK_MS


@dataclass
class RenderSettings:
    """Thresholds used by the per-frame renderer."""

    label_zoom_threshold: float = 1.2
    label_min_degree: int = 2
    label_always_zoom: float = 2.0
    badge_min_degree: int = 10
    badge_zoom_threshold: float = 1.5
    dim_alpha: float = 0.03
    cluster_avg_degree_ceiling: float = defaults.CLUSTER_AVG_DEGREE_CEILING


@dataclass
class EngineConfig:
    """Complete engine configuration."""

    layout: LayoutSettings = field(default_factory=LayoutSettings)
    zoom: ZoomSettings = field(default_factory=ZoomSettings)
    timing: TimingSettings = field(default_factory=TimingSettings)
    render: RenderSettings = field(default_factory=RenderSettings)
    max_search_matches: int = defaults.MAX_SEARCH_MATCHES

    @classmethod
    def load(cls, path: Path) -> EngineConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            EngineConfig instance (defaults if the file does not exist)

        Raises:
            ConfigError: If the file cannot be parsed or fails validation
        """
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            EngineConfig instance

        Raises:
            ConfigError: If the data is not a mapping or has unknown keys
        """
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )

        try:
            layout_data = dict(data.get("layout", {}))
            mode_forces = {
                mode: ForceSettings(**layout_data.pop(mode))
                for mode in ("cluster", "detail", "subgraph")
                if mode in layout_data
            }
            layout = LayoutSettings(**layout_data)
            for mode, forces in mode_forces.items():
                setattr(layout, mode, forces)

            config = cls(
                layout=layout,
                zoom=ZoomSettings(**data.get("zoom", {})),
                timing=TimingSettings(**data.get("timing", {})),
                render=RenderSettings(**data.get("render", {})),
                max_search_matches=data.get(
                    "max_search_matches", defaults.MAX_SEARCH_MATCHES
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}", context=data) from e

        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def save(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to save configuration
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises:
            ConfigError: If the zoom thresholds collapse or search cap is invalid
        """
        if self.zoom.exit_detail >= self.zoom.enter_detail:
            raise ConfigError(
                "zoom.exit_detail must be lower than zoom.enter_detail",
                context={
                    "enter_detail": self.zoom.enter_detail,
                    "exit_detail": self.zoom.exit_detail,
                },
            )
        if self.max_search_matches < 1:
            raise ConfigError("max_search_matches must be at least 1")

    def forces_for(self, mode: str) -> ForceSettings:
        """Return the force preset for a view mode value."""
        if mode == "cluster":
            return self.layout.cluster
        if mode == "subgraph_detail":
            return self.layout.subgraph
        return self.layout.detail
