"""Default configuration values for callgraph-viz."""

from pathlib import Path

# Zoom hysteresis: enter detail at or above ENTER, leave below EXIT
ZOOM_THRESHOLD_ENTER_DETAIL = 1.6
ZOOM_THRESHOLD_EXIT_DETAIL = 0.8

# Camera limits
MIN_ZOOM = 0.1
MAX_ZOOM = 3.5
DEFAULT_ZOOM = 1.0

# Extra zoom applied on top of ENTER when drilling into a clicked cluster
CLUSTER_DRILL_ZOOM_BONUS = 0.5

# Subgraph camera fit
SUBGRAPH_FIT_PADDING = 0.8  # fraction of the viewport the bbox may fill
SUBGRAPH_FIT_MIN_EXTENT = 100.0
SUBGRAPH_MIN_ZOOM = 0.8
SUBGRAPH_MAX_ZOOM = 3.0

# Simulation
ALPHA_DECAY = 0.03
ALPHA_MIN = 0.001
VELOCITY_DECAY = 0.85  # friction; velocities keep (1 - VELOCITY_DECAY) per tick
COOLDOWN_TICKS = 200
WARMUP_TICKS = 100
DRAG_ALPHA_TARGET = 0.3

# Frame loop and timers (milliseconds)
FRAME_INTERVAL_MS = 16
OVERLAY_MIN_DELAY_MS = 100
MODE_SWITCH_FALLBACK_MS = 6000
SUBGRAPH_FALLBACK_MS = 3000

# Search
MAX_SEARCH_MATCHES = 5

# Focus depth selector (0 = unlimited)
FOCUS_DEPTHS = (0, 1, 2, 3, 4)

# Default drawing surface
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 800

# Colour gradients, (r, g, b) endpoints keyed by low -> high ratio
FUNCTION_GRADIENT = ((100, 150, 255), (0, 80, 200))
CLUSTER_GRADIENT = ((80, 120, 200), (20, 200, 80))
CLUSTER_AVG_DEGREE_CEILING = 50.0

BACKGROUND_COLOR = "#1a1a1a"

DEFAULT_CONFIG_FILENAME = "callgraph-viz.yaml"


def get_default_config_path(project_root: Path) -> Path:
    """Return the engine config path for a project root."""
    return project_root / DEFAULT_CONFIG_FILENAME
