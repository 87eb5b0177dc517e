"""callgraph-viz - interactive, force-laid-out call graph exploration engine."""

from loguru import logger

__version__ = "0.3.0"
__author__ = "callgraph-viz contributors"

from .core.exceptions import CallGraphVizError

# Library logging is opt-in; the CLI re-enables it with --verbose.
logger.disable("callgraph_viz")

__all__ = ["CallGraphVizError", "__version__"]
