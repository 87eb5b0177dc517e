"""Graph file loading shared by the CLI commands and the HTTP host."""

from pathlib import Path
from typing import Any

import orjson
from loguru import logger

from ..config.defaults import get_default_config_path
from ..config.engine_config import EngineConfig
from ..core.engine import CallGraphEngine
from ..core.exceptions import InvalidGraphFormat


def read_graph_file(path: Path) -> Any:
    """Decode a ``{nodes, edges}`` JSON file.

    Raises:
        InvalidGraphFormat: If the file cannot be read or is not valid JSON
    """
    try:
        data = orjson.loads(path.read_bytes())
    except OSError as e:
        raise InvalidGraphFormat(f"Cannot read {path}: {e}", context={"path": str(path)}) from e
    except orjson.JSONDecodeError as e:
        raise InvalidGraphFormat(
            f"{path} is not valid JSON: {e}", context={"path": str(path)}
        ) from e
    logger.debug(f"Read graph file {path} ({path.stat().st_size} bytes)")
    return data


def open_engine(
    graph_path: Path,
    config_path: Path | None = None,
    settle: bool = True,
    **engine_kwargs: Any,
) -> CallGraphEngine:
    """Build an engine for ``graph_path`` and optionally run it to rest.

    Args:
        graph_path: Call graph JSON file
        config_path: YAML engine configuration; defaults to
            ``callgraph-viz.yaml`` beside the graph file when it exists
        settle: Run the layout until the first transition has finished
        **engine_kwargs: Forwarded to ``CallGraphEngine``

    Returns:
        Engine with the graph loaded
    """
    if config_path is None:
        config_path = get_default_config_path(graph_path.parent)
    config = EngineConfig.load(config_path)
    if config_path.exists():
        logger.debug(f"Loaded engine config from {config_path}")
    engine_kwargs.setdefault("title", graph_path.stem)
    engine = CallGraphEngine(config=config, **engine_kwargs)
    engine.load_graph(read_graph_file(graph_path))
    if settle:
        engine.run_until_settled()
    return engine
