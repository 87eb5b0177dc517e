"""Shared fixtures for callgraph-viz tests."""

from __future__ import annotations

import random
from pathlib import Path

import orjson
import pytest

from callgraph_viz.config.engine_config import EngineConfig
from callgraph_viz.core.engine import CallGraphEngine
from callgraph_viz.core.normalizer import normalize_graph


def _node(node_id: str, name: str, file: str | None, in_degree: int, out_degree: int) -> dict:
    return {
        "id": node_id,
        "name": name,
        "file": file,
        "degree": in_degree + out_degree,
        "in_degree": in_degree,
        "out_degree": out_degree,
    }


@pytest.fixture
def raw_graph() -> dict:
    """Ten functions in three files.

    Cross-file calls: three from src/a.c into src/b.c and one back from
    src/b.c into src/a.c. src/c.c only calls itself. Two extra nodes (no
    file, zero degree) and one dangling edge must be dropped.
    """
    return {
        "nodes": [
            _node("a1", "btreeOpen", "src/a.c", 0, 2),
            _node("a2", "sqlite3BtreeOpen", "src/a.c", 1, 1),
            _node("a3", "fooBtreeHelper", "src/a.c", 0, 1),
            _node("a4", "aUtil", "src/a.c", 1, 0),
            _node("b1", "bMain", "src/b.c", 2, 1),
            _node("b2", "bParse", "src/b.c", 2, 0),
            _node("b3", "bExec", "src/b.c", 0, 1),
            _node("c1", "cInit", "src/c.c", 0, 1),
            _node("c2", "cRun", "src/c.c", 1, 1),
            _node("c3", "cStop", "src/c.c", 1, 0),
            _node("x1", "externalFn", None, 1, 0),
            _node("z1", "unusedFn", "src/a.c", 0, 0),
        ],
        "edges": [
            {"source": "a1", "target": "b1"},
            {"source": "a2", "target": "b1"},
            {"source": "a3", "target": "b2"},
            {"source": "b3", "target": "a4"},
            {"source": "c1", "target": "c2"},
            {"source": "c2", "target": "c3"},
            {"source": "a1", "target": "a2"},
            {"source": "b1", "target": "b2"},
            {"source": "a1", "target": "x1"},
        ],
    }


@pytest.fixture
def normalized(raw_graph):
    return normalize_graph(raw_graph)


@pytest.fixture
def graph_file(tmp_path: Path, raw_graph) -> Path:
    path = tmp_path / "callgraph.json"
    path.write_bytes(orjson.dumps(raw_graph))
    return path


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(raw_graph, config) -> CallGraphEngine:
    """Engine with the sample graph loaded (layout not yet settled)."""
    random.seed(7)
    engine = CallGraphEngine(config=config, title="sample")
    engine.load_graph(raw_graph)
    yield engine
    engine.teardown()


@pytest.fixture
def settled_engine(engine) -> CallGraphEngine:
    """Engine after the initial cluster layout and overlay have finished."""
    engine.run_until_settled()
    return engine
