"""Tests for the callgraph-viz command line."""

from __future__ import annotations

import orjson
import pytest
from typer.testing import CliRunner

from callgraph_viz import __version__
from callgraph_viz.cli.loader import open_engine
from callgraph_viz.cli.main import app


@pytest.fixture
def cli_runner():
    return CliRunner()


class TestInspect:
    def test_text_summary(self, cli_runner, graph_file):
        result = cli_runner.invoke(app, ["inspect", str(graph_file)])
        assert result.exit_code == 0
        assert "Files: 3" in result.output
        assert "Functions: 10" in result.output
        assert "Largest files" in result.output
        assert "Dropped 2 nodes" in result.output

    def test_json_summary(self, cli_runner, graph_file):
        result = cli_runner.invoke(app, ["inspect", str(graph_file), "--json"])
        assert result.exit_code == 0
        assert '"files"' in result.output
        assert '"top_files"' in result.output

    def test_invalid_file(self, cli_runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        result = cli_runner.invoke(app, ["inspect", str(path)])
        assert result.exit_code == 1
        assert "JSON" in result.output

    def test_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["inspect", str(tmp_path / "absent.json")])
        assert result.exit_code == 2


class TestSearch:
    def test_matches_and_summary(self, cli_runner, graph_file):
        result = cli_runner.invoke(app, ["search", str(graph_file), "btree"])
        assert result.exit_code == 0
        assert "btreeOpen" in result.output
        assert "fooBtreeHelper" in result.output
        assert "subgraph_detail" in result.output

    def test_no_match(self, cli_runner, graph_file):
        result = cli_runner.invoke(app, ["search", str(graph_file), "zzz"])
        assert result.exit_code == 1
        assert "No functions found" in result.output

    def test_bad_filter(self, cli_runner, graph_file):
        result = cli_runner.invoke(app, ["search", str(graph_file), "btree", "--filter", "sideways"])
        assert result.exit_code == 2

    def test_json_with_filter(self, cli_runner, graph_file):
        result = cli_runner.invoke(
            app, ["search", str(graph_file), "btree", "-f", "incoming", "--json"]
        )
        assert result.exit_code == 0
        assert '"matched"' in result.output
        assert "a1->a2" in result.output


class TestRender:
    def test_svg_overview(self, cli_runner, graph_file, tmp_path):
        out = tmp_path / "overview.svg"
        result = cli_runner.invoke(app, ["render", str(graph_file), "-o", str(out)])
        assert result.exit_code == 0
        assert "Rendered" in result.output
        assert out.read_text().startswith("<svg")

    def test_json_detail(self, cli_runner, graph_file, tmp_path):
        out = tmp_path / "frame.json"
        result = cli_runner.invoke(
            app, ["render", str(graph_file), "-o", str(out), "--zoom", "2"]
        )
        assert result.exit_code == 0
        data = orjson.loads(out.read_bytes())
        assert data["mode"] == "detail"
        assert len(data["nodes"]) == 10

    def test_json_subgraph(self, cli_runner, graph_file, tmp_path):
        out = tmp_path / "callers.json"
        result = cli_runner.invoke(
            app,
            ["render", str(graph_file), "-o", str(out), "-q", "btree", "-f", "incoming"],
        )
        assert result.exit_code == 0
        data = orjson.loads(out.read_bytes())
        assert data["mode"] == "subgraph_detail"
        assert {n["id"] for n in data["nodes"]} == {"a1", "a2", "a3"}
        assert [e["key"] for e in data["edges"]] == ["a1->a2"]

    def test_query_without_match_still_renders(self, cli_runner, graph_file, tmp_path):
        out = tmp_path / "frame.json"
        result = cli_runner.invoke(app, ["render", str(graph_file), "-o", str(out), "-q", "zzz"])
        assert result.exit_code == 0
        assert "No functions found" in result.output
        assert orjson.loads(out.read_bytes())["mode"] == "cluster"

    def test_unsupported_format(self, cli_runner, graph_file, tmp_path):
        out = tmp_path / "frame.png"
        result = cli_runner.invoke(app, ["render", str(graph_file), "-o", str(out)])
        assert result.exit_code == 2
        assert not out.exists()

    def test_invalid_graph(self, cli_runner, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text('{"nodes": 5}')
        result = cli_runner.invoke(app, ["render", str(path), "-o", str(tmp_path / "x.svg")])
        assert result.exit_code == 1


class TestDefaultConfig:
    def test_config_beside_graph_is_used(self, graph_file):
        (graph_file.parent / "callgraph-viz.yaml").write_text("max_search_matches: 1\n")
        engine = open_engine(graph_file, settle=False)
        assert engine.config.max_search_matches == 1
        engine.teardown()

    def test_search_honours_default_config(self, cli_runner, graph_file):
        (graph_file.parent / "callgraph-viz.yaml").write_text("max_search_matches: 1\n")
        result = cli_runner.invoke(app, ["search", str(graph_file), "btree", "--json"])
        assert result.exit_code == 0
        assert "btreeOpen" in result.output
        assert "sqlite3BtreeOpen" not in result.output

    def test_invalid_default_config(self, cli_runner, graph_file):
        (graph_file.parent / "callgraph-viz.yaml").write_text("- not\n- a mapping\n")
        result = cli_runner.invoke(app, ["search", str(graph_file), "btree"])
        assert result.exit_code == 1


def test_version(cli_runner):
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
