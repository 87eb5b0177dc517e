"""CLI commands for callgraph-viz."""
