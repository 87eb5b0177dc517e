"""Command-line interface for callgraph-viz."""
