"""vecgraph command line interface."""

from vecgraph.cli.commands import cli

__all__ = ["cli"]
