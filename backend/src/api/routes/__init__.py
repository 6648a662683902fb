"""HTTP API route handlers."""

from . import directory, graph, profiles, system

__all__ = ["directory", "graph", "profiles", "system"]
