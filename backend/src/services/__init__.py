"""Service layer for business logic and external integrations."""

from .animation import AnimationLoop, GraphAnimation, GraphStreamRegistry, get_graph_streams
from .config import AppConfig, get_config, reload_config
from .directory import build_directory, filter_profiles, major_options, year_options
from .layout import Graph, GraphEdge, GraphNode, build_graph, tick_simulation
from .profiles import ProfileService, ProfileValidationError, get_profile_service
from .sheets import (
    ProfileStore,
    ProfileStoreError,
    StoreNotConfiguredError,
    get_profile_store,
)

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "build_directory",
    "filter_profiles",
    "year_options",
    "major_options",
    "Graph",
    "GraphNode",
    "GraphEdge",
    "build_graph",
    "tick_simulation",
    "GraphAnimation",
    "AnimationLoop",
    "GraphStreamRegistry",
    "get_graph_streams",
    "ProfileStore",
    "ProfileStoreError",
    "StoreNotConfiguredError",
    "get_profile_store",
    "ProfileService",
    "ProfileValidationError",
    "get_profile_service",
]
