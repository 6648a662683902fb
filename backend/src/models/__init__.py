"""Pydantic models for data validation and serialization."""

from .directory import DirectoryResult
from .graph import (
    FrameData,
    FrameNode,
    GraphData,
    GraphEdgeOut,
    GraphNodeOut,
    GraphStreamState,
    HoverRequest,
    ResizeRequest,
)
from .profile import ApprovalStatus, Profile, ProfileSubmission, SubmitResponse

__all__ = [
    "ApprovalStatus",
    "Profile",
    "ProfileSubmission",
    "SubmitResponse",
    "DirectoryResult",
    "GraphData",
    "GraphNodeOut",
    "GraphEdgeOut",
    "FrameData",
    "FrameNode",
    "GraphStreamState",
    "HoverRequest",
    "ResizeRequest",
]
