"""Graph data models."""

from typing import List, Optional
from pydantic import BaseModel, Field

from .profile import Profile

MIN_DIMENSION = 60.0
MAX_DIMENSION = 4096.0


class GraphNodeOut(BaseModel):
    """A positioned node in the network visualization."""
    id: int = Field(..., ge=0, description="Dense index of the node")
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    radius: float = Field(..., gt=0)
    ghost: bool = Field(..., description="True for filler nodes with no profile")
    profile: Optional[Profile] = Field(default=None, description="Profile drawn by this node")


class GraphEdgeOut(BaseModel):
    """An undirected connection between two node ids."""
    source: int
    target: int


class GraphData(BaseModel):
    """Graph snapshot returned by the API."""
    width: float
    height: float
    nodes: List[GraphNodeOut]
    edges: List[GraphEdgeOut]
    settled: bool = False


class FrameNode(BaseModel):
    """Per-frame node state, without the profile payload."""
    id: int
    x: float
    y: float
    radius: float
    ghost: bool


class FrameData(BaseModel):
    """One animation frame streamed to a viewer."""
    index: int = Field(..., ge=0)
    alpha: float = Field(..., ge=0, le=1, description="Fade-in progress")
    settled: bool
    connecting: bool = Field(False, description="True when there are no real profiles")
    hovered: Optional[int] = None
    connected: List[int] = Field(default_factory=list)
    nodes: List[FrameNode]
    edges: List[GraphEdgeOut]


class HoverRequest(BaseModel):
    """Pointer position in canvas coordinates."""
    x: float
    y: float


class ResizeRequest(BaseModel):
    """New canvas size for an open stream."""
    width: float = Field(..., ge=MIN_DIMENSION, le=MAX_DIMENSION)
    height: float = Field(..., ge=MIN_DIMENSION, le=MAX_DIMENSION)


class GraphStreamState(BaseModel):
    """Interactive state of one open graph stream."""
    id: str
    width: float
    height: float
    profile_count: int
    hovered: Optional[int] = None
    connected: List[int] = Field(default_factory=list)
    hovered_profile: Optional[Profile] = None
