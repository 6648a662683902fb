"""Force-directed layout for the profile network graph.

Nodes are profiles plus "ghost" filler nodes; edges join profiles that share a
major or a class year. ``tick_simulation`` advances the layout by one frame.

Both the edge search and the repulsion term are O(n^2). That is fine for the
tens to low hundreds of profiles the directory holds; a much larger directory
would need a spatial index (e.g. Barnes-Hut) instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import random
from typing import List, Optional, Sequence

from ..models.graph import FrameNode, GraphData, GraphEdgeOut, GraphNodeOut
from ..models.profile import Profile

CENTER_GRAVITY = 0.0003
REPULSION = 800.0
EDGE_SPRING = 0.0004
EDGE_REST_LENGTH = 80.0
DAMPING = 0.92
DRIFT_FORCE = 0.02
PADDING = 30.0
SETTLED_THRESHOLD = 0.1

SPARSE_PROFILE_COUNT = 5
SPARSE_RADIUS = 10.0
DENSE_RADIUS = 6.0
GHOST_RADIUS = 4.0
EMPTY_GHOST_COUNT = 10
MIN_POPULATED_NODES = 6
REAL_JITTER = 0.3
GHOST_JITTER = 0.5
HOVER_SLOP = 12.0

_DEFAULT_RNG = random.Random()


@dataclass
class GraphNode:
    id: int
    x: float
    y: float
    radius: float
    vx: float = 0.0
    vy: float = 0.0
    profile: Optional[Profile] = None

    @property
    def is_ghost(self) -> bool:
        return self.profile is None


@dataclass(frozen=True)
class GraphEdge:
    source: int
    target: int


@dataclass
class Graph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    @property
    def profile_count(self) -> int:
        return sum(1 for node in self.nodes if node.profile is not None)

    def to_model(self, width: float, height: float, settled: bool = False) -> GraphData:
        return GraphData(
            width=width,
            height=height,
            nodes=[
                GraphNodeOut(
                    id=node.id,
                    x=node.x,
                    y=node.y,
                    vx=node.vx,
                    vy=node.vy,
                    radius=node.radius,
                    ghost=node.is_ghost,
                    profile=node.profile,
                )
                for node in self.nodes
            ],
            edges=[GraphEdgeOut(source=e.source, target=e.target) for e in self.edges],
            settled=settled,
        )

    def frame_nodes(self) -> List[FrameNode]:
        return [
            FrameNode(id=n.id, x=n.x, y=n.y, radius=n.radius, ghost=n.is_ghost)
            for n in self.nodes
        ]


def _jitter(rng: random.Random, extent: float, fraction: float) -> float:
    return (rng.random() - 0.5) * extent * fraction


def _shares_major(a: Profile, b: Profile) -> bool:
    return bool(a.major and b.major and a.major.lower() == b.major.lower())


def _shares_year(a: Profile, b: Profile) -> bool:
    return bool(a.gradYear and b.gradYear and a.gradYear == b.gradYear)


def ghost_count(profile_count: int) -> int:
    if profile_count == 0:
        return EMPTY_GHOST_COUNT
    return max(0, MIN_POPULATED_NODES - profile_count)


def build_graph(
    profiles: Sequence[Profile],
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
) -> Graph:
    """
    Build a graph from profiles.

    Real nodes take ids ``0..n-1`` in profile order and start near the canvas
    center; ghost nodes follow. Edge endpoints are list indices, so the node
    list must not be reordered afterwards.
    """
    rng = rng or _DEFAULT_RNG
    n = len(profiles)
    radius = SPARSE_RADIUS if n <= SPARSE_PROFILE_COUNT else DENSE_RADIUS
    cx, cy = width / 2, height / 2

    nodes: List[GraphNode] = [
        GraphNode(
            id=i,
            x=cx + _jitter(rng, width, REAL_JITTER),
            y=cy + _jitter(rng, height, REAL_JITTER),
            radius=radius,
            profile=profile,
        )
        for i, profile in enumerate(profiles)
    ]

    edges: List[GraphEdge] = []
    for i in range(n):
        for j in range(i + 1, n):
            if _shares_major(profiles[i], profiles[j]) or _shares_year(profiles[i], profiles[j]):
                edges.append(GraphEdge(source=i, target=j))

    for _ in range(ghost_count(n)):
        nodes.append(
            GraphNode(
                id=len(nodes),
                x=cx + _jitter(rng, width, GHOST_JITTER),
                y=cy + _jitter(rng, height, GHOST_JITTER),
                radius=GHOST_RADIUS,
            )
        )

    return Graph(nodes=nodes, edges=edges)


def tick_simulation(
    graph: Graph,
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
) -> bool:
    """
    Advance the layout by one frame, mutating positions and velocities in place.

    Forces are applied in a fixed order: center gravity, pairwise repulsion,
    edge springs, random drift; then damping, integration and clamping.
    Returns True once the mean per-node speed drops under the settled
    threshold. Drift keeps the layout moving, so this is a timing hint rather
    than an equilibrium.
    """
    rng = rng or _DEFAULT_RNG
    nodes = graph.nodes
    n = len(nodes)
    if n == 0:
        return True

    cx, cy = width / 2, height / 2
    for node in nodes:
        node.vx += (cx - node.x) * CENTER_GRAVITY
        node.vy += (cy - node.y) * CENTER_GRAVITY

    for i in range(n):
        a = nodes[i]
        for j in range(i + 1, n):
            b = nodes[j]
            dx = a.x - b.x
            dy = a.y - b.y
            force = REPULSION / (dx * dx + dy * dy + 1)
            dx *= force
            dy *= force
            a.vx += dx
            a.vy += dy
            b.vx -= dx
            b.vy -= dy

    for edge in graph.edges:
        a = nodes[edge.source]
        b = nodes[edge.target]
        dx = b.x - a.x
        dy = b.y - a.y
        dist = math.sqrt(dx * dx + dy * dy) or 1.0
        force = (dist - EDGE_REST_LENGTH) * EDGE_SPRING
        fx = dx / dist * force
        fy = dy / dist * force
        a.vx += fx
        a.vy += fy
        b.vx -= fx
        b.vy -= fy

    for node in nodes:
        node.vx += (rng.random() - 0.5) * DRIFT_FORCE
        node.vy += (rng.random() - 0.5) * DRIFT_FORCE

    total_motion = 0.0
    for node in nodes:
        node.vx *= DAMPING
        node.vy *= DAMPING
        node.x = max(PADDING, min(width - PADDING, node.x + node.vx))
        node.y = max(PADDING, min(height - PADDING, node.y + node.vy))
        total_motion += abs(node.vx) + abs(node.vy)

    return total_motion / n < SETTLED_THRESHOLD


def node_at(graph: Graph, x: float, y: float) -> Optional[GraphNode]:
    """Closest node within hover range of the point, if any."""
    closest: Optional[GraphNode] = None
    closest_dist = math.inf
    for node in graph.nodes:
        dist = math.hypot(node.x - x, node.y - y)
        if dist < node.radius + HOVER_SLOP and dist < closest_dist:
            closest = node
            closest_dist = dist
    return closest


def connected_ids(graph: Graph, node_id: int) -> set[int]:
    """The node itself plus every node sharing an edge with it."""
    ids = {node_id}
    for edge in graph.edges:
        if edge.source == node_id:
            ids.add(edge.target)
        if edge.target == node_id:
            ids.add(edge.source)
    return ids


__all__ = [
    "Graph",
    "GraphNode",
    "GraphEdge",
    "build_graph",
    "tick_simulation",
    "ghost_count",
    "node_at",
    "connected_ids",
]
