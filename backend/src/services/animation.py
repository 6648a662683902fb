"""Frame-driven animation of the profile network graph."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import AsyncIterator, Dict, Optional, Sequence
from uuid import uuid4

from ..models.graph import FrameData, GraphEdgeOut, GraphStreamState
from ..models.profile import Profile
from .layout import Graph, build_graph, connected_ids, node_at, tick_simulation

logger = logging.getLogger(__name__)

FADE_STEP = 0.012
DENSE_EDGE_THRESHOLD = 50
DEFAULT_FPS = 60.0


class GraphAnimation:
    """
    Owns one graph for the lifetime of a viewer.

    Each call to ``advance`` is one frame: fade-in progresses while the view
    is visible, the simulator ticks once the graph has started to fade in,
    and a ``FrameData`` snapshot is returned.
    """

    def __init__(
        self,
        profiles: Sequence[Profile],
        width: float,
        height: float,
        visible: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.profiles = list(profiles)
        self.width = width
        self.height = height
        self.visible = visible
        self.fade = 0.0
        self.settled = False
        self.frame_index = 0
        self.hovered_id: Optional[int] = None
        self.graph: Graph = self._rebuild()

    def _rebuild(self) -> Graph:
        self.fade = 0.0
        self.settled = False
        self.hovered_id = None
        self.graph = build_graph(self.profiles, self.width, self.height, rng=self.rng)
        return self.graph

    def resize(self, width: float, height: float) -> None:
        if (width, height) == (self.width, self.height):
            return
        self.width = width
        self.height = height
        self._rebuild()

    def set_profiles(self, profiles: Sequence[Profile]) -> None:
        self.profiles = list(profiles)
        self._rebuild()

    def hover(self, x: float, y: float) -> Optional[Profile]:
        """Set the hovered node from a pointer position and return its profile."""
        node = node_at(self.graph, x, y)
        self.hovered_id = node.id if node is not None else None
        return node.profile if node is not None else None

    def clear_hover(self) -> None:
        self.hovered_id = None

    def visible_edges(self) -> list[GraphEdgeOut]:
        hovered = self.hovered_id
        dense = len(self.profiles) > DENSE_EDGE_THRESHOLD
        edges = []
        for edge in self.graph.edges:
            touches_hovered = hovered is not None and hovered in (edge.source, edge.target)
            if dense and not touches_hovered:
                continue
            edges.append(GraphEdgeOut(source=edge.source, target=edge.target))
        return edges

    def state(self, stream_id: str) -> GraphStreamState:
        return GraphStreamState(
            id=stream_id,
            width=self.width,
            height=self.height,
            profile_count=len(self.profiles),
            hovered=self.hovered_id,
            connected=self._connected(),
            hovered_profile=self._hovered_profile(),
        )

    def _connected(self) -> list[int]:
        if self.hovered_id is None:
            return []
        return sorted(connected_ids(self.graph, self.hovered_id))

    def _hovered_profile(self) -> Optional[Profile]:
        if self.hovered_id is None:
            return None
        return self.graph.nodes[self.hovered_id].profile

    def advance(self) -> FrameData:
        if self.visible and self.fade < 1:
            self.fade = min(1.0, self.fade + FADE_STEP)
        if self.fade > 0:
            self.settled = tick_simulation(self.graph, self.width, self.height, rng=self.rng)

        frame = FrameData(
            index=self.frame_index,
            alpha=self.fade,
            settled=self.settled,
            connecting=not self.profiles,
            hovered=self.hovered_id,
            connected=self._connected(),
            nodes=self.graph.frame_nodes(),
            edges=self.visible_edges(),
        )
        self.frame_index += 1
        return frame


class AnimationLoop:
    """
    Runs ``GraphAnimation.advance`` once per frame interval on a single task.

    Use as ``async with AnimationLoop(animation) as loop``; the task is
    cancelled on every exit path.
    """

    def __init__(self, animation: GraphAnimation, fps: float = DEFAULT_FPS, max_buffered: int = 1):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.animation = animation
        self.interval = 1.0 / fps
        self._queue: asyncio.Queue[FrameData] = asyncio.Queue(maxsize=max_buffered)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("Animation loop started at %.1f fps", 1.0 / self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Animation loop failed")
        logger.debug(
            "Animation loop stopped after %d frames", self.animation.frame_index
        )

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            frame = self.animation.advance()
            # Waits for the consumer, so ticks never overlap or pile up
            await self._queue.put(frame)
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self.interval - elapsed))

    async def frames(self, limit: Optional[int] = None) -> AsyncIterator[FrameData]:
        """Yield frames as they are produced, optionally stopping after ``limit``."""
        produced = 0
        while self.running and (limit is None or produced < limit):
            get = asyncio.ensure_future(self._queue.get())
            try:
                done, _ = await asyncio.wait(
                    {get, self._task}, return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                if not get.done():
                    get.cancel()
            if get not in done:
                self._raise_task_error()
                return
            produced += 1
            yield get.result()

    def _raise_task_error(self) -> None:
        task = self._task
        if task is not None and task.done() and not task.cancelled():
            error = task.exception()
            if error is not None:
                raise error

    async def __aenter__(self) -> "AnimationLoop":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()




class GraphStreamNotFoundError(Exception):
    """Raised when no open stream has the requested id."""

    def __init__(self, stream_id: str):
        self.stream_id = stream_id
        super().__init__(f"Graph stream not found: {stream_id}")


class GraphStreamRegistry:
    """
    Open animations keyed by stream id.

    A stream registers its animation for as long as its SSE response is
    being served, so pointer and resize input can be routed to it.
    """

    def __init__(self) -> None:
        self._streams: Dict[str, GraphAnimation] = {}

    def open(self, animation: GraphAnimation) -> str:
        stream_id = uuid4().hex
        self._streams[stream_id] = animation
        logger.debug("Opened graph stream %s (%d open)", stream_id, len(self._streams))
        return stream_id

    def get(self, stream_id: str) -> GraphAnimation:
        try:
            return self._streams[stream_id]
        except KeyError:
            raise GraphStreamNotFoundError(stream_id) from None

    def close(self, stream_id: str) -> None:
        self._streams.pop(stream_id, None)

    def __len__(self) -> int:
        return len(self._streams)

    def __contains__(self, stream_id: object) -> bool:
        return stream_id in self._streams


_graph_streams: GraphStreamRegistry | None = None


def get_graph_streams() -> GraphStreamRegistry:
    """Get or create the process-wide stream registry."""
    global _graph_streams
    if _graph_streams is None:
        _graph_streams = GraphStreamRegistry()
    return _graph_streams


__all__ = [
    "GraphAnimation",
    "AnimationLoop",
    "GraphStreamRegistry",
    "GraphStreamNotFoundError",
    "get_graph_streams",
    "FADE_STEP",
    "DENSE_EDGE_THRESHOLD",
]
