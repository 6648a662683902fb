"""HTTP API routes for the profile network graph."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated, AsyncGenerator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sse_starlette.sse import EventSourceResponse

from ...models.graph import (
    MAX_DIMENSION,
    MIN_DIMENSION,
    GraphData,
    GraphStreamState,
    HoverRequest,
    ResizeRequest,
)
from ...services.animation import (
    AnimationLoop,
    GraphAnimation,
    GraphStreamNotFoundError,
    GraphStreamRegistry,
    get_graph_streams,
)
from ...services.layout import Graph, build_graph, tick_simulation
from ...services.profiles import ProfileService, get_profile_service

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_WIDTH = 320.0
DEFAULT_HEIGHT = 260.0
MAX_TICKS = 300


def _relax(graph: Graph, width: float, height: float, ticks: int) -> bool:
    settled = False
    for _ in range(ticks):
        settled = tick_simulation(graph, width, height)
    return settled


def _open_stream(streams: GraphStreamRegistry, stream_id: str) -> GraphAnimation:
    try:
        return streams.get(stream_id)
    except GraphStreamNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "message": "Graph stream not found"},
        )


@router.get("/api/graph", response_model=GraphData)
async def get_graph_data(
    service: Annotated[ProfileService, Depends(get_profile_service)],
    width: float = Query(DEFAULT_WIDTH, ge=MIN_DIMENSION, le=MAX_DIMENSION),
    height: float = Query(DEFAULT_HEIGHT, ge=MIN_DIMENSION, le=MAX_DIMENSION),
    ticks: int = Query(0, ge=0, le=MAX_TICKS, description="Simulation steps to run before returning"),
) -> GraphData:
    """Build the graph and optionally relax it server-side."""
    profiles = await service.list_public()
    graph = build_graph(profiles, width, height)
    settled = False
    if ticks:
        # Relaxation is quadratic in node count; keep it off the event loop
        settled = await asyncio.to_thread(_relax, graph, width, height, ticks)
    return graph.to_model(width, height, settled=settled)


@router.get("/api/graph/stream")
async def stream_graph(
    request: Request,
    service: Annotated[ProfileService, Depends(get_profile_service)],
    streams: Annotated[GraphStreamRegistry, Depends(get_graph_streams)],
    width: float = Query(DEFAULT_WIDTH, ge=MIN_DIMENSION, le=MAX_DIMENSION),
    height: float = Query(DEFAULT_HEIGHT, ge=MIN_DIMENSION, le=MAX_DIMENSION),
    fps: float = Query(30.0, gt=0, le=60),
    frames: Optional[int] = Query(None, ge=1, le=100_000, description="Stop after this many frames"),
):
    """
    Stream animation frames as Server-Sent Events.

    The first event is ``session`` carrying the stream id used by the
    hover, resize and refresh endpoints. Every following ``frame`` event is
    one ``FrameData`` JSON object. The loop is torn down and the id released
    as soon as the client disconnects or the frame limit is reached.
    """
    profiles = await service.list_public()
    animation = GraphAnimation(profiles, width, height)

    async def event_generator() -> AsyncGenerator[dict, None]:
        stream_id = streams.open(animation)
        try:
            yield {"event": "session", "data": json.dumps({"id": stream_id})}
            async with AnimationLoop(animation, fps=fps) as loop:
                async for frame in loop.frames(limit=frames):
                    if await request.is_disconnected():
                        logger.info(
                            "Graph stream %s disconnected after %d frames", stream_id, frame.index
                        )
                        break
                    yield {"event": "frame", "data": json.dumps(frame.model_dump())}
        finally:
            streams.close(stream_id)

    return EventSourceResponse(event_generator())


@router.get("/api/graph/stream/{stream_id}", response_model=GraphStreamState)
async def get_stream_state(
    stream_id: str,
    streams: Annotated[GraphStreamRegistry, Depends(get_graph_streams)],
) -> GraphStreamState:
    return _open_stream(streams, stream_id).state(stream_id)


@router.post("/api/graph/stream/{stream_id}/hover", response_model=GraphStreamState)
async def hover_stream(
    stream_id: str,
    pointer: HoverRequest,
    streams: Annotated[GraphStreamRegistry, Depends(get_graph_streams)],
) -> GraphStreamState:
    """Move the pointer; the closest node within reach becomes hovered."""
    animation = _open_stream(streams, stream_id)
    animation.hover(pointer.x, pointer.y)
    return animation.state(stream_id)


@router.delete("/api/graph/stream/{stream_id}/hover", response_model=GraphStreamState)
async def clear_stream_hover(
    stream_id: str,
    streams: Annotated[GraphStreamRegistry, Depends(get_graph_streams)],
) -> GraphStreamState:
    animation = _open_stream(streams, stream_id)
    animation.clear_hover()
    return animation.state(stream_id)


@router.post("/api/graph/stream/{stream_id}/resize", response_model=GraphStreamState)
async def resize_stream(
    stream_id: str,
    size: ResizeRequest,
    streams: Annotated[GraphStreamRegistry, Depends(get_graph_streams)],
) -> GraphStreamState:
    """Rebuild the stream's graph for a new canvas size."""
    animation = _open_stream(streams, stream_id)
    animation.resize(size.width, size.height)
    return animation.state(stream_id)


@router.post("/api/graph/stream/{stream_id}/refresh", response_model=GraphStreamState)
async def refresh_stream(
    stream_id: str,
    service: Annotated[ProfileService, Depends(get_profile_service)],
    streams: Annotated[GraphStreamRegistry, Depends(get_graph_streams)],
) -> GraphStreamState:
    """Reload public profiles and rebuild the stream's graph from them."""
    animation = _open_stream(streams, stream_id)
    animation.set_profiles(await service.list_public())
    return animation.state(stream_id)
