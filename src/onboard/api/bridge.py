"""Transport bridge between a run's event stream and a remote peer.

Runs are plain synchronous iterators; the bridge pulls them from a worker
thread, forwards each event to the peer, and turns a peer disconnect into
the run's cancellation signal.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from typing import TYPE_CHECKING

from starlette.concurrency import iterate_in_threadpool
from starlette.websockets import WebSocketDisconnect, WebSocketState

if TYPE_CHECKING:
    import threading
    from collections.abc import AsyncGenerator, Iterator

    from starlette.websockets import WebSocket

    from onboard.workflow.events import Event

logger = logging.getLogger(__name__)


def _close(events: Iterator[Event]) -> None:
    # A generator still stepping in a worker thread cannot be closed; its
    # cancel signal stops it before the next event instead.
    if inspect.isgenerator(events) and inspect.getgeneratorstate(events) == inspect.GEN_RUNNING:
        return
    close = getattr(events, "close", None)
    if close is not None:
        close()


async def _watch_disconnect(websocket: WebSocket, cancel: threading.Event) -> None:
    """Drain incoming messages; cancel the run once the peer goes away."""
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("Peer disconnected")
                break
            logger.info("Received: %s", message.get("text") or message.get("bytes"))
    finally:
        cancel.set()


async def forward_to_websocket(
    websocket: WebSocket,
    events: Iterator[Event],
    cancel: threading.Event,
) -> int:
    """Send a run's events to a WebSocket peer as JSON messages.

    Forwarding stops when the run's stream ends or the peer disconnects,
    whichever comes first. A disconnect sets ``cancel`` so the run stops
    before its next event.

    Args:
        websocket: An accepted WebSocket.
        events: The run's event iterator.
        cancel: The run's cancellation signal.

    Returns:
        Number of events delivered.
    """
    sent = 0
    watcher = asyncio.create_task(_watch_disconnect(websocket, cancel))
    try:
        async for event in iterate_in_threadpool(events):
            if cancel.is_set():
                _close(events)
                break
            try:
                await websocket.send_json(event.to_dict())
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.info("Could not deliver event, peer is gone: %s", e)
                cancel.set()
                _close(events)
                break
            sent += 1
    except asyncio.CancelledError:
        cancel.set()
        raise
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
    logger.info("Forwarded %d event(s)", sent)
    return sent


async def close_websocket(websocket: WebSocket, code: int = 1000, reason: str = "") -> None:
    """Close the WebSocket unless either side already has."""
    if (
        websocket.client_state is WebSocketState.CONNECTED
        and websocket.application_state is WebSocketState.CONNECTED
    ):
        await websocket.close(code=code, reason=reason)


async def sse_stream(events: Iterator[Event], cancel: threading.Event) -> AsyncGenerator[str, None]:
    """Render a run's events as Server-Sent Events.

    When the client disconnects the response task is cancelled; the run is
    then cancelled and closed, releasing its tracker client.
    """
    try:
        async for event in iterate_in_threadpool(events):
            yield event.to_sse()
    except asyncio.CancelledError:
        logger.info("SSE client disconnected")
        raise
    finally:
        cancel.set()
        _close(events)
