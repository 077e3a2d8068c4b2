"""Workload page and the run event streams (WebSocket and SSE)."""

import logging
import threading
from collections.abc import Iterator
from uuid import uuid4

from fastapi import APIRouter, WebSocket, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from onboard.api.bridge import close_websocket, forward_to_websocket, sse_stream
from onboard.api.dependencies import ClientFactory, ClientFactoryDep, SessionDep, SetupDep
from onboard.api.models import APIResponse
from onboard.api.pages import workload_page
from onboard.config import SetupScheme
from onboard.reconcile import IdentityResolutionError
from onboard.tracker.client import TrackerClient
from onboard.workflow import Event, run_workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workload", tags=["workload"])


def _closing(events: Iterator[Event], client: TrackerClient) -> Iterator[Event]:
    try:
        yield from events
    finally:
        client.close()


def start_run(
    setup: SetupScheme,
    username: str,
    token: str,
    client_factory: ClientFactory,
    cancel: threading.Event,
) -> Iterator[Event]:
    """Start a run for an authenticated user.

    The tracker client is closed once the returned iterator finishes.

    Raises:
        IdentityResolutionError: If the session's user cannot be resolved.
    """
    client = client_factory(token)
    try:
        events = run_workflow(
            setup.workflow_spec(),
            username,
            client,
            run_id=str(uuid4()),
            cancel=cancel,
        )
    except Exception:
        client.close()
        raise
    return _closing(events, client)


@router.get("", response_class=HTMLResponse, response_model=None)
def workload(session: SessionDep, setup: SetupDep) -> HTMLResponse | RedirectResponse:
    """Page that opens the run socket for an authenticated user."""
    if session is None or not session.authenticated:
        logger.error("User not set up correctly")
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    return HTMLResponse(workload_page(session.username or "", setup.workflow_spec()))


@router.websocket("/socket")
async def workload_socket(
    websocket: WebSocket,
    session: SessionDep,
    setup: SetupDep,
    client_factory: ClientFactoryDep,
) -> None:
    """Run the workload and push its events to the socket as JSON."""
    if session is None or not session.authenticated:
        logger.error("User not set up correctly")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    cancel = threading.Event()
    try:
        events = await run_in_threadpool(
            start_run, setup, session.username, session.token, client_factory, cancel
        )
    except IdentityResolutionError as e:
        logger.error("Could not start run for %s: %s", session.username, e)
        await close_websocket(
            websocket, code=status.WS_1011_INTERNAL_ERROR, reason="Failed to resolve user"
        )
        return

    await forward_to_websocket(websocket, events, cancel)
    logger.info("The job for %s has completed", session.username)
    await close_websocket(websocket)


@router.get("/stream", response_model=None)
async def workload_stream(
    session: SessionDep,
    setup: SetupDep,
    client_factory: ClientFactoryDep,
) -> StreamingResponse | JSONResponse:
    """Run the workload and stream its events as Server-Sent Events."""
    if session is None or not session.authenticated:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=APIResponse[None](data=None, error="Not authenticated").model_dump(),
        )

    cancel = threading.Event()
    # IdentityResolutionError is mapped to a response by the app's handler
    events = await run_in_threadpool(
        start_run, setup, session.username, session.token, client_factory, cancel
    )

    return StreamingResponse(
        sse_stream(events, cancel),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
