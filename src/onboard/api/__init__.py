"""Web API - OAuth login, workload page and run event streams."""

from onboard.api.app import create_app
from onboard.api.bridge import forward_to_websocket, sse_stream
from onboard.api.models import APIResponse, VersionResponse
from onboard.api.sessions import SESSION_COOKIE, Session, SessionStore

__all__ = [
    "SESSION_COOKIE",
    "APIResponse",
    "Session",
    "SessionStore",
    "VersionResponse",
    "create_app",
    "forward_to_websocket",
    "sse_stream",
]
