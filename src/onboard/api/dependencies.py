"""FastAPI dependencies for dependency injection.

Everything a request needs hangs off ``app.state``, set up by ``create_app``.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from onboard.api.sessions import SESSION_COOKIE, Session, SessionStore
from onboard.auth import OAuthProvider
from onboard.config import SetupScheme
from onboard.tracker.client import TrackerClient

ClientFactory = Callable[[str], TrackerClient]


def get_sessions(conn: HTTPConnection) -> SessionStore:
    """Dependency that provides the session store."""
    return conn.app.state.sessions


def get_auth(conn: HTTPConnection) -> OAuthProvider:
    """Dependency that provides the OAuth provider."""
    return conn.app.state.auth


def get_setup(conn: HTTPConnection) -> SetupScheme:
    """Dependency that provides the loaded setup scheme."""
    return conn.app.state.setup


def get_client_factory(conn: HTTPConnection) -> ClientFactory:
    """Dependency that builds tracker clients from access tokens."""
    return conn.app.state.client_factory


SessionsDep = Annotated[SessionStore, Depends(get_sessions)]
AuthDep = Annotated[OAuthProvider, Depends(get_auth)]
SetupDep = Annotated[SetupScheme, Depends(get_setup)]
ClientFactoryDep = Annotated[ClientFactory, Depends(get_client_factory)]


def get_session(conn: HTTPConnection, sessions: SessionsDep) -> Session | None:
    """Dependency that provides the caller's session, if any."""
    return sessions.get(conn.cookies.get(SESSION_COOKIE))


SessionDep = Annotated[Session | None, Depends(get_session)]
