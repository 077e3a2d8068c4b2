"""GitHub OAuth login endpoints."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from onboard.api.dependencies import AuthDep, SessionDep, SessionsDep
from onboard.api.sessions import SESSION_COOKIE, Session, SessionStore
from onboard.auth import AuthError, new_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _home() -> RedirectResponse:
    return RedirectResponse("/", status_code=status.HTTP_302_FOUND)


def _abandon(sessions: SessionStore, session: Session) -> RedirectResponse:
    """Drop a session whose login failed and send the browser home."""
    sessions.remove(session.id)
    response = _home()
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("")
def login(sessions: SessionsDep, session: SessionDep, auth: AuthDep) -> RedirectResponse:
    """Start the OAuth flow, creating a session when the caller has none."""
    if session is None:
        session = sessions.create()
    session.state = new_state()

    response = RedirectResponse(
        auth.auth_code_url(session.state), status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(SESSION_COOKIE, session.id, httponly=True, samesite="lax")
    return response


@router.get("/callback")
def callback(
    sessions: SessionsDep,
    session: SessionDep,
    auth: AuthDep,
    state: str = "",
    code: str = "",
) -> RedirectResponse:
    """Finish the OAuth flow and remember who the session belongs to."""
    if session is None:
        logger.error("Invalid OAuth callback: no session")
        return _home()

    expected = session.state
    if not expected or state != expected:
        logger.error("Invalid OAuth state for session %s...", session.id[:6])
        if session.authenticated:
            # A stale or replayed callback must not log the user out
            return _home()
        return _abandon(sessions, session)
    session.state = ""

    try:
        token = auth.exchange_code(code)
        username = auth.username(token)
    except AuthError as e:
        logger.error("Could not authenticate user: %s", e)
        return _abandon(sessions, session)

    session.token = token
    session.username = username
    logger.info("Successfully authenticated GitHub user: %s", username)
    return RedirectResponse("/workload", status_code=status.HTTP_302_FOUND)
