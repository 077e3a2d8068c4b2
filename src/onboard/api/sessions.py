"""In-memory browser sessions."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

SESSION_COOKIE = "onboard_session"
DEFAULT_SESSION_TTL = 8 * 60 * 60  # seconds since last use


@dataclass
class Session:
    """A browser session going through the OAuth flow."""

    id: str
    state: str = ""
    username: str | None = None
    token: str | None = None
    last_seen: float = field(default=0.0, repr=False)

    @property
    def authenticated(self) -> bool:
        return bool(self.token and self.username)


class SessionStore:
    """Sessions keyed by their cookie value.

    Sessions live only as long as the process; nothing is persisted. A
    session that goes unused for ``ttl`` seconds expires and is dropped the
    next time the store is touched.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_SESSION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def _expired(self, session: Session, now: float) -> bool:
        return now - session.last_seen > self.ttl

    def _evict(self, now: float) -> None:
        stale = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.debug("Evicted %d expired session(s)", len(stale))

    def create(self) -> Session:
        now = self._clock()
        session = Session(id=secrets.token_urlsafe(24), last_seen=now)
        with self._lock:
            self._evict(now)
            self._sessions[session.id] = session
        logger.debug("Created session %s...", session.id[:6])
        return session

    def get(self, session_id: str | None) -> Session | None:
        """Look up a live session and mark it as used."""
        if not session_id:
            return None
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if self._expired(session, now):
                del self._sessions[session_id]
                return None
            session.last_seen = now
            return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
