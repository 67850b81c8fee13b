"""Minimal session storage for the Game Clipper runtime.

This is an in-memory dict of session_id -> Session. Nothing is written to
disk: every OBS session starts from a fresh query of OBS state, so there is
nothing worth replaying after a restart.

At most one session is "current" (the one bound to the live websocket);
closed sessions are kept for inspection until the process exits.
"""

from typing import Dict, List, Optional
from datetime import datetime, timezone
from uuid import uuid4

from ..models.session_models import Session, SessionState


class SessionStore:
    """In-memory session store."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._current_id: Optional[str] = None

    def create_session(self, game: Optional[str] = None) -> Session:
        """Create a new session, make it current and return it.

        A newly created session starts with:
        - a random UUID as `session_id`
        - the provided `game` (or None)
        - state IDENTIFIED (set by the Session model default)
        """
        session = Session(session_id=str(uuid4()), game=game)
        self._sessions[session.session_id] = session
        self._current_id = session.session_id
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    @property
    def current(self) -> Optional[Session]:
        if self._current_id is None:
            return None
        return self._sessions.get(self._current_id)

    def save_session(self, session: Session) -> None:
        self._sessions[session.session_id] = session

    def close_session(self, session_id: str) -> Optional[Session]:
        """Mark a session DISCONNECTED and drop it as the current one."""
        session = self._sessions.get(session_id)
        if session is None:
            return None

        session.state = SessionState.DISCONNECTED
        session.closed_at = datetime.now(timezone.utc).isoformat()
        if self._current_id == session_id:
            self._current_id = None
        return session

    def list_sessions(self) -> List[Session]:
        return list(self._sessions.values())
