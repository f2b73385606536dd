"""In-memory session table for cc-focus.

The store is the only shared mutable state in the daemon. It is owned by a
single asyncio loop: SessionTracker and SessionReaper mutate it from
synchronous code that never awaits, so no lock is taken.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from .models import Session

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class SessionStore:
    """Table of effective session id -> Session plus a change hook."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._listeners: List[ChangeListener] = []

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Optional[Session]:
        """Get session by id.

        Args:
            session_id: Effective session id

        Returns:
            Session or None if not tracked
        """
        return self._sessions.get(session_id)

    def sessions(self) -> List[Session]:
        """Return a list of all tracked sessions (safe to iterate while mutating)."""
        return list(self._sessions.values())

    def put(self, session: Session) -> None:
        """Insert or replace a session record."""
        self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> Optional[Session]:
        """Remove a session.

        Args:
            session_id: Effective session id

        Returns:
            The removed Session, or None if it was not tracked
        """
        return self._sessions.pop(session_id, None)

    def remove_many(self, session_ids: Iterable[str]) -> List[Session]:
        """Remove several sessions, returning the ones that were present."""
        removed = []
        for session_id in session_ids:
            session = self._sessions.pop(session_id, None)
            if session is not None:
                removed.append(session)
        return removed

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback fired after every store mutation.

        The callback takes no arguments; it should re-read the store.
        """
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_changed(self) -> None:
        """Tell every listener the store changed.

        A failing listener is logged and does not stop the others.
        """
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Session store listener {listener!r} failed: {e}", exc_info=True)
