"""Session state machine for cc-focus.

Turns decoded hook events into SessionStore mutations.

State Machine:
    (new) → WORKING      on session_start, user_prompt, pre_tool_use, unknown types
    (new) → NEEDS_INPUT  on stop, idle_prompt, permission_prompt
    WORKING ⇄ NEEDS_INPUT by the same classification
    Any → removed        on session_end, orphan suppression, or reaper sweep

Resume handling:
    Resuming a session makes the assistant fire two session_start events for
    the same cwd: one "startup" for a wrapper session that never sends
    session_end, then one "resume" for the real session. On a "resume" start,
    every other session in that cwd whose last event is younger than the
    orphan window is dropped.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List

from .constants import ORPHAN_WINDOW_SEC, UNKNOWN_CWD
from .errors import UnresolvableIdentityError
from .models import EventTypes, HookEvent, Session, SessionStatus
from .session_store import SessionStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def classify_status(event_type: str) -> SessionStatus:
    """Map an event type to the status it implies.

    Unrecognized types are treated as activity.
    """
    if event_type in EventTypes.NEEDS_INPUT_TRIGGERS:
        return SessionStatus.NEEDS_INPUT
    return SessionStatus.WORKING


class SessionTracker:
    """Applies hook events to a SessionStore.

    process_event() is synchronous: it runs to completion on the event loop
    thread, which is what serializes store access.
    """

    def __init__(
        self,
        store: SessionStore,
        orphan_window_sec: float = ORPHAN_WINDOW_SEC,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the session tracker.

        Args:
            store: Session table to mutate
            orphan_window_sec: Age limit for sessions removed by a resume start
            clock: Returns the current aware datetime (injectable for tests)
        """
        self.store = store
        self.orphan_window = timedelta(seconds=orphan_window_sec)
        self.clock = clock

    def process_event(self, event: HookEvent) -> None:
        """Apply one event to the store and notify listeners.

        Args:
            event: Decoded hook event
        """
        try:
            session_id = event.require_session_id()
        except UnresolvableIdentityError as e:
            logger.debug(f"Dropping event: {e.message}")
            return

        logger.debug(
            f"event={event.event_type} session={session_id} cwd={event.cwd or '(none)'}"
        )

        if event.event_type == EventTypes.SESSION_END:
            if self.store.remove(session_id) is not None:
                logger.info(f"Session {session_id} ended")
            self.store.notify_changed()
            return

        now = self.clock()

        if (
            event.event_type == EventTypes.SESSION_START
            and event.source == EventTypes.SOURCE_RESUME
        ):
            self._suppress_orphans(session_id, event.cwd or "", now)

        status = classify_status(event.event_type)
        session = self.store.get(session_id)

        if session is None:
            session = Session(
                session_id=session_id,
                cwd=event.cwd or UNKNOWN_CWD,
                status=status,
                created_at=now,
                last_event_at=now,
                needs_input_since=now if status == SessionStatus.NEEDS_INPUT else None,
                pid=event.pid,
            )
            self.store.put(session)
            logger.info(
                f"Created session {session_id} ({status.value}, cwd={session.cwd}, pid={session.pid})"
            )
        else:
            old_status = session.status
            if status == SessionStatus.NEEDS_INPUT and old_status != SessionStatus.NEEDS_INPUT:
                session.needs_input_since = now
            elif status == SessionStatus.WORKING:
                session.needs_input_since = None
            session.status = status
            session.last_event_at = now
            if event.cwd:
                session.cwd = event.cwd
            if event.pid is not None:
                session.pid = event.pid
            if old_status != status:
                logger.info(f"Session {session_id}: {old_status.value} → {status.value}")

        self.store.notify_changed()

    def _suppress_orphans(self, session_id: str, cwd: str, now: datetime) -> List[str]:
        """Remove recent sibling sessions in cwd left behind by a resume.

        Returns:
            Ids of removed sessions
        """
        orphan_ids = [
            other.session_id
            for other in self.store.sessions()
            if other.session_id != session_id
            and other.cwd == cwd
            and now - other.last_event_at < self.orphan_window
        ]
        for removed in self.store.remove_many(orphan_ids):
            logger.info(
                f"Removed orphan session {removed.session_id} superseded by resumed {session_id}"
            )
        return orphan_ids
