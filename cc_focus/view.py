"""Read-only session view for status widgets.

Consumers (status bar menus, EWW widgets) never touch the store directly.
They register a change listener on the store and call SessionView.snapshot()
to rebuild their display. Terminal focus is delegated: focus() resolves a
session to its pid and hands that to whatever FocusHandler the consumer
installed.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .models import Session, SessionList, SessionListItem, SessionStatus
from .session_store import SessionStore
from .session_tracker import Clock, utcnow

logger = logging.getLogger(__name__)

FocusHandler = Callable[[int], None]

STATUS_DOTS = {
    SessionStatus.NEEDS_INPUT: "\U0001F534",  # red circle
    SessionStatus.WORKING: "\U0001F7E2",  # green circle
}


def shorten_path(path: str, home: Optional[str] = None) -> str:
    """Shorten a cwd for menu display.

    Replaces the home directory with ~ and keeps only the last two components
    of paths deeper than three.

    Args:
        path: Absolute working directory
        home: Home directory to abbreviate (defaults to the current user's)

    Returns:
        Display path, e.g. "~/src/app" or ".../app/backend"
    """
    if home is None:
        home = str(Path.home())
    home = home.rstrip("/")
    shortened = path
    if home and (path == home or path.startswith(home + "/")):
        shortened = "~" + path[len(home):]
    components = [c for c in shortened.split("/") if c]
    if len(components) > 3:
        return ".../" + "/".join(components[-2:])
    return shortened


def format_idle(seconds: int) -> str:
    """Format an idle duration as "Idle for 3m 4s" or "Idle for 9s"."""
    minutes, secs = divmod(max(seconds, 0), 60)
    if minutes > 0:
        return f"Idle for {minutes}m {secs}s"
    return f"Idle for {secs}s"


class SessionView:
    """Snapshot and focus accessors over a SessionStore."""

    def __init__(
        self,
        store: SessionStore,
        focus_handler: Optional[FocusHandler] = None,
        home: Optional[str] = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the view.

        Args:
            store: Session table to read
            focus_handler: Called with a pid to bring its terminal forward
            home: Home directory for path shortening (defaults to Path.home())
            clock: Current-time source for idle durations
        """
        self.store = store
        self.focus_handler = focus_handler
        self.home = home
        self.clock = clock

    def snapshot(self, now: Optional[datetime] = None) -> SessionList:
        """Build the current session list.

        Sessions waiting for input come first, then by cwd.

        Args:
            now: Reference time for idle durations (defaults to the clock)

        Returns:
            SessionList with one display item per session
        """
        now = now or self.clock()
        ordered = sorted(
            self.store.sessions(),
            key=lambda s: (s.status != SessionStatus.NEEDS_INPUT, s.cwd),
        )
        items = [self._to_item(session, now) for session in ordered]
        return SessionList(
            sessions=items,
            timestamp=int(now.timestamp()),
            has_needs_input=any(item.status == SessionStatus.NEEDS_INPUT for item in items),
        )

    def _to_item(self, session: Session, now: datetime) -> SessionListItem:
        display = f"{STATUS_DOTS[session.status]} {shorten_path(session.cwd, self.home)}"
        idle_seconds = None
        if session.status == SessionStatus.NEEDS_INPUT and session.needs_input_since:
            idle_seconds = int((now - session.needs_input_since).total_seconds())
            display += f" - {format_idle(idle_seconds)}"
        return SessionListItem(
            session_id=session.session_id,
            cwd=session.cwd,
            status=session.status,
            display=display,
            pid=session.pid,
            idle_seconds=idle_seconds,
        )

    def focus_target(self, session_id: str) -> Optional[int]:
        """Return the pid whose terminal should be focused for a session."""
        session = self.store.get(session_id)
        return session.pid if session else None

    def focus(self, session_id: str) -> bool:
        """Ask the focus handler to bring the session's terminal forward.

        Returns:
            True if a handler was called, False if the session or its pid is
            unknown or no handler is installed
        """
        pid = self.focus_target(session_id)
        if pid is None:
            logger.debug(f"No pid known for session {session_id}, cannot focus")
            return False
        if self.focus_handler is None:
            logger.debug("No focus handler installed")
            return False
        self.focus_handler(pid)
        return True
