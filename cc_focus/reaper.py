"""Dead-session reaper for cc-focus.

Sessions that crash or are killed never send session_end. The reaper
periodically probes the pid each session reported and drops sessions whose
process is gone. Sessions that never reported a pid are left alone; they are
removed only by session_end or orphan suppression.
"""

import asyncio
import logging
from typing import List, Optional

import psutil

from .constants import REAP_INTERVAL_SEC
from .session_store import SessionStore

logger = logging.getLogger(__name__)


def process_alive(pid: int) -> bool:
    """Check whether a process exists without signalling it.

    A pid the OS already reaped reads as dead. A recycled pid reads as alive,
    which only delays removal. A pid too large for the OS reads as dead.
    """
    try:
        return psutil.pid_exists(pid)
    except OverflowError:
        return False


class SessionReaper:
    """Periodic liveness sweep over the session store."""

    def __init__(
        self,
        store: SessionStore,
        interval_sec: float = REAP_INTERVAL_SEC,
    ) -> None:
        """Initialize the reaper.

        Args:
            store: Session table to sweep
            interval_sec: Seconds between sweeps
        """
        self.store = store
        self.interval_sec = interval_sec
        self._running = False
        self._reap_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start the sweep loop."""
        self._running = True
        self._reap_task = asyncio.create_task(self._reap_loop())
        logger.info(f"Session reaper started (interval={self.interval_sec}s)")

    async def stop(self) -> None:
        """Stop the sweep loop."""
        self._running = False
        if self._reap_task:
            self._reap_task.cancel()
            try:
                await self._reap_task
            except asyncio.CancelledError:
                pass
            self._reap_task = None
        logger.info("Session reaper stopped")

    async def _reap_loop(self) -> None:
        """Sleep, sweep, repeat."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_sec)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Session reaper error: {e}", exc_info=True)

    def sweep(self) -> List[str]:
        """Remove sessions whose process has exited.

        Returns:
            Ids of removed sessions
        """
        dead_ids = [
            session.session_id
            for session in self.store.sessions()
            if session.pid is not None and not process_alive(session.pid)
        ]

        removed = self.store.remove_many(dead_ids)
        for session in removed:
            logger.info(f"Reaped session {session.session_id} (pid {session.pid} exited)")

        if removed:
            self.store.notify_changed()
        return [session.session_id for session in removed]
