"""Daemon lifecycle for cc-focus.

Wires one SessionStore into the tracker, reaper, view and event server, and
runs them on a single asyncio loop until shutdown is requested.
"""

import asyncio
import logging
from typing import Optional

from .config import FocusConfig
from .errors import SocketBindError
from .instance_lock import InstanceLock
from .ipc_server import EventServer
from .output import SnapshotWriter
from .reaper import SessionReaper
from .session_store import SessionStore
from .session_tracker import SessionTracker
from .view import FocusHandler, SessionView

logger = logging.getLogger(__name__)


class FocusDaemon:
    """Owns the session store and every component that touches it."""

    def __init__(
        self,
        config: FocusConfig,
        focus_handler: Optional[FocusHandler] = None,
    ) -> None:
        """Initialize the daemon.

        Args:
            config: Validated settings
            focus_handler: Terminal activation callback for SessionView.focus()
        """
        self.config = config
        self.store = SessionStore()
        self.tracker = SessionTracker(self.store, orphan_window_sec=config.orphan_window_sec)
        self.view = SessionView(self.store, focus_handler=focus_handler)
        self.reaper = SessionReaper(self.store, interval_sec=config.reap_interval_sec)
        self.server = EventServer(
            config.socket_path,
            self.tracker.process_event,
            max_message_bytes=config.max_message_bytes,
        )
        self.lock = InstanceLock(config.lock_path)
        self.snapshot_writer: Optional[SnapshotWriter] = None
        if config.snapshot_path is not None:
            self.snapshot_writer = SnapshotWriter(self.view, config.snapshot_path)

        self._shutdown_event = asyncio.Event()
        self._started = False

    async def start(self) -> bool:
        """Claim the instance lock and start serving.

        Returns:
            False if another instance is already running

        Raises:
            SocketBindError: The event socket could not be bound
        """
        if not self.lock.acquire():
            return False

        if self.snapshot_writer is not None:
            self.store.add_listener(self.snapshot_writer)
            self.snapshot_writer.write()

        try:
            await self.server.start()
        except SocketBindError:
            self._detach_snapshot_writer()
            self.lock.release()
            raise

        await self.reaper.start()
        self._started = True
        logger.info("cc-focus daemon started")
        return True

    async def stop(self) -> None:
        """Stop serving and release the socket file and instance lock."""
        if not self._started:
            return
        self._started = False
        logger.info("Shutting down...")
        await self.reaper.stop()
        await self.server.stop()
        self._detach_snapshot_writer()
        self.lock.release()

    def request_shutdown(self) -> None:
        """Wake run() so it stops the daemon."""
        self._shutdown_event.set()

    async def run(self) -> int:
        """Start, wait for shutdown, stop.

        Returns:
            Process exit code: 0 on clean exit or if already running, 1 if
            the socket could not be bound
        """
        try:
            if not await self.start():
                return 0
        except SocketBindError as e:
            logger.error(e.message, extra={"error": e.to_dict()})
            return 1

        try:
            await self._shutdown_event.wait()
        finally:
            await self.stop()
        return 0

    def _detach_snapshot_writer(self) -> None:
        if self.snapshot_writer is not None:
            self.store.remove_listener(self.snapshot_writer)
            self.snapshot_writer.remove()
