"""Single-instance guard for the cc-focus daemon.

A marker file records the pid of the running daemon. A second instance that
finds a live pid in the marker exits without touching the socket.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import psutil

from .constants import MAX_PID

logger = logging.getLogger(__name__)


class InstanceLock:
    """Pid marker file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.pid = os.getpid()
        self._held = False

    def read_owner(self) -> Optional[int]:
        """Return the pid recorded in the marker, or None if absent or unreadable."""
        try:
            owner = int(self.path.read_text().strip())
        except (FileNotFoundError, ValueError):
            return None
        except OSError as e:
            logger.warning(f"Cannot read instance marker {self.path}: {e}")
            return None
        if not 0 < owner <= MAX_PID:
            return None
        return owner

    def acquire(self) -> bool:
        """Claim the marker.

        Returns:
            False if another live process holds it, True once our pid is written
        """
        owner = self.read_owner()
        if owner is not None and owner != self.pid and psutil.pid_exists(owner):
            logger.info(f"Another instance is already running (pid {owner})")
            return False

        if owner is not None and owner != self.pid:
            logger.info(f"Replacing stale instance marker (pid {owner})")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(f"{self.pid}\n")
        self._held = True
        return True

    def release(self) -> None:
        """Remove the marker if it still records our pid."""
        if not self._held:
            return
        self._held = False
        if self.read_owner() != self.pid:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove instance marker {self.path}: {e}")
