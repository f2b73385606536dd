"""Centralized paths and timing constants for cc-focus.

Single source of truth for the socket, marker and snapshot locations and for
the timing windows used by the session state machine and the reaper.
"""

import os
from pathlib import Path
from typing import Final

# Orphan suppression: a "resume" session_start removes other sessions in the
# same cwd whose last event is younger than this.
ORPHAN_WINDOW_SEC: Final[float] = 5.0

# Dead-process sweep interval
REAP_INTERVAL_SEC: Final[float] = 30.0

# Read chunk size for IPC connections
READ_CHUNK_SIZE: Final[int] = 4096

# Pending line limit per connection (1 MiB)
MAX_MESSAGE_BYTES: Final[int] = 1024 * 1024

# cwd recorded for sessions that never reported one
UNKNOWN_CWD: Final[str] = "unknown"

TRANSCRIPT_SUFFIX: Final[str] = ".jsonl"

# Largest value a pid_t can hold
MAX_PID: Final[int] = 2**31 - 1


class ConfigPaths:
    """Per-user filesystem locations.

    Computed once at import time from the current uid and XDG_RUNTIME_DIR.
    """

    UID: Final[int] = os.getuid()
    TMP_DIR: Final[Path] = Path("/tmp")
    RUNTIME_DIR: Final[Path] = Path(os.environ.get("XDG_RUNTIME_DIR", "/tmp"))

    SOCKET_PATH: Final[Path] = TMP_DIR / f"cc-focus-{UID}.sock"
    LOCK_PATH: Final[Path] = TMP_DIR / f"cc-focus-{UID}.pid"
    SNAPSHOT_PATH: Final[Path] = RUNTIME_DIR / "cc-focus-sessions.json"
