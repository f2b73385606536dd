"""Runtime configuration for cc-focus.

Defaults come from constants.py, may be overridden by environment variables,
and finally by command-line flags (see __main__.py).

Environment Variables:
    CC_FOCUS_SOCKET         Event socket path
    CC_FOCUS_LOCK_FILE      Instance marker path
    CC_FOCUS_SNAPSHOT       Snapshot JSON path
    CC_FOCUS_ORPHAN_WINDOW  Orphan suppression window in seconds (default 5)
    CC_FOCUS_REAP_INTERVAL  Dead-process sweep interval in seconds (default 30)
    CC_FOCUS_MAX_MESSAGE    Per-message size limit in bytes (default 1 MiB)
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from .constants import (
    MAX_MESSAGE_BYTES,
    ORPHAN_WINDOW_SEC,
    REAP_INTERVAL_SEC,
    ConfigPaths,
)


class FocusConfig(BaseModel):
    """Validated daemon settings."""

    socket_path: Path = Field(default=ConfigPaths.SOCKET_PATH, description="Event socket path")
    lock_path: Path = Field(default=ConfigPaths.LOCK_PATH, description="Instance marker path")
    snapshot_path: Optional[Path] = Field(
        default=ConfigPaths.SNAPSHOT_PATH, description="Snapshot JSON path (None disables)"
    )
    orphan_window_sec: float = Field(
        default=ORPHAN_WINDOW_SEC, gt=0, description="Orphan suppression window"
    )
    reap_interval_sec: float = Field(
        default=REAP_INTERVAL_SEC, gt=0, description="Seconds between liveness sweeps"
    )
    max_message_bytes: int = Field(
        default=MAX_MESSAGE_BYTES, gt=0, description="Per-message size limit"
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FocusConfig":
        """Build a config from CC_FOCUS_* environment variables.

        Args:
            environ: Mapping to read (defaults to os.environ)

        Raises:
            pydantic.ValidationError: A variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for field_name, var in (
            ("socket_path", "CC_FOCUS_SOCKET"),
            ("lock_path", "CC_FOCUS_LOCK_FILE"),
            ("snapshot_path", "CC_FOCUS_SNAPSHOT"),
            ("orphan_window_sec", "CC_FOCUS_ORPHAN_WINDOW"),
            ("reap_interval_sec", "CC_FOCUS_REAP_INTERVAL"),
            ("max_message_bytes", "CC_FOCUS_MAX_MESSAGE"),
        ):
            value = env.get(var)
            if value:
                overrides[field_name] = value
        return cls(**overrides)
