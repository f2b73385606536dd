"""JSON snapshot output for cc-focus.

Writes the current session list to a JSON file in XDG_RUNTIME_DIR after
every store change so that status widgets can poll it (EWW defpoll, waybar
custom modules). The file is replaced atomically so readers never see a
partial write.
"""

import json
import logging
from pathlib import Path

from .view import SessionView

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Store listener that mirrors SessionView.snapshot() to a file."""

    def __init__(self, view: SessionView, path: Path) -> None:
        """Initialize the snapshot writer.

        Args:
            view: View to snapshot
            path: JSON file to (re)write
        """
        self.view = view
        self.path = path

    def __call__(self) -> None:
        self.write()

    def write(self) -> None:
        """Write the current snapshot. Errors are logged, not raised."""
        data = self.view.snapshot().model_dump(mode="json")
        try:
            self._atomic_write(json.dumps(data, separators=(",", ":")))
        except OSError as e:
            logger.error(f"Error writing snapshot {self.path}: {e}")

    def remove(self) -> None:
        """Delete the snapshot file so widgets do not show stale sessions."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove snapshot {self.path}: {e}")

    def _atomic_write(self, content: str) -> None:
        """Write to a temp file beside the target, then rename over it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        try:
            temp_path.write_text(content)
            temp_path.replace(self.path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise
