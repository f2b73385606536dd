"""Pytest configuration and fixtures for cc-focus tests."""

import shutil
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest

# Add repository root to Python path BEFORE test collection
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))

from cc_focus.session_store import SessionStore  # noqa: E402
from cc_focus.session_tracker import SessionTracker  # noqa: E402


class FakeClock:
    """Manually advanced clock for deterministic timestamps."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def tracker(store, clock) -> SessionTracker:
    return SessionTracker(store, orphan_window_sec=5.0, clock=clock)


@pytest.fixture
def socket_dir() -> Generator[Path, None, None]:
    """Short temporary directory for Unix sockets (sun_path is ~108 bytes).

    Yields:
        Path to a fresh directory under /tmp
    """
    tmpdir = tempfile.mkdtemp(prefix="ccf-", dir="/tmp")
    try:
        yield Path(tmpdir)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)
