"""
Unit tests for the snapshot JSON writer.
"""

import json

from cc_focus.models import HookEvent
from cc_focus.output import SnapshotWriter
from cc_focus.view import SessionView


class TestSnapshotWriter:
    """Test SnapshotWriter as a store listener."""

    def test_writes_on_store_change(self, tmp_path, tracker, store, clock):
        path = tmp_path / "runtime" / "cc-focus-sessions.json"
        writer = SnapshotWriter(SessionView(store, clock=clock), path)
        store.add_listener(writer)

        tracker.process_event(HookEvent(event_type="stop", session_id="s1", cwd="/p", pid=7))

        data = json.loads(path.read_text())
        assert data["type"] == "session_list"
        assert data["has_needs_input"] is True
        assert data["sessions"][0]["session_id"] == "s1"
        assert data["sessions"][0]["pid"] == 7
        assert not path.with_suffix(".tmp").exists()

    def test_rewrites_after_removal(self, tmp_path, tracker, store, clock):
        path = tmp_path / "sessions.json"
        writer = SnapshotWriter(SessionView(store, clock=clock), path)
        store.add_listener(writer)

        tracker.process_event(HookEvent(event_type="session_start", session_id="s1", cwd="/p"))
        tracker.process_event(HookEvent(event_type="session_end", session_id="s1"))

        assert json.loads(path.read_text())["sessions"] == []

    def test_write_error_is_logged_not_raised(self, tmp_path, store, clock, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("")
        writer = SnapshotWriter(SessionView(store, clock=clock), blocker / "sessions.json")

        writer.write()

        assert "Error writing snapshot" in caplog.text

    def test_remove(self, tmp_path, store, clock):
        path = tmp_path / "sessions.json"
        writer = SnapshotWriter(SessionView(store, clock=clock), path)
        writer.write()
        assert path.exists()

        writer.remove()
        writer.remove()

        assert not path.exists()
