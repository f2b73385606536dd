"""
Unit tests for the session state machine.

Tests cover identity resolution, status classification, needs-input
timestamps, session_end handling, and resume orphan suppression.
"""

import pytest

from cc_focus.models import HookEvent, SessionStatus
from cc_focus.session_tracker import classify_status


def event(event_type, **fields) -> HookEvent:
    return HookEvent(event_type=event_type, **fields)


class TestClassifyStatus:
    """Test event type → status classification."""

    @pytest.mark.parametrize("event_type", ["session_start", "user_prompt", "pre_tool_use"])
    def test_working_triggers(self, event_type):
        assert classify_status(event_type) == SessionStatus.WORKING

    @pytest.mark.parametrize("event_type", ["stop", "idle_prompt", "permission_prompt"])
    def test_needs_input_triggers(self, event_type):
        assert classify_status(event_type) == SessionStatus.NEEDS_INPUT

    def test_unknown_type_defaults_to_working(self):
        assert classify_status("post_tool_use") == SessionStatus.WORKING
        assert classify_status("") == SessionStatus.WORKING


class TestIdentityResolution:
    """Test events that cannot be attributed to a session."""

    @pytest.mark.parametrize(
        "fields",
        [
            {},
            {"session_id": ""},
            {"session_id": "", "transcript_path": ""},
            {"transcript_path": "/home/u/.claude/projects/x/notes.txt"},
            {"transcript_path": "/home/u/.claude/projects/x/.jsonl"},
            {"transcript_path": "/home/u/.claude/projects/x/"},
        ],
    )
    def test_unresolvable_event_leaves_store_unchanged(self, tracker, store, fields):
        """Events without usable identity are dropped silently."""
        tracker.process_event(event("session_start", session_id="existing", cwd="/p"))
        before = store.get("existing").model_copy()

        tracker.process_event(event("stop", cwd="/p", **fields))

        assert len(store) == 1
        assert store.get("existing") == before

    def test_transcript_path_derives_id(self, tracker, store):
        tracker.process_event(
            event("user_prompt", transcript_path="/home/u/.claude/projects/p/abc-123.jsonl")
        )

        assert "abc-123" in store
        assert len(store) == 1

    def test_session_id_preferred_over_transcript(self, tracker, store):
        tracker.process_event(
            event("user_prompt", session_id="explicit", transcript_path="/x/abc-123.jsonl")
        )

        assert "explicit" in store
        assert "abc-123" not in store

    def test_unresolvable_event_does_not_notify(self, tracker, store):
        calls = []
        store.add_listener(lambda: calls.append(1))

        tracker.process_event(event("stop"))

        assert calls == []


class TestSessionCreation:
    """Test first event for an unseen session."""

    def test_create_working_session(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="s1", cwd="/work/app", pid=4242))

        session = store.get("s1")
        assert session.status == SessionStatus.WORKING
        assert session.cwd == "/work/app"
        assert session.pid == 4242
        assert session.last_event_at == clock.now
        assert session.created_at == clock.now
        assert session.needs_input_since is None

    def test_create_needs_input_session(self, tracker, store, clock):
        tracker.process_event(event("permission_prompt", session_id="s1", cwd="/p"))

        session = store.get("s1")
        assert session.status == SessionStatus.NEEDS_INPUT
        assert session.needs_input_since == clock.now

    def test_missing_cwd_defaults_to_unknown(self, tracker, store):
        tracker.process_event(event("user_prompt", session_id="s1"))

        assert store.get("s1").cwd == "unknown"

    def test_unknown_event_type_creates_working_session(self, tracker, store):
        tracker.process_event(event("notification", session_id="s1", cwd="/p"))

        assert store.get("s1").status == SessionStatus.WORKING


class TestStatusTransitions:
    """Test updates to an existing session."""

    def test_start_stop_prompt_sequence(self, tracker, store, clock):
        """session_start → stop → user_prompt toggles needs_input_since."""
        tracker.process_event(event("session_start", session_id="s1", cwd="/p"))

        stop_time = clock.advance(3)
        tracker.process_event(event("stop", session_id="s1"))
        session = store.get("s1")
        assert session.status == SessionStatus.NEEDS_INPUT
        assert session.needs_input_since == stop_time

        clock.advance(10)
        tracker.process_event(event("user_prompt", session_id="s1"))
        session = store.get("s1")
        assert session.status == SessionStatus.WORKING
        assert session.needs_input_since is None

    def test_repeated_needs_input_keeps_original_timestamp(self, tracker, store, clock):
        tracker.process_event(event("stop", session_id="s1", cwd="/p"))
        first = clock.now

        clock.advance(30)
        tracker.process_event(event("idle_prompt", session_id="s1"))

        session = store.get("s1")
        assert session.needs_input_since == first
        assert session.last_event_at == clock.now

    def test_last_event_time_refreshes(self, tracker, store, clock):
        tracker.process_event(event("user_prompt", session_id="s1", cwd="/p"))
        clock.advance(7)
        tracker.process_event(event("pre_tool_use", session_id="s1"))

        assert store.get("s1").last_event_at == clock.now

    def test_cwd_overwritten_only_when_non_empty(self, tracker, store):
        tracker.process_event(event("session_start", session_id="s1", cwd="/first"))
        tracker.process_event(event("user_prompt", session_id="s1", cwd=""))
        assert store.get("s1").cwd == "/first"

        tracker.process_event(event("user_prompt", session_id="s1", cwd="/second"))
        assert store.get("s1").cwd == "/second"

    def test_pid_overwritten_when_supplied(self, tracker, store):
        tracker.process_event(event("session_start", session_id="s1", cwd="/p", pid=100))
        tracker.process_event(event("user_prompt", session_id="s1"))
        assert store.get("s1").pid == 100

        tracker.process_event(event("user_prompt", session_id="s1", pid=200))
        assert store.get("s1").pid == 200

    def test_every_mutation_notifies(self, tracker, store):
        calls = []
        store.add_listener(lambda: calls.append(1))

        tracker.process_event(event("session_start", session_id="s1", cwd="/p"))
        tracker.process_event(event("stop", session_id="s1"))
        tracker.process_event(event("session_end", session_id="s1"))

        assert len(calls) == 3


class TestSessionEnd:
    """Test session_end handling."""

    def test_session_end_removes_session(self, tracker, store):
        tracker.process_event(event("session_start", session_id="s1", cwd="/p"))
        tracker.process_event(event("session_end", session_id="s1"))

        assert "s1" not in store

    def test_session_end_is_idempotent(self, tracker, store):
        tracker.process_event(event("session_start", session_id="s1", cwd="/p"))

        tracker.process_event(event("session_end", session_id="s1"))
        tracker.process_event(event("session_end", session_id="s1"))

        assert "s1" not in store
        assert len(store) == 0

    def test_session_end_for_unseen_id_creates_nothing(self, tracker, store):
        tracker.process_event(event("session_end", session_id="ghost", cwd="/p"))

        assert len(store) == 0

    def test_session_end_by_transcript_path(self, tracker, store):
        tracker.process_event(event("session_start", transcript_path="/t/abc.jsonl", cwd="/p"))
        tracker.process_event(event("session_end", transcript_path="/t/abc.jsonl"))

        assert len(store) == 0


class TestResumeOrphanSuppression:
    """Test removal of the wrapper session left behind by a resume."""

    def test_resume_removes_recent_same_cwd_session(self, tracker, store, clock):
        tracker.process_event(
            event("session_start", session_id="A", cwd="/p", source="startup")
        )
        clock.advance(2)
        tracker.process_event(
            event("session_start", session_id="B", cwd="/p", source="resume")
        )

        assert "A" not in store
        assert "B" in store
        assert len(store) == 1

    def test_resume_keeps_sessions_outside_window(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="A", cwd="/p"))
        clock.advance(6)
        tracker.process_event(
            event("session_start", session_id="B", cwd="/p", source="resume")
        )

        assert "A" in store
        assert "B" in store

    def test_resume_keeps_sessions_in_other_cwd(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="A", cwd="/other"))
        clock.advance(1)
        tracker.process_event(
            event("session_start", session_id="B", cwd="/p", source="resume")
        )

        assert "A" in store

    def test_resume_does_not_remove_itself(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="B", cwd="/p"))
        clock.advance(1)
        tracker.process_event(
            event("session_start", session_id="B", cwd="/p", source="resume")
        )

        assert "B" in store

    def test_resume_removes_all_recent_orphans(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="A1", cwd="/p"))
        tracker.process_event(event("session_start", session_id="A2", cwd="/p"))
        clock.advance(1)
        tracker.process_event(
            event("session_start", session_id="B", cwd="/p", source="resume")
        )

        assert [s.session_id for s in store.sessions()] == ["B"]

    def test_startup_source_does_not_suppress(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="A", cwd="/p"))
        clock.advance(1)
        tracker.process_event(
            event("session_start", session_id="B", cwd="/p", source="startup")
        )

        assert "A" in store
        assert "B" in store

    def test_resume_flag_on_other_event_type_ignored(self, tracker, store, clock):
        tracker.process_event(event("session_start", session_id="A", cwd="/p"))
        clock.advance(1)
        tracker.process_event(event("user_prompt", session_id="B", cwd="/p", source="resume"))

        assert "A" in store

    def test_orphan_window_is_configurable(self, store, clock):
        from cc_focus.session_tracker import SessionTracker

        wide = SessionTracker(store, orphan_window_sec=60.0, clock=clock)
        wide.process_event(event("session_start", session_id="A", cwd="/p"))
        clock.advance(30)
        wide.process_event(event("session_start", session_id="B", cwd="/p", source="resume"))

        assert "A" not in store
