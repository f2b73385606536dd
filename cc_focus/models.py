"""Pydantic models for cc-focus.

This module defines the hook event wire format, the in-memory session record,
and the snapshot models handed to read-only consumers (status widgets).
"""

from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import MAX_PID, TRANSCRIPT_SUFFIX
from .errors import MalformedMessageError, UnresolvableIdentityError


class SessionStatus(str, Enum):
    """Session status as shown to the user."""

    WORKING = "working"
    NEEDS_INPUT = "needsInput"


class EventTypes:
    """Known hook event types.

    Only the needs-input triggers are listed as a set; every other type,
    known or not, is classified as working.
    """

    SESSION_START = "session_start"
    SESSION_END = "session_end"
    USER_PROMPT = "user_prompt"
    PRE_TOOL_USE = "pre_tool_use"
    STOP = "stop"
    IDLE_PROMPT = "idle_prompt"
    PERMISSION_PROMPT = "permission_prompt"

    # session_start source that marks a resumed session
    SOURCE_RESUME = "resume"

    NEEDS_INPUT_TRIGGERS = {
        STOP,
        IDLE_PROMPT,
        PERMISSION_PROMPT,
    }


class HookEvent(BaseModel):
    """One event line sent by an assistant hook.

    Unknown fields are ignored. Everything except event_type is optional.
    """

    event_type: str = Field(description="Hook event type (session_start, stop, ...)")
    session_id: Optional[str] = Field(default=None, description="Assistant session id")
    cwd: Optional[str] = Field(default=None, description="Session working directory")
    transcript_path: Optional[str] = Field(
        default=None, description="Transcript file; its stem is the fallback session id"
    )
    source: Optional[str] = Field(
        default=None, description="session_start origin (startup, resume, ...)"
    )
    pid: Optional[int] = Field(default=None, description="Owning assistant process id")

    @field_validator("pid")
    @classmethod
    def _drop_invalid_pid(cls, value: Optional[int]) -> Optional[int]:
        # 0 and negative pids address process groups, not a process
        if value is not None and not 0 < value <= MAX_PID:
            return None
        return value

    @property
    def resolved_session_id(self) -> Optional[str]:
        """Effective session id.

        Prefers session_id; falls back to the transcript file name with the
        .jsonl suffix removed (transcripts live at .../<session-uuid>.jsonl).
        """
        if self.session_id:
            return self.session_id
        if self.transcript_path:
            filename = PurePosixPath(self.transcript_path).name
            if filename.endswith(TRANSCRIPT_SUFFIX):
                stem = filename[: -len(TRANSCRIPT_SUFFIX)]
                if stem:
                    return stem
        return None

    def require_session_id(self) -> str:
        """Return the effective session id or raise UnresolvableIdentityError."""
        session_id = self.resolved_session_id
        if session_id is None:
            raise UnresolvableIdentityError(self.event_type)
        return session_id


def decode_event(raw: bytes) -> HookEvent:
    """Decode one wire message into a HookEvent.

    Args:
        raw: A single message without its newline terminator

    Returns:
        Parsed HookEvent

    Raises:
        MalformedMessageError: Bytes are not a UTF-8 JSON object of the event shape
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedMessageError(f"invalid UTF-8: {e.reason}", raw) from e

    try:
        return HookEvent.model_validate_json(text)
    except ValidationError as e:
        raise MalformedMessageError(
            f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}", raw
        ) from e


class Session(BaseModel):
    """A tracked assistant session.

    Owned by SessionStore and mutated in place by SessionTracker.
    """

    session_id: str = Field(description="Effective session id (immutable key)")
    cwd: str = Field(description="Last known working directory")
    status: SessionStatus = Field(description="Current status")
    created_at: datetime = Field(description="When the session was first seen")
    last_event_at: datetime = Field(description="When the last accepted event arrived")
    needs_input_since: Optional[datetime] = Field(
        default=None, description="Set while status is needsInput"
    )
    pid: Optional[int] = Field(default=None, description="Owning process id, if reported")


class SessionListItem(BaseModel):
    """Session summary for read-only consumers."""

    session_id: str = Field(description="Session identifier")
    cwd: str = Field(description="Working directory")
    status: SessionStatus = Field(description="Current status")
    display: str = Field(description="Menu line: status dot, short cwd, idle time")
    pid: Optional[int] = Field(default=None, description="Process id for terminal focus")
    idle_seconds: Optional[int] = Field(
        default=None, description="Seconds spent waiting for input"
    )


class SessionList(BaseModel):
    """Full session snapshot.

    Rebuilt after every store change and written for widgets to poll.
    """

    type: str = Field(default="session_list", description="Record type for consumer routing")
    sessions: list[SessionListItem] = Field(
        default_factory=list, description="All tracked sessions, needsInput first"
    )
    timestamp: int = Field(description="Unix timestamp in seconds")
    has_needs_input: bool = Field(
        default=False, description="True if any session is waiting for input"
    )
