"""
Error taxonomy for cc-focus.

Every failure in the event pipeline is recovered locally and logged; these
exceptions exist so the failing layer can say what went wrong and the layer
above can decide whether to drop a message, a connection, or the listener.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """
    Error categories.

    - MALFORMED_MESSAGE: a line did not decode into an event
    - UNRESOLVABLE_IDENTITY: event carries no usable session id
    - SOCKET_BIND_FAILURE: listener could not bind or listen
    - CONNECTION_IO_ERROR: read/accept error on one connection
    """

    MALFORMED_MESSAGE = "malformed_message"
    UNRESOLVABLE_IDENTITY = "unresolvable_identity"
    SOCKET_BIND_FAILURE = "socket_bind_failure"
    CONNECTION_IO_ERROR = "connection_io_error"


class CCFocusError(Exception):
    """Base exception for cc-focus errors."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize error.

        Args:
            kind: Error category
            message: Human-readable error message
            context: Additional context for debugging
        """
        self.kind = kind
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a dictionary for structured log output.

        Returns:
            Dictionary with kind, message and context (if any)
        """
        result = {
            "kind": self.kind.value,
            "message": self.message
        }

        if self.context:
            result["context"] = self.context

        return result


class MalformedMessageError(CCFocusError):
    """A message could not be decoded into an event."""

    def __init__(self, reason: str, raw: bytes = b""):
        """
        Initialize malformed message error.

        Args:
            reason: Why decoding failed
            raw: Offending bytes (truncated in the context)
        """
        super().__init__(
            kind=ErrorKind.MALFORMED_MESSAGE,
            message=f"Malformed event message: {reason}",
            context={"reason": reason, "raw": raw[:200].decode("utf-8", "replace")}
        )


class UnresolvableIdentityError(CCFocusError):
    """Event has neither a session id nor a usable transcript path."""

    def __init__(self, event_type: str):
        super().__init__(
            kind=ErrorKind.UNRESOLVABLE_IDENTITY,
            message=f"Cannot resolve session id for {event_type!r} event",
            context={"event_type": event_type}
        )


class SocketBindError(CCFocusError):
    """Listener could not bind or listen on its socket path."""

    def __init__(self, socket_path: str, reason: str):
        """
        Initialize socket bind error.

        Args:
            socket_path: Path the listener tried to bind
            reason: Underlying OS error text
        """
        super().__init__(
            kind=ErrorKind.SOCKET_BIND_FAILURE,
            message=f"Failed to bind event socket {socket_path}: {reason}",
            context={"socket_path": socket_path, "reason": reason}
        )
